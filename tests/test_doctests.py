# Copyright © 2022 CISPA Helmholtz Center for Information Security.
#
# This file is part of cfgkit.
#
# cfgkit is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# cfgkit is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with cfgkit.  If not, see <http://www.gnu.org/licenses/>.

import doctest
import unittest

from cfgkit import (
    cnf,
    config,
    derivation,
    evaluator,
    grammar,
    helpers,
    parser,
    symbols,
)


class TestDocstrings(unittest.TestCase):
    def test_cnf(self):
        doctest_results = doctest.testmod(m=cnf)
        self.assertFalse(doctest_results.failed)

    def test_config(self):
        doctest_results = doctest.testmod(m=config)
        self.assertFalse(doctest_results.failed)

    def test_derivation(self):
        doctest_results = doctest.testmod(m=derivation)
        self.assertFalse(doctest_results.failed)

    def test_evaluator(self):
        doctest_results = doctest.testmod(m=evaluator)
        self.assertFalse(doctest_results.failed)

    def test_grammar(self):
        doctest_results = doctest.testmod(m=grammar)
        self.assertFalse(doctest_results.failed)

    def test_helpers(self):
        doctest_results = doctest.testmod(m=helpers)
        self.assertFalse(doctest_results.failed)

    def test_parser(self):
        doctest_results = doctest.testmod(m=parser)
        self.assertFalse(doctest_results.failed)

    def test_symbols(self):
        doctest_results = doctest.testmod(m=symbols)
        self.assertFalse(doctest_results.failed)


if __name__ == "__main__":
    unittest.main()
