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

import unittest

from cfgkit.derivation import Path
from cfgkit.helpers import tree_to_string
from cfgkit.symbols import EPSILON, Production
from test_data import S, X, Y, a, b, c


class TestPath(unittest.TestCase):
    def test_replay(self):
        path = Path(
            [
                Production(S, [a, S, a]),
                Production(S, [b, S, b]),
                Production(S, [EPSILON]),
            ]
        )
        self.assertEqual("S → aSa → abSba → abba", path.replay())

    def test_replay_rewrites_leftmost_occurrence(self):
        path = Path(
            [
                Production(S, [X, b, X]),
                Production(X, [a]),
                Production(X, [c]),
            ]
        )
        self.assertEqual("S → XbX → abX → abc", path.replay())

    def test_replay_single_epsilon_step(self):
        self.assertEqual("S → ε", Path([Production(S, [EPSILON])]).replay())

    def test_replay_nested_epsilon(self):
        path = Path(
            [
                Production(S, [X, Y]),
                Production(X, [EPSILON]),
                Production(Y, [EPSILON]),
            ]
        )
        self.assertEqual("S → XY → Y → ", path.replay())

    def test_empty_path(self):
        path = Path()
        self.assertEqual("", path.replay())
        self.assertEqual("[  ]", str(path))
        self.assertEqual("Path([])", repr(path))
        self.assertFalse(path)

    def test_str(self):
        path = Path([Production(S, [a, S, a]), Production(S, [EPSILON])])
        self.assertEqual("[ S → aSa, S → ε ]", str(path))

    def test_paths_are_immutable_values(self):
        first = Path([Production(S, [a])])
        second = first.append(Production(S, [b]))

        self.assertEqual(1, len(first))
        self.assertEqual(2, len(second))
        self.assertIsInstance(second, Path)
        self.assertEqual(Path([Production(S, [a])]), first)
        self.assertEqual(hash(Path([Production(S, [a])])), hash(first))

    def test_to_parse_tree(self):
        path = Path(
            [
                Production(S, [X, b, X]),
                Production(X, [a]),
                Production(X, [EPSILON]),
            ]
        )
        tree = path.to_parse_tree()
        self.assertEqual(
            ("S", [("X", [("a", [])]), ("b", []), ("X", [("", [])])]),
            tree,
        )
        self.assertEqual("ab", tree_to_string(tree))

    def test_to_parse_tree_of_long_path(self):
        length = 5000
        path = Path([Production(S, [a, S])] * length + [Production(S, [EPSILON])])

        tree = path.to_parse_tree()

        self.assertEqual("a" * length, tree_to_string(tree))
        self.assertEqual(("a", []), tree[1][0])

    def test_replay_of_inapplicable_production(self):
        path = Path([Production(S, [a, X]), Production(Y, [b])])
        with self.assertRaises(ValueError) as context:
            path.replay()
        self.assertEqual("Y → b cannot be applied to 'aX'", str(context.exception))

    def test_to_parse_tree_inconsistent_paths(self):
        with self.assertRaises(ValueError):
            Path().to_parse_tree()

        with self.assertRaises(ValueError):
            Path([Production(S, [X, X]), Production(X, [a])]).to_parse_tree()

        with self.assertRaises(ValueError):
            Path([Production(S, [X]), Production(Y, [a])]).to_parse_tree()

        with self.assertRaises(ValueError):
            Path([Production(S, [a]), Production(S, [b])]).to_parse_tree()


if __name__ == "__main__":
    unittest.main()
