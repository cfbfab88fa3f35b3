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

import itertools
import unittest
from typing import List

from cfgkit.cnf import (
    FreshNames,
    binarize,
    cnf_grammar,
    eliminate_epsilon_rules,
    eliminate_unit_rules,
    is_cnf,
    isolate_terminals,
    normalize,
    nullable_variables,
    unit_closure,
)
from cfgkit.evaluator import evaluate
from cfgkit.grammar import Grammar
from cfgkit.symbols import EPSILON, Production, Variable, sort_productions
from test_data import (
    S,
    X,
    Y,
    a,
    b,
    c,
    CNF_EXAMPLE_RULES,
    cnf_example_grammar,
    palindrome_grammar,
    parentheses_grammar,
)


def words(alphabet: str, max_length: int) -> List[str]:
    return [
        "".join(chars)
        for length in range(max_length + 1)
        for chars in itertools.product(alphabet, repeat=length)
    ]


class TestCnf(unittest.TestCase):
    def test_nullable_variables(self):
        self.assertEqual([X, Y], list(nullable_variables(CNF_EXAMPLE_RULES)))
        self.assertEqual([S], list(nullable_variables(palindrome_grammar().rules)))
        self.assertFalse(nullable_variables(parentheses_grammar().rules))

    def test_eliminate_epsilon_rules(self):
        rules = eliminate_epsilon_rules(CNF_EXAMPLE_RULES, {X, Y})
        self.assertEqual(
            [
                "S → aXbX",
                "S → abX",
                "S → aXb",
                "S → ab",
                "X → aY",
                "X → a",
                "X → bY",
                "X → b",
                "Y → X",
                "Y → c",
            ],
            list(map(str, rules)),
        )

    def test_eliminate_epsilon_rules_keeps_duplicates_across_rules(self):
        rules = eliminate_epsilon_rules(
            [
                Production(S, [X, a]),
                Production(S, [a, X]),
                Production(X, [EPSILON]),
            ],
            {X},
        )
        self.assertEqual(["S → Xa", "S → a", "S → aX", "S → a"], list(map(str, rules)))

    def test_eliminate_epsilon_drops_epsilon_inside_bodies(self):
        rules = eliminate_epsilon_rules([Production(S, [a, EPSILON, b])], set())
        self.assertEqual([Production(S, [a, b])], rules)

    def test_unit_closure(self):
        closure = unit_closure(
            [
                Production(S, [X]),
                Production(X, [Y]),
                Production(Y, [a]),
                Production(Y, [Y]),
            ]
        )
        self.assertEqual([X, Y], list(closure[S]))
        self.assertEqual([Y], list(closure[X]))
        self.assertNotIn(Y, closure)

    def test_eliminate_unit_rules(self):
        rules = eliminate_unit_rules(
            eliminate_epsilon_rules(CNF_EXAMPLE_RULES, {X, Y})
        )
        self.assertEqual(
            [
                "S → aXb",
                "S → aXbX",
                "S → ab",
                "S → abX",
                "X → a",
                "X → aY",
                "X → b",
                "X → bY",
                "Y → a",
                "Y → aY",
                "Y → b",
                "Y → bY",
                "Y → c",
            ],
            list(map(str, rules)),
        )
        self.assertFalse(any(rule.is_unit() for rule in rules))

    def test_eliminate_unit_rules_removes_exact_duplicates(self):
        rules = eliminate_unit_rules(
            [
                Production(S, [a]),
                Production(S, [X]),
                Production(X, [a]),
            ]
        )
        self.assertEqual(["S → a", "X → a"], list(map(str, rules)))

    def test_eliminate_unit_cycles(self):
        rules = eliminate_unit_rules(
            [
                Production(S, [X]),
                Production(X, [S]),
                Production(X, [b]),
                Production(S, [a]),
            ]
        )
        self.assertEqual(["S → a", "S → b", "X → a", "X → b"], list(map(str, rules)))

    def test_binarize(self):
        rules = binarize(
            [
                Production(S, [a, X, b]),
                Production(S, [a, X, b, X]),
                Production(S, [a, b, X]),
                Production(X, [a, Y]),
            ],
            FreshNames("V"),
        )
        self.assertEqual(
            [
                "S → aV0",
                "V0 → Xb",
                "S → aV1",
                "V1 → XV2",
                "V2 → bX",
                "S → aV2",
                "X → aY",
            ],
            list(map(str, rules)),
        )

    def test_binarize_shares_identical_bodies(self):
        rules = binarize(
            [Production(S, [a, b, c]), Production(X, [a, b, c])], FreshNames("V")
        )
        self.assertEqual(["S → aV0", "V0 → bc", "X → aV0"], list(map(str, rules)))

    def test_isolate_terminals(self):
        rules = isolate_terminals(
            [Production(S, [a, X]), Production(X, [X, b]), Production(X, [c])],
            [a, b, c],
            FreshNames("T"),
        )
        self.assertEqual(
            ["S → T0X", "X → XT1", "X → c", "T0 → a", "T1 → b", "T2 → c"],
            list(map(str, rules)),
        )

    def test_normalize(self):
        rules = normalize(cnf_example_grammar())
        self.assertTrue(is_cnf(rules))
        self.assertEqual(
            [
                "S → T0T1",
                "S → T0V0",
                "S → T0V1",
                "S → T0V2",
                "T0 → a",
                "T1 → b",
                "T2 → c",
                "V0 → XT1",
                "V1 → XV2",
                "V2 → T1X",
                "X → T0Y",
                "X → T1Y",
                "X → a",
                "X → b",
                "Y → T0Y",
                "Y → T1Y",
                "Y → a",
                "Y → b",
                "Y → c",
            ],
            list(map(str, sort_productions(rules))),
        )

    def test_normalize_is_deterministic(self):
        self.assertEqual(
            normalize(cnf_example_grammar()), normalize(cnf_example_grammar())
        )
        grammar = parentheses_grammar()
        self.assertEqual(normalize(grammar), normalize(grammar))

    def test_normalize_leaves_grammar_unchanged(self):
        grammar = cnf_example_grammar()
        rules_before = grammar.rules
        index_before = grammar.rule_index

        normalize(grammar)

        self.assertEqual(tuple(CNF_EXAMPLE_RULES), grammar.rules)
        self.assertIs(rules_before, grammar.rules)
        self.assertEqual(index_before, grammar.rule_index)
        self.assertEqual([S, X, Y], list(grammar.variables))

    def test_fresh_names_avoid_declared_symbols(self):
        V0, T0 = Variable("V0"), Variable("T0")
        grammar = Grammar(
            [S, V0, T0],
            [a, b],
            [
                Production(S, [a, V0, b]),
                Production(V0, [a, T0]),
                Production(T0, [b]),
            ],
            S,
        )
        self.assertEqual(
            ["S → T1V1", "V1 → V0T2", "T0 → b", "V0 → T1T0", "T1 → a", "T2 → b"],
            list(map(str, normalize(grammar))),
        )

    def test_is_cnf(self):
        self.assertTrue(is_cnf([]))
        self.assertTrue(is_cnf([Production(S, [X, Y]), Production(X, [a])]))
        self.assertFalse(is_cnf([Production(S, [EPSILON])]))
        self.assertFalse(is_cnf([Production(S, [X])]))
        self.assertFalse(is_cnf([Production(S, [X, Y, X])]))
        self.assertFalse(is_cnf([Production(S, [a, b])]))

    def test_cnf_grammar(self):
        grammar = cnf_example_grammar()
        cnf = cnf_grammar(grammar)

        self.assertEqual(S, cnf.start)
        self.assertEqual(2 * grammar.max_depth, cnf.max_depth)
        self.assertEqual(normalize(grammar), list(cnf.rules))
        self.assertEqual(7, cnf_grammar(grammar, max_depth=7).max_depth)
        self.assertEqual(normalize(grammar), grammar.cnf())

    def test_cnf_language_equivalence(self):
        grammar = cnf_example_grammar(max_depth=20)
        cnf = cnf_grammar(grammar, max_depth=20)

        for word in words("abc", 4):
            self.assertEqual(
                evaluate(grammar, word)[1],
                evaluate(cnf, word)[1],
                f"grammars disagree on {word!r}",
            )

        self.assertTrue(evaluate(cnf, "ab")[1])
        self.assertTrue(evaluate(cnf, "abac")[1])
        self.assertFalse(evaluate(cnf, "abc")[1])

    def test_cnf_drops_empty_word(self):
        grammar = palindrome_grammar()
        cnf = cnf_grammar(grammar)

        self.assertTrue(evaluate(grammar, "")[1])
        self.assertFalse(evaluate(cnf, "")[1])

        for word in words("ab", 4)[1:]:
            self.assertEqual(
                evaluate(grammar, word)[1],
                evaluate(cnf, word)[1],
                f"grammars disagree on {word!r}",
            )

    def test_cnf_of_epsilon_only_grammar(self):
        grammar = Grammar([S], [a], [Production(S, [EPSILON])], S)
        cnf = cnf_grammar(grammar)

        self.assertEqual(["T0 → a"], list(map(str, cnf.rules)))
        self.assertFalse(cnf.productions_of(S))
        self.assertFalse(evaluate(cnf, "")[1])
        self.assertFalse(evaluate(cnf, "a")[1])

    def test_cnf_of_cnf_grammar(self):
        cnf = cnf_grammar(cnf_example_grammar(max_depth=20), max_depth=20)
        again = cnf_grammar(cnf, max_depth=20)

        self.assertTrue(is_cnf(again.rules))
        for word in words("abc", 3):
            self.assertEqual(evaluate(cnf, word)[1], evaluate(again, word)[1])


if __name__ == "__main__":
    unittest.main()
