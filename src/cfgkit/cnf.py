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

"""
Conversion of context-free grammars into Chomsky Normal Form (CNF), where
every rule body is either a single terminal or exactly two variables.

The conversion runs four phases, each producing a new rule list from the
previous one: nullable elimination, unit elimination, binarization, and
terminal isolation. The source grammar is never modified.

>>> S, X, Y = Variable("S"), Variable("X"), Variable("Y")
>>> a, b, c = Terminal("a"), Terminal("b"), Terminal("c")
>>> grammar = Grammar(
...     [S, X, Y],
...     [a, b, c],
...     [
...         Production(S, [a, X, b, X]),
...         Production(X, [a, Y]),
...         Production(X, [b, Y]),
...         Production(X, [EPSILON]),
...         Production(Y, [X]),
...         Production(Y, [c]),
...     ],
...     S,
... )
>>> rules = normalize(grammar)
>>> is_cnf(rules)
True
>>> for rule in sort_productions(rules):
...     print(rule)
S → T0T1
S → T0V0
S → T0V1
S → T0V2
T0 → a
T1 → b
T2 → c
V0 → XT1
V1 → XV2
V2 → T1X
X → T0Y
X → T1Y
X → a
X → b
Y → T0Y
Y → T1Y
Y → a
Y → b
Y → c
"""

import logging
from typing import AbstractSet, Dict, Iterable, List, Optional, Set, Tuple

from orderedset import OrderedSet

from cfgkit.grammar import Grammar
from cfgkit.helpers import indices, lazyjoin, list_del_all, non_empty_subsets
from cfgkit.symbols import (
    EPSILON,
    Production,
    Symbol,
    Terminal,
    Variable,
    is_epsilon,
    sort_productions,
)

CNF_LOGGER = logging.getLogger(__name__)

AUXILIARY_PREFIX = "V"
TERMINAL_VARIABLE_PREFIX = "T"


class FreshNames:
    """
    Hands out variables named :code:`<prefix>0`, :code:`<prefix>1`, ... from a
    monotonically increasing counter, skipping names that are already taken.

    >>> names = FreshNames("V", {"V1"})
    >>> [str(names.next()) for _ in range(3)]
    ['V0', 'V2', 'V3']
    """

    def __init__(self, prefix: str, taken: AbstractSet[str] = frozenset()):
        self.prefix = prefix
        self.taken: Set[str] = set(taken)
        self.counter = 0

    def next(self) -> Variable:
        while True:
            name = f"{self.prefix}{self.counter}"
            self.counter += 1
            if name not in self.taken:
                self.taken.add(name)
                return Variable(name)


def effective_body(production: Production) -> Tuple[Symbol, ...]:
    """The body without epsilon symbols, which derive nothing."""
    return tuple(symbol for symbol in production.body if not is_epsilon(symbol))


def nullable_variables(rules: Iterable[Production]) -> OrderedSet[Variable]:
    """
    Computes the variables from which the empty string can be derived.

    >>> A, B, C = Variable("A"), Variable("B"), Variable("C")
    >>> a = Terminal("a")
    >>> list(nullable_variables([
    ...     Production(A, [EPSILON]),
    ...     Production(B, [A, A]),
    ...     Production(C, [A, a]),
    ... ]))
    [Variable("A"), Variable("B")]
    """

    rules = list(rules)
    result: OrderedSet[Variable] = OrderedSet(
        rule.head for rule in rules if not effective_body(rule)
    )

    changed = True
    while changed:
        changed = False

        for rule in rules:
            if rule.head in result:
                continue

            if all(symbol in result for symbol in effective_body(rule)):
                changed = True
                result.add(rule.head)

    return result


def eliminate_epsilon_rules(
    rules: Iterable[Production], nullable: AbstractSet[Variable]
) -> List[Production]:
    """
    Removes all epsilon rules. For each remaining rule, adds the alternatives
    obtained by deleting any non-empty subset of the occurrences of nullable
    variables in its body, except for those with an empty body. Duplicate
    alternatives are only removed among those stemming from the same rule.

    >>> A, B = Variable("A"), Variable("B")
    >>> a = Terminal("a")
    >>> rules = eliminate_epsilon_rules(
    ...     [Production(A, [B, a, B]), Production(B, [EPSILON])], {B})
    >>> [str(rule) for rule in rules]
    ['A → BaB', 'A → aB', 'A → Ba', 'A → a']
    """

    result: List[Production] = []

    for rule in rules:
        body = effective_body(rule)
        if not body:
            continue

        result.append(Production(rule.head, body))

        seen_bodies: Set[Tuple[Symbol, ...]] = {body}
        nullable_positions = indices(body, lambda symbol: symbol in nullable)
        for positions in non_empty_subsets(nullable_positions):
            alternative = list_del_all(body, positions)
            if not alternative or alternative in seen_bodies:
                continue

            seen_bodies.add(alternative)
            result.append(Production(rule.head, alternative))

    return result


def unit_closure(rules: Iterable[Production]) -> Dict[Variable, OrderedSet[Variable]]:
    """
    Maps each variable with a unit rule to the variables it reaches through
    chains of unit rules, excluding itself.

    >>> A, B, C = Variable("A"), Variable("B"), Variable("C")
    >>> closure = unit_closure([
    ...     Production(A, [B]), Production(B, [C]), Production(C, [A])])
    >>> list(closure[A])
    [Variable("B"), Variable("C")]
    """

    closure: Dict[Variable, OrderedSet[Variable]] = {}
    for rule in rules:
        if rule.is_unit() and rule.body[0] != rule.head:
            closure.setdefault(rule.head, OrderedSet()).add(rule.body[0])

    changed = True
    while changed:
        changed = False

        for head, targets in closure.items():
            for target in list(targets):
                for reachable in closure.get(target, ()):
                    if reachable != head and reachable not in targets:
                        targets.add(reachable)
                        changed = True

    return closure


def eliminate_unit_rules(rules: Iterable[Production]) -> List[Production]:
    """
    Replaces each unit rule :code:`A → B` by copies of the productions of
    :code:`B` with head :code:`A`, following unit chains transitively. The
    result is sorted by head and body text so that later phases, and with them
    the generated variable names, are deterministic.

    >>> A, B = Variable("A"), Variable("B")
    >>> a, b = Terminal("a"), Terminal("b")
    >>> rules = eliminate_unit_rules([
    ...     Production(A, [b]), Production(A, [B]), Production(B, [a, a])])
    >>> [str(rule) for rule in rules]
    ['A → aa', 'A → b', 'B → aa']
    """

    rules = list(rules)
    closure = unit_closure(rules)

    non_unit_rules: Dict[Variable, List[Production]] = {}
    for rule in rules:
        if not rule.is_unit():
            non_unit_rules.setdefault(rule.head, []).append(rule)

    result: OrderedSet[Production] = OrderedSet(
        rule for rule in rules if not rule.is_unit()
    )
    for head, targets in closure.items():
        for target in targets:
            result.update(
                Production(head, rule.body) for rule in non_unit_rules.get(target, [])
            )

    return sort_productions(result)


def binarize(rules: Iterable[Production], fresh_names: FreshNames) -> List[Production]:
    """
    Rewrites bodies longer than two symbols into right-branching chains:
    :code:`A → s1 s2 ... sN` becomes :code:`A → s1 X1`, :code:`X1 → s2 X2`, ...,
    :code:`X(N-2) → s(N-1) sN`. An auxiliary variable is created for each body
    suffix; a suffix already derived by an earlier auxiliary reuses that
    variable, which also ends the chain.

    >>> A, B = Variable("A"), Variable("B")
    >>> a, b, c = Terminal("a"), Terminal("b"), Terminal("c")
    >>> rules = binarize(
    ...     [Production(A, [a, b, b, c]), Production(B, [c, b, c])],
    ...     FreshNames("V"))
    >>> [str(rule) for rule in rules]
    ['A → aV0', 'V0 → bV1', 'V1 → bc', 'B → cV1']
    """

    reusable: Dict[Tuple[Symbol, ...], Variable] = {}
    result: List[Production] = []

    for rule in rules:
        body = rule.body
        if len(body) <= 2:
            result.append(rule)
            continue

        # Auxiliaries for the suffixes body[1:], body[2:], ..., body[-2:].
        chain: List[Tuple[Variable, Tuple[Symbol, ...]]] = []
        reused: Optional[Variable] = None
        for start in range(1, len(body) - 1):
            suffix = body[start:]
            reused = reusable.get(suffix)
            if reused is not None:
                break

            auxiliary = fresh_names.next()
            reusable[suffix] = auxiliary
            chain.append((auxiliary, suffix))

        # A reused suffix ends the chain, so no link ever has a one-symbol body.
        result.append(Production(rule.head, (body[0], chain[0][0] if chain else reused)))
        for idx, (auxiliary, suffix) in enumerate(chain):
            if idx + 1 < len(chain):
                result.append(Production(auxiliary, (suffix[0], chain[idx + 1][0])))
            elif reused is not None:
                result.append(Production(auxiliary, (suffix[0], reused)))
            else:
                result.append(Production(auxiliary, suffix))

    return result


def isolate_terminals(
    rules: Iterable[Production], alphabet: Iterable[Terminal], fresh_names: FreshNames
) -> List[Production]:
    """
    Introduces one variable per terminal of the alphabet, in alphabet order,
    and replaces terminals in bodies of two or more symbols by them. The rules
    of the terminal variables are appended to the result.

    >>> A = Variable("A")
    >>> a, b = Terminal("a"), Terminal("b")
    >>> rules = isolate_terminals(
    ...     [Production(A, [a, A]), Production(A, [b])], [a, b], FreshNames("T"))
    >>> [str(rule) for rule in rules]
    ['A → T0A', 'A → b', 'T0 → a', 'T1 → b']
    """

    terminal_variables: Dict[Terminal, Variable] = {
        terminal: fresh_names.next() for terminal in alphabet
    }

    result: List[Production] = []
    for rule in rules:
        if len(rule.body) >= 2:
            rule = Production(
                rule.head,
                [
                    terminal_variables[symbol] if isinstance(symbol, Terminal) else symbol
                    for symbol in rule.body
                ],
            )
        result.append(rule)

    result.extend(
        Production(variable, [terminal])
        for terminal, variable in terminal_variables.items()
    )

    return result


def normalize(grammar: Grammar) -> List[Production]:
    """
    Converts the rules of :code:`grammar` into Chomsky Normal Form. Only the
    alphabet and the rules of the grammar are considered. The empty word is
    not preserved, since CNF rules cannot derive it.

    Names of new variables are unique per call and never clash with the
    grammar's variables or terminals.

    :param grammar: The grammar to convert.
    :return: A fresh list of CNF rules.
    """

    taken = {variable.value for variable in grammar.variables} | {
        terminal.value for terminal in grammar.alphabet
    }

    rules: List[Production] = list(grammar.rules)

    nullable = nullable_variables(rules)
    rules = eliminate_epsilon_rules(rules, nullable)
    CNF_LOGGER.debug(
        "Nullable variables: {%s}; %d rules without epsilon rules",
        lazyjoin(", ", nullable),
        len(rules),
    )

    rules = eliminate_unit_rules(rules)
    CNF_LOGGER.debug("%d rules without unit rules", len(rules))

    rules = binarize(rules, FreshNames(AUXILIARY_PREFIX, taken))
    CNF_LOGGER.debug("%d rules after binarization", len(rules))

    rules = isolate_terminals(
        rules, grammar.alphabet, FreshNames(TERMINAL_VARIABLE_PREFIX, taken)
    )
    CNF_LOGGER.debug("%d rules in Chomsky Normal Form", len(rules))

    assert is_cnf(rules)
    return rules


def is_cnf(rules: Iterable[Production]) -> bool:
    """
    Checks that every body is a single (non-epsilon) terminal or two variables.

    >>> A = Variable("A")
    >>> a = Terminal("a")
    >>> is_cnf([Production(A, [A, A]), Production(A, [a])])
    True
    >>> is_cnf([Production(A, [a, A])])
    False
    """

    return all(
        (
            len(rule.body) == 1
            and isinstance(rule.body[0], Terminal)
            and not is_epsilon(rule.body[0])
        )
        or (
            len(rule.body) == 2
            and all(isinstance(symbol, Variable) for symbol in rule.body)
        )
        for rule in rules
    )


def cnf_grammar(grammar: Grammar, max_depth: Optional[int] = None) -> Grammar:
    """
    Wraps the CNF rules of :code:`grammar` into a new grammar with the same
    start variable. A CNF derivation needs one extra step per terminal, so the
    depth bound defaults to twice that of :code:`grammar`.
    """

    return Grammar.from_rules(
        normalize(grammar),
        start=grammar.start,
        max_depth=2 * grammar.max_depth if max_depth is None else max_depth,
    )
