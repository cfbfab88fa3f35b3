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

import logging
from typing import Iterable, Optional, Tuple, TYPE_CHECKING, List, Dict

from frozendict import frozendict
from orderedset import OrderedSet
from returns.result import safe

from cfgkit.helpers import lazyjoin
from cfgkit.symbols import (
    Production,
    Terminal,
    Variable,
    EPSILON,
    epsilon_production,
    is_epsilon,
)
from cfgkit.type_defs import RuleIndex

if TYPE_CHECKING:
    from cfgkit.derivation import Path

GRAMMAR_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


class GrammarValidationError(ValueError):
    """Raised if the components of a grammar do not fit together."""


class StartNotInVariables(GrammarValidationError):
    def __init__(self, start: Variable):
        self.start = start
        super().__init__(f"start symbol {start} not in variables")


class VariablesAlphabetOverlap(GrammarValidationError):
    def __init__(self, symbols: Iterable[str]):
        self.symbols = tuple(symbols)
        super().__init__(
            "variables and alphabet are not disjoint, shared: "
            + ", ".join(self.symbols)
        )


class TerminalNotInAlphabet(GrammarValidationError):
    def __init__(self, terminal: Terminal, production: Production):
        self.terminal = terminal
        self.production = production
        super().__init__(f"terminal {terminal} in rule {production} not in alphabet")


class VariableNotDeclared(GrammarValidationError):
    def __init__(self, variable: Variable, production: Production, occurrence: str):
        assert occurrence in ("head", "body")
        self.variable = variable
        self.production = production
        self.occurrence = occurrence
        super().__init__(
            f"variable {variable} ({occurrence} of rule {production}) "
            + "not in variables"
        )


def _to_variable(elem: Variable | str) -> Variable:
    return elem if isinstance(elem, Variable) else Variable(elem)


def _to_terminal(elem: Terminal | str) -> Terminal:
    return elem if isinstance(elem, Terminal) else Terminal(elem)


def build_rule_index(rules: Iterable[Production]) -> RuleIndex:
    """
    Groups the rules by their heads, keeping the relative order of the rules.
    Epsilon rules are moved to the end of their group, and at most one of them
    is kept per head.

    >>> S = Variable("S")
    >>> a = Terminal("a")
    >>> index = build_rule_index([
    ...     Production(S, [EPSILON]),
    ...     Production(S, [a, S]),
    ...     Production(S, [EPSILON])])
    >>> [str(p) for p in index[S]]
    ['S → aS', 'S → ε']
    """

    groups: Dict[Variable, List[Production]] = {}
    nullable_heads: OrderedSet[Variable] = OrderedSet()

    for rule in rules:
        if rule.is_epsilon():
            groups.setdefault(rule.head, [])
            nullable_heads.add(rule.head)
            continue

        groups.setdefault(rule.head, []).append(rule)

    for head in nullable_heads:
        groups[head].append(epsilon_production(head))

    return frozendict({head: tuple(group) for head, group in groups.items()})


class Grammar:
    """
    A context-free grammar :code:`G = (V, Σ, R, S)`. Grammars are immutable
    except for the depth bound :attr:`max_depth` used when evaluating inputs,
    which is :data:`DEFAULT_MAX_DEPTH` unless given.

    >>> S = Variable("S")
    >>> a, b = Terminal("a"), Terminal("b")
    >>> grammar = Grammar(
    ...     [S],
    ...     [a, b],
    ...     [
    ...         Production(S, [a, S, a]),
    ...         Production(S, [b, S, b]),
    ...         Production(S, [EPSILON]),
    ...     ],
    ...     S,
    ... )
    >>> print(grammar)
    ( { S }, { a, b }, [ S → aSa, S → bSb, S → ε ], S )

    Strings are accepted in place of variables and terminals:

    >>> Grammar(["S"], ["a"], [Production(S, [a])], "S").start
    Variable("S")

    Invalid grammars are rejected:

    >>> Grammar([S], [a], [Production(S, [b])], S)
    Traceback (most recent call last):
    ...
    cfgkit.grammar.TerminalNotInAlphabet: terminal b in rule S → b not in alphabet
    """

    def __init__(
        self,
        variables: Iterable[Variable | str],
        alphabet: Iterable[Terminal | str],
        rules: Iterable[Production],
        start: Variable | str,
        max_depth: Optional[int] = None,
    ):
        self.__variables: OrderedSet[Variable] = OrderedSet(
            map(_to_variable, variables)
        )
        self.__alphabet: OrderedSet[Terminal] = OrderedSet(map(_to_terminal, alphabet))
        self.__rules: Tuple[Production, ...] = tuple(rules)
        self.__start: Variable = _to_variable(start)

        if EPSILON in self.__alphabet:
            GRAMMAR_LOGGER.warning(
                "Removing %s from the alphabet, it is not an input symbol", EPSILON
            )
            self.__alphabet.remove(EPSILON)

        self.__validate()

        self.__rule_index: RuleIndex = build_rule_index(self.__rules)
        self.__max_depth = 0
        self.max_depth = DEFAULT_MAX_DEPTH if max_depth is None else max_depth

        GRAMMAR_LOGGER.debug(
            "Created grammar with %d rules for variables %s",
            len(self.__rules),
            lazyjoin(", ", self.__variables),
        )

    def __validate(self) -> None:
        if self.__start not in self.__variables:
            raise StartNotInVariables(self.__start)

        variable_names = {variable.value for variable in self.__variables}
        shared = [
            terminal.value
            for terminal in self.__alphabet
            if terminal.value in variable_names
        ]
        if shared:
            raise VariablesAlphabetOverlap(shared)

        for rule in self.__rules:
            for symbol in rule.body:
                if (
                    isinstance(symbol, Terminal)
                    and not is_epsilon(symbol)
                    and symbol not in self.__alphabet
                ):
                    raise TerminalNotInAlphabet(symbol, rule)

        for rule in self.__rules:
            if rule.head not in self.__variables:
                raise VariableNotDeclared(rule.head, rule, "head")
            for symbol in rule.body:
                if isinstance(symbol, Variable) and symbol not in self.__variables:
                    raise VariableNotDeclared(symbol, rule, "body")

    @staticmethod
    @safe(exceptions=(GrammarValidationError,))
    def create(
        variables: Iterable[Variable | str],
        alphabet: Iterable[Terminal | str],
        rules: Iterable[Production],
        start: Variable | str,
        max_depth: Optional[int] = None,
    ) -> "Grammar":
        """
        Like the constructor, but returns a :code:`Result` holding either the
        grammar or the validation error.

        >>> S = Variable("S")
        >>> str(Grammar.create([S], [], [], "T").failure())
        'start symbol T not in variables'
        >>> Grammar.create([S], [], [], S).unwrap().start
        Variable("S")
        """

        return Grammar(variables, alphabet, rules, start, max_depth)

    @staticmethod
    def from_rules(
        rules: Iterable[Production],
        start: Optional[Variable | str] = None,
        max_depth: Optional[int] = None,
    ) -> "Grammar":
        """
        Creates a grammar whose variables and alphabet are exactly the symbols
        used in :code:`rules`. The start variable defaults to the head of the
        first rule.

        >>> S, A = Variable("S"), Variable("A")
        >>> a = Terminal("a")
        >>> print(Grammar.from_rules([Production(S, [A, A]), Production(A, [a])]))
        ( { S, A }, { a }, [ S → AA, A → a ], S )
        """

        rules = tuple(rules)
        if start is None:
            if not rules:
                raise ValueError("Cannot infer the start variable of an empty rule set")
            start = rules[0].head

        variables: OrderedSet[Variable] = OrderedSet([_to_variable(start)])
        alphabet: OrderedSet[Terminal] = OrderedSet()
        for rule in rules:
            variables.add(rule.head)
            for symbol in rule.body:
                if isinstance(symbol, Variable):
                    variables.add(symbol)
                elif not is_epsilon(symbol):
                    alphabet.add(symbol)

        return Grammar(variables, alphabet, rules, start, max_depth)

    @property
    def variables(self) -> OrderedSet[Variable]:
        return OrderedSet(self.__variables)

    @property
    def alphabet(self) -> OrderedSet[Terminal]:
        return OrderedSet(self.__alphabet)

    @property
    def rules(self) -> Tuple[Production, ...]:
        return self.__rules

    @property
    def start(self) -> Variable:
        return self.__start

    @property
    def rule_index(self) -> RuleIndex:
        return self.__rule_index

    @property
    def max_depth(self) -> int:
        return self.__max_depth

    @max_depth.setter
    def max_depth(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"max_depth must be a positive integer, got {value!r}")
        self.__max_depth = value

    def productions_of(self, variable: Variable) -> Tuple[Production, ...]:
        return self.__rule_index.get(variable, ())

    def evaluate(self, inp: str) -> Tuple["Path", bool]:
        from cfgkit.evaluator import evaluate

        return evaluate(self, inp)

    def cnf(self) -> List[Production]:
        from cfgkit.cnf import normalize

        return normalize(self)

    def __str__(self):
        return (
            f"( {{ {', '.join(map(str, self.__variables))} }}, "
            f"{{ {', '.join(map(str, self.__alphabet))} }}, "
            f"[ {', '.join(map(str, self.__rules))} ], "
            f"{self.__start} )"
        )

    def __repr__(self):
        return (
            f"Grammar({list(self.__variables)!r}, {list(self.__alphabet)!r}, "
            f"{list(self.__rules)!r}, {self.__start!r}, "
            f"max_depth={self.__max_depth})"
        )
