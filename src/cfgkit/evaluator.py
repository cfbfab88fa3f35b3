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
Membership testing by depth-bounded backtracking search for a leftmost
derivation.

>>> from cfgkit.symbols import EPSILON
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
>>> path, accepted = evaluate(grammar, "aabbaa")
>>> accepted
True
>>> print(path)
[ S → aSa, S → aSa, S → bSb, S → ε ]
>>> path.replay()
'S → aSa → aaSaa → aabSbaa → aabbaa'
>>> evaluate(grammar, "abab")
(Path([]), False)
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from returns.maybe import Maybe, Nothing, Some

from cfgkit.derivation import Path
from cfgkit.grammar import Grammar
from cfgkit.helpers import lazystr
from cfgkit.symbols import Production, Symbol, Terminal, Variable

EVALUATOR_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    remaining_input: str
    head: Variable
    remaining_body: Tuple[Symbol, ...]
    depth: int
    path: Path


@dataclass(frozen=True)
class FailureMarker:
    """
    Sits below the alternatives of one variable expansion on the work stack.
    Popping it means that all alternatives failed.
    """

    state: Tuple[int, Tuple[Symbol, ...]]
    depth: int


class LeftmostDerivationSearch:
    """
    Depth-first search for the first leftmost derivation of an input, trying
    alternatives in rule index order. Uses an explicit work stack instead of
    recursion.

    The outcome of a work item only depends on the remaining input, the
    remaining body and the depth, and a state that failed at some depth also
    fails at any larger depth. Failed states are therefore remembered with the
    smallest depth at which they failed and skipped when they come up again.
    """

    def __init__(self, grammar: Grammar, inp: str):
        self.grammar = grammar
        self.inp = inp
        self.max_depth = grammar.max_depth
        self.failed_states: Dict[Tuple[int, Tuple[Symbol, ...]], int] = {}
        self.explored_states = 0

    def run(self) -> Maybe[Path]:
        stack: List[Union[WorkItem, FailureMarker]] = [
            WorkItem(self.inp, production.head, production.body, 0, Path([production]))
            for production in reversed(self.grammar.productions_of(self.grammar.start))
        ]

        while stack:
            item = stack.pop()

            if isinstance(item, FailureMarker):
                known_depth = self.failed_states.get(item.state)
                if known_depth is None or item.depth < known_depth:
                    self.failed_states[item.state] = item.depth
                continue

            self.explored_states += 1
            result = self.process(item, stack)
            if result is not None:
                return Some(result)

        return Nothing

    def process(
        self, item: WorkItem, stack: List[Union[WorkItem, FailureMarker]]
    ) -> Optional[Path]:
        """
        Consumes the leading terminals of the work item's body. Returns the
        item's path if the body and the input are consumed completely. If a
        variable is reached, its alternatives are pushed onto :code:`stack`.
        """

        remaining = item.remaining_input
        body = item.remaining_body
        depth = item.depth

        while True:
            if depth >= self.max_depth:
                return None

            if not body:
                return item.path if not remaining else None

            symbol = body[0]
            match symbol:
                case Terminal() if symbol.is_epsilon():
                    body = body[1:]
                    depth += 1
                case Terminal(value):
                    if not remaining.startswith(value):
                        return None
                    remaining = remaining[len(value) :]
                    body = body[1:]
                case Variable():
                    self.expand(symbol, remaining, body, depth, item.path, stack)
                    return None

    def expand(
        self,
        variable: Variable,
        remaining: str,
        body: Tuple[Symbol, ...],
        depth: int,
        path: Path,
        stack: List[Union[WorkItem, FailureMarker]],
    ) -> None:
        state = (len(remaining), body)
        failed_depth = self.failed_states.get(state)
        if failed_depth is not None and failed_depth <= depth:
            return

        stack.append(FailureMarker(state, depth))

        alternatives: Tuple[Production, ...] = self.grammar.productions_of(variable)
        for production in reversed(alternatives):
            stack.append(
                WorkItem(
                    remaining,
                    variable,
                    production.body + body[1:],
                    depth + 1,
                    path.append(production),
                )
            )


def derive(grammar: Grammar, inp: str) -> Maybe[Path]:
    """
    Searches a leftmost derivation of :code:`inp` within the grammar's depth
    bound. :code:`Nothing` means that there is no derivation or that the depth
    bound is too low to find one.
    """

    search = LeftmostDerivationSearch(grammar, inp)
    result = search.run()

    EVALUATOR_LOGGER.debug(
        "%s %r after exploring %d states (max depth %d)",
        "Accepted" if result != Nothing else "Rejected",
        inp,
        search.explored_states,
        grammar.max_depth,
    )

    match result:
        case Some(path):
            EVALUATOR_LOGGER.debug("Derivation: %s", lazystr(path.replay))

    return result


def evaluate(grammar: Grammar, inp: str) -> Tuple[Path, bool]:
    """
    Tests whether :code:`inp` is in the language of :code:`grammar`. Returns the
    first derivation found and :code:`True`, or an empty path and
    :code:`False`.
    """

    match derive(grammar, inp):
        case Some(path):
            return path, True
        case _:
            return Path(), False
