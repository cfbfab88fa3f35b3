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
The vocabulary of context-free grammars: terminals (including the reserved
:data:`EPSILON`), variables, and production rules.

>>> S, a = Variable("S"), Terminal("a")
>>> p = Production(S, (a, S, a))
>>> str(p)
'S → aSa'
>>> p == Production(S, [a, S, a])
True
>>> Terminal("S") == Variable("S")
False
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, TypeAlias, Union


@dataclass(frozen=True)
class Terminal:
    value: str

    def __post_init__(self):
        assert isinstance(self.value, str) and self.value

    def is_epsilon(self) -> bool:
        return self == EPSILON

    def __str__(self):
        return self.value

    def __repr__(self):
        return f'Terminal("{self.value}")'


@dataclass(frozen=True)
class Variable:
    value: str

    def __post_init__(self):
        assert isinstance(self.value, str) and self.value

    def __str__(self):
        return self.value

    def __repr__(self):
        return f'Variable("{self.value}")'


EPSILON = Terminal("ε")

Symbol: TypeAlias = Union[Terminal, Variable]


def is_epsilon(symbol: Symbol) -> bool:
    return isinstance(symbol, Terminal) and symbol.is_epsilon()


def symbols_to_text(symbols: Iterable[Symbol]) -> str:
    return "".join(map(str, symbols))


@dataclass(frozen=True)
class Production:
    """
    A rewrite rule :code:`head → body`. Equality is structural; the body is
    stored as a tuple, whatever sequence was passed in.
    """

    head: Variable
    body: Tuple[Symbol, ...]

    def __init__(self, head: Variable, body: Sequence[Symbol]):
        assert isinstance(head, Variable)
        assert all(isinstance(symbol, (Terminal, Variable)) for symbol in body)
        object.__setattr__(self, "head", head)
        object.__setattr__(self, "body", tuple(body))

    def is_epsilon(self) -> bool:
        """True iff the body is exactly :code:`[ε]`."""
        return len(self.body) == 1 and is_epsilon(self.body[0])

    def is_unit(self) -> bool:
        return len(self.body) == 1 and isinstance(self.body[0], Variable)

    def body_text(self) -> str:
        return symbols_to_text(self.body)

    def sort_key(self) -> Tuple[str, str]:
        return str(self.head), self.body_text()

    def __str__(self):
        return f"{self.head} → {self.body_text()}"


def epsilon_production(head: Variable) -> Production:
    return Production(head, (EPSILON,))


def sort_productions(rules: Iterable[Production]) -> List[Production]:
    """
    Sorts rules by head, then by the text of their bodies. This is the canonical
    order for comparing rule sets.

    >>> S, A = Variable("S"), Variable("A")
    >>> a, b = Terminal("a"), Terminal("b")
    >>> [str(p) for p in sort_productions(
    ...     [Production(S, [b]), Production(A, [a]), Production(S, [A, b])])]
    ['A → a', 'S → Ab', 'S → b']
    """

    return sorted(rules, key=Production.sort_key)
