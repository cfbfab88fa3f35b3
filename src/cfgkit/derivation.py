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
Derivation paths, i.e., the sequences of productions applied in a leftmost
derivation, and their human-readable replay.
"""

from typing import Iterable, Iterator, List, Tuple

from cfgkit.symbols import Production, Terminal, Variable, is_epsilon
from cfgkit.type_defs import ParseTree

ARROW = " → "


class Path(tuple):
    """
    The productions used in one successful derivation, in application order.
    Paths are immutable.

    >>> S = Variable("S")
    >>> a = Terminal("a")
    >>> from cfgkit.symbols import EPSILON
    >>> path = Path([Production(S, [a, S, a]), Production(S, [EPSILON])])
    >>> print(path)
    [ S → aSa, S → ε ]
    >>> path.replay()
    'S → aSa → aa'
    """

    def __new__(cls, productions: Iterable[Production] = ()):
        return super().__new__(cls, productions)

    def append(self, production: Production) -> "Path":
        return Path(tuple(self) + (production,))

    def replay(self) -> str:
        """
        Shows the chain of sentential forms of this derivation. Each step replaces
        the first textual occurrence of the rewritten variable in the previous
        form; an empty path yields the empty string. Raises a :code:`ValueError`
        if a production rewrites a variable that does not occur in the previous
        form, which cannot happen for paths returned by the evaluator.

        >>> S, X = Variable("S"), Variable("X")
        >>> a = Terminal("a")
        >>> Path([Production(S, [a]), Production(X, [a])]).replay()
        Traceback (most recent call last):
        ...
        ValueError: X → a cannot be applied to 'a'
        """

        if not self:
            return ""

        first = self[0]
        forms: List[str] = [str(first.head), first.body_text()]
        for production in self[1:]:
            form = forms[-1]
            head = str(production.head)
            idx = form.find(head)
            if idx < 0:
                raise ValueError(f"{production} cannot be applied to {form!r}")

            replacement = "" if production.is_epsilon() else production.body_text()
            forms.append(form[:idx] + replacement + form[idx + len(head) :])

        return ARROW.join(forms)

    def to_parse_tree(self) -> ParseTree:
        """
        Converts this leftmost derivation into a parse tree. Terminal leaves have
        an empty children list; an epsilon expansion is represented by a single
        leaf with the empty string.

        >>> from cfgkit.symbols import EPSILON
        >>> S = Variable("S")
        >>> a = Terminal("a")
        >>> Path([Production(S, [a, S]), Production(S, [EPSILON])]).to_parse_tree()
        ('S', [('a', []), ('S', [('', [])])])

        :return: The parse tree rooted in the head of the first production.
        """

        if not self:
            raise ValueError("Cannot convert an empty path into a parse tree")

        productions: Iterator[Production] = iter(self)

        root_children: List[ParseTree] = []
        result: ParseTree = (str(self[0].head), root_children)

        # Variables still to be expanded, the leftmost one on top, together with
        # the (initially empty) children lists of their tree nodes.
        stack: List[Tuple[Variable, List[ParseTree]]] = [(self[0].head, root_children)]
        while stack:
            variable, children = stack.pop()

            production = next(productions, None)
            if production is None:
                raise ValueError(f"Path ends before {variable} is expanded")

            if production.head != variable:
                raise ValueError(
                    f"Expected a production for {variable}, found {production}"
                )

            if production.is_epsilon():
                children.append(("", []))
                continue

            expansions: List[Tuple[Variable, List[ParseTree]]] = []
            for symbol in production.body:
                if isinstance(symbol, Variable):
                    grandchildren: List[ParseTree] = []
                    children.append((str(symbol), grandchildren))
                    expansions.append((symbol, grandchildren))
                elif not is_epsilon(symbol):
                    children.append((str(symbol), []))

            if not children:
                children.append(("", []))

            stack.extend(reversed(expansions))

        if next(productions, None) is not None:
            raise ValueError("Path contains productions that are not part of the tree")

        return result

    def __str__(self):
        return f"[ {', '.join(map(str, self))} ]"

    def __repr__(self):
        return f"Path({list(self)!r})"
