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

import importlib.resources
import itertools
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    Sequence,
    Tuple,
    TypeVar,
)

from cfgkit.type_defs import ParseTree

T = TypeVar("T")


def powerset(iterable: Iterable[T]) -> Iterator[Tuple[T, ...]]:
    """powerset([1,2,3]) --> () (1,) (2,) (3,) (1,2) (1,3) (2,3) (1,2,3)"""
    s = list(iterable)
    return itertools.chain.from_iterable(
        itertools.combinations(s, r) for r in range(len(s) + 1)
    )


def non_empty_subsets(iterable: Iterable[T]) -> Iterator[Tuple[T, ...]]:
    """
    All subsets of :code:`iterable` except for the empty one, in the order of
    :func:`powerset`.

    >>> list(non_empty_subsets([1, 2]))
    [(1,), (2,), (1, 2)]
    """

    return itertools.islice(powerset(iterable), 1, None)


def tree_to_string(tree: ParseTree) -> str:
    """
    Concatenates the leaves of a parse tree. Open leaves (children :code:`None`)
    contribute nothing.

    >>> tree_to_string(("S", [("a", []), ("S", [("", [])]), ("a", [])]))
    'aa'
    >>> tree_to_string(("S", None))
    ''
    """

    result = []
    stack = [tree]

    while stack:
        symbol, children = stack.pop()

        if children is None:
            continue

        if not children:
            result.append(symbol)
            continue

        stack.extend(reversed(children))

    return "".join(result)


def indices(elems: Sequence[T], pred: Callable[[T], bool]) -> List[int]:
    """
    >>> indices("abcab", lambda c: c == "b")
    [1, 4]
    """

    return [idx for idx, elem in enumerate(elems) if pred(elem)]


def list_del_all(elems: Sequence[T], del_indices: Iterable[int]) -> Tuple[T, ...]:
    """
    Returns the elements of :code:`elems` without those at :code:`del_indices`.

    >>> list_del_all("abcde", (0, 3))
    ('b', 'c', 'e')
    """

    to_delete = set(del_indices)
    return tuple(elem for idx, elem in enumerate(elems) if idx not in to_delete)


@dataclass(frozen=True)
class lazyjoin:
    s: str
    items: Iterable[Any]

    def __str__(self):
        return self.s.join(map(str, self.items))


@dataclass(frozen=True)
class lazystr:
    c: Callable[[], Any]

    def __str__(self):
        return str(self.c())


def get_cfgkit_resource_file_content(path_to_file: str) -> str:
    traversable = importlib.resources.files("cfgkit").joinpath(path_to_file)
    with importlib.resources.as_file(traversable) as path:
        with open(path, "r", encoding="utf-8") as file:
            return file.read()
