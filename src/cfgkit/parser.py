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
Reader for the textual grammar notation, one rule per line:

.. code-block:: text

    S → aSa | bSb
    S -> ε

Heads are single uppercase letters, bodies consist of lowercase letters, the
brackets :code:`()[]`, and uppercase letters, or are a lone :code:`ε`. Spaces
and tabs between tokens are ignored, as are blank lines before the first rule.
The head of the first rule is the start variable.

>>> grammar = parse_grammar("S → aSa | bSb\\nS → ε\\n")
>>> print(grammar)
( { S }, { a, b }, [ S → aSa, S → bSb, S → ε ], S )
"""

import logging
import string
from typing import Dict, List, Optional, Set, Tuple

from orderedset import OrderedSet
from returns.result import safe

from cfgkit.grammar import Grammar, GrammarValidationError
from cfgkit.symbols import EPSILON, Production, Symbol, Terminal, Variable
from cfgkit.type_defs import ParseTree

PARSER_LOGGER = logging.getLogger(__name__)

START_SYMBOL = "<start>"
END_OF_INPUT = "<end-of-input>"

TERMINAL_CHARACTERS = string.ascii_lowercase + "()[]"
VARIABLE_CHARACTERS = string.ascii_uppercase

# Alternatives are tried in order (PEG ordered choice). A nonterminal suffixed
# with "*" or "+" matches the nonterminal zero/one or more times.
NOTATION_GRAMMAR: Dict[str, List[List[str]]] = {
    START_SYMBOL: [["<blank-line>*", "<rule>+", END_OF_INPUT]],
    "<blank-line>": [["\r\n"], ["\n"]],
    "<rule>": [
        ["<variable>", "<separator>", "<body>", "<alternative>*", "<end-of-line>"]
    ],
    "<separator>": [["→"], ["->"]],
    "<alternative>": [["|", "<body>"]],
    "<body>": [["<symbol>+"], [EPSILON.value]],
    "<symbol>": [["<terminal>"], ["<variable>"]],
    "<terminal>": [[char] for char in TERMINAL_CHARACTERS],
    "<variable>": [[char] for char in VARIABLE_CHARACTERS],
    "<end-of-line>": [["\r\n"], ["\n"]],
}


class GrammarSyntaxError(SyntaxError):
    def __init__(self, msg: str, text: str, position: int):
        self.position = position
        self.line = text.count("\n", 0, position) + 1
        line_start = text.rfind("\n", 0, position) + 1
        self.column = position - line_start + 1
        line_end = text.find("\n", position)
        line_text = text[line_start : len(text) if line_end < 0 else line_end]
        super().__init__(
            f"{msg} (line {self.line}, column {self.column})",
            ("<grammar>", self.line, self.column, line_text),
        )


def describe_tokens(tokens: Set[str]) -> str:
    """
    >>> describe_tokens({"a", "b", "A", "|", "\\n"})
    "a terminal, a variable, '\\\\n', '|'"
    """

    descriptions = []
    if tokens & set(TERMINAL_CHARACTERS):
        descriptions.append("a terminal")
    if tokens & set(VARIABLE_CHARACTERS):
        descriptions.append("a variable")

    others = sorted(
        token
        for token in tokens
        if token not in TERMINAL_CHARACTERS and token not in VARIABLE_CHARACTERS
    )
    descriptions.extend(
        "end of input" if token == END_OF_INPUT else repr(token) for token in others
    )

    return ", ".join(descriptions)


class PEGParser:
    """
    A packrat parser for grammars in canonical form whose alternatives are
    tried in order. Characters in :code:`ignore` are skipped before each
    literal token. Parse trees have the form :code:`(symbol, children)`;
    literals are leaves with an empty children list.
    """

    def __init__(
        self,
        grammar: Dict[str, List[List[str]]],
        start_symbol: str = START_SYMBOL,
        ignore: str = " \t",
    ):
        self.grammar = grammar
        self.start_symbol = start_symbol
        self.ignore = ignore

        self.text = ""
        self.memo: Dict[Tuple[str, int], Tuple[int, Optional[List[ParseTree]]]] = {}
        self.farthest_failure = -1
        self.expected: Set[str] = set()

    def parse(self, text: str) -> ParseTree:
        self.text = text
        self.memo = {}
        self.farthest_failure = -1
        self.expected = set()

        cursor, trees = self.unify_key(self.start_symbol, 0)
        if trees is None:
            position = max(self.farthest_failure, 0)
            found = (
                repr(text[position]) if position < len(text) else "end of input"
            )
            raise GrammarSyntaxError(
                f"Unexpected {found}, expected {describe_tokens(self.expected)}",
                text,
                position,
            )

        assert cursor == len(text)
        return trees[0]

    def skip_ignored(self, at: int) -> int:
        while at < len(self.text) and self.text[at] in self.ignore:
            at += 1
        return at

    def fail(self, token: str, at: int) -> Tuple[int, None]:
        if at > self.farthest_failure:
            self.farthest_failure = at
            self.expected = {token}
        elif at == self.farthest_failure:
            self.expected.add(token)
        return at, None

    def unify_rule(self, rule: List[str], at: int) -> Tuple[int, Optional[List[ParseTree]]]:
        results: List[ParseTree] = []
        for token in rule:
            at, trees = self.unify_key(token, at)
            if trees is None:
                return at, None
            results.extend(trees)
        return at, results

    def unify_repetition(
        self, key: str, at: int, minimum: int
    ) -> Tuple[int, Optional[List[ParseTree]]]:
        results: List[ParseTree] = []
        while True:
            to, trees = self.unify_key(key, at)
            if trees is None or to == at:
                break
            results.extend(trees)
            at = to

        if len(results) < minimum:
            return at, None
        return at, results

    def unify_key(self, key: str, at: int) -> Tuple[int, Optional[List[ParseTree]]]:
        if key == END_OF_INPUT:
            at = self.skip_ignored(at)
            if at == len(self.text):
                return at, []
            return self.fail(key, at)

        if key[-1:] in ("*", "+") and key[:-1] in self.grammar:
            return self.unify_repetition(key[:-1], at, 1 if key[-1] == "+" else 0)

        if key not in self.grammar:
            at = self.skip_ignored(at)
            if self.text.startswith(key, at):
                return at + len(key), [(key, [])]
            return self.fail(key, at)

        if (key, at) in self.memo:
            return self.memo[(key, at)]

        result: Tuple[int, Optional[List[ParseTree]]] = (at, None)
        for rule in self.grammar[key]:
            to, children = self.unify_rule(rule, at)
            if children is not None:
                result = (to, [(key, children)])
                break

        self.memo[(key, at)] = result
        return result


def children_named(tree: ParseTree, name: str) -> List[ParseTree]:
    return [child for child in tree[1] or [] if child[0] == name]


def body_symbols(body: ParseTree) -> List[Symbol]:
    symbol_trees = children_named(body, "<symbol>")
    if not symbol_trees:
        return [EPSILON]

    result: List[Symbol] = []
    for (_, (kind_tree,)) in symbol_trees:
        kind, ((char, _),) = kind_tree
        result.append(Variable(char) if kind == "<variable>" else Terminal(char))

    return result


def productions_from_tree(tree: ParseTree) -> List[Production]:
    result: List[Production] = []

    for rule_tree in children_named(tree, "<rule>"):
        (_, ((head_char, _),)) = children_named(rule_tree, "<variable>")[0]
        head = Variable(head_char)

        bodies = children_named(rule_tree, "<body>") + [
            children_named(alternative, "<body>")[0]
            for alternative in children_named(rule_tree, "<alternative>")
        ]
        result.extend(Production(head, body_symbols(body)) for body in bodies)

    return result


def parse_grammar(text: str, max_depth: Optional[int] = None) -> Grammar:
    """
    Reads a grammar in the textual notation. Raises a
    :class:`GrammarSyntaxError` for malformed input; the assembled grammar is
    validated as usual, which fails for variables that are used but have no
    rule.

    >>> parse_grammar("S → aT\\n")
    Traceback (most recent call last):
    ...
    cfgkit.grammar.VariableNotDeclared: variable T (body of rule S → aT) not in variables

    >>> try:
    ...     parse_grammar("S = a\\n")
    ... except GrammarSyntaxError as err:
    ...     print(err.msg)
    Unexpected '=', expected '->', '→' (line 1, column 3)

    The depth bound is :data:`cfgkit.grammar.DEFAULT_MAX_DEPTH` unless given.
    Pass :func:`cfgkit.config.default_max_depth` to use the configured one:

    >>> from returns.maybe import Some
    >>> from cfgkit.config import default_max_depth
    >>> config = Some("[[defaults.evaluate]]\\nmax-depth = 4")
    >>> parse_grammar("S → a\\n", default_max_depth(config)).max_depth
    4

    :param text: The grammar text.
    :param max_depth: The depth bound of the resulting grammar.
    :return: The grammar, with the head of the first rule as start variable.
    """

    tree = PEGParser(NOTATION_GRAMMAR).parse(text)
    productions = productions_from_tree(tree)

    variables: OrderedSet[Variable] = OrderedSet(rule.head for rule in productions)
    alphabet: OrderedSet[Terminal] = OrderedSet(
        symbol
        for rule in productions
        for symbol in rule.body
        if isinstance(symbol, Terminal) and not symbol.is_epsilon()
    )

    PARSER_LOGGER.debug(
        "Read %d productions for %d variables", len(productions), len(variables)
    )

    return Grammar(variables, alphabet, productions, productions[0].head, max_depth)


@safe(exceptions=(GrammarSyntaxError, GrammarValidationError))
def parse_grammar_safe(text: str, max_depth: Optional[int] = None) -> Grammar:
    return parse_grammar(text, max_depth)
