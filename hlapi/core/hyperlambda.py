"""Hyperlambda codec.

Hyperlambda is the native textual syntax of endpoint scripts. Every line is
one node, indented by three spaces per level:

    .arguments
       name:string
    return
       result:int:42

A line is ``name``, ``name:value`` or ``name:type:value`` where ``type`` is a
tag from the converter vocabulary. Values may be double quoted (with backslash
escapes) or verbatim quoted as ``@"..."``; both forms may span lines. ``//``
starts a line comment and ``/* ... */`` a block comment.

The line grammar is tokenized by lark; :func:`parse` builds the node tree from
the resulting lines and converts typed values.
"""

import re
from typing import Any, Callable, Iterable, List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput

from hlapi.exceptions import (
    ArgumentConversionError,
    HyperlambdaSyntaxError,
    ScriptSyntaxError,
)

from .converter import convert, is_known_type, to_text, type_name
from .node import Node

CONTENT_TYPE = "application/x-hyperlambda"
INDENT = "   "

GRAMMAR = r"""
start: line*

line: INDENT? (entry | COMMENT | BLOCK_COMMENT)? _NL

entry: key (COLON value?)*
     | (COLON value?)+

?key: NAME | STRING | VERBATIM
?value: TEXT | STRING | VERBATIM

INDENT: / +/
NAME: /(?![ "]|@"|\/\/|\/\*)[^:\n]+/
TEXT: /(?!"|@")[^:\n]+/
STRING: /"(?:[^"\\]|\\.)*"/s
VERBATIM: /@"(?:[^"]|"")*"/
COLON: ":"
COMMENT.2: /\/\/[^\n]*/
BLOCK_COMMENT.2: /\/\*(?:.|\n)*?\*\//
TRAILING: / +(?=\n)/
_NL: /\n/

%ignore TRAILING
"""

_parser = Lark(GRAMMAR, parser="lalr", maybe_placeholders=False)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}
_ESCAPE_PATTERN = re.compile(r"\\(.)", re.DOTALL)
_QUOTED = ("STRING", "VERBATIM")


class Expression(str):
    """String value declared with the ``x`` type.

    Expressions are kept verbatim; evaluating them is the evaluator's concern.
    """


def _unquote(token: Token) -> str:
    """Return the text of a string literal token without its quotes."""
    if token.type == "VERBATIM":
        return token[2:-1].replace('""', '"')

    def replace(match: "re.Match[str]") -> str:
        escaped = match.group(1)
        if escaped not in _ESCAPES:
            raise HyperlambdaSyntaxError(
                f"Unknown escape sequence '\\{escaped}'", line=token.line
            )
        return _ESCAPES[escaped]

    return _ESCAPE_PATTERN.sub(replace, token[1:-1])


def _segments(entry: Tree) -> List[Optional[Token]]:
    """Split an entry into its colon separated segments.

    An empty segment (``a:`` or ``a::b``) is returned as None.
    """
    segments: List[Optional[Token]] = []
    current: Optional[Token] = None
    for token in entry.children:
        if token.type == "COLON":
            segments.append(current)
            current = None
        else:
            current = token
    segments.append(current)
    return segments


def _text(token: Optional[Token]) -> str:
    if token is None:
        return ""
    if token.type in _QUOTED:
        return _unquote(token)
    return str(token)


def _read_value(
    values: List[Optional[Token]], line: int
) -> Tuple[Optional[str], Any]:
    """Interpret the segments following the node name.

    Returns:
        Tuple of (type tag or None, raw value)
    """
    type_tag: Optional[str] = None
    first = values[0]
    if (
        len(values) > 1
        and first is not None
        and first.type == "TEXT"
        and is_known_type(first.strip())
    ):
        type_tag = first.strip()
        values = values[1:]
    if len(values) == 1:
        token = values[0]
        if token is not None and token.type in _QUOTED:
            return type_tag, _unquote(token)
        return type_tag, _text(token).rstrip()
    if any(token is not None and token.type in _QUOTED for token in values):
        raise HyperlambdaSyntaxError("Unexpected content after value", line=line)
    # Colons in an untyped value belong to the value.
    return type_tag, ":".join(_text(token) for token in values).rstrip()


def _error_message(source: str, error: UnexpectedInput) -> str:
    position = getattr(error, "pos_in_stream", None)
    rest = source[position:] if position is not None and position >= 0 else ""
    if rest.startswith("/*"):
        return "Unterminated block comment"
    if isinstance(error, UnexpectedCharacters) and rest.startswith(('"', '@"')):
        return "Unterminated string literal"
    return "Unexpected content after value"


def _tokenize(source: str) -> Tree:
    try:
        return _parser.parse(source)
    except UnexpectedInput as e:
        raise HyperlambdaSyntaxError(
            _error_message(source, e), line=getattr(e, "line", None)
        ) from e


def parse(source: str) -> Node:
    """Parse Hyperlambda source into a script tree.

    Args:
        source: Hyperlambda text

    Returns:
        Root node whose children are the top level nodes of the source

    Raises:
        HyperlambdaSyntaxError: If the source is malformed
    """
    source = source.replace("\r\n", "\n")
    if not source.endswith("\n"):
        source += "\n"

    root = Node()
    stack: List[Node] = [root]

    for line in _tokenize(source).children:
        tokens = [child for child in line.children if isinstance(child, Token)]
        entries = [child for child in line.children if isinstance(child, Tree)]
        if not entries:
            # Blank or comment line
            continue
        entry = entries[0]
        spaces = 0
        line_number = entry.children[0].line
        if tokens and tokens[0].type == "INDENT":
            spaces = len(tokens[0])
            line_number = tokens[0].line
        if spaces % 3 != 0:
            raise HyperlambdaSyntaxError(
                "Indentation must be a multiple of three spaces", line=line_number
            )
        level = spaces // 3
        if level >= len(stack):
            raise HyperlambdaSyntaxError(
                "Node is indented too deep for its parent", line=line_number
            )

        segments = _segments(entry)
        name = segments[0]
        if name is not None and name.type in _QUOTED:
            name_text = _unquote(name)
        else:
            name_text = _text(name).rstrip()
        type_tag: Optional[str] = None
        value: Any = None
        if len(segments) > 1:
            type_tag, value = _read_value(segments[1:], line_number)

        if type_tag == "x":
            value = Expression(value)
        elif type_tag is not None and type_tag != "string":
            try:
                value = convert(value, type_tag)
            except ArgumentConversionError as e:
                raise HyperlambdaSyntaxError(e.message, line=line_number) from e

        node = Node(name_text, value)
        stack[level].add(node)
        del stack[level + 1 :]
        stack.append(node)

    return root


def parse_script(
    source: str, path: str, parser: Optional[Callable[[str], Node]] = None
) -> Node:
    """Parse the source of a script file read from storage.

    Raises:
        ScriptSyntaxError: If the file is malformed
    """
    try:
        return (parser or parse)(source)
    except HyperlambdaSyntaxError as e:
        raise ScriptSyntaxError(path, e) from e


def _quote(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _needs_quotes(text: str) -> bool:
    return (
        text == ""
        or text != text.strip()
        or any(char in text for char in ':"\n\r\t')
        or text.startswith("//")
        or text.startswith("/*")
        or text.startswith('@"')
    )


def _format_value(value: Any) -> str:
    if isinstance(value, Expression):
        return f":x:{value}"
    if isinstance(value, str):
        return ":" + (_quote(value) if _needs_quotes(value) else value)
    tag = type_name(value)
    text = to_text(value)
    if tag == "string":
        return ":" + (_quote(text) if _needs_quotes(text) else text)
    return f":{tag}:" + (_quote(text) if _needs_quotes(text) else text)


def generate(nodes: Iterable[Node], level: int = 0) -> str:
    """Render nodes back into Hyperlambda text.

    Args:
        nodes: Nodes to render, typically the children of a root node
        level: Indentation level of the given nodes

    Returns:
        Hyperlambda source, one node per line
    """
    lines: List[str] = []
    _generate(nodes, level, lines)
    return "".join(lines)


def _generate(nodes: Iterable[Node], level: int, lines: List[str]) -> None:
    for node in nodes:
        if node.name == "":
            name = '""' if node.value is None else ""
        elif _needs_quotes(node.name):
            name = _quote(node.name)
        else:
            name = node.name
        value = "" if node.value is None else _format_value(node.value)
        lines.append(f"{INDENT * level}{name}{value}\n")
        _generate(node, level + 1, lines)


__all__ = ["CONTENT_TYPE", "Expression", "generate", "parse", "parse_script"]
