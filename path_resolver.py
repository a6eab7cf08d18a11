"""
Path Endpoint Resolver
- Lexes reference path descriptions into command/number tokens
- Walks the commands to find where a reference stroke ends
- Normalizes corpus coordinates into the unit canvas square
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterator, List, NamedTuple, Tuple, Union

import config
from errors import MalformedPath
from models import Point, ReferenceStroke

logger = logging.getLogger(__name__)

# ===============================
# Lexer
# ===============================


class TokenKind(Enum):
    COMMAND = "command"
    NUMBER = "number"


class Token(NamedTuple):
    kind: TokenKind
    value: Union[str, float]
    position: int


_TOKEN_RE = re.compile(
    r"""
    (?P<command>[MmLlHhVvCcSsQqTtAaZz])
    | (?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
    | (?P<skip>[\s,]+)
    | (?P<mismatch>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def tokenize(path: str) -> Iterator[Token]:
    """
    Split a path description into tokens.

    Numbers may be packed without separators: "1-0.61" yields 1 and -0.61,
    ".5.5" yields 0.5 and 0.5.
    """
    for match in _TOKEN_RE.finditer(path):
        kind = match.lastgroup
        if kind == "command":
            yield Token(TokenKind.COMMAND, match.group(), match.start())
        elif kind == "number":
            yield Token(TokenKind.NUMBER, float(match.group()), match.start())
        elif kind == "mismatch":
            raise MalformedPath(
                path, f"unexpected character {match.group()!r} at {match.start()}"
            )


# ===============================
# Command Interpretation
# ===============================

# Arguments consumed per repetition of each command
COMMAND_ARITY = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}


def _apply_command(
    command: str, relative: bool, args: List[float], x: float, y: float
) -> Tuple[float, float]:
    """Return the current point after one argument group of a command."""
    if command == "H":
        return (x + args[0] if relative else args[0]), y
    if command == "V":
        return x, (y + args[0] if relative else args[0])
    # M, L, T, and the curve/arc commands all end on their last pair;
    # control points and arc radii/flags are consumed but unused
    end_x, end_y = args[-2], args[-1]
    if relative:
        return x + end_x, y + end_y
    return end_x, end_y


def trace_path(path: str) -> Tuple[float, float]:
    """Return the final current point of a path, in corpus units."""
    tokens = list(tokenize(path))
    if not tokens:
        raise MalformedPath(path, "empty path")
    if tokens[0].kind is not TokenKind.COMMAND:
        raise MalformedPath(path, "path must begin with a command")

    x = y = 0.0
    subpath_x = subpath_y = 0.0
    i = 0
    n = len(tokens)

    while i < n:
        token = tokens[i]
        if token.kind is not TokenKind.COMMAND:
            raise MalformedPath(path, f"unexpected number at {token.position}")
        i += 1

        letter = str(token.value)
        command = letter.upper()
        relative = letter.islower()
        arity = COMMAND_ARITY[command]

        if arity == 0:
            x, y = subpath_x, subpath_y
            continue

        groups = 0
        while i < n and tokens[i].kind is TokenKind.NUMBER:
            group = tokens[i:i + arity]
            if len(group) < arity or any(t.kind is not TokenKind.NUMBER for t in group):
                raise MalformedPath(
                    path, f"incomplete arguments for {letter!r} at {token.position}"
                )
            i += arity
            x, y = _apply_command(command, relative, [float(t.value) for t in group], x, y)

            if command == "M":
                subpath_x, subpath_y = x, y
                # further pairs after a moveto are implicit linetos
                command = "L"
            groups += 1

        if groups == 0:
            raise MalformedPath(path, f"missing arguments for {letter!r} at {token.position}")

    return x, y


def resolve_path_endpoint(path: str, dimension: float = config.REFERENCE_DIMENSION) -> Point:
    """Endpoint of a path description, normalized by the corpus dimension."""
    x, y = trace_path(path)
    return Point(x / dimension, y / dimension)


def path_start_point(path: str, dimension: float = config.REFERENCE_DIMENSION) -> Point:
    """Normalized target of the leading moveto of a path."""
    tokens = list(tokenize(path))
    if (
        len(tokens) < 3
        or tokens[0].kind is not TokenKind.COMMAND
        or str(tokens[0].value).upper() != "M"
        or tokens[1].kind is not TokenKind.NUMBER
        or tokens[2].kind is not TokenKind.NUMBER
    ):
        raise MalformedPath(path, "path must begin with a moveto")
    return Point(float(tokens[1].value) / dimension, float(tokens[2].value) / dimension)


def resolve_reference_endpoint(
    reference: ReferenceStroke, dimension: float = config.REFERENCE_DIMENSION
) -> Point:
    """Endpoint of a reference stroke, degrading to its start point if unparsable."""
    try:
        return resolve_path_endpoint(reference.path, dimension)
    except MalformedPath as exc:
        logger.warning("Unusable reference path, using start point: %s", exc)
        return reference.start_point
