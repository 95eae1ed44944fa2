"""Structural fingerprints for windows of normalized code.

A small lexical scan turns a window of normalized lines into a string of
class tokens: control headers and calls lose their parenthesized contents,
operators collapse to one token per operator family and literal values are
dropped. What survives is control-flow shape and operator mix.
"""

from __future__ import annotations

import re
from typing import List, Tuple

# ---------------------------------------------------------------------------
# Token classes
# ---------------------------------------------------------------------------
COND = "COND"
LOOP = "LOOP"
SWITCH = "SWITCH"
CALL = "CALL"
ASSIGN = "ASSIGN"
ARITH = "OP"
COMPARE = "CMP"
LITERAL = "LIT"

HEADER_CLASSES = {
    "if": COND,
    "for": LOOP,
    "while": LOOP,
    "switch": SWITCH,
}

# Words that may precede "(" without being a call
NON_CALL_WORDS = {"return", "else", "do", "case", "throw", "delete", "sizeof", "catch"}

ASSIGN_OPS = {"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>="}
ARITH_OPS = {"+", "-", "*", "/", "%", "++", "--"}
COMPARE_OPS = {"<", ">", "<=", ">=", "==", "!="}

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
  | (?P<space>[ \t\r\f\v]+)
  | (?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')
  | (?P<number>\d[\w.]*)
  | (?P<word>[^\W\d]\w*)
  | (?P<op><<=|>>=|->|::|\+\+|--|&&|\|\||<<|>>|[-+*/%&|^!=<>]=)
  | (?P<char>.)
    """,
    re.VERBOSE,
)

Token = Tuple[str, str]


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------
def tokenize(text: str) -> List[Token]:
    """Split text into (kind, text) tokens; spaces are dropped."""
    tokens: List[Token] = []
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        if kind == "space":
            continue
        tokens.append((kind, match.group()))
    return tokens


def _next_significant(tokens: List[Token], pos: int) -> int:
    while pos < len(tokens) and tokens[pos][0] == "newline":
        pos += 1
    return pos


def _skip_group(tokens: List[Token], open_pos: int) -> int:
    """Return the index just past the ")" matching the "(" at `open_pos`.

    An unbalanced group runs to the end of the window.
    """
    depth = 0
    for pos in range(open_pos, len(tokens)):
        text = tokens[pos][1]
        if text == "(":
            depth += 1
        elif text == ")":
            depth -= 1
            if depth == 0:
                return pos + 1
    return len(tokens)


def _classify_operator(text: str) -> str:
    if text in ASSIGN_OPS:
        return ASSIGN
    if text in COMPARE_OPS:
        return COMPARE
    if text in ARITH_OPS:
        return ARITH
    return text


def fingerprint(window_text: str) -> str:
    """Reduce a window of normalized lines to its structure-only token string."""
    tokens = tokenize(window_text)
    lines: List[List[str]] = [[]]
    pos = 0

    while pos < len(tokens):
        kind, text = tokens[pos]

        if kind == "newline":
            lines.append([])
            pos += 1
            continue

        if kind in ("string", "number"):
            lines[-1].append(LITERAL)
            pos += 1
            continue

        if kind == "word":
            paren = _next_significant(tokens, pos + 1) if text in HEADER_CLASSES else pos + 1
            followed_by_group = paren < len(tokens) and tokens[paren][1] == "("
            if text in HEADER_CLASSES and followed_by_group:
                lines[-1].append(HEADER_CLASSES[text])
                pos = _skip_group(tokens, paren)
                continue
            if followed_by_group and text not in NON_CALL_WORDS:
                lines[-1].append(CALL)
                pos = _skip_group(tokens, paren)
                continue
            lines[-1].append(text)
            pos += 1
            continue

        lines[-1].append(_classify_operator(text))
        pos += 1

    return "\n".join(" ".join(line) for line in lines)


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------
_MASK32 = 0xFFFFFFFF
_SIGN32 = 0x80000000


def string_hash(text: str) -> str:
    """31-multiplier rolling hash with explicit 32-bit signed wraparound, as hex.

    Not cryptographic; equal digests are treated as equal shingles.
    """
    value = 0
    for ch in text:
        value = (value * 31 + ord(ch)) & _MASK32
    if value & _SIGN32:
        value -= 1 << 32
    return format(value, "x")
