"""Normalize C/C++ source text before structural fingerprinting.

Each document goes through one pass that strips `//` and `/* ... */` comments,
drops blank lines, collapses whitespace and replaces every identifier that is
not a reserved word with a per-document placeholder (VAR_1, VAR_2, ...).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("plagiarism.normalizer")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
LINE_COMMENT = "//"
BLOCK_COMMENT_START = "/*"
BLOCK_COMMENT_END = "*/"

PLACEHOLDER_PREFIX = "VAR_"

# Maximal word run starting with a letter or underscore, non-ASCII letters included
IDENTIFIER_RE = re.compile(r"(?<!\w)[^\W\d]\w*")
WHITESPACE_RE = re.compile(r"\s+")

# Keywords, directives and common library names that keep their spelling
RESERVED_WORDS = frozenset({
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if", "int",
    "long", "register", "return", "short", "signed", "sizeof", "static",
    "struct", "switch", "typedef", "union", "unsigned", "void", "volatile",
    "while", "class", "namespace", "try", "catch", "new", "delete", "this",
    "template", "nullptr", "true", "false", "bool", "private", "protected",
    "public", "virtual", "friend", "operator", "using", "throw",
    # preprocessor
    "include", "define", "ifdef", "ifndef", "endif", "pragma",
    # standard library
    "std", "string", "vector", "map", "set", "list", "queue", "stack", "pair",
    "cout", "cin", "cerr", "endl",
})


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------
class IdentifierTable:
    """Identifier spelling -> placeholder, scoped to one normalization pass."""

    def __init__(self, reserved: frozenset = RESERVED_WORDS) -> None:
        self._reserved = reserved
        self._placeholders: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._placeholders)

    def __contains__(self, name: str) -> bool:
        return name in self._placeholders

    def placeholder_for(self, name: str) -> str:
        """Return the placeholder for `name`, assigning the next one on first sight."""
        if name in self._reserved:
            return name
        placeholder = self._placeholders.get(name)
        if placeholder is None:
            placeholder = f"{PLACEHOLDER_PREFIX}{len(self._placeholders) + 1}"
            self._placeholders[name] = placeholder
        return placeholder

    def substitute(self, line: str) -> str:
        """Replace identifiers left to right."""
        return IDENTIFIER_RE.sub(lambda m: self.placeholder_for(m.group(0)), line)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._placeholders)


@dataclass
class NormalizedDocument:
    """Normalized lines of one document plus the raw line each came from."""
    lines: List[str] = field(default_factory=list)
    source_lines: List[int] = field(default_factory=list)  # 0-based raw line index
    identifiers: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.lines)


# ---------------------------------------------------------------------------
# Comment Stripping
# ---------------------------------------------------------------------------
def strip_comments(line: str, in_block_comment: bool) -> Tuple[Optional[str], bool]:
    """Remove comments from one trimmed line.

    Returns the remaining text (None when the whole line sits inside a block
    comment) and whether a block comment is still open afterwards.
    """
    if in_block_comment:
        end = line.find(BLOCK_COMMENT_END)
        if end == -1:
            return None, True
        line = line[end + len(BLOCK_COMMENT_END):]
        in_block_comment = False

    marker = line.find(LINE_COMMENT)
    if marker != -1:
        line = line[:marker]

    start = line.find(BLOCK_COMMENT_START)
    while start != -1:
        end = line.find(BLOCK_COMMENT_END, start + len(BLOCK_COMMENT_START))
        if end == -1:
            line = line[:start]
            in_block_comment = True
            break
        line = line[:start] + line[end + len(BLOCK_COMMENT_END):]
        start = line.find(BLOCK_COMMENT_START)

    return line.strip(), in_block_comment


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------
def normalize_document(text: str) -> NormalizedDocument:
    """Normalize a whole document, keeping the raw line index of every output line."""
    table = IdentifierTable()
    doc = NormalizedDocument()
    in_block_comment = False

    # Only "\n" ends a line; form feeds and other separators stay inside it
    raw_lines = text.split("\n")
    for raw_index, raw_line in enumerate(raw_lines):
        line = raw_line.strip()
        if not line:
            continue

        line, in_block_comment = strip_comments(line, in_block_comment)
        if not line:
            continue

        line = WHITESPACE_RE.sub(" ", line)
        doc.lines.append(table.substitute(line))
        doc.source_lines.append(raw_index)

    doc.identifiers = table.as_dict()
    logger.debug(
        "Normalized %d raw lines into %d lines (%d identifiers)",
        len(raw_lines), len(doc.lines), len(table),
    )
    return doc


def normalize(text: str) -> List[str]:
    """Return the normalized lines of `text`."""
    return normalize_document(text).lines
