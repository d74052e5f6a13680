"""Link tokenization: split free text into text and ``:Name:`` link tokens.

Pure functions, no infrastructure dependencies. Consumed by the renderer
every time a text field is displayed; recomputed per call, no caching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

# Guard (string start or one whitespace char), then :content: where content is
# one or more Unicode letters/digits, whitespace, hyphen, period, apostrophe.
_REFERENCE_PATTERN = re.compile(r"(^|\s):((?:[^\W_]|[\s\-.'])+):")

TokenKind = Literal["text", "link"]


@dataclass(frozen=True)
class Token:
    """A slice of source text: either plain prose or a wiki-link reference."""

    kind: TokenKind
    content: str  # link content is trimmed and excludes the colons

    @property
    def is_link(self) -> bool:
        return self.kind == "link"


def tokenize(text: str | None) -> list[Token]:
    """Split *text* into text/link tokens in document order.

    A reference span is ``:Content:`` preceded by the start of the string or
    a whitespace character. The guard whitespace is emitted as its own text
    token, never swallowed. Empty spans (``::``) and unterminated colons
    remain ordinary text.

    Returns an empty list for ``None`` or empty input.
    """
    if not text:
        return []

    tokens: list[Token] = []
    last_end = 0
    for match in _REFERENCE_PATTERN.finditer(text):
        preceding = text[last_end : match.start()]
        if preceding:
            tokens.append(Token(kind="text", content=preceding))
        guard = match.group(1)
        if guard:
            tokens.append(Token(kind="text", content=guard))
        tokens.append(Token(kind="link", content=match.group(2).strip()))
        last_end = match.end()

    if last_end < len(text):
        tokens.append(Token(kind="text", content=text[last_end:]))
    return tokens


def extract_references(text: str | None) -> list[str]:
    """Return the trimmed content of every link token in *text*.

    Used to report the references of a text that resolve to nothing.
    """
    return [token.content for token in tokenize(text) if token.is_link]


def restore_delimiters(content: str) -> str:
    """Wrap link content back in its colons (``Name`` -> ``:Name:``)."""
    return f":{content}:"
