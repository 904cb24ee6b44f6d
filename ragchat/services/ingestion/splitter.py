"""Blank-line section splitting.

Splits a document into the sections that get embedded and stored, one per
paragraph.  A paragraph boundary is one or more blank lines, where a
"blank" line may still carry spaces or tabs.  Pieces are trimmed and empty
pieces dropped, so a document made only of whitespace yields no sections.

The splitter is pure: the same text always gives the same sections, and
splitting the join of its own output (with ``"\\n\\n"``) gives that output
back unchanged.
"""

from __future__ import annotations

import re

# A newline, any run of whitespace, then another newline.
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class SectionSplitter:
    """Splits text into trimmed, non-empty paragraph sections."""

    def split(self, text: str) -> list[str]:
        if not text:
            return []
        pieces = _PARAGRAPH_BREAK.split(text)
        return [piece.strip() for piece in pieces if piece.strip()]
