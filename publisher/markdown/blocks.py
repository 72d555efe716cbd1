"""
Block Elements - Top-level structural units of a markdown document

The block parser produces a flat, ordered list of these. They carry raw
(unformatted) text; inline formatting is resolved later by the inline
formatter when the document model is assembled.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Union


class BlockKind(Enum):
    """Types of block-level elements produced by the parser."""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    LIST = "list"
    TABLE = "table"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"


@dataclass
class HeadingBlock:
    """ATX heading (`#` to `######`)."""
    level: int
    text: str
    kind: BlockKind = field(init=False, default=BlockKind.HEADING)


@dataclass
class ParagraphBlock:
    """Run of text lines joined with single spaces."""
    text: str
    kind: BlockKind = field(init=False, default=BlockKind.PARAGRAPH)


@dataclass
class CodeBlock:
    """Fenced code block; lines are kept verbatim."""
    lines: List[str] = field(default_factory=list)
    language: Optional[str] = None
    kind: BlockKind = field(init=False, default=BlockKind.CODE)


@dataclass
class ListBlock:
    """Flat bullet or numbered list (markers already stripped)."""
    items: List[str] = field(default_factory=list)
    ordered: bool = False
    kind: BlockKind = field(init=False, default=BlockKind.LIST)


@dataclass
class TableBlock:
    """Pipe table without separator rows. Rows may differ in length."""
    rows: List[List[str]] = field(default_factory=list)
    kind: BlockKind = field(init=False, default=BlockKind.TABLE)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


@dataclass
class BlockquoteBlock:
    """Quoted text; source line breaks are preserved with newlines."""
    text: str
    kind: BlockKind = field(init=False, default=BlockKind.BLOCKQUOTE)


@dataclass
class RuleBlock:
    """Horizontal rule (`---`, `***`, `___`)."""
    kind: BlockKind = field(init=False, default=BlockKind.RULE)


BlockElement = Union[
    HeadingBlock,
    ParagraphBlock,
    CodeBlock,
    ListBlock,
    TableBlock,
    BlockquoteBlock,
    RuleBlock,
]
"""Any block produced by the parser"""
