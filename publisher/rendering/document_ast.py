"""
Document AST - Renderer-agnostic node list

A rendering-oriented intermediate representation that sits between:
- Parsed markdown blocks - WHAT the source says
- Output formats (DOCX, PPTX, pandoc source) - HOW to render it

Architecture:
    markdown text
         ↓
    BlockParser + inline formatter
         ↓
    AST builder (assemble)
         ↓
    Document nodes (this layer)
         ↓
    Renderers (DOCX, PPTX, pandoc source)

All three renderers consume exactly the same node list, so every node type
defined here must be handled (or deliberately skipped) by each of them.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Tuple

from config.constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE_PT,
    MONOSPACE_FONT_FAMILY,
    CODE_FONT_SIZE_PT,
    CODE_LABEL_FONT_SIZE_PT,
)
from publisher.markdown.inline_formatter import InlineRun


# ============================================================================
# Node Types
# ============================================================================

class NodeType(Enum):
    """Types of nodes in the document model."""
    # Cover page
    COVER_TITLE = "cover_title"
    COVER_SUBTITLE = "cover_subtitle"
    COVER_DETAIL = "cover_detail"
    PAGE_BREAK = "page_break"

    # Body
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE_LABEL = "code_label"
    CODE_LINE = "code_line"
    SPACER = "spacer"
    LIST_ITEM = "list_item"
    TABLE = "table"
    BLOCKQUOTE = "blockquote"
    DIVIDER = "divider"


class CoverRole(Enum):
    """Which cover-page detail a CoverDetailNode carries."""
    AUTHOR = "author"
    ORGANIZATION = "organization"
    DATE = "date"


# ============================================================================
# Typography
# ============================================================================

@dataclass
class RenderStyle:
    """
    Typography passed explicitly to every renderer call.

    Built from GenerationOptions (caller overrides) and Settings
    (deployment defaults); renderers never read module-level font globals.
    """
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_pt: float = DEFAULT_FONT_SIZE_PT
    monospace_font_family: str = MONOSPACE_FONT_FAMILY
    code_font_size_pt: float = CODE_FONT_SIZE_PT
    code_label_font_size_pt: float = CODE_LABEL_FONT_SIZE_PT
    page_size: str = "a4"


# ============================================================================
# Nodes
# ============================================================================

@dataclass
class DocumentNode:
    """Base class for all document nodes."""
    # node_type is set by subclasses in __post_init__, not passed as parameter
    node_type: NodeType = field(init=False, default=NodeType.PARAGRAPH)


@dataclass
class CoverTitleNode(DocumentNode):
    text: str = ""

    def __post_init__(self):
        self.node_type = NodeType.COVER_TITLE


@dataclass
class CoverSubtitleNode(DocumentNode):
    text: str = ""

    def __post_init__(self):
        self.node_type = NodeType.COVER_SUBTITLE


@dataclass
class CoverDetailNode(DocumentNode):
    """Author, organization or date line on the cover page."""
    role: CoverRole = CoverRole.DATE
    text: str = ""

    def __post_init__(self):
        self.node_type = NodeType.COVER_DETAIL


@dataclass
class PageBreakNode(DocumentNode):
    def __post_init__(self):
        self.node_type = NodeType.PAGE_BREAK


@dataclass
class HeadingNode(DocumentNode):
    """Heading; renderers clamp levels outside 1..6 to 1."""
    level: int = 1
    runs: List[InlineRun] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = NodeType.HEADING

    @property
    def effective_level(self) -> int:
        return self.level if 1 <= self.level <= 6 else 1


@dataclass
class ParagraphNode(DocumentNode):
    runs: List[InlineRun] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = NodeType.PARAGRAPH


@dataclass
class CodeLabelNode(DocumentNode):
    """Language tag shown above a code block."""
    language: str = ""

    def __post_init__(self):
        self.node_type = NodeType.CODE_LABEL


@dataclass
class CodeLineNode(DocumentNode):
    """One source line of a code block (blank lines hold a NBSP)."""
    text: str = ""

    def __post_init__(self):
        self.node_type = NodeType.CODE_LINE


@dataclass
class SpacerNode(DocumentNode):
    """Closes a code block."""

    def __post_init__(self):
        self.node_type = NodeType.SPACER


@dataclass
class ListItemNode(DocumentNode):
    prefix: str = ""
    runs: List[InlineRun] = field(default_factory=list)
    ordered: bool = False
    index: int = 0

    def __post_init__(self):
        self.node_type = NodeType.LIST_ITEM


@dataclass
class TableNode(DocumentNode):
    """
    Table grid. rows[r][c] is the run list of one cell; rows[0] is the
    header. Rows may be shorter than column_count.
    """
    rows: List[List[List[InlineRun]]] = field(default_factory=list)
    column_count: int = 0

    def __post_init__(self):
        self.node_type = NodeType.TABLE


@dataclass
class BlockquoteNode(DocumentNode):
    runs: List[InlineRun] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = NodeType.BLOCKQUOTE


@dataclass
class DividerNode(DocumentNode):
    def __post_init__(self):
        self.node_type = NodeType.DIVIDER


# ============================================================================
# Helper Functions
# ============================================================================

def runs_to_text(runs: List[InlineRun]) -> str:
    """Concatenate run texts, dropping all styling."""
    return ''.join(run.text for run in runs)


# ============================================================================
# Type Aliases
# ============================================================================

NodeList = List[DocumentNode]
"""List of document nodes"""

CoverNodeTypes = (CoverTitleNode, CoverSubtitleNode, CoverDetailNode)
"""Node classes that belong to the cover page"""


def split_cover(nodes: NodeList) -> Tuple[NodeList, NodeList]:
    """
    Separate leading cover nodes (including their closing page break)
    from the body.
    """
    i = 0
    while i < len(nodes) and isinstance(nodes[i], CoverNodeTypes):
        i += 1
    if i and i < len(nodes) and isinstance(nodes[i], PageBreakNode):
        i += 1
    return nodes[:i], nodes[i:]


__all__ = [
    'NodeType', 'CoverRole', 'RenderStyle', 'DocumentNode',
    'CoverTitleNode', 'CoverSubtitleNode', 'CoverDetailNode', 'PageBreakNode',
    'HeadingNode', 'ParagraphNode', 'CodeLabelNode', 'CodeLineNode',
    'SpacerNode', 'ListItemNode', 'TableNode', 'BlockquoteNode', 'DividerNode',
    'NodeList', 'runs_to_text', 'split_cover',
]
