"""
AST Builder - Converts parsed blocks to the document node list

Flow:
    BlockElement list (parsed) → ASTBuilder → DocumentNode list → Renderer

Responsibilities:
- Prepend cover-page nodes when a cover is requested
- Resolve inline formatting for every text-bearing block
- Expand code blocks into label / line / spacer nodes
- Expand lists into one node per item with its bullet or number prefix
- Turn tables into a single grid node with a computed column count
"""

import logging
from datetime import date
from typing import List, Optional

from config.constants import BULLET_GLYPH, NON_BREAKING_SPACE
from publisher.markdown.blocks import (
    BlockElement,
    HeadingBlock,
    ParagraphBlock,
    CodeBlock,
    ListBlock,
    TableBlock,
    BlockquoteBlock,
    RuleBlock,
)
from publisher.markdown.block_parser import parse_markdown
from publisher.markdown.inline_formatter import format_inline
from publisher.options import GenerationOptions, CoverPageMetadata
from publisher.rendering.document_ast import (
    NodeList,
    CoverRole,
    CoverTitleNode,
    CoverSubtitleNode,
    CoverDetailNode,
    PageBreakNode,
    HeadingNode,
    ParagraphNode,
    CodeLabelNode,
    CodeLineNode,
    SpacerNode,
    ListItemNode,
    TableNode,
    BlockquoteNode,
    DividerNode,
)

logger = logging.getLogger(__name__)


def format_cover_date(value: Optional[date] = None) -> str:
    """Format a date as "Month Day, Year" (e.g. "March 5, 2024")."""
    value = value or date.today()
    return f"{value:%B} {value.day}, {value.year}"


class ASTBuilder:
    """
    Builds the document node list from parsed blocks.

    Usage:
        builder = ASTBuilder()
        nodes = builder.build(blocks, options)
    """

    def build(
        self,
        blocks: List[BlockElement],
        options: Optional[GenerationOptions] = None
    ) -> NodeList:
        """
        Build the node list.

        Args:
            blocks: Parsed block elements
            options: Generation options (cover page settings are read)

        Returns:
            Cover nodes (if requested) followed by body nodes
        """
        options = options or GenerationOptions()
        nodes: NodeList = []

        if options.include_cover_page and options.cover_page:
            nodes.extend(self._build_cover(options.cover_page))

        for block in blocks:
            nodes.extend(self._convert_block(block))

        logger.debug(f"Assembled {len(blocks)} blocks into {len(nodes)} nodes")
        return nodes

    def _build_cover(self, cover: CoverPageMetadata) -> NodeList:
        nodes: NodeList = [CoverTitleNode(text=cover.title)]
        if cover.subtitle:
            nodes.append(CoverSubtitleNode(text=cover.subtitle))
        if cover.author:
            nodes.append(CoverDetailNode(role=CoverRole.AUTHOR, text=cover.author))
        if cover.organization:
            nodes.append(CoverDetailNode(role=CoverRole.ORGANIZATION, text=cover.organization))
        nodes.append(CoverDetailNode(role=CoverRole.DATE, text=cover.date or format_cover_date()))
        nodes.append(PageBreakNode())
        return nodes

    def _convert_block(self, block: BlockElement) -> NodeList:
        if isinstance(block, HeadingBlock):
            return [HeadingNode(level=block.level, runs=format_inline(block.text))]

        if isinstance(block, ParagraphBlock):
            return [ParagraphNode(runs=format_inline(block.text))]

        if isinstance(block, CodeBlock):
            nodes: NodeList = []
            if block.language:
                nodes.append(CodeLabelNode(language=block.language))
            for line in block.lines:
                nodes.append(CodeLineNode(text=line if line.strip() else NON_BREAKING_SPACE))
            nodes.append(SpacerNode())
            return nodes

        if isinstance(block, ListBlock):
            return [
                ListItemNode(
                    prefix=f"{index + 1}. " if block.ordered else BULLET_GLYPH,
                    runs=format_inline(item),
                    ordered=block.ordered,
                    index=index,
                )
                for index, item in enumerate(block.items)
            ]

        if isinstance(block, TableBlock):
            rows = [[format_inline(cell) for cell in row] for row in block.rows]
            return [TableNode(rows=rows, column_count=block.column_count)]

        if isinstance(block, BlockquoteBlock):
            return [BlockquoteNode(runs=format_inline(block.text))]

        if isinstance(block, RuleBlock):
            return [DividerNode()]

        logger.warning(f"Unknown block type: {type(block)}")
        return []


def assemble(blocks: List[BlockElement], options: Optional[GenerationOptions] = None) -> NodeList:
    """Assemble parsed blocks into document nodes."""
    return ASTBuilder().build(blocks, options)


def build_document(markdown: str, options: Optional[GenerationOptions] = None) -> NodeList:
    """Parse markdown text and assemble it into document nodes."""
    return assemble(parse_markdown(markdown), options)
