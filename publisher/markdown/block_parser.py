"""
Block Parser - Splits markdown text into typed block elements

Scans the input line by line. Every non-blank line is first classified into
a LineKind (first matching rule wins), then the handler registered for that
kind consumes as many lines as belong to the block.

Classification priority:
    RULE > HEADING > FENCE > BULLET > ORDERED > TABLE > QUOTE > TEXT

The parser never raises: anything it does not recognise ends up in a
paragraph. An unterminated code fence swallows the rest of the input into
a single code block.

Usage:
    from publisher.markdown.block_parser import parse_markdown

    blocks = parse_markdown("# Title\\n\\nSome *text*.")
"""

import logging
import re
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

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

logger = logging.getLogger(__name__)


RULE_PATTERN = re.compile(r'^(---|\*\*\*|___)$')
HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.+)$')
BULLET_PATTERN = re.compile(r'^[-*+]\s+')
ORDERED_PATTERN = re.compile(r'^\d+\.\s+')
SEPARATOR_CELL_PATTERN = re.compile(r'^[-:]+$')
FENCE_MARKER = '```'


class LineKind(Enum):
    """Classification of a single non-blank source line."""
    RULE = "rule"
    HEADING = "heading"
    FENCE = "fence"
    BULLET = "bullet"
    ORDERED = "ordered"
    TABLE = "table"
    QUOTE = "quote"
    TEXT = "text"


def classify_line(line: str) -> LineKind:
    """
    Classify one line. Rules are tried in priority order and the first
    match wins; TEXT is the fallback.
    """
    stripped = line.strip()

    if RULE_PATTERN.match(stripped):
        return LineKind.RULE
    if HEADING_PATTERN.match(stripped):
        return LineKind.HEADING
    if stripped.startswith(FENCE_MARKER):
        return LineKind.FENCE
    if BULLET_PATTERN.match(stripped):
        return LineKind.BULLET
    if ORDERED_PATTERN.match(stripped):
        return LineKind.ORDERED
    if '|' in line:
        return LineKind.TABLE
    if stripped.startswith('>'):
        return LineKind.QUOTE
    return LineKind.TEXT


def split_table_row(line: str) -> List[str]:
    """
    Split a pipe-delimited line into trimmed cells.

    Only the empty cells created by a leading or trailing pipe are dropped;
    empty cells in the middle of a row are kept.
    """
    cells = [cell.strip() for cell in line.strip().split('|')]
    if cells and cells[0] == '':
        cells = cells[1:]
    if cells and cells[-1] == '':
        cells = cells[:-1]
    return cells


def is_separator_row(cells: List[str]) -> bool:
    """A row is a separator when every non-empty cell is made of `-` and `:`."""
    return all(SEPARATOR_CELL_PATTERN.match(cell) for cell in cells if cell)


class BlockParser:
    """
    Hand-written line scanner producing BlockElement lists.

    The instance holds no state between calls; parse() is safe to call
    repeatedly and from several threads.
    """

    def __init__(self):
        self._handlers: Dict[LineKind, Callable[[List[str], int], Tuple[Optional[BlockElement], int]]] = {
            LineKind.RULE: self._parse_rule,
            LineKind.HEADING: self._parse_heading,
            LineKind.FENCE: self._parse_fence,
            LineKind.BULLET: self._parse_bullet_list,
            LineKind.ORDERED: self._parse_ordered_list,
            LineKind.TABLE: self._parse_table,
            LineKind.QUOTE: self._parse_blockquote,
            LineKind.TEXT: self._parse_paragraph,
        }

    def parse(self, text: str) -> List[BlockElement]:
        """
        Parse markdown text into an ordered list of blocks.

        Args:
            text: Raw markdown source

        Returns:
            List of block elements in source order
        """
        lines = (text or '').replace('\r\n', '\n').split('\n')
        blocks: List[BlockElement] = []
        i = 0

        while i < len(lines):
            if not lines[i].strip():
                i += 1
                continue

            kind = classify_line(lines[i])
            block, i = self._handlers[kind](lines, i)
            if block is not None:
                blocks.append(block)

        logger.debug(f"Parsed {len(lines)} lines into {len(blocks)} blocks")
        return blocks

    # ------------------------------------------------------------------
    # Handlers: each receives the cursor at the classified line and
    # returns (block or None, cursor after the block)
    # ------------------------------------------------------------------

    def _parse_rule(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        return RuleBlock(), i + 1

    def _parse_heading(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        match = HEADING_PATTERN.match(lines[i].strip())
        return HeadingBlock(level=len(match.group(1)), text=match.group(2)), i + 1

    def _parse_fence(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        language = lines[i].strip()[len(FENCE_MARKER):].strip() or None
        code_lines: List[str] = []
        i += 1

        while i < len(lines) and not lines[i].strip().startswith(FENCE_MARKER):
            code_lines.append(lines[i])
            i += 1

        if i >= len(lines):
            logger.debug("Unterminated code fence, consumed to end of input")

        # Skip the closing fence (no-op at end of input)
        return CodeBlock(lines=code_lines, language=language), i + 1

    def _parse_bullet_list(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        items, i = self._collect_list_items(lines, i, BULLET_PATTERN)
        return ListBlock(items=items, ordered=False), i

    def _parse_ordered_list(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        items, i = self._collect_list_items(lines, i, ORDERED_PATTERN)
        return ListBlock(items=items, ordered=True), i

    def _collect_list_items(self, lines: List[str], i: int, pattern: re.Pattern) -> Tuple[List[str], int]:
        items: List[str] = []
        while i < len(lines) and pattern.match(lines[i].strip()):
            items.append(pattern.sub('', lines[i].strip(), count=1))
            i += 1
        return items, i

    def _parse_table(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        rows: List[List[str]] = []
        while i < len(lines) and '|' in lines[i]:
            cells = split_table_row(lines[i])
            if not is_separator_row(cells):
                rows.append(cells)
            i += 1

        if not rows:
            return None, i
        return TableBlock(rows=rows), i

    def _parse_blockquote(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        quote_lines: List[str] = []
        while i < len(lines) and lines[i].strip().startswith('>'):
            content = lines[i].strip()[1:]
            if content.startswith(' '):
                content = content[1:]
            quote_lines.append(content)
            i += 1
        return BlockquoteBlock(text='\n'.join(quote_lines)), i

    def _parse_paragraph(self, lines: List[str], i: int) -> Tuple[Optional[BlockElement], int]:
        paragraph_lines = [lines[i].strip()]
        i += 1
        while (
            i < len(lines)
            and lines[i].strip()
            and classify_line(lines[i]) is LineKind.TEXT
        ):
            paragraph_lines.append(lines[i].strip())
            i += 1
        return ParagraphBlock(text=' '.join(paragraph_lines)), i


_default_parser = BlockParser()


def parse_markdown(text: str) -> List[BlockElement]:
    """Parse markdown text with the shared stateless parser."""
    return _default_parser.parse(text)
