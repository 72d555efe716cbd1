"""
Markdown Module

Block parsing and inline formatting for the supported markdown dialect.
"""

from .blocks import (
    BlockKind,
    BlockElement,
    HeadingBlock,
    ParagraphBlock,
    CodeBlock,
    ListBlock,
    TableBlock,
    BlockquoteBlock,
    RuleBlock,
)
from .block_parser import BlockParser, LineKind, classify_line, parse_markdown
from .inline_formatter import InlineRun, RunKind, format_inline, strip_formatting

__all__ = [
    'BlockKind',
    'BlockElement',
    'HeadingBlock',
    'ParagraphBlock',
    'CodeBlock',
    'ListBlock',
    'TableBlock',
    'BlockquoteBlock',
    'RuleBlock',
    'BlockParser',
    'LineKind',
    'classify_line',
    'parse_markdown',
    'InlineRun',
    'RunKind',
    'format_inline',
    'strip_formatting',
]
