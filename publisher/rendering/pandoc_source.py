"""
Pandoc Source Renderer - Re-flattens document nodes to pandoc markdown

The PDF backend does not lay anything out itself: it writes this text to a
staging file and hands it to pandoc. Cover nodes become LaTeX spacing
directives around the title block, page breaks become \\newpage.
"""

import logging
from typing import List, Optional

from config.constants import NON_BREAKING_SPACE
from publisher.markdown.inline_formatter import InlineRun, RunKind
from publisher.rendering.document_ast import (
    NodeList,
    DocumentNode,
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

_RUN_TEMPLATES = {
    RunKind.PLAIN: "{text}",
    RunKind.BOLD: "**{text}**",
    RunKind.ITALIC: "*{text}*",
    RunKind.BOLD_ITALIC: "***{text}***",
    RunKind.CODE: "`{text}`",
    RunKind.LINK: "[{text}]({url})",
}

_COVER_LABELS = {
    CoverRole.AUTHOR: "Author",
    CoverRole.ORGANIZATION: "Organization",
    CoverRole.DATE: "Date",
}


def runs_to_markdown(runs: List[InlineRun]) -> str:
    """Write inline runs back out with markdown markers."""
    return ''.join(
        _RUN_TEMPLATES[run.kind].format(text=run.text, url=run.url or '')
        for run in runs
    )


def render_pandoc_source(nodes: NodeList) -> str:
    """
    Render nodes to a pandoc markdown document.

    Args:
        nodes: Node list from the AST builder

    Returns:
        Markdown text with blocks separated by blank lines
    """
    blocks: List[str] = []
    list_lines: List[str] = []
    code_lines: Optional[List[str]] = None
    previous: Optional[DocumentNode] = None

    def flush_list():
        if list_lines:
            blocks.append('\n'.join(list_lines))
            list_lines.clear()

    for node in nodes:
        if not isinstance(node, ListItemNode) or node.index == 0:
            flush_list()

        if isinstance(node, (CodeLabelNode, CodeLineNode)):
            if code_lines is None:
                language = node.language if isinstance(node, CodeLabelNode) else ''
                code_lines = [f"```{language}"]
            if isinstance(node, CodeLineNode):
                code_lines.append('' if node.text == NON_BREAKING_SPACE else node.text)
        elif isinstance(node, SpacerNode):
            fence = code_lines if code_lines is not None else ["```"]
            fence.append("```")
            blocks.append('\n'.join(fence))
            code_lines = None
        elif isinstance(node, ListItemNode):
            marker = f"{node.index + 1}." if node.ordered else "-"
            list_lines.append(f"{marker} {runs_to_markdown(node.runs)}")
        else:
            if isinstance(node, CoverDetailNode) and isinstance(
                previous, (CoverTitleNode, CoverSubtitleNode)
            ):
                blocks.append("\\vspace{2cm}")
            rendered = _render_block(node)
            if rendered is not None:
                blocks.append(rendered)
        previous = node

    flush_list()
    if code_lines is not None:
        code_lines.append("```")
        blocks.append('\n'.join(code_lines))

    return '\n\n'.join(blocks) + '\n'


def _render_block(node: DocumentNode) -> Optional[str]:
    if isinstance(node, CoverTitleNode):
        return f"\\vspace*{{3cm}}\n\n# {node.text}"
    if isinstance(node, CoverSubtitleNode):
        return f"### {node.text}"
    if isinstance(node, CoverDetailNode):
        return f"**{_COVER_LABELS[node.role]}:** {node.text}"
    if isinstance(node, PageBreakNode):
        return "\\newpage"
    if isinstance(node, HeadingNode):
        return f"{'#' * node.effective_level} {runs_to_markdown(node.runs)}"
    if isinstance(node, ParagraphNode):
        return runs_to_markdown(node.runs)
    if isinstance(node, TableNode):
        return _render_table(node)
    if isinstance(node, BlockquoteNode):
        return '\n'.join(f"> {line}" for line in runs_to_markdown(node.runs).split('\n'))
    if isinstance(node, DividerNode):
        return "---"

    logger.warning(f"Unknown node type: {type(node)}")
    return None


def _render_table(node: TableNode) -> Optional[str]:
    if not node.rows or node.column_count == 0:
        return None

    def row_line(cells: List[str]) -> str:
        padded = cells + [''] * (node.column_count - len(cells))
        return "| " + " | ".join(padded) + " |"

    lines = []
    for index, row in enumerate(node.rows):
        lines.append(row_line([runs_to_markdown(cell) for cell in row]))
        if index == 0:
            lines.append(row_line(["---"] * node.column_count))
    return '\n'.join(lines)
