"""
DOCX Adapter - Converts document nodes to a Word package

This module bridges the renderer-agnostic node list and python-docx.

Architecture:
    DocumentNode list → build_docx() → docx.Document → serialize_docx() → bytes

Features:
    - Cover page (centered title block followed by a page break)
    - Optional table-of-contents field
    - Built-in "Heading N" styles for headings
    - Inline bold / italic / code / hyperlink runs
    - Shaded, indented code lines with an optional language label
    - Bordered tables with a shaded header row
    - Left-bordered blockquotes and bottom-bordered dividers
    - Running footer with "PAGE of NUMPAGES" fields
    - Normal style font and page size taken from RenderStyle

Usage:
    from publisher.rendering.docx_adapter import build_docx, serialize_docx

    document = build_docx(nodes, options, style)
    data = serialize_docx(document)
"""

import io
import logging
import re
from typing import List, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, Cm, Inches, RGBColor

from config.constants import (
    CODE_BACKGROUND,
    TABLE_HEADER_BACKGROUND,
    BORDER_COLOR,
    MUTED_TEXT_COLOR,
    FOOTER_TEXT_COLOR,
    HYPERLINK_COLOR,
    FOOTER_FONT_SIZE_PT,
)
from publisher.markdown.inline_formatter import InlineRun, RunKind
from publisher.options import GenerationOptions, DocumentProperties
from publisher.rendering.document_ast import (
    NodeList,
    DocumentNode,
    RenderStyle,
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
    split_cover,
)

logger = logging.getLogger(__name__)

# Control characters lxml refuses in element text (tab, LF and CR are allowed)
XML_ILLEGAL_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f]')


PAGE_SIZES = {
    'a4': {
        'width': Cm(21.0),
        'height': Cm(29.7),
    },
    'letter': {
        'width': Inches(8.5),
        'height': Inches(11.0),
    },
    'legal': {
        'width': Inches(8.5),
        'height': Inches(14.0),
    },
}


# ============================================================================
# Main Rendering Functions
# ============================================================================

def build_docx(
    nodes: NodeList,
    options: Optional[GenerationOptions] = None,
    style: Optional[RenderStyle] = None,
    default_creator: Optional[str] = None
) -> Document:
    """
    Build an in-memory Word document from document nodes.

    Args:
        nodes: Node list from the AST builder
        options: Generation options (TOC, metadata)
        style: Typography; defaults to RenderStyle()
        default_creator: Author written when the metadata has none

    Returns:
        python-docx Document, not yet saved
    """
    options = options or GenerationOptions()
    style = style or RenderStyle()

    logger.info(f"Rendering {len(nodes)} nodes to DOCX")

    doc = Document()
    _setup_document_properties(doc, options.document_metadata, default_creator)
    _setup_normal_style(doc, style)
    _setup_page(doc, style)
    _setup_footer(doc)

    cover, body = split_cover(nodes)
    for node in cover:
        _render_node(doc, node, style)

    if options.include_toc:
        _insert_toc(doc, options.toc_depth)

    for node in body:
        _render_node(doc, node, style)

    return doc


def serialize_docx(doc: Document) -> bytes:
    """Serialize a document to .docx bytes without touching the filesystem."""
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


# ============================================================================
# Document Setup
# ============================================================================

def _setup_document_properties(
    doc: Document,
    metadata: Optional[DocumentProperties],
    default_creator: Optional[str]
) -> None:
    """Set core properties from document metadata."""
    metadata = metadata or DocumentProperties()
    props = doc.core_properties
    props.author = _xml_safe(metadata.author or metadata.creator or default_creator)
    props.title = _xml_safe(metadata.title)
    props.subject = _xml_safe(metadata.subject)
    props.comments = _xml_safe(metadata.description)
    props.keywords = _xml_safe(", ".join(metadata.keywords))
    logger.debug(f"Document properties set: title={props.title}, author={props.author}")


def _setup_normal_style(doc: Document, style: RenderStyle) -> None:
    """Apply the body font to the Normal style (inherited by everything)."""
    normal = doc.styles['Normal']
    normal.font.name = style.font_family
    normal.font.size = Pt(style.font_size_pt)
    # East-Asian slot so the font applies to every script
    normal.element.rPr.rFonts.set(qn('w:eastAsia'), style.font_family)


def _setup_page(doc: Document, style: RenderStyle) -> None:
    size = PAGE_SIZES.get(style.page_size, PAGE_SIZES['a4'])
    for section in doc.sections:
        section.page_width = size['width']
        section.page_height = size['height']


def _setup_footer(doc: Document) -> None:
    """Centered "N of M" page counter in the running footer."""
    footer = doc.sections[0].footer
    p = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    runs = [_add_field(p, 'PAGE'), p.add_run(' of '), _add_field(p, 'NUMPAGES')]
    for run in runs:
        run.font.size = Pt(FOOTER_FONT_SIZE_PT)
        run.font.color.rgb = _hex_to_rgb(FOOTER_TEXT_COLOR)


def _insert_toc(doc: Document, depth: int) -> None:
    """Insert a table-of-contents field page (populated when Word updates fields)."""
    title = doc.add_paragraph()
    title_run = title.add_run("Table of Contents")
    title_run.bold = True
    title_run.font.size = Pt(16)

    field = doc.add_paragraph()
    _add_field(field, f'TOC \\o "1-{depth}" \\h \\z \\u',
               placeholder="Right-click and select 'Update Field' to populate")

    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
    logger.debug(f"TOC field inserted (depth {depth})")


# ============================================================================
# Node Rendering Dispatch
# ============================================================================

def _render_node(doc: Document, node: DocumentNode, style: RenderStyle) -> None:
    """Dispatch rendering based on node type."""
    if isinstance(node, CoverTitleNode):
        _render_cover_title(doc, node)
    elif isinstance(node, CoverSubtitleNode):
        _render_cover_subtitle(doc, node)
    elif isinstance(node, CoverDetailNode):
        _render_cover_detail(doc, node)
    elif isinstance(node, PageBreakNode):
        doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
    elif isinstance(node, HeadingNode):
        _render_heading(doc, node, style)
    elif isinstance(node, ParagraphNode):
        _render_paragraph(doc, node, style)
    elif isinstance(node, CodeLabelNode):
        _render_code_label(doc, node, style)
    elif isinstance(node, CodeLineNode):
        _render_code_line(doc, node, style)
    elif isinstance(node, SpacerNode):
        p = doc.add_paragraph()
        p.paragraph_format.space_before = Pt(0)
        p.paragraph_format.space_after = Pt(6)
    elif isinstance(node, ListItemNode):
        _render_list_item(doc, node, style)
    elif isinstance(node, TableNode):
        _render_table(doc, node, style)
    elif isinstance(node, BlockquoteNode):
        _render_blockquote(doc, node, style)
    elif isinstance(node, DividerNode):
        _render_divider(doc)
    else:
        logger.warning(f"Unknown node type: {type(node)}")


# ============================================================================
# Cover Page
# ============================================================================

def _render_cover_title(doc: Document, node: CoverTitleNode) -> None:
    # ~2 inches of space above the title
    doc.add_paragraph().paragraph_format.space_before = Pt(144)

    p = doc.add_paragraph()
    run = p.add_run(_xml_safe(node.text))
    run.bold = True
    run.font.size = Pt(36)
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.paragraph_format.space_after = Pt(24)


def _render_cover_subtitle(doc: Document, node: CoverSubtitleNode) -> None:
    p = doc.add_paragraph()
    run = p.add_run(_xml_safe(node.text))
    run.font.size = Pt(20)
    run.font.color.rgb = _hex_to_rgb(MUTED_TEXT_COLOR)
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.paragraph_format.space_after = Pt(48)


def _render_cover_detail(doc: Document, node: CoverDetailNode) -> None:
    text = f"Author: {node.text}" if node.role == CoverRole.AUTHOR else node.text
    p = doc.add_paragraph()
    run = p.add_run(_xml_safe(text))
    run.font.size = Pt(12)
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.paragraph_format.space_after = Pt(6)


# ============================================================================
# Body Renderers
# ============================================================================

def _render_heading(doc: Document, node: HeadingNode, style: RenderStyle) -> None:
    """Render a heading using Word's built-in heading styles."""
    p = doc.add_paragraph(style=f'Heading {node.effective_level}')
    _add_inline_runs(p, node.runs, style)
    p.paragraph_format.space_before = Pt(12)
    p.paragraph_format.space_after = Pt(6)


def _render_paragraph(doc: Document, node: ParagraphNode, style: RenderStyle) -> None:
    p = doc.add_paragraph()
    _add_inline_runs(p, node.runs, style)
    p.paragraph_format.space_after = Pt(6)


def _render_code_label(doc: Document, node: CodeLabelNode, style: RenderStyle) -> None:
    p = doc.add_paragraph()
    run = p.add_run(_xml_safe(node.language))
    run.font.name = style.monospace_font_family
    run.font.size = Pt(style.code_label_font_size_pt)
    run.font.color.rgb = _hex_to_rgb(MUTED_TEXT_COLOR)
    p.paragraph_format.space_before = Pt(6)
    p.paragraph_format.space_after = Pt(3)


def _render_code_line(doc: Document, node: CodeLineNode, style: RenderStyle) -> None:
    p = doc.add_paragraph()
    _set_paragraph_shading(p, CODE_BACKGROUND)

    run = p.add_run(_xml_safe(node.text))
    run.font.name = style.monospace_font_family
    run.font.size = Pt(style.code_font_size_pt)

    fmt = p.paragraph_format
    fmt.space_before = Pt(0)
    fmt.space_after = Pt(0)
    fmt.line_spacing = 1.15
    fmt.left_indent = Pt(18)


def _render_list_item(doc: Document, node: ListItemNode, style: RenderStyle) -> None:
    p = doc.add_paragraph()
    p.add_run(node.prefix)
    _add_inline_runs(p, node.runs, style)
    p.paragraph_format.left_indent = Pt(36)
    p.paragraph_format.space_after = Pt(3)


def _render_table(doc: Document, node: TableNode, style: RenderStyle) -> None:
    """
    Render a table grid. Rows shorter than the column count leave their
    trailing cells empty.
    """
    if not node.rows or node.column_count == 0:
        return

    table = doc.add_table(rows=len(node.rows), cols=node.column_count)
    table.style = 'Table Grid'

    for row_index, row_cells in enumerate(node.rows):
        row = table.rows[row_index]
        for col_index, runs in enumerate(row_cells[:node.column_count]):
            cell = row.cells[col_index]
            paragraph = cell.paragraphs[0]
            _add_inline_runs(paragraph, runs, style)

            if row_index == 0:
                for run in paragraph.runs:
                    run.font.bold = True

        if row_index == 0:
            for cell in row.cells:
                _set_cell_shading(cell, TABLE_HEADER_BACKGROUND)

    # Space after table
    doc.add_paragraph()


def _render_blockquote(doc: Document, node: BlockquoteNode, style: RenderStyle) -> None:
    p = doc.add_paragraph()
    _set_paragraph_border(p, 'left', size=24, color=BORDER_COLOR)
    _add_inline_runs(p, node.runs, style)

    fmt = p.paragraph_format
    fmt.left_indent = Pt(36)
    fmt.space_before = Pt(6)
    fmt.space_after = Pt(6)


def _render_divider(doc: Document) -> None:
    p = doc.add_paragraph()
    _set_paragraph_border(p, 'bottom', size=6, color=BORDER_COLOR)
    p.paragraph_format.space_before = Pt(12)
    p.paragraph_format.space_after = Pt(12)


# ============================================================================
# Inline Runs
# ============================================================================

def _add_inline_runs(paragraph, runs: List[InlineRun], style: RenderStyle) -> None:
    """Append styled runs to a paragraph."""
    for inline in runs:
        if inline.kind == RunKind.LINK:
            _add_hyperlink(paragraph, inline.text, inline.url)
            continue

        run = paragraph.add_run(_xml_safe(inline.text))
        if inline.kind == RunKind.CODE:
            run.font.name = style.monospace_font_family
            run.font.size = Pt(style.code_font_size_pt)
            _set_run_shading(run, CODE_BACKGROUND)
        else:
            if inline.is_bold:
                run.bold = True
            if inline.is_italic:
                run.italic = True


def _add_hyperlink(paragraph, text: str, url: str) -> None:
    """
    Add an external hyperlink to a paragraph.

    python-docx has no public hyperlink API, so the w:hyperlink element and
    its relationship are created directly.
    """
    r_id = paragraph.part.relate_to(_xml_safe(url), RT.HYPERLINK, is_external=True)

    hyperlink = OxmlElement('w:hyperlink')
    hyperlink.set(qn('r:id'), r_id)

    new_run = OxmlElement('w:r')
    rPr = OxmlElement('w:rPr')

    color = OxmlElement('w:color')
    color.set(qn('w:val'), HYPERLINK_COLOR)
    rPr.append(color)

    underline = OxmlElement('w:u')
    underline.set(qn('w:val'), 'single')
    rPr.append(underline)

    new_run.append(rPr)

    text_elm = OxmlElement('w:t')
    text_elm.set(qn('xml:space'), 'preserve')
    text_elm.text = _xml_safe(text)
    new_run.append(text_elm)

    hyperlink.append(new_run)
    paragraph._p.append(hyperlink)


# ============================================================================
# OpenXML Helpers
# ============================================================================

def _add_field(paragraph, instruction: str, placeholder: str = "1"):
    """
    Insert a Word field (PAGE, NUMPAGES, TOC ...) into a paragraph.

    Returns the run holding the placeholder so callers can style it.
    """
    run = paragraph.add_run()
    fldChar_begin = OxmlElement('w:fldChar')
    fldChar_begin.set(qn('w:fldCharType'), 'begin')

    instrText = OxmlElement('w:instrText')
    instrText.set(qn('xml:space'), 'preserve')
    instrText.text = instruction

    fldChar_separate = OxmlElement('w:fldChar')
    fldChar_separate.set(qn('w:fldCharType'), 'separate')

    run._r.append(fldChar_begin)
    run._r.append(instrText)
    run._r.append(fldChar_separate)

    # Placeholder text (replaced when fields are updated)
    result_run = paragraph.add_run(placeholder)

    end_run = paragraph.add_run()
    fldChar_end = OxmlElement('w:fldChar')
    fldChar_end.set(qn('w:fldCharType'), 'end')
    end_run._r.append(fldChar_end)

    return result_run


def _shading_element(fill: str):
    shading = OxmlElement('w:shd')
    shading.set(qn('w:val'), 'clear')
    shading.set(qn('w:color'), 'auto')
    shading.set(qn('w:fill'), fill)
    return shading


def _set_paragraph_shading(paragraph, fill: str) -> None:
    # Must run before paragraph_format setters so w:shd precedes w:spacing/w:ind
    paragraph._p.get_or_add_pPr().append(_shading_element(fill))


def _set_run_shading(run, fill: str) -> None:
    run._r.get_or_add_rPr().append(_shading_element(fill))


def _set_cell_shading(cell, fill: str) -> None:
    cell._tc.get_or_add_tcPr().append(_shading_element(fill))


def _set_paragraph_border(paragraph, side: str, size: int, color: str) -> None:
    # Must run before paragraph_format setters so w:pBdr precedes w:spacing/w:ind
    pPr = paragraph._p.get_or_add_pPr()
    border = OxmlElement('w:pBdr')
    edge = OxmlElement(f'w:{side}')
    edge.set(qn('w:val'), 'single')
    edge.set(qn('w:sz'), str(size))
    edge.set(qn('w:space'), '4')
    edge.set(qn('w:color'), color)
    border.append(edge)
    pPr.append(border)


def _xml_safe(text: Optional[str]) -> str:
    """Replace control characters that cannot appear in WordprocessingML with spaces."""
    return XML_ILLEGAL_PATTERN.sub(' ', text or '')


def _hex_to_rgb(hex_color: str) -> RGBColor:
    """Parse hex color (e.g., "FF0000" -> RGB(255, 0, 0))."""
    return RGBColor(int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16))
