"""
PPTX Adapter - Converts document nodes to a slide deck

Architecture:
    DocumentNode list → plan_slides() → SlidePlan list → build_presentation()

Slide mapping:
    - Cover nodes          → title slide
    - Heading level 1      → section divider slide
    - Heading level 2+     → content slide (title + accent underline)
    - Paragraph / list item / blockquote → bullet on the current slide,
      split into "(continued)" slides past max_bullets_per_slide
    - Table                → "Data" slide
    - Code block           → "Code: <language>" slide; text after a table or
      code slide opens a "<heading> (continued)" slide
    - Divider / page break → ignored

Bullet text is plain: inline styling is dropped.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from config.constants import (
    BULLET_GLYPH,
    CODE_BACKGROUND,
    DEFAULT_THEME,
    MAX_BULLETS_PER_SLIDE,
    MONOSPACE_FONT_FAMILY,
    NON_BREAKING_SPACE,
    SLIDE_SIZES,
)
from publisher.options import GenerationOptions, DocumentProperties
from publisher.rendering.ast_builder import format_cover_date
from publisher.rendering.document_ast import (
    NodeList,
    CoverRole,
    CoverTitleNode,
    CoverSubtitleNode,
    CoverDetailNode,
    HeadingNode,
    ParagraphNode,
    CodeLabelNode,
    CodeLineNode,
    SpacerNode,
    ListItemNode,
    TableNode,
    BlockquoteNode,
    runs_to_text,
    split_cover,
)

logger = logging.getLogger(__name__)

# Blank layout in the default template
BLANK_LAYOUT_INDEX = 6


# ============================================================================
# Themes
# ============================================================================

@dataclass(frozen=True)
class SlideTheme:
    """Theme colors (hex, without #)."""
    primary: str      # headings, accents
    secondary: str    # subheadings
    background: str
    text: str
    accent: str       # highlights


PPTX_THEMES: Dict[str, SlideTheme] = {
    'default': SlideTheme('2D5A8B', '4A7FB5', 'FFFFFF', '333333', 'E67E22'),
    'dark': SlideTheme('4FC3F7', '81D4FA', '1E1E1E', 'FFFFFF', 'FFB74D'),
    'professional': SlideTheme('1A365D', '2A4365', 'FFFFFF', '2D3748', 'DD6B20'),
    'modern': SlideTheme('6366F1', '8B5CF6', 'FFFFFF', '374151', '10B981'),
    'minimal': SlideTheme('000000', '4A4A4A', 'FFFFFF', '000000', '888888'),
}


def get_theme(name: Optional[str] = None) -> SlideTheme:
    """Look up a theme by name; unknown or missing names fall back to the default."""
    if name and name not in PPTX_THEMES:
        logger.warning(f"Unknown theme '{name}', using '{DEFAULT_THEME}'")
    return PPTX_THEMES.get(name or DEFAULT_THEME, PPTX_THEMES[DEFAULT_THEME])


def available_themes() -> List[str]:
    return list(PPTX_THEMES.keys())


# ============================================================================
# Slide Planning
# ============================================================================

SLIDE_SECTION = 'section'
SLIDE_CONTENT = 'content'
SLIDE_TABLE = 'table'
SLIDE_CODE = 'code'


@dataclass
class SlidePlan:
    """Content of one slide, independent of python-pptx."""
    kind: str
    title: str
    bullets: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    code: str = ""


@dataclass
class TitleSlidePlan:
    title: str
    subtitle: Optional[str] = None
    byline: Optional[str] = None  # "author | organization"
    date: Optional[str] = None


class SlidePlanner:
    """
    Walks the node list once and groups it into slides.

    Bullets are buffered and flushed whenever a slide boundary is reached,
    so overflow can be split into continuation slides.
    """

    def __init__(self, max_bullets: int = MAX_BULLETS_PER_SLIDE):
        self.max_bullets = max(1, max_bullets)
        self.slides: List[SlidePlan] = []
        self._current: Optional[SlidePlan] = None
        self._heading_title: Optional[str] = None
        self._pending: List[str] = []
        self._code_language: Optional[str] = None
        self._code_lines: List[str] = []

    def plan(self, nodes: NodeList) -> List[SlidePlan]:
        for node in nodes:
            if isinstance(node, HeadingNode):
                self._close_current()
                kind = SLIDE_SECTION if node.effective_level == 1 else SLIDE_CONTENT
                self._heading_title = runs_to_text(node.runs)
                self._current = SlidePlan(kind=kind, title=self._heading_title)
            elif isinstance(node, ParagraphNode):
                self._add_bullet(runs_to_text(node.runs))
            elif isinstance(node, ListItemNode):
                self._add_bullet(runs_to_text(node.runs))
            elif isinstance(node, BlockquoteNode):
                self._add_bullet(f'"{runs_to_text(node.runs)}"')
            elif isinstance(node, TableNode):
                self._close_current()
                rows = [[runs_to_text(cell) for cell in row] for row in node.rows]
                self.slides.append(SlidePlan(kind=SLIDE_TABLE, title="Data", rows=rows))
            elif isinstance(node, CodeLabelNode):
                self._code_language = node.language
            elif isinstance(node, CodeLineNode):
                self._code_lines.append('' if node.text == NON_BREAKING_SPACE else node.text)
            elif isinstance(node, SpacerNode):
                self._emit_code_slide()
            # Dividers and page breaks have no slide representation

        self._close_current()
        return self.slides

    def _add_bullet(self, text: str) -> None:
        if not text:
            return
        if self._current is None:
            # Content before the first heading has no slide to land on
            if self._heading_title is None:
                return
            # Text after a table or code slide continues the heading's slide
            self._current = SlidePlan(kind=SLIDE_CONTENT, title=f"{self._heading_title} (continued)")
        self._pending.append(text)

    def _emit_code_slide(self) -> None:
        self._close_current()
        language = self._code_language
        self.slides.append(SlidePlan(
            kind=SLIDE_CODE,
            title=f"Code: {language}" if language else "Code",
            code='\n'.join(self._code_lines),
        ))
        self._code_language = None
        self._code_lines = []

    def _flush_bullets(self) -> None:
        current = self._current
        if current is None:
            self._pending = []
            return

        base_title = self._heading_title or current.title
        while self._pending:
            chunk = self._pending[:self.max_bullets]
            self._pending = self._pending[self.max_bullets:]

            if current.kind == SLIDE_CONTENT and not current.bullets:
                current.bullets = chunk
                continue

            # Section slides carry no body; their text opens a content slide
            title = base_title
            if current.kind == SLIDE_CONTENT:
                title = f"{base_title} (continued)"
            self.slides.append(current)
            current = SlidePlan(kind=SLIDE_CONTENT, title=title, bullets=chunk)

        self._current = current
        self._pending = []

    def _close_current(self) -> None:
        self._flush_bullets()
        if self._current is not None:
            self.slides.append(self._current)
            self._current = None


def plan_slides(nodes: NodeList, max_bullets: int = MAX_BULLETS_PER_SLIDE) -> List[SlidePlan]:
    """Group body nodes into slide plans."""
    return SlidePlanner(max_bullets).plan(nodes)


def plan_title_slide(cover: NodeList) -> Optional[TitleSlidePlan]:
    """Collapse cover nodes into a title slide (None when there is no cover)."""
    plan = None
    byline: List[str] = []
    for node in cover:
        if isinstance(node, CoverTitleNode):
            plan = TitleSlidePlan(title=node.text)
        elif plan is None:
            continue
        elif isinstance(node, CoverSubtitleNode):
            plan.subtitle = node.text
        elif isinstance(node, CoverDetailNode):
            if node.role == CoverRole.DATE:
                plan.date = node.text
            else:
                byline.append(node.text)

    if plan is not None:
        plan.byline = " | ".join(byline) or None
        plan.date = plan.date or format_cover_date()
    return plan


# ============================================================================
# Main Rendering Function
# ============================================================================

def build_presentation(
    nodes: NodeList,
    options: Optional[GenerationOptions] = None,
    theme_name: Optional[str] = None,
    max_bullets: Optional[int] = None
) -> Tuple[Presentation, int]:
    """
    Build an in-memory slide deck from document nodes.

    Args:
        nodes: Node list from the AST builder
        options: Generation options (theme, slide size, metadata)
        theme_name: Fallback theme when options.theme is unset
        max_bullets: Fallback bullet limit when options.max_bullets_per_slide is unset

    Returns:
        (Presentation, slide_count)
    """
    options = options or GenerationOptions()
    theme = get_theme(options.theme or theme_name)
    limit = options.max_bullets_per_slide or max_bullets or MAX_BULLETS_PER_SLIDE

    prs = Presentation()
    width, height = SLIDE_SIZES.get(options.slide_size, SLIDE_SIZES['16:9'])
    prs.slide_width = Inches(width)
    prs.slide_height = Inches(height)
    _set_core_properties(prs, options.document_metadata)

    cover, body = split_cover(nodes)
    title_plan = plan_title_slide(cover)
    plans = plan_slides(body, limit)

    logger.info(f"Rendering {len(plans)} slides (theme={options.theme or theme_name or DEFAULT_THEME})")

    renderer = _SlideRenderer(prs, theme, width)
    if title_plan is not None:
        renderer.add_title_slide(title_plan)
    for plan in plans:
        renderer.add_slide(plan)

    return prs, len(prs.slides)


def serialize_presentation(prs: Presentation) -> bytes:
    """Serialize a deck to .pptx bytes without touching the filesystem."""
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def _set_core_properties(prs: Presentation, metadata: Optional[DocumentProperties]) -> None:
    if metadata is None:
        return
    props = prs.core_properties
    if metadata.title:
        props.title = metadata.title
    if metadata.author:
        props.author = metadata.author
    if metadata.subject:
        props.subject = metadata.subject
    if metadata.keywords:
        props.keywords = ", ".join(metadata.keywords)


class _SlideRenderer:
    """Draws slide plans onto a python-pptx Presentation."""

    def __init__(self, prs: Presentation, theme: SlideTheme, slide_width: float):
        self.prs = prs
        self.theme = theme
        self.content_width = slide_width - 1.0

    def add_slide(self, plan: SlidePlan) -> None:
        if plan.kind == SLIDE_SECTION:
            self.add_section_slide(plan)
        elif plan.kind == SLIDE_TABLE:
            self.add_table_slide(plan)
        elif plan.kind == SLIDE_CODE:
            self.add_code_slide(plan)
        else:
            self.add_content_slide(plan)

    def _new_slide(self):
        slide = self.prs.slides.add_slide(self.prs.slide_layouts[BLANK_LAYOUT_INDEX])
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = RGBColor.from_string(self.theme.background)
        return slide

    def _add_text(self, slide, text, x, y, w, h, size, color,
                  bold=False, align=None, font=None):
        box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
        frame = box.text_frame
        frame.word_wrap = True
        paragraph = frame.paragraphs[0]
        paragraph.text = text
        if align is not None:
            paragraph.alignment = align
        _style_runs(paragraph, size, color, bold=bold, name=font)
        return box

    def _add_slide_title(self, slide, title: str) -> None:
        self._add_text(slide, title, 0.5, 0.3, self.content_width, 0.75,
                       28, self.theme.primary, bold=True)

    def add_title_slide(self, plan: TitleSlidePlan) -> None:
        slide = self._new_slide()
        center = PP_ALIGN.CENTER
        self._add_text(slide, plan.title, 0.5, 2.0, self.content_width, 1.5,
                       44, self.theme.primary, bold=True, align=center)
        if plan.subtitle:
            self._add_text(slide, plan.subtitle, 0.5, 3.5, self.content_width, 0.75,
                           24, self.theme.secondary, align=center)
        if plan.byline:
            self._add_text(slide, plan.byline, 0.5, 4.25, self.content_width, 0.5,
                           16, self.theme.text, align=center)
        if plan.date:
            self._add_text(slide, plan.date, 0.5, 4.75, self.content_width, 0.5,
                           14, self.theme.secondary, align=center)

    def add_section_slide(self, plan: SlidePlan) -> None:
        slide = self._new_slide()
        band = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, 0, Inches(2.0), self.prs.slide_width, Inches(1.5)
        )
        band.fill.solid()
        band.fill.fore_color.rgb = RGBColor.from_string(self.theme.primary)
        band.line.fill.background()

        self._add_text(slide, plan.title, 0.5, 2.25, self.content_width, 1.0,
                       36, self.theme.background, bold=True, align=PP_ALIGN.CENTER)

    def add_content_slide(self, plan: SlidePlan) -> None:
        slide = self._new_slide()
        self._add_slide_title(slide, plan.title)

        underline = slide.shapes.add_connector(
            MSO_CONNECTOR.STRAIGHT,
            Inches(0.5), Inches(1.0), Inches(0.5 + self.content_width), Inches(1.0)
        )
        underline.line.color.rgb = RGBColor.from_string(self.theme.accent)
        underline.line.width = Pt(2)

        if not plan.bullets:
            return

        box = slide.shapes.add_textbox(
            Inches(0.5), Inches(1.25), Inches(self.content_width), Inches(4.0)
        )
        frame = box.text_frame
        frame.word_wrap = True
        frame.vertical_anchor = MSO_ANCHOR.TOP
        for index, bullet in enumerate(plan.bullets):
            paragraph = frame.paragraphs[0] if index == 0 else frame.add_paragraph()
            paragraph.text = f"{BULLET_GLYPH}{bullet}"
            _style_runs(paragraph, 18, self.theme.text)
            paragraph.space_after = Pt(6)

    def add_table_slide(self, plan: SlidePlan) -> None:
        slide = self._new_slide()
        self._add_slide_title(slide, plan.title)

        if not plan.rows:
            return

        column_count = max(len(row) for row in plan.rows) or 1
        shape = slide.shapes.add_table(
            len(plan.rows), column_count,
            Inches(0.5), Inches(1.25), Inches(self.content_width), Inches(4.0)
        )
        table = shape.table

        for row_index, row in enumerate(plan.rows):
            header = row_index == 0
            for col_index in range(column_count):
                cell = table.cell(row_index, col_index)
                cell.text = row[col_index] if col_index < len(row) else ""
                cell.fill.solid()
                cell.fill.fore_color.rgb = RGBColor.from_string(
                    self.theme.primary if header else self.theme.background
                )
                cell.vertical_anchor = MSO_ANCHOR.MIDDLE
                paragraph = cell.text_frame.paragraphs[0]
                paragraph.alignment = PP_ALIGN.CENTER
                _style_runs(paragraph, 14,
                            self.theme.background if header else self.theme.text,
                            bold=header)

    def add_code_slide(self, plan: SlidePlan) -> None:
        slide = self._new_slide()
        self._add_slide_title(slide, plan.title)

        panel = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE,
            Inches(0.5), Inches(1.1), Inches(self.content_width), Inches(4.2)
        )
        panel.fill.solid()
        panel.fill.fore_color.rgb = RGBColor.from_string(CODE_BACKGROUND)
        panel.line.fill.background()

        if plan.code:
            box = self._add_text(slide, plan.code, 0.6, 1.2, self.content_width - 0.2, 4.0,
                                 12, '333333', font=MONOSPACE_FONT_FAMILY)
            box.text_frame.vertical_anchor = MSO_ANCHOR.TOP


def _style_runs(paragraph, size, color, bold=False, name=None) -> None:
    """Apply font settings to every run (PowerPoint ignores paragraph defaults)."""
    for run in paragraph.runs:
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = RGBColor.from_string(color)
        if name:
            run.font.name = name
