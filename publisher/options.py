#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generation Options & Results
============================

Per-call configuration and outcome objects shared by the three generators
(DOCX, PPTX, PDF). Everything here is created for one generation call and
discarded afterwards.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, List, Dict, Any, Union

from config.constants import (
    DEFAULT_TOC_DEPTH,
    SUPPORTED_PAGE_SIZES,
    SUPPORTED_CITATION_FORMATS,
)
from config.settings import Settings, settings as default_settings
from publisher.rendering.document_ast import RenderStyle


@dataclass
class CoverPageMetadata:
    """Cover page (DOCX, PDF) / title slide (PPTX) content."""
    title: str
    subtitle: Optional[str] = None
    author: Optional[str] = None
    organization: Optional[str] = None
    date: Optional[str] = None  # Defaults to today when rendered


@dataclass
class DocumentProperties:
    """Document metadata written into the output package / PDF info."""
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    creator: Optional[str] = None
    company: Optional[str] = None


@dataclass
class GenerationOptions:
    """
    Options for one generation call.

    Backend-specific fields are ignored by the other backends:
    theme/slide_size/max_bullets_per_slide (PPTX), margin/page_numbers/
    count_pages (PDF).
    """
    # Structure
    include_toc: bool = False
    toc_depth: int = DEFAULT_TOC_DEPTH
    include_cover_page: bool = False
    cover_page: Optional[CoverPageMetadata] = None

    # Citations
    include_citations: bool = False
    citation_format: str = 'ieee'  # ieee | apa | mla | chicago

    # Output location (document-file entry points only)
    output_dir: Optional[Union[str, Path]] = None
    output_filename: Optional[str] = None  # without extension

    # Typography & page
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    page_size: Optional[str] = None  # a4 | letter | legal

    document_metadata: Optional[DocumentProperties] = None

    # Slide deck
    theme: Optional[str] = None
    slide_size: str = '16:9'  # 16:9 | 4:3
    max_bullets_per_slide: Optional[int] = None

    # Typesetting (PDF)
    margin: Optional[str] = None
    page_numbers: bool = True
    count_pages: bool = True

    def __post_init__(self):
        if self.page_size is not None and self.page_size not in SUPPORTED_PAGE_SIZES:
            raise ValueError(
                f"Unsupported page size '{self.page_size}'. "
                f"Expected one of {SUPPORTED_PAGE_SIZES}"
            )
        if self.citation_format not in SUPPORTED_CITATION_FORMATS:
            raise ValueError(
                f"Unsupported citation format '{self.citation_format}'. "
                f"Expected one of {SUPPORTED_CITATION_FORMATS}"
            )

    def copy(self, **changes) -> "GenerationOptions":
        """Return a modified copy; the caller's options are never mutated."""
        return replace(self, **changes)

    def resolve_page_size(self, app_settings: Optional[Settings] = None) -> str:
        return self.page_size or (app_settings or default_settings).page_size

    def resolve_margin(self, app_settings: Optional[Settings] = None) -> str:
        return self.margin or (app_settings or default_settings).margin

    def render_style(self, app_settings: Optional[Settings] = None) -> RenderStyle:
        """Typography for the renderers: options override settings."""
        app_settings = app_settings or default_settings
        return RenderStyle(
            font_family=self.font_family or app_settings.font_family,
            font_size_pt=float(self.font_size or app_settings.font_size),
            monospace_font_family=app_settings.monospace_font_family,
            page_size=self.resolve_page_size(app_settings),
        )


@dataclass
class GenerationResult:
    """
    Outcome of a generation call. Public entry points always return one of
    these instead of raising.
    """
    success: bool
    output_path: Optional[str] = None
    error: Optional[str] = None
    page_count: Optional[int] = None  # PDF backend only
    slide_count: Optional[int] = None  # PPTX backend only

    @classmethod
    def ok(cls, output_path: Union[str, Path], **extra) -> "GenerationResult":
        return cls(success=True, output_path=str(output_path), **extra)

    @classmethod
    def failure(cls, error: str) -> "GenerationResult":
        return cls(success=False, error=error or "Unknown error")

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary (None fields omitted)."""
        data = {
            'success': self.success,
            'output_path': self.output_path,
            'error': self.error,
            'page_count': self.page_count,
            'slide_count': self.slide_count,
        }
        return {k: v for k, v in data.items() if v is not None}
