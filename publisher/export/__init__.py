"""
Export Module

Async generators turning markdown into DOCX, PPTX and PDF files.

Usage:
    from publisher.export import DocxGenerator

    result = await DocxGenerator().generate(markdown, "out.docx")
    if not result.success:
        print(result.error)
"""

from .citations import CitationProvider, NullCitationProvider
from .docx_generator import DocxGenerator
from .pptx_generator import PptxGenerator
from .pdf_generator import PdfGenerator

__all__ = [
    'CitationProvider',
    'NullCitationProvider',
    'DocxGenerator',
    'PptxGenerator',
    'PdfGenerator',
]
