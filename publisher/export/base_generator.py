"""
Base Generator - Shared entry-point logic for the DOCX / PPTX / PDF backends

Every public entry point returns a GenerationResult and never raises.
Subclasses implement generate(); reading a document file, resolving its
output path, appending citations, deriving a default cover title and
merging sections are shared here.
"""

import asyncio
import os
import re
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union

from config.constants import SECTION_DIVIDER
from config.settings import Settings, settings as default_settings
from publisher.export.citations import CitationProvider, NullCitationProvider
from publisher.markdown.inline_formatter import strip_formatting
from publisher.options import GenerationOptions, GenerationResult, CoverPageMetadata
from publisher.rendering.section_aggregator import Section, aggregate_sections

logger = logging.getLogger(__name__)

FIRST_H1_PATTERN = re.compile(r'^#\s+(.+)$', re.MULTILINE)

SectionInput = Union[Section, dict]


class BaseGenerator(ABC):
    """Common behaviour of the three output generators."""

    #: File extension of the produced output
    extension: str = ""
    #: Inserted between the document body and the reference list
    reference_separator: str = SECTION_DIVIDER

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        citation_provider: Optional[CitationProvider] = None
    ):
        self.settings = app_settings or default_settings
        self.citation_provider = citation_provider or NullCitationProvider()

    @property
    def name(self) -> str:
        return self.extension.lstrip('.').upper()

    @abstractmethod
    async def generate(
        self,
        markdown: str,
        output_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """Render markdown text to output_path."""

    async def generate_from_document(
        self,
        document_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Render a markdown file.

        The output goes to `output_dir` (default: the document's directory)
        as `output_filename` (default: the document's stem) plus the
        backend's extension.
        """
        options = options or GenerationOptions()
        document_path = Path(document_path)

        try:
            content = await asyncio.to_thread(document_path.read_text, encoding='utf-8')
            output_path = self.resolve_output_path(document_path, options)

            if options.include_citations:
                content = await self._append_citations(content, document_path, options)

            if options.include_cover_page and options.cover_page is None:
                options = options.copy(cover_page=default_cover_page(content, document_path))

            return await self.generate(content, output_path, options)

        except Exception as e:
            logger.error(f"{self.name} generation from {document_path} failed: {e}")
            return GenerationResult.failure(str(e) or "Failed to read document")

    async def generate_from_sections(
        self,
        sections: Iterable[SectionInput],
        output_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """Merge sections (ordered by `order`) and render them as one document."""
        try:
            items = [s if isinstance(s, Section) else Section.from_dict(s) for s in sections]
            content = aggregate_sections(items)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid sections: {e}")
            return GenerationResult.failure(f"Invalid sections: {e}")

        return await self.generate(content, output_path, options)

    def resolve_output_path(self, document_path: Path, options: GenerationOptions) -> Path:
        directory = Path(options.output_dir) if options.output_dir else document_path.parent
        stem = options.output_filename or document_path.stem
        return directory / f"{stem}{self.extension}"

    async def _append_citations(
        self,
        content: str,
        document_path: Path,
        options: GenerationOptions
    ) -> str:
        references = await self.citation_provider.generate_reference_list_markdown(
            str(document_path), options.citation_format
        )
        if not references:
            return content
        logger.debug(f"Appending {options.citation_format} reference list")
        return content + self.reference_separator + references

    @staticmethod
    def write_output(output_path: Union[str, Path], data: bytes) -> Path:
        """
        Write bytes next to the target and move them into place, so a failed
        write never leaves a partial output file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = output_path.with_name(f".{output_path.name}.part")
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, output_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        return output_path


def default_cover_page(content: str, document_path: Path) -> CoverPageMetadata:
    """Cover title from the first level-1 heading (markup removed), else the file stem."""
    match = FIRST_H1_PATTERN.search(content)
    title = strip_formatting(match.group(1).strip()) if match else ''
    return CoverPageMetadata(title=title or document_path.stem)
