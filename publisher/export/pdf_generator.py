"""
PDF Generator - typesetting through pandoc

Flow:
    markdown → nodes → pandoc markdown (staging file) → pandoc → PDF
                                                              ↓
                                                      pdfinfo page count

pandoc (and the LaTeX engine behind it) is an external collaborator; when
it is missing the call fails with a structured result, not an exception.
"""

import asyncio
import shutil
import uuid
import logging
from pathlib import Path
from typing import List, Optional, Union

from config.constants import OUTPUT_EXTENSIONS, PREVIEW_DPI
from publisher.export.base_generator import BaseGenerator
from publisher.export.external_tools import (
    find_pandoc,
    get_pdf_page_count,
    parse_pandoc_version,
    render_first_page_png,
    run_process,
)
from publisher.options import GenerationOptions, GenerationResult
from publisher.rendering.ast_builder import build_document
from publisher.rendering.pandoc_source import render_pandoc_source

logger = logging.getLogger(__name__)

PANDOC_MISSING_ERROR = "Pandoc is not installed. Please install Pandoc to generate PDFs."


class PdfGenerator(BaseGenerator):
    """
    PDF generator backed by pandoc.

    The discovered pandoc path is cached on the instance; nothing else is
    kept between calls.
    """

    extension = OUTPUT_EXTENSIONS['pdf']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._pandoc_path: Optional[str] = None

    @property
    def staging_dir(self) -> Path:
        return Path(self.settings.staging_dir)

    def find_pandoc(self) -> Optional[str]:
        if self._pandoc_path is None:
            self._pandoc_path = find_pandoc(self.settings.pandoc_path)
            if self._pandoc_path:
                logger.info(f"Using pandoc at {self._pandoc_path}")
        return self._pandoc_path

    async def is_pandoc_available(self) -> bool:
        return self.find_pandoc() is not None

    async def get_pandoc_version(self) -> Optional[str]:
        """Installed pandoc version (e.g. "3.1.9"), or None."""
        pandoc = self.find_pandoc()
        if not pandoc:
            return None
        try:
            result = await run_process(pandoc, '--version')
        except OSError as e:
            logger.warning(f"Could not query pandoc version: {e}")
            return None
        return parse_pandoc_version(result.stdout) if result.ok else None

    def build_pandoc_args(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        options: GenerationOptions
    ) -> List[str]:
        """Command-line arguments for one pandoc run (program name excluded)."""
        args = [
            str(input_path),
            '-o', str(output_path),
            f'--pdf-engine={self.settings.pdf_engine}',
        ]

        if options.include_toc:
            args += ['--toc', f'--toc-depth={options.toc_depth}']

        args += ['-V', f'papersize={options.resolve_page_size(self.settings)}']
        args += ['-V', f'geometry:margin={options.resolve_margin(self.settings)}']

        if options.font_size:
            args += ['-V', f'fontsize={options.font_size:g}pt']

        if options.page_numbers:
            args += ['-V', 'numbersections']

        metadata = options.document_metadata
        if metadata:
            if metadata.title:
                args += ['-M', f'title={metadata.title}']
            if metadata.author:
                args += ['-M', f'author={metadata.author}']
            if metadata.subject:
                args += ['-M', f'subject={metadata.subject}']
            if metadata.keywords:
                args += ['-M', f"keywords={', '.join(metadata.keywords)}"]

        # Standalone document
        args.append('-s')
        return args

    async def generate(
        self,
        markdown: str,
        output_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Generate a PDF from markdown text.

        Returns:
            GenerationResult with page_count when pdfinfo is available
        """
        options = options or GenerationOptions()

        pandoc = self.find_pandoc()
        if not pandoc:
            return GenerationResult.failure(PANDOC_MISSING_ERROR)

        output_path = Path(output_path)
        staging_file = self.staging_dir / f"source-{uuid.uuid4()}.md"

        try:
            source = render_pandoc_source(build_document(markdown, options))

            self.staging_dir.mkdir(parents=True, exist_ok=True)
            staging_file.write_text(source, encoding='utf-8')
            output_path.parent.mkdir(parents=True, exist_ok=True)

            args = self.build_pandoc_args(staging_file, output_path, options)
            try:
                result = await run_process(pandoc, *args)
            except OSError as e:
                logger.error(f"Failed to run pandoc: {e}")
                return GenerationResult.failure(f"Failed to run Pandoc: {e}")

            if not result.ok:
                logger.error(f"pandoc exited with code {result.returncode}")
                return GenerationResult.failure(
                    result.stderr.strip() or f"Pandoc exited with code {result.returncode}"
                )

            page_count = None
            if options.count_pages:
                page_count = await get_pdf_page_count(output_path, self.settings.pdfinfo_command)

            logger.info(f"PDF written: {output_path} ({page_count or '?'} pages)")
            return GenerationResult.ok(output_path, page_count=page_count)

        except Exception as e:
            logger.error(f"PDF generation failed: {e}", exc_info=True)
            return GenerationResult.failure(str(e) or "Unknown error during PDF generation")

        finally:
            self._remove_staging_file(staging_file)

    async def generate_preview(
        self,
        pdf_path: Union[str, Path],
        output_path: Union[str, Path],
        dpi: int = PREVIEW_DPI
    ) -> GenerationResult:
        """Render the first page of a PDF to PNG."""
        try:
            result = await render_first_page_png(
                pdf_path, output_path, dpi, command=self.settings.pdftoppm_command
            )
        except OSError as e:
            logger.warning(f"pdftoppm unavailable: {e}")
            return GenerationResult.failure("pdftoppm not available for preview generation")

        if not result.ok:
            return GenerationResult.failure(result.stderr.strip() or "Failed to generate preview")
        return GenerationResult.ok(output_path)

    async def cleanup(self) -> None:
        """Remove the staging directory; errors are ignored."""
        await asyncio.to_thread(shutil.rmtree, self.staging_dir, True)
        logger.debug(f"Staging dir cleaned: {self.staging_dir}")

    def _remove_staging_file(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Could not remove staging file {path}: {e}")
