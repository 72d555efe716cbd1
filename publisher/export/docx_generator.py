"""
DOCX Generator

markdown → nodes → python-docx Document (in memory) → bytes (worker
thread) → one file write.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from config.constants import OUTPUT_EXTENSIONS
from publisher.export.base_generator import BaseGenerator
from publisher.options import GenerationOptions, GenerationResult
from publisher.rendering.ast_builder import build_document
from publisher.rendering.docx_adapter import build_docx, serialize_docx

logger = logging.getLogger(__name__)


class DocxGenerator(BaseGenerator):
    """Word document generator."""

    extension = OUTPUT_EXTENSIONS['docx']

    async def generate(
        self,
        markdown: str,
        output_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """
        Generate a .docx file from markdown text.

        Args:
            markdown: Source text
            output_path: Destination file
            options: Generation options

        Returns:
            GenerationResult (never raises)
        """
        options = options or GenerationOptions()

        try:
            nodes = build_document(markdown, options)
            style = options.render_style(self.settings)
            document = build_docx(nodes, options, style, default_creator=self.settings.creator)

            data = await asyncio.to_thread(serialize_docx, document)
            path = self.write_output(output_path, data)

            logger.info(f"DOCX written: {path} ({len(data)} bytes)")
            return GenerationResult.ok(path)

        except Exception as e:
            logger.error(f"DOCX generation failed: {e}", exc_info=True)
            return GenerationResult.failure(str(e) or "Unknown error during DOCX generation")
