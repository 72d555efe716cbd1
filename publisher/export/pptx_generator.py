"""
PPTX Generator

markdown → nodes → python-pptx Presentation (in memory) → bytes (worker
thread) → one file write. Level-1 headings become section slides, deeper
headings content slides.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union

from config.constants import OUTPUT_EXTENSIONS
from publisher.export.base_generator import BaseGenerator
from publisher.options import GenerationOptions, GenerationResult
from publisher.rendering.ast_builder import build_document
from publisher.rendering.pptx_adapter import (
    available_themes,
    build_presentation,
    serialize_presentation,
)

logger = logging.getLogger(__name__)


class PptxGenerator(BaseGenerator):
    """Slide deck generator."""

    extension = OUTPUT_EXTENSIONS['pptx']
    # References get their own section slide
    reference_separator = "\n\n# References\n\n"

    async def generate(
        self,
        markdown: str,
        output_path: Union[str, Path],
        options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """Generate a .pptx file from markdown text; the result carries slide_count."""
        options = options or GenerationOptions()

        try:
            nodes = build_document(markdown, options)
            presentation, slide_count = build_presentation(
                nodes,
                options,
                theme_name=self.settings.theme,
                max_bullets=self.settings.max_bullets_per_slide,
            )

            data = await asyncio.to_thread(serialize_presentation, presentation)
            path = self.write_output(output_path, data)

            logger.info(f"PPTX written: {path} ({slide_count} slides)")
            return GenerationResult.ok(path, slide_count=slide_count)

        except Exception as e:
            logger.error(f"PPTX generation failed: {e}", exc_info=True)
            return GenerationResult.failure(str(e) or "Unknown error during PPTX generation")

    def get_available_themes(self) -> List[str]:
        return available_themes()
