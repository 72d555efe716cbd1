"""
Integration tests for PPTX generation

Decks are written for real and re-opened with python-pptx.
"""

from pathlib import Path

import pytest
from pptx import Presentation
from pptx.util import Inches

from publisher.export.pptx_generator import PptxGenerator
from publisher.options import CoverPageMetadata, DocumentProperties, GenerationOptions


def _slide_texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame and shape.text_frame.text]


class ReferenceList:

    async def generate_reference_list_markdown(self, document_path, citation_format):
        return "- Ref A\n- Ref B"


class TestPptxGenerate:

    @pytest.mark.asyncio
    async def test_slide_count_matches_file(self, temp_output_dir, sample_markdown, test_settings):
        output = temp_output_dir / "deck.pptx"
        result = await PptxGenerator(test_settings).generate(sample_markdown, output)

        assert result.success, result.error
        assert result.page_count is None
        # Section "Quarterly Report", its intro text, "Highlights", code, table,
        # then the quote and closing text on "Highlights (continued)"
        prs = Presentation(str(output))
        assert result.slide_count == len(prs.slides) == 6
        texts = _slide_texts(prs.slides[5])
        assert texts[0] == "Highlights (continued)"
        assert "Best quarter" in texts[1]
        assert texts[1].endswith("• Closing remarks.")

    @pytest.mark.asyncio
    async def test_section_and_content_slides(self, temp_output_dir, test_settings):
        output = temp_output_dir / "layout.pptx"
        await PptxGenerator(test_settings).generate("# Part One\n\n## Goals\n\n- ship\n- learn", output)

        slides = list(Presentation(str(output)).slides)
        assert _slide_texts(slides[0]) == ["Part One"]
        assert _slide_texts(slides[1]) == ["Goals", "• ship\n• learn"]

    @pytest.mark.asyncio
    async def test_bullet_overflow(self, temp_output_dir, test_settings):
        output = temp_output_dir / "overflow.pptx"
        items = "\n".join(f"- point {n}" for n in range(1, 6))
        options = GenerationOptions(max_bullets_per_slide=2)

        result = await PptxGenerator(test_settings).generate(f"## Many\n\n{items}", output, options)

        assert result.slide_count == 3
        titles = [_slide_texts(s)[0] for s in Presentation(str(output)).slides]
        assert titles == ["Many", "Many (continued)", "Many (continued)"]

    @pytest.mark.asyncio
    async def test_table_slide(self, temp_output_dir, test_settings):
        output = temp_output_dir / "table.pptx"
        await PptxGenerator(test_settings).generate("| A | B |\n|---|---|\n| 1 |", output)

        slide = Presentation(str(output)).slides[0]
        tables = [shape.table for shape in slide.shapes if shape.has_table]
        assert len(tables) == 1
        table = tables[0]
        assert table.cell(0, 1).text == "B"
        assert table.cell(1, 0).text == "1"
        assert table.cell(1, 1).text == ""

    @pytest.mark.asyncio
    async def test_code_slide(self, temp_output_dir, test_settings):
        output = temp_output_dir / "code.pptx"
        await PptxGenerator(test_settings).generate("```bash\necho hi\n```", output)

        texts = _slide_texts(Presentation(str(output)).slides[0])
        assert texts == ["Code: bash", "echo hi"]

    @pytest.mark.asyncio
    async def test_title_slide(self, temp_output_dir, test_settings):
        output = temp_output_dir / "title.pptx"
        options = GenerationOptions(
            include_cover_page=True,
            cover_page=CoverPageMetadata(title="Kickoff", author="Robin", organization="R&D", date="June 2, 2025"),
        )
        result = await PptxGenerator(test_settings).generate("## Agenda", output, options)

        assert result.slide_count == 2
        texts = _slide_texts(Presentation(str(output)).slides[0])
        assert texts == ["Kickoff", "Robin | R&D", "June 2, 2025"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slide_size,height", [("16:9", 5.625), ("4:3", 7.5)])
    async def test_slide_size(self, temp_output_dir, test_settings, slide_size, height):
        output = temp_output_dir / "size.pptx"
        await PptxGenerator(test_settings).generate("## A", output, GenerationOptions(slide_size=slide_size))

        prs = Presentation(str(output))
        assert prs.slide_width == Inches(10)
        assert prs.slide_height == Inches(height)

    @pytest.mark.asyncio
    async def test_unknown_theme_still_renders(self, temp_output_dir, test_settings):
        result = await PptxGenerator(test_settings).generate(
            "## A", temp_output_dir / "theme.pptx", GenerationOptions(theme="neon")
        )
        assert result.success, result.error

    @pytest.mark.asyncio
    async def test_metadata(self, temp_output_dir, test_settings):
        output = temp_output_dir / "meta.pptx"
        options = GenerationOptions(document_metadata=DocumentProperties(title="Deck", author="Kim"))
        await PptxGenerator(test_settings).generate("## A", output, options)

        props = Presentation(str(output)).core_properties
        assert props.title == "Deck"
        assert props.author == "Kim"

    @pytest.mark.asyncio
    async def test_failure_leaves_no_file(self, temp_output_dir, test_settings):
        blocker = temp_output_dir / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = await PptxGenerator(test_settings).generate("## A", blocker / "deck.pptx")

        assert result.success is False
        assert result.slide_count is None
        assert not (blocker / "deck.pptx").exists()


class TestPptxFromDocument:

    @pytest.mark.asyncio
    async def test_references_slide(self, markdown_file, test_settings):
        options = GenerationOptions(include_citations=True)
        result = await PptxGenerator(test_settings, ReferenceList()).generate_from_document(markdown_file, options)

        assert result.success, result.error
        assert Path(result.output_path).suffix == ".pptx"
        slides = list(Presentation(result.output_path).slides)
        assert _slide_texts(slides[-2]) == ["References"]
        assert _slide_texts(slides[-1]) == ["References", "• Ref A\n• Ref B"]

    @pytest.mark.asyncio
    async def test_sections(self, temp_output_dir, sample_sections, test_settings):
        output = temp_output_dir / "sections.pptx"
        result = await PptxGenerator(test_settings).generate_from_sections(sample_sections, output)

        titles = [_slide_texts(s)[0] for s in Presentation(str(output)).slides]
        assert titles == ["Introduction", "Introduction", "Results", "Results"]
        assert result.slide_count == 4

    def test_available_themes(self, test_settings):
        assert "dark" in PptxGenerator(test_settings).get_available_themes()
