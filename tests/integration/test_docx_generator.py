"""
Integration tests for DOCX generation

Files are written for real and re-opened with python-docx.
"""

from pathlib import Path

import pytest
from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT

from publisher.export.docx_generator import DocxGenerator
from publisher.options import DocumentProperties, GenerationOptions
from publisher.rendering.section_aggregator import Section


class FixedCitations:
    """Citation provider returning a canned reference list."""

    def __init__(self, references):
        self.references = references
        self.calls = []

    async def generate_reference_list_markdown(self, document_path, citation_format):
        self.calls.append((document_path, citation_format))
        return self.references


def _texts(document):
    return [p.text for p in document.paragraphs]


class TestDocxGenerate:

    @pytest.mark.asyncio
    async def test_writes_document(self, temp_output_dir, sample_markdown, test_settings):
        output = temp_output_dir / "report.docx"
        result = await DocxGenerator(test_settings).generate(sample_markdown, output)

        assert result.success, result.error
        assert result.output_path == str(output)
        assert result.page_count is None
        assert output.exists()

        document = Document(str(output))
        headings = [(p.style.name, p.text) for p in document.paragraphs if p.style.name.startswith("Heading")]
        assert headings == [("Heading 1", "Quarterly Report"), ("Heading 2", "Highlights")]

    @pytest.mark.asyncio
    async def test_inline_styles(self, temp_output_dir, test_settings):
        output = temp_output_dir / "inline.docx"
        await DocxGenerator(test_settings).generate("**bold** and *italic* and `code`", output)

        runs = Document(str(output)).paragraphs[0].runs
        assert [r.text for r in runs] == ["bold", " and ", "italic", " and ", "code"]
        assert runs[0].bold is True
        assert runs[2].italic is True
        assert runs[4].font.name == test_settings.monospace_font_family

    @pytest.mark.asyncio
    async def test_hyperlink_relationship(self, temp_output_dir, test_settings):
        output = temp_output_dir / "link.docx"
        await DocxGenerator(test_settings).generate("see [docs](https://example.com/docs) now", output)

        document = Document(str(output))
        targets = [r.target_ref for r in document.part.rels.values() if r.reltype == RT.HYPERLINK]
        assert targets == ["https://example.com/docs"]

    @pytest.mark.asyncio
    async def test_lists_code_and_quote(self, temp_output_dir, sample_markdown, test_settings):
        output = temp_output_dir / "blocks.docx"
        await DocxGenerator(test_settings).generate(sample_markdown, output)

        texts = _texts(Document(str(output)))
        assert "• Two new regions" in texts
        assert "1. Hire" in texts
        assert "2. Ship" in texts
        assert "python" in texts
        assert "def total(xs):" in texts
        assert "\u00a0" in texts
        assert "Best quarter\nso far" in texts

    @pytest.mark.asyncio
    async def test_table(self, temp_output_dir, sample_markdown, test_settings):
        output = temp_output_dir / "table.docx"
        await DocxGenerator(test_settings).generate(sample_markdown, output)

        tables = Document(str(output)).tables
        assert len(tables) == 1
        table = tables[0]
        assert len(table.rows) == 3
        assert len(table.columns) == 2
        assert table.cell(0, 0).text == "Region"
        assert table.cell(2, 0).text == "APAC"
        assert table.cell(2, 1).text == ""
        assert table.style.name == "Table Grid"

    @pytest.mark.asyncio
    async def test_cover_page(self, temp_output_dir, cover_options, test_settings):
        output = temp_output_dir / "cover.docx"
        await DocxGenerator(test_settings).generate("# Body", output, cover_options)

        texts = _texts(Document(str(output)))
        for expected in ["Annual Review", "Fiscal 2024", "Author: Jordan Lee", "Acme Corp", "January 15, 2025"]:
            assert expected in texts
        assert texts.index("Annual Review") < texts.index("Body")

    @pytest.mark.asyncio
    async def test_toc_field(self, temp_output_dir, test_settings):
        output = temp_output_dir / "toc.docx"
        options = GenerationOptions(include_toc=True, toc_depth=2)
        await DocxGenerator(test_settings).generate("# One\n\n## Two", output, options)

        body_xml = Document(str(output)).element.body.xml
        assert 'TOC \\o "1-2"' in body_xml

    @pytest.mark.asyncio
    async def test_footer_page_fields(self, temp_output_dir, test_settings):
        output = temp_output_dir / "footer.docx"
        await DocxGenerator(test_settings).generate("text", output)

        footer_xml = Document(str(output)).sections[0].footer.paragraphs[0]._p.xml
        assert "PAGE" in footer_xml
        assert "NUMPAGES" in footer_xml

    @pytest.mark.asyncio
    async def test_font_and_properties(self, temp_output_dir, test_settings):
        output = temp_output_dir / "props.docx"
        options = GenerationOptions(
            font_family="Georgia",
            font_size=12,
            document_metadata=DocumentProperties(
                title="Props", subject="Testing", keywords=["a", "b"]
            ),
        )
        await DocxGenerator(test_settings).generate("text", output, options)

        document = Document(str(output))
        normal = document.styles["Normal"]
        assert normal.font.name == "Georgia"
        assert normal.font.size.pt == 12
        props = document.core_properties
        assert props.title == "Props"
        assert props.subject == "Testing"
        assert props.keywords == "a, b"
        assert props.author == test_settings.creator

    @pytest.mark.asyncio
    async def test_letter_page_size(self, temp_output_dir, test_settings):
        output = temp_output_dir / "letter.docx"
        await DocxGenerator(test_settings).generate("text", output, GenerationOptions(page_size="letter"))

        section = Document(str(output)).sections[0]
        assert round(section.page_width.inches, 2) == 8.5
        assert round(section.page_height.inches, 2) == 11.0

    @pytest.mark.asyncio
    async def test_control_characters_replaced(self, temp_output_dir, test_settings):
        output = temp_output_dir / "control.docx"
        markdown = "# Form\x0cfeed\n\npage one\x0cpage two **b\x01old**\n\n```\nx\x0by\n```"
        options = GenerationOptions(document_metadata=DocumentProperties(title="Bad\x07title"))

        result = await DocxGenerator(test_settings).generate(markdown, output, options)

        assert result.success, result.error
        document = Document(str(output))
        texts = _texts(document)
        assert "Form feed" in texts
        assert "page one page two b old" in texts
        assert "x y" in texts
        assert document.core_properties.title == "Bad title"

    @pytest.mark.asyncio
    async def test_failure_leaves_no_file(self, temp_output_dir, test_settings):
        blocker = temp_output_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        output = blocker / "out.docx"

        result = await DocxGenerator(test_settings).generate("text", output)

        assert result.success is False
        assert result.error
        assert not output.exists()


class TestDocxFromDocument:

    @pytest.mark.asyncio
    async def test_output_next_to_source(self, markdown_file, test_settings):
        result = await DocxGenerator(test_settings).generate_from_document(markdown_file)

        assert result.success, result.error
        assert Path(result.output_path) == markdown_file.with_suffix(".docx")

    @pytest.mark.asyncio
    async def test_output_dir_and_filename(self, markdown_file, temp_output_dir, test_settings):
        options = GenerationOptions(output_dir=temp_output_dir / "out", output_filename="final")
        result = await DocxGenerator(test_settings).generate_from_document(markdown_file, options)

        assert Path(result.output_path) == temp_output_dir / "out" / "final.docx"
        assert Path(result.output_path).exists()

    @pytest.mark.asyncio
    async def test_missing_document(self, temp_output_dir, test_settings):
        result = await DocxGenerator(test_settings).generate_from_document(temp_output_dir / "missing.md")
        assert result.success is False
        assert result.error

    @pytest.mark.asyncio
    async def test_citations_appended_after_divider(self, markdown_file, test_settings):
        provider = FixedCitations("1. Knuth, *The Art of Computer Programming*")
        options = GenerationOptions(include_citations=True, citation_format="apa")

        result = await DocxGenerator(test_settings, provider).generate_from_document(markdown_file, options)

        assert provider.calls == [(str(markdown_file), "apa")]
        texts = _texts(Document(result.output_path))
        assert texts[-1] == "1. Knuth, The Art of Computer Programming"

    @pytest.mark.asyncio
    async def test_citations_skipped_when_disabled(self, markdown_file, test_settings):
        provider = FixedCitations("1. Unused")
        await DocxGenerator(test_settings, provider).generate_from_document(markdown_file)
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_cover_title_from_first_heading(self, markdown_file, test_settings):
        options = GenerationOptions(include_cover_page=True)
        result = await DocxGenerator(test_settings).generate_from_document(markdown_file, options)

        texts = _texts(Document(result.output_path))
        assert texts.count("Quarterly Report") == 2  # cover title + heading
        assert options.cover_page is None

    @pytest.mark.asyncio
    async def test_cover_title_drops_inline_markup(self, temp_output_dir, test_settings):
        source = temp_output_dir / "plan.md"
        source.write_text("# The **2025** [Plan](https://example.com)\n\nBody", encoding="utf-8")

        result = await DocxGenerator(test_settings).generate_from_document(
            source, GenerationOptions(include_cover_page=True)
        )

        texts = _texts(Document(result.output_path))
        assert texts.count("The 2025 Plan") == 2  # cover title + heading

    @pytest.mark.asyncio
    async def test_cover_title_from_file_stem(self, temp_output_dir, test_settings):
        source = temp_output_dir / "meeting-notes.md"
        source.write_text("No headings here.", encoding="utf-8")

        result = await DocxGenerator(test_settings).generate_from_document(
            source, GenerationOptions(include_cover_page=True)
        )

        assert "meeting-notes" in _texts(Document(result.output_path))


class TestDocxFromSections:

    @pytest.mark.asyncio
    async def test_sections_ordered(self, temp_output_dir, sample_sections, test_settings):
        output = temp_output_dir / "sections.docx"
        result = await DocxGenerator(test_settings).generate_from_sections(sample_sections, output)

        assert result.success, result.error
        headings = [p.text for p in Document(str(output)).paragraphs if p.style.name == "Heading 1"]
        assert headings == ["Introduction", "Results"]

    @pytest.mark.asyncio
    async def test_accepts_dicts(self, temp_output_dir, test_settings):
        output = temp_output_dir / "dicts.docx"
        sections = [{"title": "B", "content": "b", "order": 2}, {"title": "A", "content": "a", "order": 1}]
        result = await DocxGenerator(test_settings).generate_from_sections(sections, output)

        assert result.success, result.error

    @pytest.mark.asyncio
    async def test_invalid_section(self, temp_output_dir, test_settings):
        result = await DocxGenerator(test_settings).generate_from_sections(
            [{"content": "no title"}], temp_output_dir / "bad.docx"
        )
        assert result.success is False
        assert "Invalid sections" in result.error

    @pytest.mark.asyncio
    async def test_matches_single_document(self, temp_output_dir, test_settings):
        sections = [Section(title="S1", content="one", order=1), Section(title="S2", content="two", order=2)]
        generator = DocxGenerator(test_settings)

        await generator.generate_from_sections(sections, temp_output_dir / "a.docx")
        await generator.generate("# S1\n\none\n\n---\n\n# S2\n\ntwo", temp_output_dir / "b.docx")

        assert _texts(Document(str(temp_output_dir / "a.docx"))) == _texts(Document(str(temp_output_dir / "b.docx")))
