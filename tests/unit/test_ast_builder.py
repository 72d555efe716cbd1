"""
Unit tests for document assembly (blocks → nodes)
"""

from collections import Counter
from datetime import date

import pytest

from config.constants import BULLET_GLYPH, NON_BREAKING_SPACE
from publisher.markdown.blocks import CodeBlock, HeadingBlock, ListBlock, TableBlock
from publisher.markdown.inline_formatter import InlineRun
from publisher.options import CoverPageMetadata, GenerationOptions
from publisher.rendering.ast_builder import (
    ASTBuilder,
    assemble,
    build_document,
    format_cover_date,
)
from publisher.rendering.document_ast import (
    CodeLabelNode,
    CodeLineNode,
    CoverDetailNode,
    CoverRole,
    CoverSubtitleNode,
    CoverTitleNode,
    DividerNode,
    HeadingNode,
    ListItemNode,
    NodeType,
    PageBreakNode,
    ParagraphNode,
    SpacerNode,
    TableNode,
    runs_to_text,
    split_cover,
)


class TestCoverPage:

    def test_full_cover(self, cover_options):
        nodes = build_document("body", cover_options)
        assert nodes[:6] == [
            CoverTitleNode(text="Annual Review"),
            CoverSubtitleNode(text="Fiscal 2024"),
            CoverDetailNode(role=CoverRole.AUTHOR, text="Jordan Lee"),
            CoverDetailNode(role=CoverRole.ORGANIZATION, text="Acme Corp"),
            CoverDetailNode(role=CoverRole.DATE, text="January 15, 2025"),
            PageBreakNode(),
        ]
        assert isinstance(nodes[6], ParagraphNode)

    def test_minimal_cover_defaults_date(self):
        options = GenerationOptions(
            include_cover_page=True,
            cover_page=CoverPageMetadata(title="Only a title"),
        )
        nodes = build_document("", options)
        assert [n.node_type for n in nodes] == [
            NodeType.COVER_TITLE, NodeType.COVER_DETAIL, NodeType.PAGE_BREAK
        ]
        assert nodes[1].text == format_cover_date()

    def test_cover_needs_metadata(self):
        options = GenerationOptions(include_cover_page=True)
        assert build_document("# T", options) == [HeadingNode(level=1, runs=[InlineRun.plain("T")])]

    def test_cover_flag_off_ignores_metadata(self):
        options = GenerationOptions(cover_page=CoverPageMetadata(title="x"))
        assert not any(isinstance(n, CoverTitleNode) for n in build_document("text", options))

    def test_format_cover_date(self):
        assert format_cover_date(date(2024, 3, 5)) == "March 5, 2024"

    def test_split_cover(self, cover_options):
        nodes = build_document("# Body", cover_options)
        cover, body = split_cover(nodes)
        assert len(cover) == 6
        assert isinstance(cover[-1], PageBreakNode)
        assert body == [HeadingNode(level=1, runs=[InlineRun.plain("Body")])]


class TestBlockConversion:

    def test_code_block_nodes(self):
        nodes = assemble([CodeBlock(lines=["a = 1", "", "b = 2"], language="python")])
        assert nodes == [
            CodeLabelNode(language="python"),
            CodeLineNode(text="a = 1"),
            CodeLineNode(text=NON_BREAKING_SPACE),
            CodeLineNode(text="b = 2"),
            SpacerNode(),
        ]

    def test_code_block_without_language(self):
        nodes = assemble([CodeBlock(lines=["x"])])
        assert [n.node_type for n in nodes] == [NodeType.CODE_LINE, NodeType.SPACER]

    def test_bullet_prefixes(self):
        nodes = assemble([ListBlock(items=["a", "b"], ordered=False)])
        assert [n.prefix for n in nodes] == [BULLET_GLYPH, BULLET_GLYPH]

    def test_ordered_prefixes(self):
        nodes = assemble([ListBlock(items=["a", "b", "c"], ordered=True)])
        assert [n.prefix for n in nodes] == ["1. ", "2. ", "3. "]
        assert [n.index for n in nodes] == [0, 1, 2]

    def test_list_item_runs_are_formatted(self):
        node = assemble([ListBlock(items=["**key** point"])])[0]
        assert node.runs == [InlineRun.bold("key"), InlineRun.plain(" point")]

    def test_table_grid(self):
        node = assemble([TableBlock(rows=[["A", "B"], ["*x*"]])])[0]
        assert isinstance(node, TableNode)
        assert node.column_count == 2
        assert node.rows[1] == [[InlineRun.italic("x")]]

    def test_heading_level_kept(self):
        node = assemble([HeadingBlock(level=4, text="Deep")])[0]
        assert node.level == 4

    @pytest.mark.parametrize("level,expected", [(0, 1), (3, 3), (7, 1)])
    def test_effective_level_clamped(self, level, expected):
        assert HeadingNode(level=level).effective_level == expected

    def test_rule_becomes_divider(self):
        assert build_document("---") == [DividerNode()]


class TestBuildDocument:

    def test_full_pipeline(self, sample_markdown):
        nodes = build_document(sample_markdown)
        stats = Counter(n.node_type.value for n in nodes)
        assert stats["heading"] == 2
        assert stats["list_item"] == 5
        assert stats["code_line"] == 3
        assert stats["table"] == 1
        assert stats["blockquote"] == 1
        assert stats["divider"] == 1

    def test_heading_text(self, sample_markdown):
        headings = [n for n in build_document(sample_markdown) if isinstance(n, HeadingNode)]
        assert [runs_to_text(h.runs) for h in headings] == ["Quarterly Report", "Highlights"]

    def test_builder_instance(self):
        assert ASTBuilder().build([]) == []
