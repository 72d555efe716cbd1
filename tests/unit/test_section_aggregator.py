"""
Unit tests for section aggregation
"""

from publisher.rendering.ast_builder import build_document
from publisher.rendering.document_ast import HeadingNode, runs_to_text
from publisher.rendering.section_aggregator import (
    Section,
    aggregate_sections,
    build_document_from_sections,
)


class TestAggregateSections:

    def test_sorted_by_order(self):
        text = aggregate_sections([
            Section(title="A", content="a body", order=2),
            Section(title="B", content="b body", order=1),
        ])
        assert text == "# B\n\nb body\n\n---\n\n# A\n\na body"

    def test_stable_for_equal_order(self):
        text = aggregate_sections([
            Section(title="first", content="", order=1),
            Section(title="second", content="", order=1),
        ])
        assert text.index("# first") < text.index("# second")

    def test_non_contiguous_orders(self):
        text = aggregate_sections([
            Section(title="late", content="", order=100),
            Section(title="early", content="", order=-5),
        ])
        assert text.startswith("# early")

    def test_empty(self):
        assert aggregate_sections([]) == ""

    def test_from_dict(self):
        section = Section.from_dict({"title": "T", "content": "c", "order": "3", "id": "x"})
        assert section == Section(title="T", content="c", order=3, id="x")

    def test_from_dict_defaults(self):
        assert Section.from_dict({"title": "T"}) == Section(title="T", content="")


class TestBuildFromSections:

    def test_body_follows_order(self):
        nodes = build_document_from_sections([
            Section(title="A", content="alpha", order=2),
            Section(title="B", content="beta", order=1),
        ])
        titles = [runs_to_text(n.runs) for n in nodes if isinstance(n, HeadingNode)]
        assert titles == ["B", "A"]

    def test_same_nodes_as_single_document(self, sample_sections):
        first, second = sorted(sample_sections, key=lambda s: s.order)
        single = (
            f"# {first.title}\n\n{first.content}"
            f"\n\n---\n\n"
            f"# {second.title}\n\n{second.content}"
        )
        assert build_document_from_sections(sample_sections) == build_document(single)

    def test_input_not_modified(self, sample_sections):
        before = list(sample_sections)
        aggregate_sections(sample_sections)
        assert sample_sections == before
