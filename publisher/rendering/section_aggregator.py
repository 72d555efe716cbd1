"""
Section Aggregator - Merges caller-supplied sections into one document

Sections are ordered by their `order` value (stable for ties), written as
`# {title}` followed by their content, and joined with horizontal rules.
The merged text then goes through the normal parse/assemble path, so a
multi-section document renders exactly like the same text supplied as a
single document.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from config.constants import SECTION_DIVIDER
from publisher.options import GenerationOptions
from publisher.rendering.ast_builder import build_document
from publisher.rendering.document_ast import NodeList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    """A named, ordered chunk of markdown owned by the caller."""
    title: str
    content: str
    order: int = 0
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Section":
        return cls(
            title=data['title'],
            content=data.get('content', ''),
            order=int(data.get('order', 0)),
            id=data.get('id'),
        )


def aggregate_sections(sections: Iterable[Section]) -> str:
    """
    Merge sections into a single markdown text.

    Args:
        sections: Sections in any order

    Returns:
        "# {title}\\n\\n{content}" per section, sorted by order and joined
        with "\\n\\n---\\n\\n"
    """
    ordered: List[Section] = sorted(sections, key=lambda section: section.order)
    logger.debug(f"Aggregating {len(ordered)} sections")
    return SECTION_DIVIDER.join(
        f"# {section.title}\n\n{section.content}" for section in ordered
    )


def build_document_from_sections(
    sections: Iterable[Section],
    options: Optional[GenerationOptions] = None
) -> NodeList:
    """Aggregate sections and build the document node list."""
    return build_document(aggregate_sections(sections), options)
