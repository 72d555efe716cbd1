"""
Citation boundary

Reference lookup and formatting live outside this package. Generators only
ask a provider for a finished markdown fragment and append it.
"""

from typing import Optional, Protocol


class CitationProvider(Protocol):
    """Anything that can produce a formatted reference list for a document."""

    async def generate_reference_list_markdown(
        self,
        document_path: str,
        citation_format: str
    ) -> Optional[str]:
        """Return the reference list as markdown, or None when there is none."""
        ...


class NullCitationProvider:
    """Default provider: no references."""

    async def generate_reference_list_markdown(
        self,
        document_path: str,
        citation_format: str
    ) -> Optional[str]:
        return None
