"""
Pytest configuration and shared fixtures for Markdown Publisher tests.
"""
import sys
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import Settings
from publisher.options import CoverPageMetadata, GenerationOptions
from publisher.rendering.section_aggregator import Section


# ============================================================================
# Fixtures: Configuration & Settings
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Settings isolated from the environment: staging inside temp_dir."""
    return Settings(
        staging_dir=temp_dir / "staging",
        pandoc_path=None,
        pdfinfo_command="pdfinfo",
        pdftoppm_command="pdftoppm",
    )


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

@pytest.fixture
def sample_markdown() -> str:
    """Document exercising every block type."""
    return (
        "# Quarterly Report\n"
        "\n"
        "Revenue grew **12%** this quarter, see [the dashboard](https://example.com/q3).\n"
        "\n"
        "## Highlights\n"
        "\n"
        "- New *enterprise* tier\n"
        "- Faster `build` times\n"
        "- Two new regions\n"
        "\n"
        "1. Hire\n"
        "2. Ship\n"
        "\n"
        "```python\n"
        "def total(xs):\n"
        "\n"
        "    return sum(xs)\n"
        "```\n"
        "\n"
        "| Region | Revenue |\n"
        "|--------|---------|\n"
        "| EMEA | 1.2M |\n"
        "| APAC |\n"
        "\n"
        "> Best quarter\n"
        "> so far\n"
        "\n"
        "---\n"
        "\n"
        "Closing remarks.\n"
    )


@pytest.fixture
def sample_sections():
    """Sections deliberately out of order."""
    return [
        Section(title="Results", content="Numbers went up.", order=2, id="s2"),
        Section(title="Introduction", content="Why we did this.", order=1, id="s1"),
    ]


@pytest.fixture
def cover_options() -> GenerationOptions:
    return GenerationOptions(
        include_cover_page=True,
        cover_page=CoverPageMetadata(
            title="Annual Review",
            subtitle="Fiscal 2024",
            author="Jordan Lee",
            organization="Acme Corp",
            date="January 15, 2025",
        ),
    )


@pytest.fixture
def markdown_file(temp_dir: Path, sample_markdown: str) -> Path:
    path = temp_dir / "report.md"
    path.write_text(sample_markdown, encoding="utf-8")
    return path


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests writing real output files")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Auto-add 'unit' marker to test files in tests/unit/
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        # Auto-add 'integration' marker to test files in tests/integration/
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
