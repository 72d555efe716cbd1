#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest fixtures for integration tests.

Provides:
- temp_output_dir: Temporary directory for generated files
- no_pandoc: pandoc hidden from discovery
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import sys

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def temp_output_dir():
    """Temporary directory for test outputs."""
    temp_dir = Path(tempfile.mkdtemp(prefix="publisher_test_"))
    yield temp_dir
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def no_pandoc():
    """Hide every pandoc install from discovery."""
    with patch("publisher.export.pdf_generator.find_pandoc", return_value=None):
        yield
