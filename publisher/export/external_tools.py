"""
External Tools - pandoc / poppler discovery and invocation

All processes are started with asyncio.create_subprocess_exec (no shell)
and awaited to completion; there is no timeout or cancellation.
"""

import asyncio
import os
import re
import shutil
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from config.constants import PANDOC_SEARCH_PATHS

logger = logging.getLogger(__name__)

PAGES_PATTERN = re.compile(r'Pages:\s+(\d+)')
PANDOC_VERSION_PATTERN = re.compile(r'pandoc\s+([\d.]+)')


@dataclass
class ProcessResult:
    """Exit status and decoded output of a finished process."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_process(program: str, *args: str) -> ProcessResult:
    """
    Run a program and wait for it to exit.

    Raises:
        OSError: The program could not be started
    """
    logger.debug(f"Running: {program} {' '.join(args)}")
    proc = await asyncio.create_subprocess_exec(
        program, *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return ProcessResult(
        returncode=proc.returncode,
        stdout=stdout.decode('utf-8', errors='replace'),
        stderr=stderr.decode('utf-8', errors='replace'),
    )


def _is_executable(path: Union[str, Path]) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_pandoc(
    explicit_path: Optional[str] = None,
    search_paths: Iterable[str] = PANDOC_SEARCH_PATHS
) -> Optional[str]:
    """
    Locate the pandoc binary.

    Order: explicit path (settings), well-known install locations, then PATH.

    Returns:
        Path to pandoc, or None when it is not installed
    """
    if explicit_path:
        if _is_executable(explicit_path):
            return explicit_path
        logger.warning(f"Configured pandoc path is not executable: {explicit_path}")

    for candidate in search_paths:
        if _is_executable(candidate):
            return candidate

    found = shutil.which('pandoc')
    if not found:
        logger.warning("pandoc not found - PDF generation will fail")
    return found


def parse_page_count(output: str) -> Optional[int]:
    """Extract the page count from pdfinfo output."""
    match = PAGES_PATTERN.search(output)
    return int(match.group(1)) if match else None


def parse_pandoc_version(output: str) -> Optional[str]:
    """Extract the version number from `pandoc --version` output."""
    match = PANDOC_VERSION_PATTERN.search(output)
    return match.group(1) if match else None


async def get_pdf_page_count(pdf_path: Union[str, Path], command: str = 'pdfinfo') -> Optional[int]:
    """
    Count pages with pdfinfo.

    A missing or failing pdfinfo yields None; it never fails the caller.
    """
    try:
        result = await run_process(command, str(pdf_path))
    except OSError as e:
        logger.debug(f"{command} unavailable: {e}")
        return None

    if not result.ok:
        logger.debug(f"{command} exited with code {result.returncode}")
        return None
    return parse_page_count(result.stdout)


async def render_first_page_png(
    pdf_path: Union[str, Path],
    output_path: Union[str, Path],
    dpi: int,
    command: str = 'pdftoppm'
) -> ProcessResult:
    """
    Render page 1 of a PDF to PNG with pdftoppm.

    pdftoppm appends ".png" itself, so the prefix passed to it is the output
    path without its extension.

    Raises:
        OSError: pdftoppm could not be started
    """
    prefix = str(Path(output_path).with_suffix(''))
    return await run_process(
        command, '-png', '-f', '1', '-l', '1', '-r', str(dpi), '-singlefile',
        str(pdf_path), prefix,
    )
