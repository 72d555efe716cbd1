#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

import tempfile
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE_PT,
    MONOSPACE_FONT_FAMILY,
    PANDOC_PDF_ENGINE,
    DEFAULT_MARGIN,
    DEFAULT_THEME,
    MAX_BULLETS_PER_SLIDE,
    STAGING_DIR_NAME,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Typography ==========
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = DEFAULT_FONT_SIZE_PT
    monospace_font_family: str = MONOSPACE_FONT_FAMILY

    # ========== Page Layout ==========
    page_size: str = "a4"  # a4 | letter | legal
    margin: str = DEFAULT_MARGIN

    # ========== Document Properties ==========
    creator: str = "Markdown Publisher"

    # ========== Slides ==========
    theme: str = DEFAULT_THEME
    max_bullets_per_slide: int = MAX_BULLETS_PER_SLIDE

    # ========== Typesetting (pandoc) ==========
    # Explicit pandoc binary; skips discovery when set
    pandoc_path: Optional[str] = None
    pdf_engine: str = PANDOC_PDF_ENGINE
    pdfinfo_command: str = "pdfinfo"
    pdftoppm_command: str = "pdftoppm"

    # ========== Directories ==========
    staging_dir: Path = Path(tempfile.gettempdir()) / STAGING_DIR_NAME

    class Config:
        env_prefix = "PUBLISHER_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def print_config(self):
        """Print configuration summary"""
        print("\n" + "=" * 70)
        print("CONFIGURATION")
        print("=" * 70)
        print(f"Font:            {self.font_family} {self.font_size}pt")
        print(f"Monospace:       {self.monospace_font_family}")
        print(f"Page:            {self.page_size} (margin {self.margin})")
        print(f"Theme:           {self.theme}")
        print(f"Pandoc:          {self.pandoc_path or 'auto-discover'}")
        print(f"PDF engine:      {self.pdf_engine}")
        print(f"Staging dir:     {self.staging_dir}")
        print("=" * 70 + "\n")


# Global settings instance
settings = Settings()
