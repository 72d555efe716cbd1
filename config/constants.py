"""
Centralized constants for Markdown Publisher.
Fixed values shared by the parser, renderers and generators.
"""

# ===========================================
# TYPOGRAPHY
# ===========================================
DEFAULT_FONT_FAMILY = 'Calibri'
DEFAULT_FONT_SIZE_PT = 11
MONOSPACE_FONT_FAMILY = 'Consolas'
CODE_FONT_SIZE_PT = 10
CODE_LABEL_FONT_SIZE_PT = 9
FOOTER_FONT_SIZE_PT = 9

# ===========================================
# COLORS (hex, without #)
# ===========================================
CODE_BACKGROUND = 'F5F5F5'
TABLE_HEADER_BACKGROUND = 'E0E0E0'
BORDER_COLOR = 'CCCCCC'
MUTED_TEXT_COLOR = '666666'
FOOTER_TEXT_COLOR = '999999'
HYPERLINK_COLOR = '0563C1'

# ===========================================
# DOCUMENT STRUCTURE
# ===========================================
BULLET_GLYPH = '• '
NON_BREAKING_SPACE = '\u00a0'
SECTION_DIVIDER = '\n\n---\n\n'
DEFAULT_TOC_DEPTH = 3
SUPPORTED_PAGE_SIZES = ['a4', 'letter', 'legal']
SUPPORTED_CITATION_FORMATS = ['ieee', 'apa', 'mla', 'chicago']

# ===========================================
# SLIDES
# ===========================================
DEFAULT_THEME = 'default'
MAX_BULLETS_PER_SLIDE = 6
SLIDE_SIZES = {
    '16:9': (10.0, 5.625),   # inches
    '4:3': (10.0, 7.5),
}

# ===========================================
# TYPESETTING (PANDOC)
# ===========================================
PANDOC_SEARCH_PATHS = [
    '/opt/homebrew/bin/pandoc',
    '/usr/local/bin/pandoc',
    '/usr/bin/pandoc',
    'C:\\Program Files\\Pandoc\\pandoc.exe',
]
PANDOC_PDF_ENGINE = 'pdflatex'
DEFAULT_MARGIN = '1in'
STAGING_DIR_NAME = 'publisher-pdf'
PREVIEW_DPI = 150

# ===========================================
# FILE HANDLING
# ===========================================
OUTPUT_EXTENSIONS = {
    'docx': '.docx',
    'pptx': '.pptx',
    'pdf': '.pdf',
}

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/publisher.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
