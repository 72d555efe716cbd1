"""
Markdown Publisher

Converts a constrained markdown dialect into a renderer-agnostic node list
and publishes it as DOCX, PPTX or PDF (via pandoc).
"""

__version__ = "1.0.0"
