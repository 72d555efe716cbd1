#!/usr/bin/env python3
"""
Markdown Publisher CLI - Export markdown to DOCX, PPTX or PDF

Usage:
    publisher docx report.md
    publisher pptx report.md --theme dark --cover
    publisher pdf report.md --toc --page-size letter --margin 0.75in
    publisher docx --sections sections.json -o combined.docx
    publisher pandoc-info

Examples:
    # Word document with a cover page titled from the first heading
    publisher docx notes.md --cover

    # Slide deck, 4:3, at most 4 bullets per slide
    publisher pptx talk.md --slide-size 4:3 --max-bullets 4

    # Merge ordered sections ([{"title": ..., "content": ..., "order": ...}])
    publisher pdf --sections chapters.json -o book.pdf
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from config.constants import SUPPORTED_PAGE_SIZES, SUPPORTED_CITATION_FORMATS, SLIDE_SIZES
from config.logging_config import setup_logger
from config.settings import settings
from publisher.export import DocxGenerator, PptxGenerator, PdfGenerator
from publisher.options import (
    CoverPageMetadata,
    DocumentProperties,
    GenerationOptions,
    GenerationResult,
)
from publisher.rendering.pptx_adapter import available_themes
from publisher.rendering.section_aggregator import Section

GENERATORS = {
    'docx': DocxGenerator,
    'pptx': PptxGenerator,
    'pdf': PdfGenerator,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('input', nargs='?', help='Input markdown file')
    common.add_argument('--sections', help='JSON file with a list of {title, content, order} sections')
    common.add_argument('-o', '--output', help='Output file (default: <input dir>/<input stem>.<ext>)')

    cover = common.add_argument_group('cover page')
    cover.add_argument('--cover', action='store_true', help='Add a cover page / title slide')
    cover.add_argument('--title', help='Cover title (default: first "# " heading or file name)')
    cover.add_argument('--subtitle')
    cover.add_argument('--author')
    cover.add_argument('--organization')
    cover.add_argument('--date', help='Cover date (default: today)')

    layout = common.add_argument_group('layout')
    layout.add_argument('--toc', action='store_true', help='Include a table of contents')
    layout.add_argument('--toc-depth', type=int, default=3)
    layout.add_argument('--font', help='Body font family')
    layout.add_argument('--font-size', type=float, help='Body font size in points')
    layout.add_argument('--page-size', choices=SUPPORTED_PAGE_SIZES)

    refs = common.add_argument_group('citations')
    refs.add_argument('--citations', action='store_true', help='Append the reference list')
    refs.add_argument('--citation-format', choices=SUPPORTED_CITATION_FORMATS, default='ieee')

    parser = argparse.ArgumentParser(
        prog='publisher',
        description="Export markdown to Word, PowerPoint or PDF",
        epilog=__doc__.split('Examples:')[1],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('docx', parents=[common], help='Generate a Word document')

    pptx = subparsers.add_parser('pptx', parents=[common], help='Generate a slide deck')
    pptx.add_argument('--theme', choices=available_themes())
    pptx.add_argument('--slide-size', choices=list(SLIDE_SIZES.keys()), default='16:9')
    pptx.add_argument('--max-bullets', type=int, help='Bullets per slide before splitting')

    pdf = subparsers.add_parser('pdf', parents=[common], help='Generate a PDF with pandoc')
    pdf.add_argument('--margin', help='Page margin (e.g. 1in, 2cm)')
    pdf.add_argument('--no-section-numbers', action='store_true',
                     help='Do not number sections')
    pdf.add_argument('--no-page-count', action='store_true',
                     help='Skip the pdfinfo page count')

    subparsers.add_parser('pandoc-info', help='Show pandoc availability and version')

    return parser


def build_options(args: argparse.Namespace) -> GenerationOptions:
    """Translate parsed arguments into GenerationOptions."""
    cover_page = None
    if args.title:
        cover_page = CoverPageMetadata(
            title=args.title,
            subtitle=args.subtitle,
            author=args.author,
            organization=args.organization,
            date=args.date,
        )

    metadata = None
    if args.title or args.author:
        metadata = DocumentProperties(title=args.title, author=args.author)

    return GenerationOptions(
        include_toc=args.toc,
        toc_depth=args.toc_depth,
        include_cover_page=args.cover or cover_page is not None,
        cover_page=cover_page,
        include_citations=args.citations,
        citation_format=args.citation_format,
        font_family=args.font,
        font_size=args.font_size,
        page_size=args.page_size,
        document_metadata=metadata,
        theme=getattr(args, 'theme', None),
        slide_size=getattr(args, 'slide_size', '16:9'),
        max_bullets_per_slide=getattr(args, 'max_bullets', None),
        margin=getattr(args, 'margin', None),
        page_numbers=not getattr(args, 'no_section_numbers', False),
        count_pages=not getattr(args, 'no_page_count', False),
    )


def load_sections(path: str) -> List[Section]:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of sections")
    try:
        return [Section.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"{path}: invalid section entry ({e!r})") from e


async def run_export(args: argparse.Namespace) -> GenerationResult:
    generator = GENERATORS[args.command]()
    options = build_options(args)

    if args.sections:
        sections = load_sections(args.sections)
        output = args.output or str(Path(args.sections).with_suffix(generator.extension))
        return await generator.generate_from_sections(sections, output, options)

    if args.output:
        output = Path(args.output)
        options = options.copy(output_dir=output.parent, output_filename=output.stem)

    return await generator.generate_from_document(args.input, options)


async def pandoc_info() -> int:
    generator = PdfGenerator()
    if not await generator.is_pandoc_available():
        print("❌ pandoc not found")
        return 1
    version = await generator.get_pandoc_version()
    print(f"✅ pandoc {version or '(unknown version)'} at {generator.find_pandoc()}")
    return 0


def print_result(result: GenerationResult) -> None:
    if not result.success:
        print(f"\n❌ Export failed: {result.error}", file=sys.stderr)
        return

    print(f"\n✅ Written: {result.output_path}")
    if result.slide_count is not None:
        print(f"   Slides: {result.slide_count}")
    if result.page_count is not None:
        print(f"   Pages:  {result.page_count}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger('publisher', level='DEBUG' if args.verbose else 'WARNING')
    if args.verbose:
        settings.print_config()

    if args.command == 'pandoc-info':
        return asyncio.run(pandoc_info())

    if not args.input and not args.sections:
        parser.error("an input file or --sections is required")

    try:
        result = asyncio.run(run_export(args))
    except (OSError, ValueError) as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    print_result(result)
    return 0 if result.success else 1


if __name__ == '__main__':
    sys.exit(main())
