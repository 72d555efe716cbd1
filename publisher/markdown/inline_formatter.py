"""
Inline Formatting Engine - Converts block text into styled text runs

Two passes:

1. Link extraction. `[label](url)` spans are cut out of the text, leaving
   an explicit list of segments: TextSegment(text) and LinkSegment(index),
   with the (label, url) pairs kept in a side table. Link labels are never
   seen by the emphasis pass, so markers inside them stay literal.

2. Emphasis/code tokenization over every text segment with a single
   cursor. Precedence at each position:

       `code`  >  ***bold italic***  >  **strong**  >  *emphasis*

   `__`/`___`/`_` work like their asterisk counterparts. Every opener looks
   for the nearest closer of the same marker. An opener without a closer
   is emitted as plain text and scanning resumes at the next character.
   A span with nothing between its markers is dropped.

The formatter never raises; unmatched markers come back as plain text.
"""

import re
from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union


LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')


class RunKind(Enum):
    """Inline styles a run can carry."""
    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"
    CODE = "code"
    LINK = "link"


@dataclass(frozen=True)
class InlineRun:
    """A styled fragment of text inside a block."""
    kind: RunKind
    text: str
    url: Optional[str] = None

    @classmethod
    def plain(cls, text: str) -> "InlineRun":
        return cls(RunKind.PLAIN, text)

    @classmethod
    def bold(cls, text: str) -> "InlineRun":
        return cls(RunKind.BOLD, text)

    @classmethod
    def italic(cls, text: str) -> "InlineRun":
        return cls(RunKind.ITALIC, text)

    @classmethod
    def bold_italic(cls, text: str) -> "InlineRun":
        return cls(RunKind.BOLD_ITALIC, text)

    @classmethod
    def code(cls, text: str) -> "InlineRun":
        return cls(RunKind.CODE, text)

    @classmethod
    def link(cls, text: str, url: str) -> "InlineRun":
        return cls(RunKind.LINK, text, url)

    @property
    def is_bold(self) -> bool:
        return self.kind in (RunKind.BOLD, RunKind.BOLD_ITALIC)

    @property
    def is_italic(self) -> bool:
        return self.kind in (RunKind.ITALIC, RunKind.BOLD_ITALIC)


@dataclass(frozen=True)
class TextSegment:
    """Stretch of source text outside any link."""
    text: str


@dataclass(frozen=True)
class LinkSegment:
    """Reference into the link side table."""
    index: int


Segment = Union[TextSegment, LinkSegment]


def extract_links(text: str) -> Tuple[List[Segment], List[Tuple[str, str]]]:
    """
    Split text into text and link segments.

    Returns:
        (segments, links) where links[i] is the (label, url) pair that
        LinkSegment(i) refers to.
    """
    segments: List[Segment] = []
    links: List[Tuple[str, str]] = []
    position = 0

    for match in LINK_PATTERN.finditer(text):
        if match.start() > position:
            segments.append(TextSegment(text[position:match.start()]))
        segments.append(LinkSegment(len(links)))
        links.append((match.group(1), match.group(2)))
        position = match.end()

    if position < len(text):
        segments.append(TextSegment(text[position:]))

    return segments, links


# (marker, run kind) in the order they are tried at each cursor position
_DELIMITERS = [
    ('`', RunKind.CODE),
    ('***', RunKind.BOLD_ITALIC),
    ('___', RunKind.BOLD_ITALIC),
    ('**', RunKind.BOLD),
    ('__', RunKind.BOLD),
    ('*', RunKind.ITALIC),
    ('_', RunKind.ITALIC),
]


def _find_closer(text: str, marker: str, start: int) -> int:
    """
    Index of the nearest closer for `marker` at or after `start`, or -1.

    Single-character emphasis markers reject a closer directly preceded by
    the same character so strong markers are not re-matched.
    """
    end = text.find(marker, start)
    if end == -1:
        return -1
    if len(marker) == 1 and marker != '`' and text[end - 1] == marker:
        return -1
    return end


def _tokenize_emphasis(text: str) -> List[InlineRun]:
    """Tokenize one link-free text segment into runs."""
    runs: List[InlineRun] = []
    plain: List[str] = []
    i = 0

    def flush_plain():
        if plain:
            runs.append(InlineRun.plain(''.join(plain)))
            plain.clear()

    while i < len(text):
        matched = False

        for marker, kind in _DELIMITERS:
            if not text.startswith(marker, i):
                continue
            # Lone `*`/`_` only opens emphasis when not part of a doubled marker
            if kind is RunKind.ITALIC and text[i + 1:i + 2] == marker:
                continue

            end = _find_closer(text, marker, i + len(marker))
            if end == -1:
                continue

            content = text[i + len(marker):end]
            # Empty spans (`****`, a bare pair of backticks) produce no run
            if content:
                flush_plain()
                runs.append(InlineRun(kind, content))
            i = end + len(marker)
            matched = True
            break

        if not matched:
            plain.append(text[i])
            i += 1

    flush_plain()
    return runs


def format_inline(text: str) -> List[InlineRun]:
    """
    Convert raw block text into an ordered list of inline runs.

    Args:
        text: Text of a heading, paragraph, list item, cell or quote

    Returns:
        Runs in source order. Empty input, or input made only of empty
        spans, gives an empty list.
    """
    if not text:
        return []

    segments, links = extract_links(text)
    runs: List[InlineRun] = []

    for segment in segments:
        if isinstance(segment, LinkSegment):
            label, url = links[segment.index]
            runs.append(InlineRun.link(label, url))
        else:
            runs.extend(_tokenize_emphasis(segment.text))

    return runs


def strip_formatting(text: str) -> str:
    """Return text with all inline markup removed (link labels kept)."""
    return ''.join(run.text for run in format_inline(text))
