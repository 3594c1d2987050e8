"""Core utilities for generating tag cloud HTML from plain text."""
from __future__ import annotations

import collections
import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS = " \t\n\r,-.!?[]';:/()"
DEFAULT_MAX_ITEMS = 50
DEFAULT_MIN_FONT = 11
DEFAULT_MAX_FONT = 48
DEFAULT_STYLESHEETS: Tuple[str, ...] = (
    "http://web.cse.ohio-state.edu/software/2231/web-sw2/assignments/projects/tag-cloud-generator/data/tagcloud.css",
    "tagcloud.css",
)


class TagCloudError(Exception):
    """Base class for tag cloud I/O failures."""


class InputOpenError(TagCloudError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read input file {self.path}: {reason}")


class OutputWriteError(TagCloudError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write output file {self.path}: {reason}")


def separator_set(chars: Iterable[str]) -> FrozenSet[str]:
    return frozenset(chars)


@dataclass
class TagCloudConfig:
    """Configuration for tag cloud generation."""

    separators: str = DEFAULT_SEPARATORS
    max_items: int = DEFAULT_MAX_ITEMS
    min_font_size: int = DEFAULT_MIN_FONT
    max_font_size: int = DEFAULT_MAX_FONT
    stylesheets: Tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_STYLESHEETS))
    encoding: str = "utf-8"

    def separator_set(self) -> FrozenSet[str]:
        return separator_set(self.separators)

    def validate(self) -> None:
        if self.max_items < 0:
            raise ValueError(f"max_items must be non-negative, got {self.max_items}")
        if self.min_font_size > self.max_font_size:
            raise ValueError(
                f"min_font_size ({self.min_font_size}) exceeds max_font_size ({self.max_font_size})"
            )


@dataclass
class TagEntry:
    word: str
    count: int
    font_size: int

    @property
    def css_class(self) -> str:
        return f"f{self.font_size}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "text": self.word,
            "count": self.count,
            "size": self.font_size,
            "class": self.css_class,
        }


@dataclass
class TagCloud:
    source_name: str
    entries: List[TagEntry]
    counts: Dict[str, int]
    min_count: int
    max_count: int
    requested: int
    stylesheets: Tuple[str, ...] = ()

    @property
    def selected(self) -> int:
        return len(self.entries)

    @property
    def total_words(self) -> int:
        return sum(self.counts.values())

    @property
    def distinct_words(self) -> int:
        return len(self.counts)

    def to_html(self) -> str:
        return render_html(
            self.entries,
            source_name=self.source_name,
            count=self.selected,
            stylesheets=self.stylesheets,
        )


def next_word_or_separator(text: str, position: int, separators: FrozenSet[str]) -> str:
    """Return the maximal run starting at ``position`` that is either all
    separator characters or all non-separator characters."""
    if not 0 <= position < len(text):
        raise ValueError(f"position {position} out of range for text of length {len(text)}")
    is_separator = text[position] in separators
    end = position + 1
    while end < len(text) and (text[end] in separators) == is_separator:
        end += 1
    return text[position:end]


def iter_tokens(text: str, separators: FrozenSet[str]) -> Iterator[str]:
    position = 0
    while position < len(text):
        token = next_word_or_separator(text, position, separators)
        position += len(token)
        yield token


def tokenize_text(text: str, separators: FrozenSet[str]) -> List[str]:
    return [token for token in iter_tokens(text, separators) if token[0] not in separators]


def count_words(tokens: Iterable[str]) -> Dict[str, int]:
    return dict(collections.Counter(tokens))


def _alpha_key(pair: Tuple[str, int]) -> Tuple[str, str]:
    return pair[0].lower(), pair[0]


def rank_by_count(counts: Mapping[str, int]) -> List[Tuple[str, int]]:
    # Equal counts fall back to case-insensitive alphabetical order.
    return sorted(counts.items(), key=lambda pair: (-pair[1],) + _alpha_key(pair))


def select_top(counts: Mapping[str, int], n: int) -> List[Tuple[str, int]]:
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    ranked = rank_by_count(counts)
    top = ranked[: min(n, len(ranked))]
    return sorted(top, key=_alpha_key)


def count_bounds(counts: Mapping[str, int]) -> Tuple[int, int]:
    if not counts:
        return 0, 0
    values = counts.values()
    return min(values), max(values)


def scale_font_sizes(
    counts: Sequence[int],
    *,
    lo: int,
    hi: int,
    min_font: int = DEFAULT_MIN_FONT,
    max_font: int = DEFAULT_MAX_FONT,
) -> List[int]:
    values = np.asarray(counts, dtype=np.int64)
    if hi == lo:
        return [int(min_font)] * len(values)
    sizes = min_font + ((max_font - min_font) * (values - lo)) // (hi - lo)
    return [int(size) for size in sizes]


HEADER_TEMPLATE = """<html>
<head>
<title>{title}</title>
{links}
</head>
<body>
<h2>{title}</h2>
<hr>
<div class="cdiv">
<p class="cbox">
"""

FOOTER = """
</p>
</div>
</body>
</html>
"""

SPAN_TEMPLATE = '<span style="cursor:default" class="{css_class}" title="count: {count}">{word}</span>'


def render_header(source_name: str, count: int, stylesheets: Sequence[str] = DEFAULT_STYLESHEETS) -> str:
    title = html.escape(f"Top {count} words in {source_name}")
    links = "\n".join(
        f'<link href="{html.escape(href, quote=True)}" rel="stylesheet" type="text/css">' for href in stylesheets
    )
    return HEADER_TEMPLATE.format(title=title, links=links)


def render_span(entry: TagEntry) -> str:
    return SPAN_TEMPLATE.format(
        css_class=entry.css_class,
        count=entry.count,
        word=html.escape(entry.word),
    )


def render_html(
    entries: Sequence[TagEntry],
    *,
    source_name: str,
    count: Optional[int] = None,
    stylesheets: Sequence[str] = DEFAULT_STYLESHEETS,
) -> str:
    shown = len(entries) if count is None else count
    body = "\n".join(render_span(entry) for entry in entries)
    return render_header(source_name, shown, stylesheets) + body + FOOTER


def generate_tag_cloud_from_counts(
    counts: Mapping[str, int], *, config: TagCloudConfig, source_name: str
) -> TagCloud:
    config.validate()
    lo, hi = count_bounds(counts)
    top = select_top(counts, config.max_items)
    sizes = scale_font_sizes(
        [count for _, count in top],
        lo=lo,
        hi=hi,
        min_font=config.min_font_size,
        max_font=config.max_font_size,
    )
    entries = [TagEntry(word=word, count=count, font_size=size) for (word, count), size in zip(top, sizes)]
    logger.debug(
        "Selected %d of %d distinct words from %s (counts %d..%d)",
        len(entries),
        len(counts),
        source_name,
        lo,
        hi,
    )
    return TagCloud(
        source_name=source_name,
        entries=entries,
        counts=dict(counts),
        min_count=lo,
        max_count=hi,
        requested=config.max_items,
        stylesheets=tuple(config.stylesheets),
    )


def generate_tag_cloud_from_text(text: str, *, config: TagCloudConfig, source_name: str) -> TagCloud:
    tokens = tokenize_text(text, config.separator_set())
    logger.debug("Tokenized %d words from %s", len(tokens), source_name)
    return generate_tag_cloud_from_counts(count_words(tokens), config=config, source_name=source_name)


def load_text_from_path(path: Path | str, *, encoding: str = "utf-8") -> str:
    target = Path(path)
    try:
        with target.open("r", encoding=encoding) as infile:
            return infile.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise InputOpenError(target, str(exc)) from exc


def count_words_in_path(path: Path | str, *, config: TagCloudConfig) -> Dict[str, int]:
    text = load_text_from_path(path, encoding=config.encoding)
    return count_words(tokenize_text(text, config.separator_set()))


def generate_tag_cloud_from_file(path: Path | str, *, config: TagCloudConfig) -> TagCloud:
    target = Path(path)
    text = load_text_from_path(target, encoding=config.encoding)
    return generate_tag_cloud_from_text(text, config=config, source_name=str(target))


def write_output(path: Path | str, content: str, *, encoding: str = "utf-8") -> Path:
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding=encoding) as outfile:
            outfile.write(content)
    except OSError as exc:
        raise OutputWriteError(target, str(exc)) from exc
    return target
