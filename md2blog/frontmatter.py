"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import datetime
import re
import typing
from dataclasses import dataclass, field

import yaml

from .serializer import JsonType

DEFAULT_TAG = "闲谈"


def extract_value(expr: re.Pattern[str], text: str) -> tuple[str | None, str]:
    """
    Extracts the value captured by the first group in a regular expression.

    :returns: A tuple of (1) the value extracted and (2) remaining text without the captured text.
    """

    if expr.groups != 1:
        raise ValueError("expected: a single group whose value to extract")

    class _Matcher:
        value: str | None = None

        def __call__(self, match: re.Match[str]) -> str:
            self.value = match.group(1)
            return ""

    matcher = _Matcher()
    text = expr.sub(matcher, text, count=1)
    return matcher.value, text


# a fence at the very start of the text, up to the nearest closing fence
_METADATA_REGEXP = re.compile(r"\A(---.+?---)", flags=re.DOTALL)
_LASTMOD_REGEXP = re.compile(r"^lastmod: [^\r\n]*", flags=re.MULTILINE)
_CLOSING_FENCE_REGEXP = re.compile(r"\n?---\Z")


def format_timestamp(moment: datetime.datetime) -> str:
    "Formats a timestamp as `YYYY-MM-DD HH:MM:SS`, the format used in metadata fields."

    return moment.strftime("%Y-%m-%d %H:%M:%S")


def compact_timestamp(moment: datetime.datetime) -> str:
    "Formats a timestamp as `YYYYMMDDHHMMSS`, the format used in generated file names."

    return moment.strftime("%Y%m%d%H%M%S")


def extract_metadata(text: str) -> str:
    """
    Extracts the metadata block at the start of a document.

    The block must begin at offset 0; a fence appearing later in the body is never matched.

    :returns: The block including its fences, or an empty string if the document has no metadata.
    """

    block, _ = extract_value(_METADATA_REGEXP, text)
    return block or ""


def strip_metadata(text: str) -> str:
    "Removes the metadata block (if any) from the start of a document, and trims surrounding whitespace."

    _, text = extract_value(_METADATA_REGEXP, text)
    return text.strip()


def compose_document(metadata: str, body: str) -> str:
    "Joins a metadata block and a document body."

    return f"{metadata}\n{body}"


def _quote(value: str) -> str:
    "Quotes a string as a single-quoted YAML scalar."

    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def generate_metadata(title: str | None = None, *, now: datetime.datetime | None = None, default_tag: str = DEFAULT_TAG) -> str:
    """
    Builds a new metadata block.

    Untitled documents get a single default tag, which marks them as casual posts.

    :param title: Document title, or `None` for an untitled document.
    :param now: Creation timestamp; defaults to the current local time.
    :param default_tag: Tag to assign to untitled documents.
    """

    timestamp = format_timestamp(now or datetime.datetime.now())
    tags = "[]" if title else f"[{default_tag}]"
    lines = [
        "---",
        f"title: {_quote(title or '')}",
        f"date: '{timestamp}'",
        f"lastmod: '{timestamp}'",
        f"tags: {tags}",
        "draft: false",
        "summary: ''",
        "---",
    ]
    return "\n".join(lines)


def update_lastmod(metadata: str, now: datetime.datetime) -> str:
    """
    Sets the last-modified timestamp in a metadata block.

    Only the `lastmod` line is replaced; all other lines are kept as they are. If the block has no `lastmod` line, one
    is inserted before the closing fence.

    :param metadata: Metadata block including its fences, or an empty string.
    :param now: New last-modified timestamp.
    """

    if not metadata:
        return metadata

    lastmod = f"lastmod: '{format_timestamp(now)}'"
    updated, count = _LASTMOD_REGEXP.subn(lambda _: lastmod, metadata, count=1)
    if count > 0:
        return updated

    return _CLOSING_FENCE_REGEXP.sub(lambda _: f"\n{lastmod}\n---", metadata, count=1)


@dataclass
class MetadataProperties:
    """
    Fields of a metadata block, for inspection only.

    :param title: Document title.
    :param date: Creation timestamp.
    :param lastmod: Last-modified timestamp.
    :param tags: Tags assigned to the document.
    :param draft: Whether the post is a draft.
    :param summary: Short description of the post.
    :param extra: Any other fields found in the block.
    """

    title: str | None = None
    date: str | None = None
    lastmod: str | None = None
    tags: list[str] = field(default_factory=list)
    draft: bool = False
    summary: str | None = None
    extra: dict[str, JsonType] = field(default_factory=dict)


def _as_string(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return format_timestamp(value)
    return str(value)


def parse_metadata(metadata: str) -> MetadataProperties | None:
    """
    Parses the fields of a metadata block.

    The block text is authoritative; this view is never serialized back.

    :returns: Structured fields, or `None` if the block is empty, malformed or not a mapping.
    """

    inner = metadata.strip()
    if not inner.startswith("---") or not inner.endswith("---") or len(inner) < 6:
        return None

    try:
        data = yaml.safe_load(inner[3:-3])
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None

    values = typing.cast(dict[str, typing.Any], data)
    tags = values.pop("tags", None)
    return MetadataProperties(
        title=_as_string(values.pop("title", None)),
        date=_as_string(values.pop("date", None)),
        lastmod=_as_string(values.pop("lastmod", None)),
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        draft=bool(values.pop("draft", False)),
        summary=_as_string(values.pop("summary", None)),
        extra={str(key): value for key, value in values.items()},
    )
