"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import logging
import mimetypes
import re
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

LOGGER = logging.getLogger(__name__)


class Uploader(Protocol):
    def upload(self, name: str, data: bytes, *, content_type: str | None = None) -> str: ...


def image_markup(name: str, url: str) -> str:
    "Markdown reference to an image."

    return f"![{name}]({url})"


def image_type(path: Path) -> str | None:
    "MIME type of an image file, or `None` if the file is not an image."

    content_type, _ = mimetypes.guess_type(path.name, strict=True)
    if content_type is None or not content_type.startswith("image/"):
        return None
    return content_type


def is_remote(target: str) -> bool:
    "True if a link target is an absolute URL (or a data URI) rather than a relative path."

    return bool(urlparse(target).scheme)


# `![alt](target)` with an optional title, and `![[target]]` or `![[target|size]]` wiki-style embeds
_IMAGE_REGEXP = re.compile(r"!\[(?P<alt>[^\]]*)\]\((?P<target><[^>]+>|[^)\s]+)(?:\s+\"[^\"]*\")?\)")
_EMBED_REGEXP = re.compile(r"!\[\[(?P<target>[^\]|]+)(?:\|[^\]]*)?\]\]")
# a fenced code block up to its closing fence, or up to the end of the text if the fence is never closed
_FENCED_CODE_REGEXP = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,}).*?(?:^[ ]{0,3}(?P=fence)[ \t\r]*$|\Z)", flags=re.MULTILINE | re.DOTALL)


class ImageRewriter:
    """
    Uploads local images referenced in a Markdown document, replacing references with the public URL.

    Each file is uploaded at most once per rewriter instance.
    """

    uploader: Uploader
    uploaded: dict[Path, str]

    def __init__(self, uploader: Uploader) -> None:
        self.uploader = uploader
        self.uploaded = {}

    def upload_file(self, path: Path) -> str:
        """
        Uploads an image file.

        :returns: Public URL of the uploaded image.
        """

        absolute_path = path.resolve()
        url = self.uploaded.get(absolute_path)
        if url is None:
            with open(absolute_path, "rb") as f:
                data = f.read()
            url = self.uploader.upload(absolute_path.name, data, content_type=image_type(absolute_path))
            self.uploaded[absolute_path] = url
        return url

    def _resolve(self, target: str, base_dir: Path) -> Path | None:
        if is_remote(target):
            return None

        path = (base_dir / unquote(target)).resolve()
        if not path.is_file():
            LOGGER.warning("Referenced image not found: %s", path)
            return None
        if image_type(path) is None:
            LOGGER.debug("Skipping non-image file: %s", path)
            return None
        return path

    def _rewrite_text(self, text: str, base_dir: Path) -> str:
        def _replace_image(match: re.Match[str]) -> str:
            target = match.group("target").strip("<>")
            path = self._resolve(target, base_dir)
            if path is None:
                return match.group(0)
            return image_markup(match.group("alt") or path.name, self.upload_file(path))

        def _replace_embed(match: re.Match[str]) -> str:
            path = self._resolve(match.group("target").strip(), base_dir)
            if path is None:
                return match.group(0)
            return image_markup(path.name, self.upload_file(path))

        text = _IMAGE_REGEXP.sub(_replace_image, text)
        return _EMBED_REGEXP.sub(_replace_embed, text)

    def rewrite(self, text: str, base_dir: Path) -> str:
        """
        Replaces references to local image files with references to the uploaded copy.

        References inside fenced code blocks are kept as they are.

        :param text: Markdown text.
        :param base_dir: Directory that relative image paths are resolved against.
        :returns: Markdown text with local image references rewritten; remote and unresolvable references are kept.
        """

        parts: list[str] = []
        pos = 0
        for match in _FENCED_CODE_REGEXP.finditer(text):
            parts.append(self._rewrite_text(text[pos : match.start()], base_dir))
            parts.append(match.group(0))
            pos = match.end()
        parts.append(self._rewrite_text(text[pos:], base_dir))
        return "".join(parts)
