"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import datetime
import logging
from collections.abc import Callable
from pathlib import Path

from .frontmatter import compose_document, extract_metadata, strip_metadata, update_lastmod

LOGGER = logging.getLogger(__name__)


class LocalDocument:
    """
    A Markdown document stored in the local file system.

    :param path: Path to the Markdown file.
    """

    path: Path

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def title(self) -> str:
        "Title inferred from the file name."

        return self.path.stem

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    def read(self) -> str:
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def write(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    def __repr__(self) -> str:
        return f"LocalDocument({str(self.path)!r})"


class LocalDocumentSync:
    """
    Keeps the metadata of a local document in step with what has been published.
    """

    clock: Callable[[], datetime.datetime]

    def __init__(self, clock: Callable[[], datetime.datetime] = datetime.datetime.now) -> None:
        self.clock = clock

    def refresh(self, document: LocalDocument, published_content: str) -> None:
        """
        Overwrites a local document with published content, setting the last-modified timestamp to the current time.

        :param document: Document to overwrite.
        :param published_content: Content with a metadata block, as published.
        """

        metadata = extract_metadata(published_content)
        if not metadata:
            LOGGER.warning("Content has no metadata; document left unchanged: %s", document.path)
            return

        updated = compose_document(update_lastmod(metadata, self.clock()), strip_metadata(published_content))
        document.write(updated)
        LOGGER.info("Updated metadata in document: %s", document.path)
