"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import datetime
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import requests

from .api_types import GitHubContentFile, GitHubPutFileResponse
from .attachment import ImageRewriter, image_markup, image_type
from .environment import ArgumentError, RemoteError, StorageError
from .extra import override
from .frontmatter import compact_timestamp, compose_document, extract_metadata, generate_metadata, parse_metadata, strip_metadata
from .local import LocalDocument, LocalDocumentSync
from .settings import PublisherSettings
from .text import normalize_line_breaks

LOGGER = logging.getLogger(__name__)


class RemoteFileStore(Protocol):
    "Reads and writes path-addressed files in a versioned remote repository."

    def get_file(self, path: str) -> GitHubContentFile | None: ...

    def put_file(self, path: str, content: str, *, sha: str | None, message: str) -> GitHubPutFileResponse: ...


class Notifier(ABC):
    "Channel for messages shown to the user."

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...


class LoggingNotifier(Notifier):
    "Shows user messages as log entries."

    @override
    def info(self, message: str) -> None:
        LOGGER.info(message)

    @override
    def error(self, message: str) -> None:
        LOGGER.error(message)


@dataclass(frozen=True)
class PublishRequest:
    """
    Content ready to be published.

    :param content: Final content, including the metadata block.
    :param filename: Name of the blog post file without extension.
    :param document: Local document the content originates from, or `None` for a selection.
    """

    content: str
    filename: str
    document: LocalDocument | None = None


@dataclass(frozen=True)
class PublishResult:
    """
    Outcome of a successful publish operation.

    :param path: Path of the blog post in the repository.
    :param created: True if a new file was created, false if an existing file was updated.
    :param content: Content published.
    :param commit_sha: SHA of the commit that GitHub created.
    :param html_url: Link to view the published file on GitHub.
    """

    path: str
    created: bool
    content: str
    commit_sha: str
    html_url: str | None


class Publisher:
    """
    The entry point for publishing notes.

    Ensures content carries a metadata block, creates or updates the blog post in the remote repository, and refreshes
    the metadata of the originating local document.
    """

    store: RemoteFileStore | None
    settings: PublisherSettings
    notifier: Notifier
    rewriter: ImageRewriter | None
    clock: Callable[[], datetime.datetime]
    local_sync: LocalDocumentSync

    def __init__(
        self,
        store: RemoteFileStore | None,
        settings: PublisherSettings,
        *,
        notifier: Notifier | None = None,
        rewriter: ImageRewriter | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        """
        Initializes a new publisher instance.

        :param store: Session to the repository that holds the blog; `None` for local operations only.
        :param settings: Publishing configuration.
        :param notifier: Channel for user messages.
        :param rewriter: Uploads local images referenced in documents; `None` to keep references as they are.
        :param clock: Source of the current local time.
        """

        self.store = store
        self.settings = settings
        self.notifier = notifier or LoggingNotifier()
        self.rewriter = rewriter
        self.clock = clock
        self.local_sync = LocalDocumentSync(clock)

    def remote_path(self, filename: str) -> str:
        "Path of a blog post in the repository, e.g. `data/blog/<filename>.mdx`."

        content_dir = self.settings.content_dir.strip("/")
        name = f"{filename}.{self.settings.extension}"
        return f"{content_dir}/{name}" if content_dir else name

    def generated_name(self) -> str:
        "File name for a post without a title, e.g. `闲谈-20241019153000`."

        return f"{self.settings.default_tag}-{compact_timestamp(self.clock())}"

    def _generate_metadata(self, title: str | None) -> str:
        return generate_metadata(title, now=self.clock(), default_tag=self.settings.default_tag)

    def prepare_document(self, text: str, title: str | None = None, base_dir: Path | None = None) -> str:
        """
        Produces the content to publish for a whole document.

        An existing metadata block is kept as it is; otherwise a new block is generated.

        :param text: Document text, possibly starting with a metadata block.
        :param title: Title to use when a new metadata block is generated.
        :param base_dir: Directory to resolve local image references against when images are uploaded.
        """

        metadata = extract_metadata(text)
        body = strip_metadata(text)
        if self.rewriter is not None and base_dir is not None:
            body = self.rewriter.rewrite(body, base_dir)
        body = normalize_line_breaks(body)

        if metadata:
            properties = parse_metadata(metadata)
            if properties is not None:
                LOGGER.debug("Keeping existing metadata: %s", properties)
        else:
            metadata = self._generate_metadata(title)
        return compose_document(metadata, body)

    def publish_document(self, document: LocalDocument, title: str | None = None, *, sync: bool = True) -> PublishResult | None:
        """
        Publishes an entire document, then refreshes its metadata locally.

        :param document: Local document to publish.
        :param title: Title and file name for the post; defaults to the document file name.
        :param sync: Whether to write the published metadata back to the local document.
        :returns: Details about the published post, or `None` if publishing failed.
        """

        title = title or document.title or None
        try:
            content = self.prepare_document(document.read(), title, document.base_dir)
        except StorageError as e:
            self.notifier.error(f"Failed to upload image: {e}")
            return None
        except requests.RequestException as e:
            self.notifier.error(f"An error occurred: {e}")
            return None

        return self.publish(PublishRequest(content=content, filename=title or self.generated_name(), document=document if sync else None))

    def publish_selection(self, text: str) -> PublishResult | None:
        """
        Publishes a fragment of text as an untitled post with freshly generated metadata.

        :param text: Selected text, without metadata.
        :returns: Details about the published post, or `None` if there was nothing to publish or publishing failed.
        """

        if not text or not text.strip():
            self.notifier.info("No text selected")
            return None

        content = compose_document(self._generate_metadata(None), normalize_line_breaks(text))
        return self.publish(PublishRequest(content=content, filename=self.generated_name()))

    def update_metadata(self, document: LocalDocument) -> None:
        """
        Adds a metadata block to a local document, or updates the last-modified timestamp of the existing block.

        Does not contact the remote repository.
        """

        text = document.read()
        metadata = extract_metadata(text) or self._generate_metadata(document.title or None)
        self.local_sync.refresh(document, compose_document(metadata, strip_metadata(text)))

    def upload_attachments(self, paths: Iterable[Path]) -> list[str]:
        """
        Uploads image files to object storage.

        :returns: A Markdown image reference for each file uploaded successfully.
        """

        if self.rewriter is None:
            raise StorageError("object storage not configured")

        references: list[str] = []
        for path in paths:
            content_type = image_type(path)
            if content_type is None:
                self.notifier.info(f"Skipping file that is not an image: {path.name}")
                continue

            self.notifier.info(f"Uploading file: {path.name} ({content_type})")
            try:
                url = self.rewriter.upload_file(path)
            except (StorageError, OSError, requests.RequestException) as e:
                self.notifier.error(f"Failed to upload image: {e}")
                continue
            references.append(image_markup(path.name, url))
        return references

    def _lookup_sha(self, store: RemoteFileStore, path: str) -> str | None:
        "Fetches the blob SHA of an existing file, or `None` if the file is to be created."

        try:
            existing = store.get_file(path)
        except RemoteError as e:
            LOGGER.warning("Unable to look up %s, assuming it does not exist: %s", path, e.message)
            return None

        if existing is None:
            return None

        LOGGER.info("Blog post already exists and will be replaced: %s", path)
        return existing.sha

    def publish(self, request: PublishRequest) -> PublishResult | None:
        """
        Creates or updates a blog post in the remote repository.

        Fetches the current blob SHA of the post right before writing it. Local metadata is refreshed only after the
        remote write succeeds.

        :returns: Details about the published post, or `None` if publishing failed.
        """

        if self.store is None:
            raise ArgumentError("remote repository not configured")

        path = self.remote_path(request.filename)
        try:
            sha = self._lookup_sha(self.store, path)
            response = self.store.put_file(path, request.content, sha=sha, message=f"Add new blog post: {request.filename}")
        except RemoteError as e:
            self.notifier.error(f"Failed to publish content: {e.message}")
            return None
        except requests.RequestException as e:
            self.notifier.error(f"An error occurred: {e}")
            return None

        self.notifier.info("Content published successfully")

        if request.document is not None:
            try:
                self.local_sync.refresh(request.document, request.content)
            except OSError as e:
                self.notifier.error(f"Failed to update local document: {e}")

        return PublishResult(
            path=path,
            created=sha is None,
            content=request.content,
            commit_sha=response.commit.sha,
            html_url=response.content.html_url,
        )
