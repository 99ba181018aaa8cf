"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class GitHubContentFile:
    """
    Holds a file stored in a GitHub repository, as returned by the contents API.

    :param type: Content type, `file` for regular files.
    :param name: File name.
    :param path: Path of the file relative to the repository root.
    :param sha: Blob SHA of the file. Required to update an existing file.
    :param size: Size in bytes.
    :param content: Base64-encoded file content, if included in the response.
    :param encoding: Encoding of `content`, typically `base64`.
    :param html_url: Link to view the file on GitHub.
    :param download_url: Link to the raw file.
    """

    type: str
    name: str
    path: str
    sha: str
    size: int
    content: str | None = None
    encoding: str | None = None
    html_url: str | None = None
    download_url: str | None = None

    def decoded_content(self) -> bytes:
        "File content as raw bytes."

        if self.content is None:
            return b""
        if self.encoding not in (None, "base64"):
            raise ValueError(f"unsupported content encoding: {self.encoding}")
        return base64.b64decode(self.content)

    def text(self) -> str:
        return self.decoded_content().decode("utf-8")


@dataclass(frozen=True)
class GitHubCommit:
    """
    Holds the commit that a file write produced.

    :param sha: Commit SHA.
    :param html_url: Link to view the commit on GitHub.
    :param message: Commit message.
    """

    sha: str
    html_url: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class GitHubPutFileRequest:
    """
    Request body to create or update a file.

    :param message: Commit message.
    :param content: Base64-encoded new file content.
    :param branch: Branch to commit to.
    :param sha: Blob SHA of the file being replaced; must be omitted when creating a new file.
    """

    message: str
    content: str
    branch: str
    sha: str | None = None


@dataclass(frozen=True)
class GitHubPutFileResponse:
    content: GitHubContentFile
    commit: GitHubCommit


@dataclass(frozen=True)
class GitHubErrorResponse:
    message: str
    documentation_url: str | None = None
