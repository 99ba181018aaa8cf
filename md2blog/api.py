"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import base64
import logging
import typing
from types import TracebackType
from typing import TypeVar
from urllib.parse import quote, urlencode, urlparse, urlunparse

import requests
from cattrs import BaseValidationError

from .api_types import GitHubContentFile, GitHubErrorResponse, GitHubPutFileRequest, GitHubPutFileResponse
from .environment import GitHubConnectionProperties, RemoteError
from .serializer import JsonType, json_to_object, object_to_json_payload

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def build_url(base_url: str, query: dict[str, str] | None = None) -> str:
    "Builds a URL with scheme, host, port, path and query string parameters."

    scheme, netloc, path, params, query_str, fragment = urlparse(base_url)

    if params:
        raise ValueError("expected: url with no parameters")
    if query_str:
        raise ValueError("expected: url with no query string")
    if fragment:
        raise ValueError("expected: url with no fragment")

    url_parts = (scheme, netloc, path, None, urlencode(query) if query else None, None)
    return urlunparse(url_parts)


def error_message(response: requests.Response) -> str:
    "Extracts the human-readable error message from a GitHub API response."

    try:
        data = typing.cast(JsonType, response.json())
        if isinstance(data, dict):
            return json_to_object(GitHubErrorResponse, data).message
    except (ValueError, KeyError, BaseValidationError):
        pass
    return response.reason or f"HTTP status {response.status_code}"


def response_cast(response_type: type[T], response: requests.Response) -> T:
    "Converts a response body into the expected type, raising an error with the service message on failure."

    if response.text:
        LOGGER.debug("Received HTTP payload:\n%s", response.text)
    if not response.ok:
        raise RemoteError(error_message(response), response.status_code)
    return json_to_object(response_type, response.json())


class GitHubAPI:
    """
    Represents an active connection to the GitHub REST API.
    """

    properties: GitHubConnectionProperties
    session: "GitHubSession | None" = None

    def __init__(self, properties: GitHubConnectionProperties) -> None:
        self.properties = properties

    def __enter__(self) -> "GitHubSession":
        session = requests.Session()
        session.headers.update(
            {
                "Authorization": f"token {self.properties.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

        self.session = GitHubSession(
            session,
            api_url=self.properties.api_url,
            owner=self.properties.owner,
            repository=self.properties.repository,
            branch=self.properties.branch,
        )
        return self.session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None


class GitHubSession:
    """
    Information about an open session to a GitHub repository.

    Reads and writes files with the contents API. Writing to an existing file requires its current blob SHA, which
    GitHub checks to reject updates based on a stale version.
    """

    _session: requests.Session
    api_url: str
    owner: str
    repository: str
    branch: str

    def __init__(self, session: requests.Session, *, api_url: str, owner: str, repository: str, branch: str) -> None:
        self._session = session
        self.api_url = api_url
        self.owner = owner
        self.repository = repository
        self.branch = branch

    def close(self) -> None:
        self._session.close()
        self._session = requests.Session()

    def _build_url(self, path: str, query: dict[str, str] | None = None) -> str:
        """
        Builds a full URL for a file in the repository.

        :param path: Path of the file relative to the repository root.
        :param query: Query parameters to pass to the API endpoint.
        :returns: A full URL.
        """

        base_url = f"{self.api_url}/repos/{self.owner}/{self.repository}/contents/{quote(path.lstrip('/'))}"
        return build_url(base_url, query)

    def get_file(self, path: str) -> GitHubContentFile | None:
        """
        Looks up a file in the repository.

        :param path: Path of the file relative to the repository root.
        :returns: The file with its blob SHA, or `None` if the file does not exist on the branch.
        :raises RemoteError: The service rejected the request for a reason other than a missing file.
        """

        url = self._build_url(path, {"ref": self.branch})
        response = self._session.get(url, headers={"Accept": "application/vnd.github+json"})
        if response.status_code == 404:
            LOGGER.debug("File not found: %s", path)
            return None
        if response.ok and isinstance(response.json(), list):
            raise RemoteError(f"expected: a file but got a directory: {path}", response.status_code)

        return response_cast(GitHubContentFile, response)

    def put_file(self, path: str, content: str, *, sha: str | None, message: str) -> GitHubPutFileResponse:
        """
        Creates or updates a file in the repository.

        :param path: Path of the file relative to the repository root.
        :param content: New file content as text, committed in UTF-8.
        :param sha: Blob SHA of the file being replaced, or `None` to create a new file.
        :param message: Commit message.
        :returns: Details about the file written and the commit.
        :raises RemoteError: The service rejected the request, e.g. due to bad credentials or a version conflict.
        """

        request = GitHubPutFileRequest(
            message=message,
            content=base64.b64encode(content.encode("utf-8")).decode("ascii"),
            branch=self.branch,
            sha=sha,
        )

        if sha is None:
            LOGGER.info("Creating file: %s", path)
        else:
            LOGGER.info("Updating file: %s (SHA %s)", path, sha)

        url = self._build_url(path)
        response = self._session.put(
            url,
            data=object_to_json_payload(request),
            headers={"Content-Type": "application/json", "Accept": "application/vnd.github+json"},
        )
        return response_cast(GitHubPutFileResponse, response)
