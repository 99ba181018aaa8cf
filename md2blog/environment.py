"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

from typing import overload


class ArgumentError(ValueError):
    "Raised when wrong arguments are passed to a function call."


class RemoteError(RuntimeError):
    """
    Raised when a GitHub API call fails.

    :param message: Human-readable message returned by the service.
    :param status_code: HTTP status code of the response, if any.
    """

    message: str
    status_code: int | None

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorageError(RuntimeError):
    "Raised when an object storage upload fails."


@overload
def _validate_api_url(api_url: str) -> str: ...


@overload
def _validate_api_url(api_url: str | None) -> str | None: ...


def _validate_api_url(api_url: str | None) -> str | None:
    if api_url is None:
        return None

    if not api_url.startswith(("http://", "https://")):
        raise ArgumentError("GitHub API URL must start with 'http://' or 'https://'")

    return api_url.rstrip("/")


def _validate_region(region: str) -> str:
    if region.startswith(("http://", "https://")) or "/" in region:
        raise ArgumentError("OSS region looks like a URL; only region identifier required, e.g. `oss-cn-hangzhou`")

    return region


class GitHubConnectionProperties:
    """
    Properties related to connecting to a GitHub repository.

    :param api_url: GitHub REST API base URL, e.g. `https://api.github.com`.
    :param owner: Owner (user or organization) of the target repository.
    :param repository: Name of the target repository.
    :param branch: Branch to commit changes to.
    :param token: Personal access token.
    """

    api_url: str
    owner: str
    repository: str
    branch: str
    token: str

    def __init__(self, *, api_url: str, owner: str, repository: str, branch: str, token: str) -> None:
        if not token:
            raise ArgumentError("GitHub token not specified")
        if not owner:
            raise ArgumentError("GitHub repository owner not specified")
        if not repository:
            raise ArgumentError("GitHub repository name not specified")
        if not branch:
            raise ArgumentError("GitHub branch not specified")

        self.api_url = _validate_api_url(api_url)
        self.owner = owner
        self.repository = repository
        self.branch = branch
        self.token = token


class ObjectStorageProperties:
    """
    Properties related to connecting to an Aliyun OSS bucket.

    :param access_key_id: OSS access key ID.
    :param access_key_secret: OSS access key secret.
    :param bucket: Bucket name.
    :param region: Region identifier, e.g. `oss-cn-hangzhou`.
    :param security_token: STS security token when temporary credentials are used.
    """

    access_key_id: str
    access_key_secret: str
    bucket: str
    region: str
    security_token: str | None

    def __init__(
        self, *, access_key_id: str, access_key_secret: str, bucket: str, region: str, security_token: str | None = None
    ) -> None:
        if not access_key_id or not access_key_secret:
            raise ArgumentError("OSS access key not specified")
        if not bucket:
            raise ArgumentError("OSS bucket not specified")
        if not region:
            raise ArgumentError("OSS region not specified")

        self.access_key_id = access_key_id
        self.access_key_secret = access_key_secret
        self.bucket = bucket
        self.region = _validate_region(region)
        self.security_token = security_token or None

    @property
    def endpoint(self) -> str:
        "Service endpoint of the region."

        return f"https://{self.region}.aliyuncs.com"

    @property
    def public_url(self) -> str:
        "Virtual-hosted style URL of the bucket."

        return f"https://{self.bucket}.{self.region}.aliyuncs.com"
