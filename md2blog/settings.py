"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import dataclasses
import logging
import os
import typing
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .environment import ArgumentError, GitHubConnectionProperties, ObjectStorageProperties

LOGGER = logging.getLogger(__name__)

ENVIRONMENT_PREFIX = "MD2BLOG_"
SECRET_SETTINGS = ("github_token", "oss_access_key_secret", "oss_security_token")


@dataclass(frozen=True)
class PublisherSettings:
    """
    Configuration for publishing notes and uploading attachments.

    :param github_token: GitHub personal access token.
    :param repo_owner: Owner of the repository that holds the blog.
    :param repo_name: Name of the repository that holds the blog.
    :param branch: Branch to commit blog posts to.
    :param api_url: GitHub REST API base URL.
    :param content_dir: Directory in the repository that holds blog posts.
    :param extension: File extension for blog posts.
    :param default_tag: Tag assigned to untitled posts, also used as a prefix for generated file names.
    :param oss_access_key_id: Aliyun OSS access key ID.
    :param oss_access_key_secret: Aliyun OSS access key secret.
    :param oss_bucket: Aliyun OSS bucket name.
    :param oss_region: Aliyun OSS region, e.g. `oss-cn-hangzhou`.
    :param oss_security_token: Aliyun STS security token, for temporary credentials only.
    """

    github_token: str = ""
    repo_owner: str = "clown139880"
    repo_name: str = "next-akagi"
    branch: str = "main"
    api_url: str = "https://api.github.com"
    content_dir: str = "data/blog"
    extension: str = "mdx"
    default_tag: str = "闲谈"
    oss_access_key_id: str = ""
    oss_access_key_secret: str = ""
    oss_bucket: str = ""
    oss_region: str = ""
    oss_security_token: str = ""

    def github(self) -> GitHubConnectionProperties:
        "Connection properties for the GitHub contents API."

        return GitHubConnectionProperties(
            api_url=self.api_url,
            owner=self.repo_owner,
            repository=self.repo_name,
            branch=self.branch,
            token=self.github_token,
        )

    def object_storage(self) -> ObjectStorageProperties:
        "Connection properties for the object storage service."

        return ObjectStorageProperties(
            access_key_id=self.oss_access_key_id,
            access_key_secret=self.oss_access_key_secret,
            bucket=self.oss_bucket,
            region=self.oss_region,
            security_token=self.oss_security_token or None,
        )

    @property
    def has_object_storage(self) -> bool:
        return bool(self.oss_access_key_id and self.oss_access_key_secret and self.oss_bucket and self.oss_region)


def setting_names() -> list[str]:
    return [f.name for f in dataclasses.fields(PublisherSettings)]


def default_settings_path() -> Path:
    "Location of the persisted settings file."

    path = os.getenv(f"{ENVIRONMENT_PREFIX}CONFIG")
    if path:
        return Path(path)

    config_home = os.getenv("XDG_CONFIG_HOME")
    base_dir = Path(config_home) if config_home else Path.home() / ".config"
    return base_dir / "md2blog" / "settings.yaml"


def _check_keys(values: dict[str, Any], source: str) -> dict[str, str]:
    names = set(setting_names())
    unknown = sorted(key for key in values if key not in names)
    if unknown:
        raise ArgumentError(f"unrecognized settings in {source}: {', '.join(unknown)}")

    result: dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ArgumentError(f"expected: string value for setting `{key}` in {source}")
        result[key] = str(value)
    return result


def read_settings_file(path: Path) -> dict[str, str]:
    "Reads persisted settings as key-value pairs, or an empty dictionary if the file does not exist."

    if not path.is_file():
        LOGGER.debug("No settings file found at: %s", path)
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ArgumentError(f"expected: key-value pairs in settings file: {path}")

    return _check_keys(typing.cast(dict[str, Any], data), str(path))


def read_environment() -> dict[str, str]:
    "Collects settings passed as environment variables, e.g. `MD2BLOG_GITHUB_TOKEN`."

    values: dict[str, str] = {}
    for name in setting_names():
        value = os.getenv(f"{ENVIRONMENT_PREFIX}{name.upper()}")
        if value:
            values[name] = value
    return values


def load_settings(path: Path | None = None, overrides: dict[str, str | None] | None = None) -> PublisherSettings:
    """
    Loads settings, merging sources in order of increasing precedence.

    Defaults are overridden by the persisted settings file, which is overridden by environment variables, which are
    overridden by explicit values (typically command-line options). `None` in `overrides` means "not specified".

    :param path: Settings file to read; defaults to the user configuration directory.
    :param overrides: Explicit values with highest precedence.
    """

    values: dict[str, str] = {}
    values.update(read_settings_file(path or default_settings_path()))
    values.update(read_environment())
    if overrides:
        values.update(_check_keys(overrides, "command-line options"))

    return dataclasses.replace(PublisherSettings(), **values)


def save_settings(path: Path | None, settings: PublisherSettings) -> Path:
    """
    Persists settings as a YAML file.

    :returns: Path to the file written.
    """

    path = path or default_settings_path()
    os.makedirs(path.parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(dataclasses.asdict(settings), f, allow_unicode=True, sort_keys=False)

    LOGGER.info("Settings saved to: %s", path)
    return path


def update_settings_file(path: Path | None, overrides: dict[str, str | None]) -> PublisherSettings:
    """
    Merges explicit values over the persisted settings, and writes the result back.

    Environment variables are not persisted.

    :param overrides: New values; `None` keeps the persisted value.
    """

    path = path or default_settings_path()
    values = read_settings_file(path)
    values.update(_check_keys(overrides, "command-line options"))
    settings = dataclasses.replace(PublisherSettings(), **values)
    save_settings(path, settings)
    return settings


def describe_settings(settings: PublisherSettings) -> str:
    "Settings as YAML text, with secrets masked."

    values = dataclasses.asdict(settings)
    for key in SECRET_SETTINGS:
        if values[key]:
            values[key] = "********"
    return yaml.safe_dump(values, allow_unicode=True, sort_keys=False)
