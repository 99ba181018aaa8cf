"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import dataclasses
import logging
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import yaml

from md2blog.environment import ArgumentError
from md2blog.extra import override
from md2blog.settings import (
    PublisherSettings,
    default_settings_path,
    describe_settings,
    load_settings,
    read_environment,
    read_settings_file,
    save_settings,
    update_settings_file,
)
from tests.utility import TypedTestCase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)


class TestSettings(TypedTestCase):
    tmp_dir: TemporaryDirectory[str]
    path: Path

    @override
    def setUp(self) -> None:
        self.tmp_dir = TemporaryDirectory()
        self.path = Path(self.tmp_dir.name) / "settings.yaml"

    @override
    def tearDown(self) -> None:
        self.tmp_dir.cleanup()

    def _write(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    @patch.dict("os.environ", {}, clear=True)
    def test_defaults(self) -> None:
        settings = load_settings(self.path)
        self.assertEqual(settings, PublisherSettings())
        self.assertEqual(settings.repo_owner, "clown139880")
        self.assertEqual(settings.repo_name, "next-akagi")
        self.assertEqual(settings.branch, "main")
        self.assertEqual(settings.content_dir, "data/blog")
        self.assertEqual(settings.extension, "mdx")
        self.assertEqual(settings.default_tag, "闲谈")
        self.assertFalse(settings.has_object_storage)

    @patch.dict("os.environ", {"MD2BLOG_BRANCH": "from-env", "MD2BLOG_GITHUB_TOKEN": "env-token"}, clear=True)
    def test_precedence(self) -> None:
        self._write("repo_owner: someone\nbranch: from-file\ngithub_token: file-token\n")

        settings = load_settings(self.path, {"github_token": "cli-token", "branch": None})
        self.assertEqual(settings.repo_owner, "someone")
        self.assertEqual(settings.branch, "from-env")
        self.assertEqual(settings.github_token, "cli-token")
        self.assertEqual(settings.repo_name, "next-akagi")

    @patch.dict("os.environ", {"MD2BLOG_OSS_BUCKET": "images", "UNRELATED": "x"}, clear=True)
    def test_read_environment(self) -> None:
        self.assertEqual(read_environment(), {"oss_bucket": "images"})

    def test_missing_file(self) -> None:
        self.assertEqual(read_settings_file(self.path), {})

    def test_empty_file(self) -> None:
        self._write("")
        self.assertEqual(read_settings_file(self.path), {})

    def test_unknown_key(self) -> None:
        self._write("repo_owner: someone\npassword: secret\n")
        with self.assertRaises(ArgumentError):
            read_settings_file(self.path)

    def test_invalid_file(self) -> None:
        self._write("- just\n- a list\n")
        with self.assertRaises(ArgumentError):
            read_settings_file(self.path)

    def test_scalar_conversion(self) -> None:
        self._write("extension: 5\nbranch:\n")
        self.assertEqual(read_settings_file(self.path), {"extension": "5"})

    def test_save(self) -> None:
        settings = PublisherSettings(github_token="token", default_tag="chat")
        path = save_settings(self.path, settings)
        self.assertEqual(path, self.path)

        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        self.assertEqual(data["github_token"], "token")
        self.assertEqual(data["default_tag"], "chat")

    @patch.dict("os.environ", {"MD2BLOG_REPO_NAME": "not-persisted"}, clear=True)
    def test_update(self) -> None:
        self._write("repo_owner: someone\n")

        settings = update_settings_file(self.path, {"github_token": "token", "repo_owner": None})
        self.assertEqual(settings.repo_owner, "someone")
        self.assertEqual(settings.github_token, "token")

        persisted = read_settings_file(self.path)
        self.assertEqual(persisted["repo_owner"], "someone")
        self.assertEqual(persisted["github_token"], "token")
        self.assertEqual(persisted["repo_name"], "next-akagi")

    def test_describe(self) -> None:
        text = describe_settings(PublisherSettings(github_token="ghp_secret", oss_access_key_id="id"))
        self.assertNotIn("ghp_secret", text)
        self.assertIn("github_token: '********'", text)
        self.assertIn("oss_access_key_id: id", text)
        self.assertIn("oss_access_key_secret: ''", text)

    @patch.dict("os.environ", {"MD2BLOG_CONFIG": "/etc/md2blog.yaml"}, clear=True)
    def test_config_path_env(self) -> None:
        self.assertEqual(default_settings_path(), Path("/etc/md2blog.yaml"))

    @patch.dict("os.environ", {"XDG_CONFIG_HOME": "/home/user/.cfg"}, clear=True)
    def test_config_path_xdg(self) -> None:
        self.assertEqual(default_settings_path(), Path("/home/user/.cfg/md2blog/settings.yaml"))

    def test_connection_properties(self) -> None:
        with self.assertRaises(ArgumentError):
            PublisherSettings().github()

        github = PublisherSettings(github_token="token").github()
        self.assertEqual(github.owner, "clown139880")
        self.assertEqual(github.repository, "next-akagi")

        storage = PublisherSettings(oss_access_key_id="id", oss_access_key_secret="secret", oss_bucket="images", oss_region="oss-cn-hangzhou")
        self.assertTrue(storage.has_object_storage)
        self.assertEqual(storage.object_storage().public_url, "https://images.oss-cn-hangzhou.aliyuncs.com")
        self.assertIsNone(storage.object_storage().security_token)
        self.assertEqual(dataclasses.replace(storage, oss_security_token="sts").object_storage().security_token, "sts")

        with self.assertRaises(ArgumentError):
            PublisherSettings(oss_access_key_id="id", oss_access_key_secret="secret", oss_bucket="images", oss_region="https://oss-cn-hangzhou.aliyuncs.com").object_storage()


if __name__ == "__main__":
    unittest.main()
