"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

import io
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import MagicMock, patch

from md2blog.__main__ import Arguments, get_help, get_parser, main
from md2blog.api_types import GitHubCommit, GitHubContentFile, GitHubPutFileResponse
from md2blog.environment import RemoteError
from md2blog.settings import read_settings_file
from tests.utility import TypedTestCase


def parse(*argv: str) -> Arguments:
    args = Arguments()
    get_parser().parse_args(list(argv), namespace=args)
    return args


class TestParser(TypedTestCase):
    def test_publish(self) -> None:
        args = parse("publish", "notes/Ideas.md", "--title", "Big Ideas", "--repo-owner", "someone")
        self.assertEqual(args.command, "publish")
        self.assertEqual(args.mdpath, Path("notes/Ideas.md"))
        self.assertEqual(args.title, "Big Ideas")
        self.assertEqual(args.repo_owner, "someone")
        self.assertIsNone(args.github_token)
        self.assertFalse(args.upload_images)
        self.assertTrue(args.sync)
        self.assertFalse(parse("publish", "a.md", "--no-sync").sync)
        self.assertEqual(args.loglevel, "info")

    def test_selection(self) -> None:
        self.assertEqual(parse("publish-selection", "hello").text, "hello")
        self.assertIsNone(parse("publish-selection").text)

    def test_upload(self) -> None:
        args = parse("-l", "debug", "upload", "a.png", "b.jpg")
        self.assertListEqual(args.paths, [Path("a.png"), Path("b.jpg")])
        self.assertEqual(args.loglevel, "debug")

    def test_missing_command(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            parse()

    def test_help(self) -> None:
        text = get_help()
        for command in ["publish", "publish-selection", "update-metadata", "upload", "configure"]:
            self.assertIn(command, text)


class TestMain(TypedTestCase):
    def test_configure(self) -> None:
        with TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "settings.yaml"
            argv = ["md2blog", "-c", str(path), "configure", "--github-token", "token", "--default-tag", "chat"]
            with patch("sys.argv", argv), patch.dict("os.environ", {}, clear=True):
                main()

            values = read_settings_file(path)
            self.assertEqual(values["github_token"], "token")
            self.assertEqual(values["default_tag"], "chat")

    def test_update_metadata(self) -> None:
        with TemporaryDirectory() as tmp_dir:
            document = Path(tmp_dir) / "Notes.md"
            document.write_text("body\n", encoding="utf-8")
            argv = ["md2blog", "-c", str(Path(tmp_dir) / "missing.yaml"), "update-metadata", str(document)]
            with patch("sys.argv", argv), patch.dict("os.environ", {}, clear=True):
                main()

            self.assertTrue(document.read_text(encoding="utf-8").startswith("---\ntitle: 'Notes'\n"))

    def test_missing_token(self) -> None:
        with TemporaryDirectory() as tmp_dir:
            argv = ["md2blog", "-c", str(Path(tmp_dir) / "missing.yaml"), "publish-selection", "hello"]
            with patch("sys.argv", argv), patch.dict("os.environ", {}, clear=True):
                with redirect_stderr(io.StringIO()) as stderr, self.assertRaises(SystemExit) as cm:
                    main()

            self.assertEqual(cm.exception.code, 2)
            self.assertIn("GitHub token not specified", stderr.getvalue())

    def _publish_selection(self, store: MagicMock, *text: str) -> int | str | None:
        "Runs `publish-selection` against a stand-in repository, returning the exit code."

        with TemporaryDirectory() as tmp_dir:
            argv = ["md2blog", "-c", str(Path(tmp_dir) / "missing.yaml"), "publish-selection", *text, "--github-token", "token"]
            with patch("sys.argv", argv), patch.dict("os.environ", {}, clear=True), patch("md2blog.api.GitHubAPI") as api:
                api.return_value.__enter__.return_value = store
                try:
                    main()
                except SystemExit as e:
                    return e.code
        return 0

    def test_selection_published(self) -> None:
        store = MagicMock()
        store.get_file.return_value = None
        store.put_file.return_value = GitHubPutFileResponse(
            content=GitHubContentFile(type="file", name="post.mdx", path="data/blog/post.mdx", sha="def456", size=5),
            commit=GitHubCommit(sha="commit-sha"),
        )

        self.assertEqual(self._publish_selection(store, "hello"), 0)
        store.put_file.assert_called_once()

    def test_selection_write_failure(self) -> None:
        store = MagicMock()
        store.get_file.return_value = None
        store.put_file.side_effect = RemoteError("Bad credentials", 401)

        self.assertEqual(self._publish_selection(store, "hello"), 1)

    def test_selection_empty(self) -> None:
        store = MagicMock()

        self.assertEqual(self._publish_selection(store, "   "), 0)
        store.put_file.assert_not_called()


if __name__ == "__main__":
    unittest.main()
