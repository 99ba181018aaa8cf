"""
Publish Markdown notes to a GitHub-hosted blog.

Ensures each note carries a front-matter metadata block, and invokes the GitHub contents API to create or update the
corresponding blog post.

Copyright 2022-2026, Levente Hunyadi
"""

import argparse
import logging
import os.path
import sys
from contextlib import ExitStack
from io import StringIO
from pathlib import Path

from . import __version__
from .environment import ArgumentError
from .settings import PublisherSettings, describe_settings, load_settings, setting_names, update_settings_file


class Arguments(argparse.Namespace):
    command: str
    config: Path | None
    loglevel: str
    mdpath: Path
    paths: list[Path]
    text: str | None
    title: str | None
    upload_images: bool
    sync: bool
    show: bool

    github_token: str | None
    repo_owner: str | None
    repo_name: str | None
    branch: str | None
    api_url: str | None
    content_dir: str | None
    extension: str | None
    default_tag: str | None
    oss_access_key_id: str | None
    oss_access_key_secret: str | None
    oss_bucket: str | None
    oss_region: str | None
    oss_security_token: str | None


_SETTING_HELP = {
    "github_token": "GitHub personal access token.",
    "repo_owner": "Owner of the GitHub repository that holds the blog.",
    "repo_name": "Name of the GitHub repository that holds the blog.",
    "branch": "Branch to commit blog posts to.",
    "api_url": "GitHub REST API base URL (default: 'https://api.github.com').",
    "content_dir": "Directory in the repository that holds blog posts (default: 'data/blog').",
    "extension": "File extension for blog posts (default: 'mdx').",
    "default_tag": "Tag for untitled posts, also used as prefix for generated file names.",
    "oss_access_key_id": "Aliyun OSS access key ID.",
    "oss_access_key_secret": "Aliyun OSS access key secret.",
    "oss_bucket": "Aliyun OSS bucket name.",
    "oss_region": "Aliyun OSS region, e.g. 'oss-cn-hangzhou'.",
    "oss_security_token": "Aliyun STS security token, for temporary credentials only.",
}


def _settings_parser() -> argparse.ArgumentParser:
    "Options shared by all commands that override persisted settings."

    parser = argparse.ArgumentParser(add_help=False)
    group = parser.add_argument_group("settings")
    for name in setting_names():
        group.add_argument(f"--{name.replace('_', '-')}", dest=name, help=_SETTING_HELP.get(name))
    return parser


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.prog = os.path.basename(os.path.dirname(__file__))
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to settings file (default: '~/.config/md2blog/settings.yaml').",
    )
    parser.add_argument(
        "-l",
        "--loglevel",
        choices=[
            logging.getLevelName(level).lower()
            for level in (
                logging.DEBUG,
                logging.INFO,
                logging.WARN,
                logging.ERROR,
                logging.CRITICAL,
            )
        ],
        default=logging.getLevelName(logging.INFO).lower(),
        help="Use this option to set the log verbosity.",
    )

    parents = [_settings_parser()]
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    publish = commands.add_parser("publish", parents=parents, help="Publish an entire Markdown document.")
    publish.add_argument("mdpath", type=Path, help="Path to Markdown file to publish.")
    publish.add_argument("--title", help="Title and file name for the post (default: Markdown file name).")
    publish.add_argument(
        "--upload-images",
        action="store_true",
        default=False,
        help="Upload local images to object storage and rewrite references to the public URL.",
    )
    publish.add_argument(
        "--no-sync",
        dest="sync",
        action="store_false",
        default=True,
        help="Do not write the updated metadata back to the Markdown file.",
    )

    selection = commands.add_parser("publish-selection", parents=parents, help="Publish a fragment of text as an untitled post.")
    selection.add_argument("text", nargs="?", help="Text to publish. Reads standard input if omitted or '-'.")

    metadata = commands.add_parser("update-metadata", parents=parents, help="Add or update the metadata block of a Markdown document.")
    metadata.add_argument("mdpath", type=Path, help="Path to Markdown file to update.")

    upload = commands.add_parser("upload", parents=parents, help="Upload images to object storage and print Markdown references.")
    upload.add_argument("paths", type=Path, nargs="+", metavar="FILE", help="Image files to upload.")

    configure = commands.add_parser("configure", parents=parents, help="Persist settings passed as options.")
    configure.add_argument("--show", action="store_true", default=False, help="Print effective settings instead of saving.")

    return parser


def get_help() -> str:
    parser = get_parser()
    with StringIO() as buf:
        parser.print_help(file=buf)
        return buf.getvalue()


def _run(args: Arguments, settings: PublisherSettings) -> bool:
    "Executes a command that may connect to remote services. Returns true on success."

    from .api import GitHubAPI
    from .attachment import ImageRewriter
    from .local import LocalDocument
    from .publisher import Publisher
    from .storage import ObjectStorageAPI

    needs_storage = args.command == "upload" or (args.command == "publish" and args.upload_images)
    needs_github = args.command in ("publish", "publish-selection")

    with ExitStack() as stack:
        rewriter = ImageRewriter(stack.enter_context(ObjectStorageAPI(settings.object_storage()))) if needs_storage else None
        store = stack.enter_context(GitHubAPI(settings.github())) if needs_github else None
        publisher = Publisher(store, settings, rewriter=rewriter)

        match args.command:
            case "publish":
                return publisher.publish_document(LocalDocument(args.mdpath), args.title, sync=args.sync) is not None
            case "publish-selection":
                text = args.text if args.text is not None and args.text != "-" else sys.stdin.read()
                # an empty selection is a no-op, not a failure
                return publisher.publish_selection(text) is not None or not text.strip()
            case "update-metadata":
                publisher.update_metadata(LocalDocument(args.mdpath))
                return True
            case "upload":
                references = publisher.upload_attachments(args.paths)
                for reference in references:
                    print(reference)
                return len(references) == len(args.paths)
            case _:
                raise NotImplementedError(f"unrecognized command: {args.command}")


def main() -> None:
    parser = get_parser()
    args = Arguments()
    parser.parse_args(namespace=args)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
    )

    overrides: dict[str, str | None] = {name: getattr(args, name, None) for name in setting_names()}
    try:
        if args.command == "configure":
            if args.show:
                print(describe_settings(load_settings(args.config, overrides)), end="")
            else:
                update_settings_file(args.config, overrides)
            return

        settings = load_settings(args.config, overrides)
        success = _run(args, settings)
    except ArgumentError as e:
        parser.error(str(e))
    except OSError as e:
        logging.error(e)
        sys.exit(1)

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
