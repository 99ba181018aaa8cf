"""
Publish Markdown notes to a GitHub-hosted blog.

Copyright 2022-2026, Levente Hunyadi
"""

HARD_LINE_BREAK = "  "


def normalize_line_breaks(text: str) -> str:
    """
    Turns every line break into a hard line break.

    The blog renderer joins consecutive lines into a single paragraph unless a line ends in two spaces. Lines that
    already end in two spaces are left untouched, which makes the operation idempotent.

    :param text: Markdown body text, with UNIX or Windows line endings.
    :returns: Text with UNIX line endings, each line ending in (at least) two spaces.
    """

    lines = text.replace("\r\n", "\n").split("\n")
    return "\n".join(line if line.endswith(HARD_LINE_BREAK) else line + HARD_LINE_BREAK for line in lines)
