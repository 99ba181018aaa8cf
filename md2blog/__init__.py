"""
Publish Markdown notes to a GitHub-hosted blog.

Ensures each note carries a front-matter metadata block, and invokes the GitHub contents API to create or update the
corresponding blog post. Images referenced by a note can be uploaded to object storage, with references rewritten to
the public URL.
"""

from ._version import __version__

__all__ = ["__version__"]

__author__ = "Levente Hunyadi"
__copyright__ = "Copyright 2022-2026, Levente Hunyadi"
__license__ = "MIT"
__maintainer__ = "Levente Hunyadi"
__status__ = "Production"
