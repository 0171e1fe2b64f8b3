"""
Import file resolution.

Maps an @import target to either a .sass file to compile or a .css name
to pass through:

    foo.css   -> "foo.css"             (never opened)
    foo.sass  -> "<path>/_foo.sass" or "<path>/foo.sass", else error
    foo       -> "<path>/_foo.sass" or "<path>/foo.sass", else "foo.css"

Load paths are searched in order; within one path the partial
(underscore-prefixed) form wins over the bare name.
"""

import logging
import os
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

SASS_EXTENSION = ".sass"
CSS_EXTENSION = ".css"
PARTIAL_PREFIX = "_"


def is_readable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def find_full_path(filename: str, load_paths: Iterable[str]) -> Optional[str]:
    """
    Return the first readable match for `filename` on the load paths.

    `filename` may contain directories; only its last component gets the
    partial prefix.
    """
    directory, base = os.path.split(filename)
    for path in load_paths:
        for name in (PARTIAL_PREFIX + base, base):
            full_path = os.path.join(path, directory, name)
            if is_readable(full_path):
                return full_path
    return None


def find_file_to_import(filename: str, load_paths: Iterable[str]) -> str:
    """
    Resolve an @import target.

    Returns:
        A readable .sass path, or a name ending in .css for passthrough

    Raises:
        FileNotFoundError: If an explicit .sass target cannot be found
    """
    was_sass = False
    original_filename = filename

    if filename.endswith(SASS_EXTENSION):
        filename = filename[: -len(SASS_EXTENSION)]
        was_sass = True
    elif filename.endswith(CSS_EXTENSION):
        return filename

    new_filename = find_full_path(filename + SASS_EXTENSION, load_paths)
    if new_filename is not None:
        logger.debug("Resolved import %s to %s", original_filename, new_filename)
        return new_filename

    if was_sass:
        raise FileNotFoundError(f"File to import not found or unreadable: {original_filename}.")

    logger.debug("No .sass file for import %s; passing through as CSS", original_filename)
    return filename + CSS_EXTENSION


__all__ = [
    "is_readable",
    "read_file",
    "find_full_path",
    "find_file_to_import",
]
