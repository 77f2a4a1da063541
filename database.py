"""Whole-file load and save of the catalog.

The file is read completely at startup and rewritten completely on save.
Save goes through a temporary sibling file and ``os.replace`` so a failed
write never leaves a half-written catalog behind.
"""

import logging
import os
import shutil
import tempfile
from typing import List

from dotenv import load_dotenv

from book import Book
from errors import NotFoundError, ParseError, SaveError
from library import Library
from record_codec import parse_row, serialize_header, serialize_row

# Make sure .env is applied before DATABASE_FILE is read.
load_dotenv()

logger = logging.getLogger(__name__)

# Default catalog file.
# Priority:
# 1) LIBRARY_DB_FILE (explicit override)
# 2) LIBRARY_DATA_FILE (shared with config.py / .env)
# 3) database.txt in the working directory
DATABASE_FILE = (
    os.environ.get("LIBRARY_DB_FILE")
    or os.environ.get("LIBRARY_DATA_FILE")
    or "database.txt"
)
ENCODING = "utf-8"


def load_file(path: str) -> Library:
    """Read the catalog at ``path``; the first line is the header and is skipped."""
    if not os.path.exists(path):
        raise NotFoundError(path)

    rows: List[Book] = []
    with open(path, "r", encoding=ENCODING, newline="") as f:
        f.readline()
        for line_number, line in enumerate(f, start=2):
            if not line.strip():
                continue
            try:
                rows.append(parse_row(line))
            except ParseError as exc:
                raise ParseError(str(exc), line_number=line_number) from exc

    logger.info(f"Loaded {len(rows)} books from {path}")
    return Library.from_rows(rows)


def save_file(path: str, library: Library) -> None:
    """Rewrite ``path`` with the header and every book in catalog order."""
    existed = os.path.exists(path)
    if not existed:
        logger.warning(f"Data file {path} cannot be found. New file will be created.")

    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".catalog-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding=ENCODING, newline="") as f:
            f.write(serialize_header())
            for book in library:
                f.write(serialize_row(book))
        if existed:
            # keep the permissions of the file being replaced
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        logger.error(f"Saving {path} failed: {exc}")
        raise SaveError(f"Could not save catalog to {path}: {exc}") from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info(f"Saved {len(library)} books to {path}")


def initialize_database(path: str) -> bool:
    """Create a header-only catalog at ``path`` if none exists. Returns True if created."""
    if os.path.exists(path):
        return False
    save_file(path, Library())
    return True
