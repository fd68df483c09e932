"""Journal entry and note files.

This module provides utilities for:
- Creating the journal root and its journals/ and notes/ subdirectories
- Creating one journal entry per day
- Creating timestamped notes with an optional title
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from .settings import JOURNALS_DIR_NAME, NOTES_DIR_NAME

logger = logging.getLogger(__name__)


def ensure_layout(root: Path) -> None:
    """Create the root directory and its journals/ and notes/ subdirectories."""
    for path in (root, root / JOURNALS_DIR_NAME, root / NOTES_DIR_NAME):
        if not path.exists():
            logger.info(f"Creating directory: {path}")
            path.mkdir(parents=True, exist_ok=True)


def journal_file_name(when: datetime) -> str:
    """Return the journal entry file name for a day, e.g. `2024-03-09.md`."""
    return f"{when.strftime('%Y-%m-%d')}.md"


def journal_heading(when: datetime) -> str:
    """Return the heading line, e.g. `# Journal Entry - Sat Mar 09 2024`."""
    return f"# Journal Entry - {when.strftime('%a %b %d %Y')}"


def create_journal_entry(root: Path, when: datetime | None = None) -> Path:
    """Create today's journal entry unless it already exists.

    Args:
        root: Journal root directory, created if missing.
        when: Local time of the entry. Defaults to now.

    Returns:
        Path to the journal entry file.
    """
    when = when or datetime.now()
    ensure_layout(root)

    path = root / JOURNALS_DIR_NAME / journal_file_name(when)
    if path.exists():
        logger.info(f"Journal entry already exists: {path}")
        return path

    path.write_text(f"{journal_heading(when)}\n\n", encoding="utf-8")
    logger.info(f"Created journal entry: {path}")
    return path


def slugify_title(title: str) -> str:
    """Lower-case a title and replace whitespace runs with hyphens."""
    return re.sub(r"\s+", "-", title.strip().lower())


def note_file_name(when: datetime, title: str | None = None) -> str:
    """Return `<UTC ISO-8601 timestamp>[-<slug>].md` for a note."""
    stamp = when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    slug = slugify_title(title) if title else ""
    if slug:
        return f"{stamp}-{slug}.md"
    return f"{stamp}.md"


def create_note(root: Path, title: str | None = None, when: datetime | None = None) -> Path:
    """Create a note named after the current time and the optional title.

    An existing file with the same name is left untouched.
    """
    when = when or datetime.now(timezone.utc)
    title = title.strip() if title else None
    ensure_layout(root)

    path = root / NOTES_DIR_NAME / note_file_name(when, title)
    if path.exists():
        logger.info(f"Note already exists: {path}")
        return path

    stamp = when.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")
    path.write_text(f"# Note: {title or 'Untitled'} - {stamp}\n\n", encoding="utf-8")
    logger.info(f"Created note: {path}")
    return path
