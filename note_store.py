"""
Daily note files: naming, existence checks, created_at read-back and
atomic writes.
"""
import os
import platform
import tempfile
import time
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_PREFIX = "Dayflow_"
FRONTMATTER_DELIMITER = "---"


class NoteWriteError(OSError):
    """A note could not be written to the output directory."""

    def __init__(self, path: Path, cause: Exception):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


def note_filename(day: str, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{day}.md"


def note_path(day: str, directory: Path, prefix: str = DEFAULT_PREFIX) -> Path:
    return Path(directory) / note_filename(day, prefix)


def note_exists(day: str, directory: Path, prefix: str = DEFAULT_PREFIX) -> bool:
    return note_path(day, directory, prefix).is_file()


def read_frontmatter(path: Path) -> Optional[dict]:
    """
    Parse only the leading frontmatter block of a note.

    Reading stops at the closing delimiter, so the note body is never
    scanned. Returns None when there is no well-formed block.
    """
    lines = []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if f.readline().rstrip("\r\n") != FRONTMATTER_DELIMITER:
                return None
            for line in f:
                if line.rstrip("\r\n") == FRONTMATTER_DELIMITER:
                    break
                lines.append(line)
            else:
                return None
    except (OSError, UnicodeDecodeError):
        return None

    try:
        data = yaml.safe_load("".join(lines))
    except yaml.YAMLError:
        return None
    return data if isinstance(data, dict) else None


def read_created_at(day: str, directory: Path, prefix: str = DEFAULT_PREFIX) -> Optional[str]:
    """created_at recorded in an existing note, or None if it can't be read."""
    frontmatter = read_frontmatter(note_path(day, directory, prefix))
    if not frontmatter:
        return None

    value = frontmatter.get("created_at")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or value == "":
        return None
    return str(value)


def safe_replace(src, dst, retries=3, delay=0.1):
    """Cross-platform atomic file replace with Windows retry logic."""
    for attempt in range(retries):
        try:
            os.replace(src, dst)
            return
        except PermissionError:
            if platform.system() == 'Windows' and attempt < retries - 1:
                time.sleep(delay)
            else:
                raise


def write_note(day: str, content: str, directory: Path, prefix: str = DEFAULT_PREFIX) -> Path:
    """Write a note as a whole: temp file in the same directory, then replace."""
    path = note_path(day, directory, prefix)
    tmp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix='.tmp')
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        safe_replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise NoteWriteError(path, e) from e
    return path
