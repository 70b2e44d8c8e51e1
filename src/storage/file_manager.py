# src/storage/file_manager.py

"""Crash-safe JSON file reads and writes for the tracker's data files."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from src.errors import ConfigError

logger = logging.getLogger("price_tracker.storage")


def read_json(path: Path, *, label: str) -> Any:
    """Load a JSON document, raising ConfigError on any read/parse failure."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"{label} file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"{label} file {path} is not valid JSON "
            f"(line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {label} file {path}: {exc}") from exc


def write_json_atomic(path: Path, data: Any) -> None:
    """Write *data* as JSON so that *path* is either old or new, never partial.

    The document goes to a temp file in the same directory, is fsync'ed,
    then renamed over the target.  A crash before the rename leaves the
    previous file untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    logger.debug("Wrote %s", path)
