"""Local-disk storage used when the object store cannot take an upload."""

import logging
import os
import time
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Collision retries before giving up on a filename.
_MAX_NAME_ATTEMPTS = 1000

# Most filesystems cap a path component at 255 bytes; the rest is left for
# the ``<ms-timestamp>_`` prefix.
MAX_DISK_NAME_BYTES = 200

# Longer suffixes are treated as part of the stem, not as an extension.
_MAX_EXTENSION_BYTES = 16


def safe_filename(original_name: str) -> str:
    """Strip any directory components a client put into the upload name."""
    name = os.path.basename(original_name.replace("\\", "/")).strip()
    if name in ("", ".", ".."):
        return "file"
    return name


def shorten_filename(name: str, max_bytes: int) -> str:
    """Cut *name* to at most *max_bytes* of UTF-8, keeping its extension.

    >>> shorten_filename("a" * 300 + ".pdf", 10)
    'aaaaaa.pdf'
    """
    if len(name.encode("utf-8")) <= max_bytes:
        return name

    stem, dot, ext = name.rpartition(".")
    suffix = dot + ext
    if not stem or len(suffix.encode("utf-8")) > _MAX_EXTENSION_BYTES:
        stem, suffix = name, ""

    budget = max_bytes - len(suffix.encode("utf-8"))
    # A multi-byte character split by the cut is dropped.
    stem = stem.encode("utf-8")[:budget].decode("utf-8", "ignore")
    return (stem or "file") + suffix


class LocalDiskStore:
    """Flat directory of uploaded files named ``<ms-timestamp>_<name>``.

    Security: every path is resolved under ``root`` so a crafted key cannot
    escape the uploads directory.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def write(self, original_name: str, data: bytes, now_ms: Optional[int] = None) -> tuple[str, Path]:
        """Write *data* under a fresh filename. Returns ``(filename, absolute_path)``.

        Uses exclusive creation; on a name clash the timestamp is bumped
        rather than overwriting another upload.
        """
        self.ensure_root()
        name = shorten_filename(safe_filename(original_name), MAX_DISK_NAME_BYTES)
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)

        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = f"{stamp}_{name}"
            path = self.root / filename
            try:
                with open(path, "xb") as fh:
                    fh.write(data)
            except FileExistsError:
                stamp += 1
                continue
            return filename, path

        raise FileExistsError(f"No free filename for {name!r} in {self.root}")

    def resolve(self, storage_key: str) -> Optional[Path]:
        """Absolute path for *storage_key*, or None if it falls outside root."""
        path = (self.root / storage_key).resolve()
        if path.parent != self.root:
            return None
        return path

    def delete(self, storage_path: Union[str, Path]) -> bool:
        """Remove a stored file. Returns False when it was already gone."""
        path = Path(storage_path).resolve()
        if path.parent != self.root:
            raise ValueError(f"Refusing to delete outside uploads directory: {path}")
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
