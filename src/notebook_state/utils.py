"""Utility functions for notebook_state."""

from __future__ import annotations

import os
import time
import uuid
from datetime import UTC, datetime
from pathlib import Path

import fsspec
from fsspec.core import url_to_fs


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with milliseconds."""
    stamp = datetime.now(UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def now_ms() -> int:
    """Return the current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """Return a new opaque entity identifier."""
    return uuid.uuid4().hex


def get_fs_and_path(
    path: str | Path,
    fs: fsspec.AbstractFileSystem | None = None,
) -> tuple[fsspec.AbstractFileSystem, str]:
    """Resolve ``path`` to an fsspec filesystem and a protocol-less path.

    Args:
        path: Local path or fsspec URL (``memory://``, ``file://``...).
        fs: Optional filesystem; when given ``path`` is used as-is.

    Returns:
        Tuple of (filesystem, path understood by that filesystem).

    """
    if fs is not None:
        return fs, str(path)
    return url_to_fs(str(path))


def is_local_fs(fs: fsspec.AbstractFileSystem) -> bool:
    protocol = getattr(fs, "protocol", "file") or "file"
    if isinstance(protocol, (list, tuple)):
        return "file" in protocol or "local" in protocol
    return protocol in {"file", "local"}


def fs_join(base: str, *parts: str) -> str:
    return "/".join([base.rstrip("/"), *parts])


def fs_exists(fs: fsspec.AbstractFileSystem, path: str) -> bool:
    return bool(fs.exists(path))


def fs_makedirs(
    fs: fsspec.AbstractFileSystem,
    path: str,
    mode: int = 0o700,
    *,
    exist_ok: bool = True,
) -> None:
    """Create ``path``; local directories get restrictive permissions."""
    if is_local_fs(fs):
        Path(path).mkdir(mode=mode, parents=True, exist_ok=exist_ok)
        return
    fs.makedirs(path, exist_ok=exist_ok)


def fs_read_text(fs: fsspec.AbstractFileSystem, path: str) -> str:
    with fs.open(path, "r", encoding="utf-8") as handle:
        return handle.read()


def fs_write_text(
    fs: fsspec.AbstractFileSystem,
    path: str,
    payload: str,
    mode: int = 0o600,
) -> None:
    """Replace the file at ``path`` with ``payload`` in one step.

    The payload is written to a temporary sibling first and then moved over
    the target, so readers never observe a half-written file. The temporary
    file is removed again if the write or the move fails. Local files are
    created with ``mode`` permissions.

    Args:
        fs: Target filesystem.
        path: Destination path on ``fs``.
        payload: Text to write.
        mode: Permission bits applied to local files at creation.

    """
    tmp_path = f"{path}.{uuid.uuid4().hex}.tmp"

    if is_local_fs(fs):
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        return

    try:
        with fs.open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(payload)
        fs.mv(tmp_path, path)
    except BaseException:
        if fs.exists(tmp_path):
            fs.rm(tmp_path)
        raise
