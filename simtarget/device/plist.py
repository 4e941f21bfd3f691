"""Plist manifest access: plistlib for reading, plutil for in-place updates."""

from __future__ import annotations

import asyncio
import datetime
import json
import plistlib
from pathlib import Path
from typing import Any

from simtarget.models import ManifestError


def _make_json_safe(obj: Any) -> Any:
    """Recursively convert plist types that aren't JSON-serializable.

    bytes become a lowercase hex string and datetime an ISO 8601 string.
    Everything else passes through unchanged.
    """
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, datetime.datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _make_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_make_json_safe(v) for v in obj]
    return obj


async def read_plist(path: Path | str) -> dict:
    """Read an XML or binary plist file into a JSON-safe dict.

    Raises ManifestError if the file is missing or cannot be parsed.
    """
    def _read() -> dict:
        with open(path, "rb") as f:
            return plistlib.load(f)

    try:
        data = await asyncio.to_thread(_read)
    except Exception as e:
        raise ManifestError(f"plistlib read failed for {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"{path} does not contain a dictionary")
    return _make_json_safe(data)


def _plutil_args(value: Any) -> tuple[str, str]:
    """Map a Python value to a plutil type flag and its textual value.

    bool -> -bool, int -> -integer, float -> -float, list/dict -> -json,
    everything else -> -string.
    """
    if isinstance(value, bool):
        return "-bool", "true" if value else "false"
    if isinstance(value, int):
        return "-integer", str(value)
    if isinstance(value, float):
        return "-float", str(value)
    if isinstance(value, (list, dict)):
        return "-json", json.dumps(value)
    return "-string", str(value)


async def set_plist_value(path: Path | str, key: str, value: Any) -> None:
    """Set a key in a plist file.

    Uses: plutil -replace <key> -<type> <value> <path>
    """
    type_flag, str_value = _plutil_args(value)
    proc = await asyncio.create_subprocess_exec(
        "plutil", "-replace", key, type_flag, str_value, str(path),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise ManifestError(
            f"plutil set failed for {path} key {key!r}: {stderr.decode().strip()}"
        )


async def update_plist(path: Path | str, patch: dict[str, Any]) -> None:
    """Apply every key in ``patch`` to the plist at ``path``."""
    for key, value in patch.items():
        await set_plist_value(path, key, value)
