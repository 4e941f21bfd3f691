"""Match a resolved device string against the live device inventory."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from simtarget.models import DeviceMatch

logger = logging.getLogger("simtarget.matcher")

_UDID_RE = re.compile(r".+\[([^\]]+)\]")


def extract_udid(descriptor: str) -> str | None:
    """Pull the bracketed udid out of 'iPhone 6 (9.0) [UUID]'."""
    match = _UDID_RE.search(descriptor)
    return match.group(1) if match else None


def get_sim_for_device_string(device_string: str, devices: Iterable[str]) -> DeviceMatch:
    """Find the inventory entry containing ``device_string``.

    Every entry is scanned and the last one containing the string wins.
    No match is a normal outcome: both fields of the result are None.
    """
    matched = DeviceMatch()
    for device in devices:
        if device_string in device:
            matched = DeviceMatch(device=device, udid=extract_udid(device))

    if matched.device is None:
        logger.debug("No device matched '%s'", device_string)
    else:
        logger.debug("Matched '%s' to %s (udid=%s)", device_string, matched.device, matched.udid)
    return matched
