"""Derive the instruments device string for a session's capabilities."""

from __future__ import annotations

import json
import logging

from simtarget.models import CapabilitySet, ToolchainVersion
from simtarget.resolution.fixups import fixups_for

logger = logging.getLogger("simtarget.device-string")

OVERRIDE_PREFIX = "="


def is_iphone_family(caps: CapabilitySet) -> bool:
    """Decide phone vs tablet from forceIphone/forceIpad and the device name."""
    is_iphone = bool(caps.force_iphone) or not caps.force_ipad
    if caps.device_name:
        device = caps.device_name.lower()
        if "iphone" in device:
            is_iphone = True
        elif "ipad" in device:
            is_iphone = False
    return is_iphone


def get_device_string(
    xcode_version: ToolchainVersion,
    ios_sdk_version: str,
    caps: CapabilitySet,
) -> str:
    """Build the device string instruments expects, e.g. 'iPhone 6 (9.0)'.

    A device name starting with '=' is returned verbatim without the prefix.
    Otherwise the name (or a generic family simulator) gets a version suffix
    whose form depends on the Xcode major version, and known-broken generic
    strings are replaced from the fixup table. Never raises.
    """
    logger.debug("Getting device string from caps: %s", json.dumps({
        "forceIphone": caps.force_iphone,
        "forceIpad": caps.force_ipad,
        "xcodeVersion": xcode_version.version_string,
        "iosSdkVersion": ios_sdk_version,
        "deviceName": caps.device_name,
        "platformVersion": caps.platform_version,
    }))

    device_name = caps.device_name
    if device_name and device_name.startswith(OVERRIDE_PREFIX):
        return device_name[len(OVERRIDE_PREFIX):]

    base = device_name or ("iPhone Simulator" if is_iphone_family(caps) else "iPad Simulator")
    req_version = caps.platform_version or ios_sdk_version

    # Fixup tables are keyed by the pre-Xcode-7 form of the string
    lookup_key = f"{base} ({req_version} Simulator)"
    if xcode_version.major == 7:
        device_string = f"{base} ({req_version})"
    else:
        device_string = lookup_key

    fixed = fixups_for(xcode_version.major).get(lookup_key)
    if fixed:
        logger.debug("Fixing device. Changed from: '%s' to '%s'", device_string, fixed)
        device_string = fixed

    logger.debug("Final device string is: '%s'", device_string)
    return device_string
