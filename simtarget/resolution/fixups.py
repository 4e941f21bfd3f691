"""Corrections for device strings that Xcode's instruments does not accept.

Keys are the generic strings built from a family name and version; values are
the concrete device types to use instead. Xcode 7 dropped the " Simulator"
suffix from device strings, hence the two tables.
"""

from __future__ import annotations

from types import MappingProxyType

XCODE7_DEVICE_FIXUPS = MappingProxyType({
    "iPad Simulator (8.0 Simulator)": "iPad 2 (8.0)",
    "iPad Simulator (8.1 Simulator)": "iPad 2 (8.1)",
    "iPad Simulator (8.2 Simulator)": "iPad 2 (8.2)",
    "iPad Simulator (8.3 Simulator)": "iPad 2 (8.3)",
    "iPad Simulator (8.4 Simulator)": "iPad 2 (8.4)",
    "iPad Simulator (7.1 Simulator)": "iPad 2 (7.1)",
    "iPad Simulator (9.0 Simulator)": "iPad 2 (9.0)",
    "iPhone Simulator (8.4 Simulator)": "iPhone 6 (8.4)",
    "iPhone Simulator (8.3 Simulator)": "iPhone 6 (8.3)",
    "iPhone Simulator (8.2 Simulator)": "iPhone 6 (8.2)",
    "iPhone Simulator (8.1 Simulator)": "iPhone 6 (8.1)",
    "iPhone Simulator (8.0 Simulator)": "iPhone 6 (8.0)",
    "iPhone Simulator (7.1 Simulator)": "iPhone 5s (7.1)",
    "iPhone Simulator (9.0 Simulator)": "iPhone 6 (9.0)",
})

DEFAULT_DEVICE_FIXUPS = MappingProxyType({
    "iPad Simulator (8.0 Simulator)": "iPad 2 (8.0 Simulator)",
    "iPad Simulator (8.1 Simulator)": "iPad 2 (8.1 Simulator)",
    "iPad Simulator (8.2 Simulator)": "iPad 2 (8.2 Simulator)",
    "iPad Simulator (8.3 Simulator)": "iPad 2 (8.3 Simulator)",
    "iPad Simulator (8.4 Simulator)": "iPad 2 (8.4 Simulator)",
    "iPad Simulator (7.1 Simulator)": "iPad 2 (7.1 Simulator)",
    "iPad Simulator (9.0 Simulator)": "iPad 2 (9.0 Simulator)",
    "iPhone Simulator (8.4 Simulator)": "iPhone 6 (8.4 Simulator)",
    "iPhone Simulator (8.3 Simulator)": "iPhone 6 (8.3 Simulator)",
    "iPhone Simulator (8.2 Simulator)": "iPhone 6 (8.2 Simulator)",
    "iPhone Simulator (8.1 Simulator)": "iPhone 6 (8.1 Simulator)",
    "iPhone Simulator (8.0 Simulator)": "iPhone 6 (8.0 Simulator)",
    "iPhone Simulator (7.1 Simulator)": "iPhone 5s (7.1 Simulator)",
    "iPhone Simulator (9.0 Simulator)": "iPhone 6 (9.0 Simulator)",
})


def fixups_for(xcode_major: int) -> MappingProxyType:
    """Select the fixup table for an Xcode major version."""
    return XCODE7_DEVICE_FIXUPS if xcode_major == 7 else DEFAULT_DEVICE_FIXUPS
