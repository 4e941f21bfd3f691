"""Capability normalization: derived fields, app vs bundle id, validation.

Both normalizers return a new CapabilitySet and leave their input untouched,
so a validation failure never leaves a half-updated record behind.
"""

from __future__ import annotations

import logging
import re

from simtarget.models import CapabilitySet, Orientation, ValidationError

logger = logging.getLogger("simtarget.caps")

SETTINGS_BUNDLE_ID = "com.apple.Preferences"
DEFAULT_STRINGS_DIR = "en.lproj"

MISSING_APP_MESSAGE = (
    "Please provide the 'app' or 'browserName' capability or start "
    "appium with the --app or --browser-name argument. Alternatively, "
    "you may provide the 'bundleId' and 'udid' capabilities for an app "
    "under test on a real device."
)

_BUNDLE_ID_RE = re.compile(r"^[a-zA-Z0-9\-_]+(\.[a-zA-Z0-9\-_]+)+$")
_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)")


def version_float(value: str | float | None) -> float | None:
    """Parse the leading numeric part of a version ('8.1.2' -> 8.1).

    Returns None when there is nothing numeric to parse.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT_RE.match(value)
    if not match:
        return None
    return float(match.group(0))


def is_bundle_identifier(app: str | None) -> bool:
    """True if ``app`` looks like a dotted bundle id ('com.example.App', 'MyApp.app')."""
    if not app:
        return False
    return bool(_BUNDLE_ID_RE.match(app))


def prepare_ios_caps(caps: CapabilitySet) -> CapabilitySet:
    """Fill in derived fields and validate location services settings.

    Raises:
        ValidationError if location services are authorized without a bundle id.
    """
    if caps.location_services_authorized and not caps.bundle_id:
        raise ValidationError("locationServicesAuthorized requires bundleId")

    use_robot = (caps.robot_port or 0) > 0
    robot_url = f"http://{caps.robot_address}:{caps.robot_port}" if use_robot else None

    pv = version_float(caps.platform_version)
    if pv is not None and pv < 7.1:
        logger.warning(
            "iOS version %s: iOS %s support has been deprecated and will be "
            "removed in a future version.",
            caps.platform_version, caps.platform_version,
        )

    return caps.model_copy(update={
        "without_delay": caps.native_instruments_lib,
        "reset": not caps.no_reset,
        "initial_orientation": caps.device_orientation or caps.orientation or Orientation.PORTRAIT,
        "use_robot": use_robot,
        "robot_url": robot_url,
        "localizable_strings_dir": caps.localizable_strings_dir or DEFAULT_STRINGS_DIR,
    })


def prepare_ios_app_caps(caps: CapabilitySet) -> CapabilitySet:
    """Reconcile the ``app`` and ``bundleId`` capabilities.

    On iOS 8+ a simulator can launch an installed app by bundle id; before
    that only a real device (``udid``) can.

    Raises:
        ValidationError if there is neither an app nor a launchable bundle id.
    """
    pv = version_float(caps.platform_version)
    ios8 = pv is not None and pv >= 8

    if not caps.app and not ((ios8 or caps.udid) and caps.bundle_id):
        raise ValidationError(MISSING_APP_MESSAGE)

    app = caps.app
    bundle_id = caps.bundle_id

    if not bundle_id and is_bundle_identifier(app):
        bundle_id = app

    if app and app.lower() == "settings":
        if ios8:
            logger.debug("We're on iOS8+ so not copying preferences app")
            bundle_id = SETTINGS_BUNDLE_ID
            app = None
    elif bundle_id and is_bundle_identifier(bundle_id) and (not app or is_bundle_identifier(app)):
        logger.debug("App is an iOS bundle, will attempt to run as pre-existing")

    return caps.model_copy(update={"app": app, "bundle_id": bundle_id})
