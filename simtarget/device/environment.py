"""Pre-flight helpers: udid detection, app manifest access, simulator hygiene."""

from __future__ import annotations

import logging
import shlex
import shutil
from pathlib import Path

from simtarget.config import ResolverConfig
from simtarget.device import runner
from simtarget.device.plist import read_plist, update_plist
from simtarget.models import CapabilitySet, ManifestError, ProcessError, UdidDetectionError
from simtarget.resolution.capabilities import version_float

logger = logging.getLogger("simtarget.environment")

STRINGS_FILE = "Localizable.strings"
DAEMON_CLEANUP_TIMEOUT = 10.0


# ---------------------------------------------------------------------------
# Real device udid
# ---------------------------------------------------------------------------


def _find_udid_probe(config: ResolverConfig) -> list[str]:
    """Locate a udid probe: libimobiledevice's idevice_id, else udidetect."""
    idevice_id = shutil.which("idevice_id")
    if idevice_id:
        return [idevice_id, "-l"]
    udidetect = config.udidetect_path or shutil.which("udidetect")
    if udidetect:
        return [udidetect]
    raise UdidDetectionError("Neither idevice_id nor udidetect is installed")


async def detect_udid(caps: CapabilitySet, config: ResolverConfig | None = None) -> CapabilitySet:
    """Replace ``udid='auto'`` with the udid of the first attached device.

    Any other udid value is returned unchanged.

    Raises:
        UdidDetectionError if the probe fails, times out, or finds nothing.
    """
    if caps.udid != "auto":
        logger.debug("Not auto-detecting udid.")
        return caps

    config = config or ResolverConfig()
    logger.debug("Auto-detecting iOS udid...")
    probe = _find_udid_probe(config)
    try:
        result = await runner.run(*probe, timeout=config.udid_probe_timeout)
    except ProcessError as e:
        logger.error("Error detecting udid")
        raise UdidDetectionError(f"udid probe failed: {e}") from e

    udid = result.stdout.split("\n")[0].strip()
    if len(udid) <= 2:
        raise UdidDetectionError("Could not detect udid.")

    logger.debug("Detected udid as %s", udid)
    return caps.model_copy(update={"udid": udid})


# ---------------------------------------------------------------------------
# App manifest
# ---------------------------------------------------------------------------


async def get_bundle_id_from_app(app: str | Path) -> str:
    """Read CFBundleIdentifier from <app>/Info.plist.

    Raises:
        ManifestError if Info.plist is unreadable or has no bundle identifier.
    """
    logger.debug("Getting bundle ID from app")
    try:
        info = await read_plist(Path(app) / "Info.plist")
    except ManifestError:
        logger.error("Could not get the bundleId from app.")
        raise
    bundle_id = info.get("CFBundleIdentifier")
    if not bundle_id:
        raise ManifestError(f"No CFBundleIdentifier in {app}/Info.plist")
    return bundle_id


async def set_bundle_id_from_app(caps: CapabilitySet) -> CapabilitySet:
    """Fill in ``bundle_id`` from the app's Info.plist when it is missing."""
    if caps.bundle_id:
        return caps
    if not caps.app:
        raise ManifestError("Cannot read a bundle id without an app path")
    bundle_id = await get_bundle_id_from_app(caps.app)
    return caps.model_copy(update={"bundle_id": bundle_id})


async def set_device_type_in_info_plist(app: str | Path, device_string: str) -> None:
    """Tag the app's UIDeviceFamily: 1 for iPhone, 2 for any iPad device string."""
    is_iphone = "ipad" not in device_string.lower()
    await update_plist(Path(app) / "Info.plist", {"UIDeviceFamily": [1 if is_iphone else 2]})


async def parse_localizable_strings(caps: CapabilitySet) -> CapabilitySet:
    """Attach the app's Localizable.strings, if one can be found and parsed.

    Looks in <app>/<language>.lproj/, then <app>/, then
    <app>/<localizable_strings_dir>/. A missing or unparseable file only logs
    a warning.
    """
    if not caps.app:
        logger.debug("Localizable.strings is not currently supported when using real devices.")
        return caps

    app = Path(caps.app)
    candidates = []
    if caps.language:
        candidates.append(app / f"{caps.language}.lproj" / STRINGS_FILE)
    candidates.append(app / STRINGS_FILE)
    candidates.append(app / (caps.localizable_strings_dir or "en.lproj") / STRINGS_FILE)

    strings_path = next((p for p in candidates if p.exists()), candidates[-1])
    if caps.language and strings_path != candidates[0]:
        logger.debug(
            "No strings file '%s' for language '%s', getting default strings",
            STRINGS_FILE, caps.language,
        )

    try:
        strings = await read_plist(strings_path)
    except ManifestError:
        logger.warning("Could not parse app %s assuming it doesn't exist", STRINGS_FILE)
        return caps

    logger.debug("Parsed app %s", STRINGS_FILE)
    return caps.model_copy(update={"localizable_strings": strings})


# ---------------------------------------------------------------------------
# Simulator environment
# ---------------------------------------------------------------------------


def should_prelaunch_simulator(caps: CapabilitySet, ios_sdk_version: str) -> bool:
    """Whether the simulator must be booted before instruments starts.

    From iOS SDK 7.1 on instruments launches the device itself, as it does
    when the default device is requested.
    """
    sdk = version_float(ios_sdk_version)
    if sdk is not None and sdk >= 7.1:
        logger.debug("We're on iOS7.1+ so forcing defaultDevice on")
        return False
    if caps.default_device:
        logger.debug("User specified default device, letting instruments launch it")
        return False
    return True


async def end_simulator_daemons(config: ResolverConfig | None = None) -> None:
    """Stop, then remove, every launchd job whose label contains the
    configured ``simulator_service``.

    Best effort: failures and timeouts are logged and ignored.
    """
    service = (config or ResolverConfig()).simulator_service
    logger.debug("Killing any other simulator daemons")
    for action in ("stop", "remove"):
        cmd = f"launchctl list | grep {shlex.quote(service)} | cut -f 3 | xargs -n 1 launchctl {action}"
        try:
            await runner.run_shell(cmd, timeout=DAEMON_CLEANUP_TIMEOUT, check=False)
        except ProcessError as e:
            logger.debug("launchctl %s of simulator daemons failed: %s", action, e)


def remove_instruments_socket(sock: str | Path) -> None:
    """Delete a leftover instruments socket, if any."""
    logger.debug("Removing any remaining instruments sockets")
    Path(sock).unlink(missing_ok=True)
    logger.debug("Cleaned up instruments socket %s", sock)
