"""XcodeAdapter: Xcode version and installed iOS SDK discovery."""

from __future__ import annotations

import logging
import re

from simtarget.device import runner
from simtarget.models import CapabilitySet, ProcessError, ToolchainDiscoveryError, ToolchainVersion
from simtarget.resolution.capabilities import version_float

logger = logging.getLogger("simtarget.xcode")

XCODEBUILD_TIMEOUT = 30.0

_XCODE_VERSION_RE = re.compile(r"Xcode\s+(\d+(?:\.\d+)*)")
_IOS_SDK_RE = re.compile(r"-sdk\s+iphoneos(\d+(?:\.\d+)*)")


class XcodeAdapter:
    """Queries the active Xcode via xcodebuild."""

    async def _run_xcodebuild(self, *args: str) -> str:
        try:
            result = await runner.run("xcodebuild", *args, timeout=XCODEBUILD_TIMEOUT)
        except ProcessError as e:
            raise ToolchainDiscoveryError(f"xcodebuild {args[0]} failed: {e}") from e
        return result.stdout

    async def get_version(self) -> ToolchainVersion:
        """Parse `xcodebuild -version` ('Xcode 7.0.1\\nBuild version 7A1001')."""
        stdout = await self._run_xcodebuild("-version")
        match = _XCODE_VERSION_RE.search(stdout)
        if not match:
            raise ToolchainDiscoveryError(f"Could not parse Xcode version from: {stdout.strip()!r}")
        return ToolchainVersion.parse(match.group(1))

    async def get_max_ios_sdk(self) -> str:
        """Return the highest iphoneos SDK listed by `xcodebuild -showsdks`."""
        stdout = await self._run_xcodebuild("-showsdks")
        versions = _IOS_SDK_RE.findall(stdout)
        if not versions:
            raise ToolchainDiscoveryError("No iOS SDK found in xcodebuild -showsdks output")
        return max(versions, key=lambda v: tuple(int(p) for p in v.split(".")))


async def get_and_check_xcode_version(adapter: XcodeAdapter, caps: CapabilitySet) -> ToolchainVersion:
    """Fetch the Xcode version and warn about deprecated versions.

    Xcode < 6.3 is deprecated, except Xcode 6.0 driving iOS 8.0.
    """
    try:
        version = await adapter.get_version()
    except ToolchainDiscoveryError as e:
        logger.error("Could not determine Xcode version: %s", e)
        raise

    pv = version_float(caps.platform_version)
    if version.version_float < 6.3 and not (version.version_float == 6.0 and pv == 8.0):
        logger.warning(
            "Xcode version is %s. Support for Xcode %s has been deprecated and "
            "will be removed in a future version. Please upgrade to Xcode "
            "version 6.3 or higher (or version 6.0.1 for iOS 8.0)",
            version.version_string, version.version_string,
        )
    return version


async def get_and_check_ios_sdk_version(adapter: XcodeAdapter) -> str:
    """Fetch the maximum installed iOS SDK version."""
    try:
        return await adapter.get_max_ios_sdk()
    except ToolchainDiscoveryError:
        logger.error("Could not determine iOS SDK version")
        raise
