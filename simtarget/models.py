"""Core data models for capability sets, toolchain facts and resolution results."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Orientation(str, enum.Enum):
    """Initial device orientation requested by a session."""

    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"


class CapabilitySet(BaseModel):
    """Session-requested and derived capabilities for an iOS test target.

    Raw session input uses camelCase keys (``bundleId``, ``platformVersion``);
    both those aliases and the snake_case field names are accepted. Keys this
    model does not know about are kept as extras so they survive normalization.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    app: str | None = Field(default=None, description="Path to a .app bundle, a bundle id, or 'settings'")
    bundle_id: str | None = Field(default=None, alias="bundleId")
    udid: str | None = Field(default=None, description="Real device udid, or 'auto' to detect one")
    device_name: str | None = Field(default=None, alias="deviceName")
    platform_version: str | None = Field(default=None, alias="platformVersion")
    orientation: Orientation | None = None
    device_orientation: Orientation | None = Field(default=None, alias="deviceOrientation")
    no_reset: bool = Field(default=False, alias="noReset")
    native_instruments_lib: bool = Field(default=False, alias="nativeInstrumentsLib")
    robot_address: str | None = Field(default=None, alias="robotAddress")
    robot_port: int | None = Field(default=None, alias="robotPort")
    location_services_authorized: bool = Field(default=False, alias="locationServicesAuthorized")
    language: str | None = None
    localizable_strings_dir: str | None = Field(default=None, alias="localizableStringsDir")
    force_iphone: bool | None = Field(default=None, alias="forceIphone")
    force_ipad: bool | None = Field(default=None, alias="forceIpad")
    default_device: bool | None = Field(default=None, alias="defaultDevice")

    # Derived by the normalizer
    without_delay: bool | None = Field(default=None, alias="withoutDelay")
    reset: bool | None = None
    initial_orientation: Orientation | None = Field(default=None, alias="initialOrientation")
    use_robot: bool | None = Field(default=None, alias="useRobot")
    robot_url: str | None = Field(default=None, alias="robotUrl")
    localizable_strings: dict[str, Any] | None = Field(default=None, alias="localizableStrings")

    @field_validator("platform_version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        # Clients frequently send 8.0 instead of "8.0"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_caps(self) -> dict[str, Any]:
        """Dump as camelCase session capabilities, omitting unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ToolchainVersion(BaseModel):
    """Parsed Xcode version, fetched once per session."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int = 0
    patch: int = 0
    version_float: float
    version_string: str

    @classmethod
    def parse(cls, version_string: str) -> ToolchainVersion:
        """Parse a dotted version such as '7.3.1'."""
        parts = [int(p) for p in version_string.strip().split(".") if p.isdigit()]
        if not parts:
            raise ValueError(f"Unparseable version: {version_string!r}")
        parts += [0] * (3 - len(parts))
        major, minor, patch = parts[:3]
        return cls(
            major=major,
            minor=minor,
            patch=patch,
            version_float=float(f"{major}.{minor}"),
            version_string=version_string.strip(),
        )


class DeviceMatch(BaseModel):
    """Result of matching a device string against the live inventory.

    Both fields are None when nothing matched.
    """

    device: str | None = None
    udid: str | None = None


class ResolvedTarget(BaseModel):
    """A concrete, addressable simulator target ready for session setup."""

    device_string: str
    device: str | None = None
    udid: str | None = None
    should_prelaunch: bool = False
    xcode_version: str = ""
    ios_sdk_version: str = ""
    capabilities: CapabilitySet


# ---------------------------------------------------------------------------
# API request models
# ---------------------------------------------------------------------------


class DeviceStringRequest(BaseModel):
    """Resolve a device string from explicit toolchain facts."""

    xcode_version: str = Field(description="e.g. '7.0.1'")
    ios_sdk_version: str = Field(description="Maximum installed iOS SDK, e.g. '9.0'")
    capabilities: dict[str, Any] = Field(default_factory=dict)


class DeviceMatchRequest(BaseModel):
    """Match a device string against an inventory listing."""

    device_string: str
    devices: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ResolutionError(Exception):
    """Base error for target resolution. ``tool`` names the failing subsystem."""

    def __init__(self, message: str, tool: str = "simtarget") -> None:
        super().__init__(message)
        self.tool = tool


class ValidationError(ResolutionError):
    """Malformed or contradictory capabilities."""

    def __init__(self, message: str, tool: str = "caps") -> None:
        super().__init__(message, tool=tool)


class ToolchainDiscoveryError(ResolutionError):
    """Xcode or iOS SDK version could not be determined."""

    def __init__(self, message: str, tool: str = "xcode") -> None:
        super().__init__(message, tool=tool)


class UdidDetectionError(ResolutionError):
    """Auto-detection of a real device udid failed."""

    def __init__(self, message: str, tool: str = "udid") -> None:
        super().__init__(message, tool=tool)


class ManifestError(ResolutionError):
    """An app manifest (plist) could not be read, parsed or written."""

    def __init__(self, message: str, tool: str = "plist") -> None:
        super().__init__(message, tool=tool)


class ProcessError(ResolutionError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, message: str, tool: str = "process") -> None:
        super().__init__(message, tool=tool)


class ProcessTimeoutError(ProcessError):
    """An external command did not finish within its timeout."""
