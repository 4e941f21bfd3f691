"""TargetResolver: raw capabilities in, concrete simulator target out."""

from __future__ import annotations

import logging
from typing import Any

from simtarget.config import ResolverConfig
from simtarget.device.environment import detect_udid, should_prelaunch_simulator
from simtarget.device.instruments import InstrumentsInventory
from simtarget.device.xcode import (
    XcodeAdapter,
    get_and_check_ios_sdk_version,
    get_and_check_xcode_version,
)
from simtarget.models import CapabilitySet, DeviceMatch, ResolvedTarget
from simtarget.polling import wait_for_condition
from simtarget.resolution.capabilities import prepare_ios_app_caps, prepare_ios_caps
from simtarget.resolution.device_string import get_device_string
from simtarget.resolution.matcher import get_sim_for_device_string

logger = logging.getLogger("simtarget.resolver")


def normalize(raw: dict[str, Any] | CapabilitySet) -> CapabilitySet:
    """Validate raw session capabilities and fill in derived fields.

    Raises ValidationError before any device interaction happens.
    """
    caps = raw if isinstance(raw, CapabilitySet) else CapabilitySet.model_validate(raw)
    caps = prepare_ios_caps(caps)
    return prepare_ios_app_caps(caps)


class TargetResolver:
    """Runs normalization, toolchain discovery, device string resolution and
    inventory matching in order.

    Collaborators are injectable so callers (and tests) can substitute them.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        xcode: XcodeAdapter | None = None,
        inventory: InstrumentsInventory | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.xcode = xcode or XcodeAdapter()
        self.inventory = inventory or InstrumentsInventory()

    async def resolve(self, raw: dict[str, Any] | CapabilitySet) -> ResolvedTarget:
        caps = normalize(raw)
        caps = await detect_udid(caps, self.config)

        xcode_version = await get_and_check_xcode_version(self.xcode, caps)
        ios_sdk_version = await get_and_check_ios_sdk_version(self.xcode)

        device_string = get_device_string(xcode_version, ios_sdk_version, caps)
        devices = await self.inventory.list_devices()
        match = get_sim_for_device_string(device_string, devices)
        if match.device is None:
            logger.warning("No available device matches '%s'", device_string)

        return ResolvedTarget(
            device_string=device_string,
            device=match.device,
            udid=match.udid,
            should_prelaunch=should_prelaunch_simulator(caps, ios_sdk_version),
            xcode_version=xcode_version.version_string,
            ios_sdk_version=ios_sdk_version,
            capabilities=caps,
        )

    async def wait_for_device(self, device_string: str, timeout: float = 30.0) -> DeviceMatch:
        """Poll the inventory until a device matching ``device_string`` appears.

        Returns an empty DeviceMatch if none shows up within ``timeout`` seconds.
        """
        match = DeviceMatch()

        async def _attached() -> bool:
            nonlocal match
            match = get_sim_for_device_string(device_string, await self.inventory.list_devices())
            return match.device is not None

        await wait_for_condition(timeout, _attached, interval=self.config.poll_interval)
        return match
