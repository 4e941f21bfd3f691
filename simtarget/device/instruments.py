"""InstrumentsInventory: lists known devices as '<name> [<udid>]' lines."""

from __future__ import annotations

import logging

from simtarget.device import runner
from simtarget.models import ProcessError, ResolutionError

logger = logging.getLogger("simtarget.instruments")

LIST_TIMEOUT = 60.0


class InstrumentsInventory:
    """Reads the device inventory from `xcrun instruments -s devices`.

    Output looks like::

        Known Devices:
        my-mac [5A0C3A54-...]
        iPhone 6 (9.0) [2F7678F2-7A5E-4A4B-9B8A-8D2F1F5B7C1A]
        iPad 2 (8.4 Simulator) [D5C1E2C4-...]
    """

    async def list_devices(self) -> list[str]:
        """Return one descriptor per known device, in instruments' order."""
        try:
            result = await runner.run("xcrun", "instruments", "-s", "devices", timeout=LIST_TIMEOUT)
        except ProcessError as e:
            raise ResolutionError(f"Could not list devices: {e}", tool="instruments") from e
        return self.parse_devices(result.stdout)

    @staticmethod
    def parse_devices(output: str) -> list[str]:
        devices = []
        for line in output.splitlines():
            line = line.strip()
            if not line or line.endswith(":"):
                continue
            devices.append(line)
        return devices
