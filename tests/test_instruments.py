"""Tests for the instruments device inventory."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from simtarget.device.instruments import InstrumentsInventory
from simtarget.device.runner import ProcessResult
from simtarget.models import ProcessError, ResolutionError

INSTRUMENTS_OUTPUT = """\
Known Devices:
builder [5A0C3A54-1B2C-4D5E-8F90-123456789ABC]
iPhone 6 (9.0) [2F7678F2-7A5E-4A4B-9B8A-8D2F1F5B7C1A]
iPad 2 (9.0) [D5C1E2C4-1111-2222-3333-444455556666]

"""


class TestParseDevices:
    def test_skips_header_and_blank_lines(self):
        devices = InstrumentsInventory.parse_devices(INSTRUMENTS_OUTPUT)
        assert devices == [
            "builder [5A0C3A54-1B2C-4D5E-8F90-123456789ABC]",
            "iPhone 6 (9.0) [2F7678F2-7A5E-4A4B-9B8A-8D2F1F5B7C1A]",
            "iPad 2 (9.0) [D5C1E2C4-1111-2222-3333-444455556666]",
        ]


class TestListDevices:
    async def test_runs_instruments(self):
        result = ProcessResult(stdout=INSTRUMENTS_OUTPUT, stderr="", exit_code=0)
        with patch("simtarget.device.instruments.runner.run", AsyncMock(return_value=result)) as mock_run:
            devices = await InstrumentsInventory().list_devices()
        assert len(devices) == 3
        assert mock_run.call_args[0] == ("xcrun", "instruments", "-s", "devices")

    async def test_failure_wrapped(self):
        with patch("simtarget.device.instruments.runner.run", AsyncMock(side_effect=ProcessError("no xcrun"))):
            with pytest.raises(ResolutionError, match="Could not list devices") as exc_info:
                await InstrumentsInventory().list_devices()
        assert exc_info.value.tool == "instruments"

    async def test_missing_xcrun_wrapped(self):
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("xcrun"))):
            with pytest.raises(ResolutionError, match="could not be started") as exc_info:
                await InstrumentsInventory().list_devices()
        assert exc_info.value.tool == "instruments"
