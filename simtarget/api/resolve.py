"""API routes for capability normalization and device resolution."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from simtarget.models import (
    CapabilitySet,
    DeviceMatchRequest,
    DeviceStringRequest,
    ManifestError,
    ResolutionError,
    ToolchainDiscoveryError,
    ToolchainVersion,
    UdidDetectionError,
    ValidationError,
)
from simtarget.resolution.device_string import get_device_string
from simtarget.resolution.matcher import get_sim_for_device_string
from simtarget.resolution.resolver import normalize

router = APIRouter(prefix="/api/v1", tags=["resolve"])
logger = logging.getLogger("simtarget.api")


def _get_resolver(request: Request):
    resolver = request.app.state.resolver
    if resolver is None:
        raise HTTPException(status_code=503, detail="Resolver not initialized")
    return resolver


def _handle_resolution_error(e: ResolutionError) -> HTTPException:
    """Map a ResolutionError to an appropriate HTTPException."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ManifestError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (ToolchainDiscoveryError, UdidDetectionError)):
        return HTTPException(status_code=503, detail=f"[{e.tool}] {e}")
    return HTTPException(status_code=500, detail=f"[{e.tool}] {e}")


def _parse_caps(raw: dict[str, Any]) -> CapabilitySet:
    try:
        return CapabilitySet.model_validate(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/capabilities/normalize")
async def normalize_capabilities(raw: dict[str, Any] = Body(...)):
    """Validate session capabilities and return them with derived fields."""
    try:
        caps = normalize(_parse_caps(raw))
    except ResolutionError as e:
        raise _handle_resolution_error(e)
    return caps.to_caps()


@router.post("/device/string")
async def device_string(body: DeviceStringRequest):
    """Resolve a device string from explicitly supplied Xcode/SDK versions."""
    try:
        xcode_version = ToolchainVersion.parse(body.xcode_version)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    caps = _parse_caps(body.capabilities)
    return {"device_string": get_device_string(xcode_version, body.ios_sdk_version, caps)}


@router.post("/device/match")
async def device_match(body: DeviceMatchRequest):
    """Match a device string against a supplied inventory listing."""
    return get_sim_for_device_string(body.device_string, body.devices).model_dump()


@router.post("/resolve")
async def resolve(request: Request, raw: dict[str, Any] = Body(...)):
    """Run the full resolution flow against the local toolchain."""
    resolver = _get_resolver(request)
    caps = _parse_caps(raw)
    try:
        target = await resolver.resolve(caps)
    except ResolutionError as e:
        raise _handle_resolution_error(e)
    result = target.model_dump(mode="json", exclude={"capabilities"})
    result["capabilities"] = target.capabilities.to_caps()
    return result
