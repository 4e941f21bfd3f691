"""simtarget CLI and HTTP application factory."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from simtarget import __version__
from simtarget.api.resolve import router as resolve_router
from simtarget.auth import APIKeyMiddleware
from simtarget.config import ResolverConfig
from simtarget.models import ResolutionError
from simtarget.resolution.resolver import TargetResolver, normalize

logger = logging.getLogger("simtarget")


def create_app(
    config: ResolverConfig | None = None,
    resolver: TargetResolver | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = ResolverConfig()
    config.ensure_api_key()

    app = FastAPI(
        title="simtarget",
        version=__version__,
        description="Resolve iOS test-session capabilities into a simulator target",
    )
    app.state.config = config
    app.state.resolver = resolver or TargetResolver(config=config)

    app.add_middleware(APIKeyMiddleware, api_key=config.api_key)
    app.include_router(resolve_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _load_caps(path: str) -> dict:
    """Read capabilities JSON from a file, or stdin when path is '-'."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text()
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("capabilities must be a JSON object")
    return data


def _cmd_normalize(args: argparse.Namespace) -> int:
    caps = normalize(_load_caps(args.caps))
    print(json.dumps(caps.to_caps(), indent=2))
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    config = ResolverConfig.from_user_config()
    target = asyncio.run(TargetResolver(config=config).resolve(_load_caps(args.caps)))
    result = target.model_dump(mode="json", exclude={"capabilities"})
    result["capabilities"] = target.capabilities.to_caps()
    print(json.dumps(result, indent=2))
    return 0 if target.device else 2


def _cmd_serve(args: argparse.Namespace) -> int:
    config = ResolverConfig.from_user_config(host=args.host, port=args.port)
    app = create_app(config=config)
    logger.info("Serving on http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level="debug" if args.verbose else "info")
    return 0


def cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="simtarget",
        description="Resolve iOS test-session capabilities into a simulator target",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize_parser = subparsers.add_parser("normalize", help="Validate and normalize capabilities")
    normalize_parser.add_argument("caps", help="Capabilities JSON file ('-' for stdin)")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve capabilities to a simulator")
    resolve_parser.add_argument("caps", help="Capabilities JSON file ('-' for stdin)")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind host (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: 9200)")

    subparsers.add_parser("regenerate-key", help="Generate a new API key")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "normalize":
            return _cmd_normalize(args)
        if args.command == "resolve":
            return _cmd_resolve(args)
        if args.command == "serve":
            return _cmd_serve(args)
        key = ResolverConfig.regenerate_api_key()
        print(f"New API key: {key}")
        return 0
    except ResolutionError as e:
        print(f"Error: [{e.tool}] {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(cli())
