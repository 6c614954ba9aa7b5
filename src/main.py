# src/main.py - v1
"""CLI entry point: drive the cache engine against a real origin.

Usage:
    shellcache sync                 # install + activate
    shellcache install
    shellcache activate
    shellcache fetch <url>
    shellcache offline
    shellcache status

The blob store is durable (json/sqlite/redis backends), so each command
picks up where the previous process left off.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from shellcache.config.settings import ConfigurationError, Settings, load_settings
from shellcache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except (ConfigurationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="shellcache",
        description=f"shellcache v{__version__}: offline resource cache synchronizer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-m", "--manifest", type=Path, default=None,
        help="Build manifest JSON (default: MANIFEST_PATH setting)",
    )
    parser.add_argument(
        "--origin", default=None,
        help="Serving origin, e.g. https://app.example.com (default: ORIGIN setting)",
    )
    parser.add_argument(
        "--store", dest="store_backend", choices=["memory", "json", "sqlite", "redis"],
        default=None, help="Blob store backend (default: STORE_BACKEND setting)",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_install = subparsers.add_parser("install", help="Prefetch shell resources into staging")
    p_install.set_defaults(func=_cmd_install)

    p_activate = subparsers.add_parser("activate", help="Reconcile the cache with the manifest")
    p_activate.set_defaults(func=_cmd_activate)

    p_sync = subparsers.add_parser("sync", help="Install then activate")
    p_sync.set_defaults(func=_cmd_sync)

    p_fetch = subparsers.add_parser("fetch", help="Serve one request through the cache")
    p_fetch.add_argument("url", help="Absolute URL to request")
    p_fetch.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    p_fetch.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the response body to this file",
    )
    p_fetch.set_defaults(func=_cmd_fetch)

    p_offline = subparsers.add_parser("offline", help="Download every missing resource")
    p_offline.set_defaults(func=_cmd_offline)

    p_status = subparsers.add_parser("status", help="Show partitions and manifest drift")
    p_status.set_defaults(func=_cmd_status)

    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.manifest is not None:
        overrides["manifest_path"] = args.manifest
    if args.origin is not None:
        overrides["origin"] = args.origin
    if args.store_backend is not None:
        overrides["store_backend"] = args.store_backend
    return load_settings(**overrides)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    """Wire up the worker for this process and run the selected command."""
    from shellcache.engine.context import WorkerContext
    from shellcache.engine.host import LocalHostRuntime
    from shellcache.engine.lifecycle import LifecycleCoordinator
    from shellcache.manifest.loader import load_build_manifest
    from shellcache.storage.store_factory import create_blob_store
    from shellcache.transport.httpx_transport import HttpxTransport

    build = load_build_manifest(settings.manifest_path)
    store = create_blob_store(settings)
    transport = HttpxTransport(
        timeout_s=settings.transport_timeout_s,
        connect_timeout_s=settings.transport_connect_timeout_s,
    )
    context = WorkerContext.from_settings(settings, build, store, transport)
    coordinator = LifecycleCoordinator(context, LocalHostRuntime())
    try:
        return await args.func(args, coordinator)
    finally:
        await transport.aclose()
        store.close()


async def _cmd_install(args: argparse.Namespace, coordinator) -> int:
    report = await coordinator.on_install()
    print(f"Staged {len(report.stored)} shell resources into {report.partition}")
    return 0


async def _cmd_activate(args: argparse.Namespace, coordinator) -> int:
    coordinator.resume("installed")
    return _print_activation(await coordinator.on_activate(), coordinator)


async def _cmd_sync(args: argparse.Namespace, coordinator) -> int:
    await coordinator.on_install()
    return _print_activation(await coordinator.on_activate(), coordinator)


async def _cmd_fetch(args: argparse.Namespace, coordinator) -> int:
    from shellcache.core.models import ResourceRequest

    coordinator.resume()
    response = await coordinator.on_fetch(ResourceRequest(url=args.url, method=args.method))
    if response is None:
        print(f"{args.url}: pass-through (not a cached resource)")
        return 0

    print(f"{response.url}: HTTP {response.status} from {response.source} ({len(response.body)} bytes)")
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(response.body)
    return 0 if response.ok else 1


async def _cmd_offline(args: argparse.Namespace, coordinator) -> int:
    coordinator.resume()
    report = await coordinator.prefetch_remaining()
    print(f"Downloaded {len(report.stored)} resources into {report.partition}")
    return 0


async def _cmd_status(args: argparse.Namespace, coordinator) -> int:
    from shellcache.core.errors import ManifestMissing

    context = coordinator.context
    existing = await context.store.partition_names()
    print(f"\nOrigin: {context.origin}")
    print("Partitions:")
    for name in context.partition_names:
        if name in existing:
            partition = await context.store.open_partition(name)
            print(f"  {name:20s} {len(await partition.keys())} entries")
        else:
            print(f"  {name:20s} (absent)")

    try:
        stored = await coordinator.reconciler.manifest_store.load()
    except ManifestMissing:
        print("Stored manifest: none (next activation is a cold start)")
        return 0

    diff = context.manifest.diff(stored)
    print(f"Stored manifest: {len(stored)} resources")
    print(f"  Added:     {len(diff.added)}")
    print(f"  Removed:   {len(diff.removed)}")
    print(f"  Changed:   {len(diff.changed)}")
    print(f"  Unchanged: {len(diff.unchanged)}")
    return 0


def _print_activation(report, coordinator) -> int:
    if report is None:
        print(f"Activation reset the cache: {coordinator.state.last_error}")
        return 1
    kind = "Cold start" if report.cold_start else "Upgrade"
    print(f"\n{kind} complete:")
    print(f"  Evicted:   {len(report.evicted)}")
    print(f"  Retained:  {len(report.retained)}")
    print(f"  Promoted:  {len(report.promoted)}")
    print(f"  Manifest:  {report.manifest_size} resources")
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from shellcache.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
