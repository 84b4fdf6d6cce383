"""Command-line entry point for listing and installing manifest units.

Usage:
    extension-suite list
    extension-suite install
    extension-suite install foundation utilities
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from extension_suite.config import SuiteSettings, load_settings
from extension_suite.errors import ExtensionSuiteError
from extension_suite.logging_utils import configure_logging
from extension_suite.suite import ExtensionSuite


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="extension-suite",
        description="Fetch, evaluate, and initialize the extensions declared in a manifest",
    )
    parser.add_argument("--manifest", help="Manifest TOML file (default: bundled manifest)")
    parser.add_argument("--base-url", help="Base URL for relative source locations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Show manifest units in install order")

    install = subparsers.add_parser("install", help="Install all units, or the named ones")
    install.add_argument("ids", nargs="*", help="Unit ids to install (default: all, in order)")
    install.add_argument("--pacing-delay", type=float, help="Seconds to wait between units")
    return parser.parse_args(argv)


def _apply_overrides(settings: SuiteSettings, args: argparse.Namespace) -> SuiteSettings:
    updates: dict[str, object] = {"auto_install": False}
    if args.manifest:
        updates["manifest_path"] = args.manifest
    if args.base_url:
        updates["base_url"] = args.base_url
    if getattr(args, "pacing_delay", None) is not None:
        updates["pacing_delay"] = args.pacing_delay
    return settings.model_copy(update=updates)


def _print_manifest(suite: ExtensionSuite) -> None:
    for index, descriptor in enumerate(suite.registry, start=1):
        marker = "*" if descriptor.critical else " "
        print(f"{index:>2}. {marker} {descriptor.id:<14} {descriptor.name}")
        print(f"       {descriptor.source_location}")
    print()
    print("* critical")


async def _install(suite: ExtensionSuite, ids: list[str]) -> int:
    await suite.onload()
    try:
        if ids:
            failures = 0
            for unit_id in ids:
                try:
                    await suite.install_one(unit_id)
                except ExtensionSuiteError:
                    failures += 1
            log = suite.orchestrator.log
            success = len(ids) - failures
            total = len(ids)
        else:
            report = await suite.install_all()
            log = report.log
            success, failures, total = report.success, report.failure, report.total

        for entry in log:
            print(f"[{entry.timestamp:%H:%M:%S}] {entry.severity.value:<7} {entry.message}")
        print()
        print(f"Installed {success}/{total} extensions ({failures} failed)")
    finally:
        warnings = await suite.onunload()
        await suite.aclose()
    for warning in warnings:
        print(f"WARN {warning}", file=sys.stderr)
    return 0 if failures == 0 else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = _apply_overrides(load_settings(), args)
        configure_logging(settings.log_level)
        suite = ExtensionSuite.from_settings(settings)
    except (OSError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.command == "list":
        _print_manifest(suite)
        asyncio.run(suite.aclose())
        return 0
    return asyncio.run(_install(suite, args.ids))


if __name__ == "__main__":
    sys.exit(main())
