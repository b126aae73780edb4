# SPDX-License-Identifier: MIT
"""
leakwatch - Command Line Interface

This CLI provides:
- leakwatch version
- leakwatch detectors
- leakwatch init
- leakwatch scan <file> --url <page url> --format {text,json}
- leakwatch recheck [--fingerprint <fp>]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx

from . import __version__
from .core.exceptions import LeakwatchConfigError, StoreError
from .core.redaction import redact_scan_result
from .core.store import JsonFindingsStore


def main(argv=None):
    argv = argv if argv is not None else sys.argv[1:]
    p = argparse.ArgumentParser(prog="leakwatch", description="Credential leak scanner for web page text")
    p.add_argument("-v", "--version", action="store_true", help="print version and exit")
    p.add_argument("--log-level", dest="log_level", help="override log_level from the config")

    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("version", help="print version")
    sub.add_parser("detectors", help="list detector ids")

    ip = sub.add_parser("init", help="write a .leakwatch.yml template")
    ip.add_argument("--path", default=".leakwatch.yml", help="where to write the template")
    ip.add_argument("--force", action="store_true", help="overwrite an existing file")

    sp = sub.add_parser("scan", help="scan a page text file")
    sp.add_argument("file", help="file to scan, '-' for stdin")
    sp.add_argument("--url", required=True, help="URL the content was served from")
    sp.add_argument("--config", help="path to config YAML file")
    sp.add_argument("--store", help="findings store path (overrides store_path)")
    sp.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="output format (default: text)",
    )
    sp.add_argument("--json-out", dest="json_out", help="write JSON results to file")
    sp.add_argument("--no-store", dest="no_store", action="store_true", help="do not write findings to the store")
    sp.add_argument("--show-secrets", dest="show_secrets", action="store_true", help="print secrets unredacted")

    rp = sub.add_parser("recheck", help="re-validate stored findings")
    rp.add_argument("--config", help="path to config YAML file")
    rp.add_argument("--store", help="findings store path (overrides store_path)")
    rp.add_argument("--fingerprint", help="recheck a single finding")

    args = p.parse_args(argv)

    if args.version or args.cmd == "version":
        print(__version__)
        return 0

    if args.cmd == "detectors":
        from .detectors import DETECTORS

        for name in DETECTORS:
            print(name)
        return 0

    if args.cmd == "init":
        return handle_init_command(args)

    if args.cmd == "scan":
        return handle_scan_command(args)

    if args.cmd == "recheck":
        return handle_recheck_command(args)

    p.print_help()
    return 0


def setup_logging(level):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(args):
    from .scanner.config import load_scanner_config

    config = load_scanner_config(args.config)
    setup_logging(args.log_level or config.get("log_level", "INFO"))
    store = JsonFindingsStore(args.store or config["store_path"])
    return config, store


def handle_init_command(args):
    """Handle the init subcommand."""
    from .scanner.config import create_default_config_template

    path = Path(args.path)
    if path.exists() and not args.force:
        print(f"{path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    path.write_text(create_default_config_template(), encoding="utf-8")
    print(f"Wrote {path}")
    return 0


def handle_scan_command(args):
    """Handle the scan subcommand."""
    from .scanner import Scanner

    try:
        config, store = _load_config(args)
    except LeakwatchConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 2

    try:
        if args.file == "-":
            content = sys.stdin.read()
        else:
            content = Path(args.file).read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        print(f"Error reading {args.file}: {e}", file=sys.stderr)
        return 2

    async def run_scan():
        async with httpx.AsyncClient() as client:
            scanner = Scanner.from_config(config, store=store, client=client)
            if args.no_store:
                return await scanner.run(content, args.url)
            return await scanner.scan_and_store(content, args.url)

    try:
        result = asyncio.run(run_scan())
    except StoreError as e:
        print(f"Error during scan: {e}", file=sys.stderr)
        return 2

    scan_results = result.to_dict()
    if not args.show_secrets:
        scan_results = redact_scan_result(scan_results)

    if args.format == "json" or args.json_out:
        json_output = json.dumps(scan_results, indent=2, default=str)
        if args.json_out:
            Path(args.json_out).write_text(json_output, encoding="utf-8")
            if args.format == "text":
                print(f"JSON output written to {args.json_out}")
        if args.format == "json":
            print(json_output)

    if args.format == "text":
        print_text_summary(scan_results)

    return 1 if result.findings else 0


def handle_recheck_command(args):
    """Handle the recheck subcommand."""
    from .detectors import DetectorContext
    from .recheck import RecheckEngine
    from .validate.core import ValidatorSettings

    try:
        config, store = _load_config(args)
    except LeakwatchConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 2

    async def run_recheck():
        async with httpx.AsyncClient() as client:
            context = DetectorContext(store=store, settings=ValidatorSettings.from_config(config), client=client)
            engine = RecheckEngine(store, context)
            if args.fingerprint:
                return {args.fingerprint: await engine.recheck_fingerprint(args.fingerprint)}
            return await engine.recheck_all()

    try:
        results = asyncio.run(run_recheck())
    except KeyError:
        print(f"No stored finding with fingerprint {args.fingerprint}", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"Error during recheck: {e}", file=sys.stderr)
        return 2

    for fingerprint, validity in results.items():
        print(f"{fingerprint[:16]}  {validity or 'skipped'}")
    return 0


def print_text_summary(scan_results):
    """Print a text summary of scan results."""
    findings = scan_results.get("findings", [])
    errors = scan_results.get("errors", {})

    print("\n🔍 leakwatch Scan Results")
    print("=" * 50)
    print(f"URL: {scan_results.get('url', '')}")
    print(f"Total findings: {len(findings)}")

    if findings:
        print("\nFindings by type:")
        finding_counts = {}
        for finding in findings:
            finding_type = finding.get("secretType", "unknown")
            finding_counts[finding_type] = finding_counts.get(finding_type, 0) + 1
        for finding_type, count in finding_counts.items():
            print(f"  {finding_type}: {count}")

        print("\nDetails:")
        for finding in findings:
            fields = next(iter(finding.get("secretValue", {}).values()), {})
            shown = ", ".join(f"{k}={v}" for k, v in fields.items() if v)
            print(f"  [{finding.get('secretType')}] {shown}")
            for occurrence in finding.get("occurrences", []):
                source = occurrence.get("sourceContent", {})
                where = source.get("contentFilename", "")
                if source.get("contentStartLineNum", -1) != -1:
                    where += f":{source.get('exactMatchNumbers')}"
                print(f"      {occurrence.get('type') or '-'} at {where}")

    if errors:
        print("\nDetector errors:")
        for name, error in errors.items():
            print(f"  {name}: {error}")
