# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""realtimeprobe CLI."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Any

from ..acs import create_call_answerer
from ..config import ProbeSettings, load_settings
from ..errors import ConfigurationError
from ..log import setup_logging
from ..models import ProbeTrace
from ..probe.report import render_trace
from ..runtime import RealtimeProbe
from ..webhook import handle_events

EXIT_OK = 0
EXIT_NO_WINNER = 1
EXIT_CONFIG_ERROR = 2


def _protocol_list(value: str) -> list[str]:
    return [token.strip() for token in value.split(",") if token.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover which realtime WebSocket endpoint shape a deployment accepts")
    parser.add_argument("--log-level", default=None, help="Logging level (default: REALTIMEPROBE_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    discover = sub.add_parser("discover", help="Try every version/path/param/protocol combination")
    discover.add_argument("--version", dest="versions", action="append", help="API version to try (repeatable)")
    discover.add_argument("--path", dest="paths", action="append", help="URL path to try (repeatable)")
    discover.add_argument("--param", dest="param_names", action="append", help="Deployment query parameter name (repeatable)")
    discover.add_argument(
        "--protocols",
        dest="protocol_sets",
        action="append",
        type=_protocol_list,
        help="Comma-separated sub-protocol set (repeatable)",
    )
    discover.add_argument("--timeout", type=float, default=None, help="Per-attempt timeout in seconds")
    discover.add_argument("--concurrency", type=int, default=None, help="Attempts in flight at once (default 1)")
    discover.add_argument("--max-redirects", dest="max_redirect_hops", type=int, default=None, help="Redirect hops to follow")
    _add_common(discover)

    once = sub.add_parser("once", help="Try a single endpoint shape")
    once.add_argument("--version", default=None, help="API version")
    once.add_argument("--path", default=None, help="URL path, e.g. openai/realtime")
    once.add_argument("--param", dest="param_name", default=None, help="Deployment query parameter name")
    once.add_argument("--protocols", type=_protocol_list, default=None, help="Comma-separated sub-protocols")
    once.add_argument("--timeout", type=float, default=None, help="Timeout in seconds")
    _add_common(once)

    sub.add_parser("env", help="Print the effective (redacted) configuration")

    webhook = sub.add_parser("webhook", help="Replay a webhook delivery from a JSON file ('-' for stdin)")
    webhook.add_argument("payload", help="Path to the JSON payload")
    return parser


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Output JSON instead of the text report")
    parser.add_argument("--verbose", action="store_true", help="Include response body snippets in the text report and log at DEBUG")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed endpoints)",
    )


def _print_json(data: Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _emit_trace(trace: ProbeTrace, args: argparse.Namespace) -> int:
    if args.json:
        _print_json(trace)
    else:
        print(render_trace(trace, verbose=args.verbose))
    return EXIT_OK if trace.succeeded else EXIT_NO_WINNER


def _read_payload(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


def main(argv: list[str] | None = None, settings: ProbeSettings | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, verbose=getattr(args, "verbose", False))

    settings = settings or load_settings()
    if getattr(args, "ignore_ssl_errors", False):
        settings = replace(settings, verify_ssl=False)

    if args.command == "env":
        _print_json(settings.summary())
        return EXIT_OK

    if args.command == "webhook":
        try:
            answerer = create_call_answerer(settings)
        except ConfigurationError as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        reply = handle_events(_read_payload(args.payload), settings=settings, answerer=answerer)
        _print_json({"status_code": reply.status_code, "body": reply.body, "answered": reply.answered})
        return EXIT_OK

    probe = RealtimeProbe(settings)
    try:
        if args.command == "once":
            trace = probe.probe_once(
                version=args.version,
                path=args.path,
                param_name=args.param_name,
                protocols=args.protocols,
                timeout=args.timeout,
            )
        else:
            trace = probe.discover(
                versions=args.versions,
                paths=args.paths,
                param_names=args.param_names,
                protocol_sets=args.protocol_sets,
                timeout=args.timeout,
                concurrency=args.concurrency,
                max_redirect_hops=args.max_redirect_hops,
            )
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    return _emit_trace(trace, args)


__all__ = ["build_parser", "main"]


if __name__ == "__main__":
    raise SystemExit(main())
