"""Command line entry point."""

from __future__ import annotations

import argparse
import json
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

from hubblecli import defaults
from hubblecli.logsetup import initialize
from hubblecli.peer import ChangeNotification, ChangeNotificationType, TLSInfo, watch_peers
from hubblecli.status import ServerStatus, StatusError, render_status
from hubblecli.timeutil import parse_duration
from hubblecli.version import GIT_BRANCH, GIT_HASH, VERSION, version_line

_PROG = "hubble"


def _duration(text: str) -> float:
    try:
        return parse_duration(text).total_seconds()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_global_flags(parser: argparse.ArgumentParser, root: bool) -> None:
    def default(value):
        return value if root else argparse.SUPPRESS

    parser.add_argument("-D", "--debug", action="store_true", default=default(False),
                        help="Enable debug messages")
    parser.add_argument("--server", default=default(defaults.SERVER_ADDRESS),
                        help="Address of a Hubble server")
    parser.add_argument("--timeout", type=_duration, default=default(defaults.DIAL_TIMEOUT),
                        help="Hubble server dialing timeout")


@contextmanager
def _open_input(path: str) -> Iterator[TextIO]:
    if path == "-":
        yield sys.stdin
    else:
        with open(path, encoding="utf-8") as handle:
            yield handle


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def _server_status(data: dict) -> ServerStatus:
    return ServerStatus(
        num_flows=int(data.get("num_flows", 0)),
        max_flows=int(data.get("max_flows", 0)),
        seen_flows=int(data.get("seen_flows", 0)),
        uptime_ns=int(data.get("uptime_ns", 0)),
        num_connected_nodes=_optional_int(data.get("num_connected_nodes")),
        num_unavailable_nodes=_optional_int(data.get("num_unavailable_nodes")),
        unavailable_nodes=list(data.get("unavailable_nodes") or []),
    )


def _run_status(args: argparse.Namespace) -> None:
    with _open_input(args.input) as handle:
        data = json.load(handle)
    health = data.get("health")
    if not isinstance(health, str):
        raise StatusError("failed getting status: no health status in input")
    raw = data.get("server_status")
    status = None if raw is None else _server_status(raw)
    try:
        sys.stdout.write(render_status(args.server, health == "SERVING", health, status))
    except StatusError as exc:
        sys.stdout.write(exc.output)
        raise


def _change_type(value) -> ChangeNotificationType:
    if isinstance(value, str):
        return ChangeNotificationType[value]
    return ChangeNotificationType(int(value))


def _notifications(handle: TextIO) -> Iterator[ChangeNotification]:
    for line in handle:
        if not line.strip():
            continue
        data = json.loads(line)
        tls = data.get("tls")
        yield ChangeNotification(
            name=data.get("name", ""),
            address=data.get("address", ""),
            type=_change_type(data.get("type", 0)),
            tls=None if tls is None else TLSInfo(server_name=tls.get("server_name", "")),
        )


def _run_peers(args: argparse.Namespace) -> None:
    with _open_input(args.input) as handle:
        watch_peers(_notifications(handle), sys.stdout)


def _run_version(args: argparse.Namespace) -> None:
    print(version_line(_PROG, VERSION, GIT_BRANCH, GIT_HASH))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog=_PROG,
        description="Hubble is a utility to observe and inspect recent Cilium routed "
                    "traffic in a cluster.",
    )
    parser.add_argument("--version", action="version", version=f"{_PROG} v{VERSION}")
    _add_global_flags(parser, root=True)

    shared = argparse.ArgumentParser(add_help=False)
    _add_global_flags(shared, root=False)

    commands = parser.add_subparsers(dest="command", metavar="<command>")

    version = commands.add_parser("version", parents=[shared],
                                  help="Display detailed version information")
    version.set_defaults(handler=_run_version)

    status = commands.add_parser("status", parents=[shared],
                                 help="Display status of Hubble server")
    status.add_argument("--input", default="-",
                        help="JSON status response to read ('-' for stdin)")
    status.set_defaults(handler=_run_status)

    watch = commands.add_parser("watch", aliases=["w"], parents=[shared],
                                help="Watch Hubble objects")
    watch.set_defaults(handler=lambda _args: watch.print_help())
    watch_commands = watch.add_subparsers(dest="watch_command", metavar="<command>")
    peers = watch_commands.add_parser("peers", aliases=["peer"], parents=[shared],
                                      help="Watch for Hubble peers updates")
    peers.add_argument("--input", default="-",
                       help="JSON lines of change notifications ('-' for stdin)")
    peers.set_defaults(handler=_run_peers)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line; return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = initialize(args.debug)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    logger.debug("running command %s", args.command)
    try:
        handler(args)
    except (StatusError, ValueError, KeyError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())