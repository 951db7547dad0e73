"""Rendering of the server health and status report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class StatusError(Exception):
    """Status could not be reported; ``output`` holds what was rendered so far."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


@dataclass
class ServerStatus:
    num_flows: int = 0
    max_flows: int = 0
    seen_flows: int = 0
    uptime_ns: int = 0
    num_connected_nodes: Optional[int] = None
    num_unavailable_nodes: Optional[int] = None
    unavailable_nodes: list[str] = field(default_factory=list)


def render_status(target: str, serving: bool, health_status: str,
                  server_status: Optional[ServerStatus]) -> str:
    """Return the status report; raise StatusError when the server is not healthy."""
    health = "Ok" if serving else f"Unavailable: {health_status}"
    lines = [f"Healthcheck (via {target}): {health}"]
    if not serving:
        raise StatusError("not healthy", output=lines[0] + "\n")
    if server_status is None:
        raise StatusError("failed to get hubble server status: no status available",
                          output=lines[0] + "\n")

    ss = server_status
    ratio = ""
    if ss.max_flows > 0:
        ratio = f" ({ss.num_flows / ss.max_flows * 100:.2f}%)"
    lines.append(f"Current/Max Flows: {ss.num_flows}/{ss.max_flows}{ratio}")

    per_sec = "N/A"
    uptime = ss.uptime_ns / 1e9
    if uptime > 0:
        per_sec = f"{ss.seen_flows / uptime:.2f}"
    lines.append(f"Flows/s: {per_sec}")

    connected, unavailable_count = ss.num_connected_nodes, ss.num_unavailable_nodes
    if connected is not None:
        total = ""
        if unavailable_count is not None:
            total = f"/{unavailable_count + connected}"
        lines.append(f"Connected Nodes: {connected}{total}")
    if unavailable_count is not None and unavailable_count > 0:
        if ss.unavailable_nodes:
            names = sorted(ss.unavailable_nodes)
            if unavailable_count > len(names):
                names.append(f"and {unavailable_count - len(names)} more...")
            lines.append(f"Unavailable Nodes: {unavailable_count}")
            lines.extend(f"  - {name}" for name in names)
        else:
            lines.append(f"Unavailable Nodes: {unavailable_count}")
    return "\n".join(lines) + "\n"