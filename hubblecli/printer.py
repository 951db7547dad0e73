"""Printing of flows, node status, agent and debug events."""

from __future__ import annotations

import json
import posixpath
import sys
from typing import Optional, TextIO

from hubblecli import monitor
from hubblecli.color import Colorer
from hubblecli.flow import (
    AgentEvent, AgentEventType, EndpointRegenNotification, EndpointUpdateNotification,
    Flow, FlowsResponse, IPCacheNotification, L7Record, NodeState,
    PolicyUpdateNotification, ServiceAddress, ServiceDeleteNotification,
    ServiceUpsertNotification, TimeNotification, Timestamp, UnknownNotification,
    Verdict, to_json,
)
from hubblecli.options import Options, Output
from hubblecli.timeutil import format_time

TAB = "\t"
NEWLINE = "\n"
SPACE = " "
DICT_SEPARATOR = "------------"
NODE_NAMES_CUT_OFF = 50


class _Discard:
    def write(self, text: str) -> int:
        return len(text)


class _TabWriter:
    """Elastic tab stops: minwidth 2, padding 3, space padding."""

    _MIN_WIDTH = 2
    _PADDING = 3

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._reset()

    def _reset(self) -> None:
        self._lines: list[list[str]] = [[]]
        self._cell = ""

    def write(self, text: str) -> None:
        for ch in text:
            if ch == "\t":
                self._lines[-1].append(self._cell)
                self._cell = ""
            elif ch == "\n":
                self._lines[-1].append(self._cell)
                self._cell = ""
                ncells = len(self._lines[-1])
                self._lines.append([])
                if ncells == 1:
                    self.flush()
            else:
                self._cell += ch

    def flush(self) -> None:
        if self._cell:
            self._lines[-1].append(self._cell)
            self._cell = ""
        parts: list[str] = []
        self._format(parts, 0, len(self._lines), [])
        self._reset()
        self._out.write("".join(parts))

    def _format(self, parts: list[str], line0: int, line1: int, widths: list[int]) -> None:
        column = len(widths)
        current = line0
        while current < line1:
            if column >= len(self._lines[current]) - 1:
                current += 1
                continue
            self._write_lines(parts, line0, current, widths)
            line0 = current
            width = self._MIN_WIDTH
            while current < line1:
                line = self._lines[current]
                if column >= len(line) - 1:
                    break
                width = max(width, len(line[column]) + self._PADDING)
                current += 1
            widths.append(width)
            self._format(parts, line0, current, widths)
            widths.pop()
            line0 = current
        self._write_lines(parts, line0, line1, widths)

    def _write_lines(self, parts: list[str], line0: int, line1: int, widths: list[int]) -> None:
        for i in range(line0, line1):
            for j, cell in enumerate(self._lines[i]):
                parts.append(cell)
                if j < len(widths):
                    parts.append(" " * (widths[j] - len(cell)))
            if i + 1 < len(self._lines):
                parts.append("\n")


def _join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _dumps(value) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False) + "\n"


def fmt_timestamp(layout: str, ts: Optional[Timestamp]) -> str:
    """Format a timestamp, or "N/A" when it is missing or invalid."""
    if ts is None or not ts.is_valid():
        return "N/A"
    return format_time(ts.to_datetime(), layout)


def get_flow_type(flow: Optional[Flow]) -> str:
    """Return the type of a flow as a string."""
    if flow is None:
        return "UNKNOWN"
    if flow.l7 is not None:
        protocol = "l7" if flow.l7.record is L7Record.NONE else flow.l7.record.value
        return f"{protocol}-{flow.l7.type.name.lower()}"
    event = flow.event_type
    kind = event.type if event is not None else 0
    sub_type = event.sub_type if event is not None else 0
    if kind == monitor.MessageType.TRACE:
        return monitor.trace_observation_point(sub_type)
    if kind == monitor.MessageType.DROP:
        return monitor.drop_reason(sub_type)
    if kind == monitor.MessageType.POLICY_VERDICT:
        if flow.verdict == Verdict.FORWARDED:
            return monitor.policy_match_type(flow.policy_match_type)
        if flow.verdict == Verdict.DROPPED:
            return monitor.drop_reason(flow.drop_reason)
    elif kind == monitor.MessageType.CAPTURE:
        return flow.debug_capture_point.name
    return "UNKNOWN"


def join_with_cut_off(elems: list[str], sep: str, target_len: int) -> str:
    """Join elements, omitting those past target_len (at least one is kept)."""
    length = 0
    end = len(elems)
    for i, elem in enumerate(elems):
        length += len(elem) + len(sep)
        if length > target_len and i > 0:
            end = i
            break
    joined = sep.join(elems[:end])
    omitted = len(elems) - end
    if omitted == 0:
        return joined
    return f"{joined} (and {omitted} more)"


def _fmt_service_addr(addr: ServiceAddress) -> str:
    return _join_host_port(addr.ip, str(addr.port))


def agent_event_details(event: Optional[AgentEvent], time_layout: str) -> str:
    """Describe the notification carried by an agent event."""
    if event is None:
        return "UNKNOWN"
    kind, n = event.type, event.notification
    if kind == AgentEventType.AGENT_EVENT_UNKNOWN and isinstance(n, UnknownNotification):
        return f"type: {n.type}, notification: {n.notification}"
    if kind == AgentEventType.AGENT_STARTED and isinstance(n, TimeNotification):
        return f"start time: {fmt_timestamp(time_layout, n.time)}"
    if (kind in (AgentEventType.POLICY_UPDATED, AgentEventType.POLICY_DELETED)
            and isinstance(n, PolicyUpdateNotification)):
        return f"labels: [{','.join(n.labels)}], revision: {n.revision}, count: {n.rule_count}"
    if (kind in (AgentEventType.ENDPOINT_REGENERATE_SUCCESS,
                 AgentEventType.ENDPOINT_REGENERATE_FAILURE)
            and isinstance(n, EndpointRegenNotification)):
        text = f"id: {n.id}, labels: [{','.join(n.labels)}]"
        if n.error:
            text += f", error: {n.error}"
        return text
    if (kind in (AgentEventType.ENDPOINT_CREATED, AgentEventType.ENDPOINT_DELETED)
            and isinstance(n, EndpointUpdateNotification)):
        text = f"id: {n.id}"
        if n.namespace:
            text += f", namespace: {n.namespace}"
        if n.pod_name:
            text += f", pod name: {n.pod_name}"
        return text
    if (kind in (AgentEventType.IPCACHE_UPSERTED, AgentEventType.IPCACHE_DELETED)
            and isinstance(n, IPCacheNotification)):
        text = f"cidr: {n.cidr}, identity: {n.identity}"
        if n.old_identity is not None:
            text += f", old identity: {n.old_identity}"
        if n.host_ip:
            text += f", host ip: {n.host_ip}"
        if n.old_host_ip:
            text += f", old host ip: {n.old_host_ip}"
        return text + f", encrypt key: {n.encrypt_key}"
    if kind == AgentEventType.SERVICE_UPSERTED and isinstance(n, ServiceUpsertNotification):
        text = f"id: {n.id}"
        if n.frontend_address is not None:
            text += f", frontend: {_fmt_service_addr(n.frontend_address)}"
        if n.backend_addresses:
            backends = ",".join(_fmt_service_addr(a) for a in n.backend_addresses)
            text += f", backends: [{backends}]"
        if n.type:
            text += f", type: {n.type}"
        if n.traffic_policy:
            text += f", traffic policy: {n.traffic_policy}"
        if n.namespace:
            text += f", namespace: {n.namespace}"
        if n.name:
            text += f", name: {n.name}"
        return text
    if kind == AgentEventType.SERVICE_DELETED and isinstance(n, ServiceDeleteNotification):
        return f"id: {n.id}"
    return "UNKNOWN"


def _fmt_hex(value: Optional[int]) -> str:
    return "N/A" if value is None else f"0x{value:x}"


def _fmt_cpu(value: Optional[int]) -> str:
    return "N/A" if value is None else f"{value:02d}"


def _fmt_endpoint_short(ep) -> str:
    if ep is None:
        return "N/A"
    text = f"ID: {ep.id}"
    if ep.namespace and ep.pod_name:
        text = f"{ep.namespace}/{ep.pod_name} ({text})"
    elif len(ep.labels) == 1 and "reserved:".startswith(ep.labels[0]):
        text = f"{ep.labels[0]} ({text})"
    return text


class Printer:
    """Writes flows and events in the configured output mode."""

    def __init__(self, options: Optional[Options] = None) -> None:
        self.opts = options if options is not None else Options()
        self._out = self.opts.writer if self.opts.writer is not None else sys.stdout
        if self.opts.ignore_stderr:
            self._err = _Discard()
        else:
            self._err = self.opts.err_writer if self.opts.err_writer is not None else sys.stderr
        self._line = 0
        self._color = Colorer(self.opts.color)
        self._tw: Optional[_TabWriter] = None
        if self.opts.output is Output.TAB:
            self._tw = _TabWriter(self._out)
            self._color.disable()

    def __enter__(self) -> "Printer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Flush any buffered tabular output."""
        if self._tw is not None:
            self._tw.flush()

    def write_err(self, msg: str) -> None:
        self._err.write(msg + "\n")

    @staticmethod
    def _emit(target, what: str, *parts) -> None:
        try:
            target.write("".join(str(p) for p in parts))
        except OSError as exc:
            raise OSError(f"failed to write out {what}: {exc}") from exc

    def get_ports(self, flow: Flow) -> tuple[str, str]:
        l4 = flow.l4
        if l4 is None or l4.protocol not in ("TCP", "UDP"):
            return "", ""
        return str(l4.source_port), str(l4.destination_port)

    def get_host_names(self, flow: Optional[Flow]) -> tuple[str, str]:
        if flow is None:
            return "", ""
        if flow.ip is None:
            if flow.ethernet is not None:
                return (self._color.host(flow.ethernet.source),
                        self._color.host(flow.ethernet.destination))
            return "", ""
        src_ns = dst_ns = src_pod = dst_pod = src_svc = dst_svc = ""
        if flow.source is not None:
            src_ns, src_pod = flow.source.namespace, flow.source.pod_name
        if flow.destination is not None:
            dst_ns, dst_pod = flow.destination.namespace, flow.destination.pod_name
        if flow.source_service is not None:
            src_ns, src_svc = flow.source_service.namespace, flow.source_service.name
        if flow.destination_service is not None:
            dst_ns, dst_svc = flow.destination_service.namespace, flow.destination_service.name
        src_port, dst_port = self.get_ports(flow)
        src = self.hostname(flow.ip.source, src_port, src_ns, src_pod, src_svc,
                            flow.source_names)
        dst = self.hostname(flow.ip.destination, dst_port, dst_ns, dst_pod, dst_svc,
                            flow.destination_names)
        return self._color.host(src), self._color.host(dst)

    def hostname(self, ip: str, port: str, ns: str, pod: str, svc: str, names) -> str:
        host = ip
        if self.opts.enable_ip_translation:
            if pod:
                host = posixpath.normpath("/".join(p for p in (ns, pod) if p))
            elif svc:
                host = posixpath.normpath("/".join(p for p in (ns, svc) if p))
            elif names:
                host = ",".join(names)
        if port and port != "0":
            return _join_host_port(host, self._color.port(port))
        return host

    def _verdict(self, flow: Flow) -> str:
        v = flow.verdict
        if v == Verdict.FORWARDED:
            return self._color.verdict_forwarded(v.name)
        if v in (Verdict.DROPPED, Verdict.ERROR):
            return self._color.verdict_dropped(v.name)
        if v == Verdict.AUDIT:
            return self._color.verdict_audit(v.name)
        return v.name

    def write_proto_flow(self, response: FlowsResponse) -> None:
        f = response.flow if response.flow is not None else Flow()
        out, layout, node = self.opts.output, self.opts.time_format, self.opts.node_name
        what = "packet"
        if out is Output.TAB:
            src, dst = self.get_host_names(f)
            if self._line == 0:
                self._emit(self._tw, what, "TIMESTAMP", TAB, *(("NODE", TAB) if node else ()),
                           "SOURCE", TAB, "DESTINATION", TAB, "TYPE", TAB,
                           "VERDICT", TAB, "SUMMARY", NEWLINE)
            self._emit(self._tw, what, fmt_timestamp(layout, f.time), TAB,
                       *((f.node_name, TAB) if node else ()),
                       src, TAB, dst, TAB, get_flow_type(f), TAB,
                       self._verdict(f), TAB, f.summary, NEWLINE)
        elif out is Output.DICT:
            src, dst = self.get_host_names(f)
            if self._line != 0:
                self._emit(self._out, what, DICT_SEPARATOR)
            self._emit(self._out, what, "  TIMESTAMP: ", fmt_timestamp(layout, f.time), NEWLINE,
                       *(("       NODE: ", f.node_name, NEWLINE) if node else ()),
                       "     SOURCE: ", src, NEWLINE,
                       "DESTINATION: ", dst, NEWLINE,
                       "       TYPE: ", get_flow_type(f), NEWLINE,
                       "    VERDICT: ", self._verdict(f), NEWLINE,
                       "    SUMMARY: ", f.summary, NEWLINE)
        elif out is Output.COMPACT:
            src, dst = self.get_host_names(f)
            node_part = f" [{f.node_name}]" if node else ""
            arrow = "->"
            if f.is_reply is None:
                arrow = "<>"
            elif f.is_reply:
                src, dst = dst, src
                arrow = "<-"
            self._emit(self._out, what,
                       f"{fmt_timestamp(layout, f.time)}{node_part}: {src} {arrow} {dst} "
                       f"{get_flow_type(f)} {self._verdict(f)} ({f.summary})\n")
        elif out is Output.JSON:
            self._out.write(_dumps(to_json(response.flow) if response.flow else None))
            return
        elif out is Output.JSONPB:
            self._out.write(_dumps(to_json(response)))
            return
        self._line += 1

    def write_proto_node_status_event(self, response: FlowsResponse) -> None:
        s = response.node_status
        if s is None:
            raise ValueError("not a node status event")
        if not self.opts.enable_debug and s.state_change not in (
                NodeState.NODE_ERROR, NodeState.NODE_UNAVAILABLE):
            return
        out, layout = self.opts.output, self.opts.time_format
        if out in (Output.JSON, Output.JSONPB):
            self._err.write(_dumps(to_json(response)))
        elif out is Output.DICT:
            if self._line != 0:
                self._out.write(DICT_SEPARATOR + "\n")
            else:
                self._line += 1
            names = join_with_cut_off(s.node_names, ", ", NODE_NAMES_CUT_OFF)
            message = json.dumps(s.message) if s.message else "N/A"
            self._emit(self._err, "node status",
                       "  TIMESTAMP: ", fmt_timestamp(layout, response.time), NEWLINE,
                       "      STATE: ", s.state_change.name, NEWLINE,
                       "      NODES: ", names, NEWLINE,
                       "    MESSAGE: ", message, NEWLINE)
        else:
            count = len(s.node_names)
            names = join_with_cut_off(s.node_names, ", ", NODE_NAMES_CUT_OFF)
            prefix = f"{fmt_timestamp(layout, response.time)} [{response.node_name}]"
            messages = {
                NodeState.NODE_CONNECTED: f"Receiving flows from {count} nodes: {names}",
                NodeState.NODE_UNAVAILABLE: f"{count} nodes are unavailable: {names}",
                NodeState.NODE_GONE: f"{count} nodes removed from cluster: {names}",
                NodeState.NODE_ERROR:
                    f"Error {json.dumps(s.message)} on {count} nodes: {names}",
            }
            body = messages.get(s.state_change, f"unknown node status event: {s!r}")
            self.write_err(f"{prefix}: {body}")

    def write_proto_agent_event(self, response) -> None:
        e = response.agent_event
        if e is None:
            raise ValueError("not an agent event")
        out, layout, node = self.opts.output, self.opts.time_format, self.opts.node_name
        what = "agent event"
        ts = fmt_timestamp(layout, response.time)
        details = agent_event_details(e, layout)
        if out is Output.JSON:
            self._out.write(_dumps(to_json(e)))
            return
        if out is Output.JSONPB:
            self._out.write(_dumps(to_json(response)))
            return
        if out is Output.DICT:
            if self._line != 0:
                self._emit(self._out, what, DICT_SEPARATOR)
            self._emit(self._out, what, "  TIMESTAMP: ", ts, NEWLINE,
                       *(("       NODE: ", response.node_name, NEWLINE) if node else ()),
                       "       TYPE: ", e.type.name, NEWLINE,
                       "    DETAILS: ", details, NEWLINE)
        elif out is Output.TAB:
            if self._line == 0:
                self._emit(self._tw, what, "TIMESTAMP", TAB,
                           *(("NODE", TAB) if node else ()), "TYPE", TAB, "DETAILS", NEWLINE)
            self._emit(self._tw, what, ts, TAB,
                       *((response.node_name, TAB) if node else ()),
                       e.type.name, TAB, details, NEWLINE)
        elif out is Output.COMPACT:
            node_part = f" [{response.node_name}]" if node else ""
            self._emit(self._out, what, f"{ts}{node_part}: {e.type.name} ({details})\n")
        self._line += 1

    def write_proto_debug_event(self, response) -> None:
        e = response.debug_event
        if e is None:
            raise ValueError("not a debug event")
        out, layout, node = self.opts.output, self.opts.time_format, self.opts.node_name
        what = "debug event"
        ts = fmt_timestamp(layout, response.time)
        src = _fmt_endpoint_short(e.source)
        mark, cpu = _fmt_hex(e.hash), _fmt_cpu(e.cpu)
        if out is Output.JSON:
            self._out.write(_dumps(to_json(e)))
            return
        if out is Output.JSONPB:
            self._out.write(_dumps(to_json(response)))
            return
        if out is Output.DICT:
            if self._line != 0:
                self._emit(self._out, what, DICT_SEPARATOR)
            self._emit(self._out, what, "  TIMESTAMP: ", ts, NEWLINE,
                       *(("       NODE: ", response.node_name, NEWLINE) if node else ()),
                       "       TYPE: ", e.type.name, NEWLINE,
                       "       FROM: ", src, NEWLINE,
                       "       MARK: ", mark, NEWLINE,
                       "        CPU: ", cpu, NEWLINE,
                       "    MESSAGE: ", e.message, NEWLINE)
        elif out is Output.TAB:
            if self._line == 0:
                self._emit(self._tw, what, "TIMESTAMP", TAB,
                           *(("NODE", TAB) if node else ()),
                           "FROM", TAB, TAB, "TYPE", TAB, "CPU/MARK", TAB, "MESSAGE", NEWLINE)
            self._emit(self._tw, what, ts, TAB,
                       *((response.node_name, TAB) if node else ()),
                       src, TAB, TAB, e.type.name, TAB, cpu, SPACE, mark, TAB,
                       e.message, NEWLINE)
        elif out is Output.COMPACT:
            node_part = f" [{response.node_name}]" if node else ""
            self._emit(self._out, what,
                       f"{ts}{node_part}: {src} {e.type.name} MARK: {mark} CPU: {cpu} "
                       f"({e.message})\n")
        self._line += 1

    def write_get_flows_response(self, response: FlowsResponse) -> None:
        if response.flow is not None:
            self.write_proto_flow(response)
        elif response.node_status is not None:
            self.write_proto_node_status_event(response)