"""Flow, event and response records with their proto3-style JSON form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any, ClassVar, Optional, Union

_MIN_SECONDS = -62135596800
_MAX_SECONDS = 253402300799
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Timestamp:
    seconds: int = 0
    nanos: int = 0

    def is_valid(self) -> bool:
        return _MIN_SECONDS <= self.seconds <= _MAX_SECONDS and 0 <= self.nanos < 1_000_000_000

    def to_datetime(self) -> datetime:
        if not self.is_valid():
            raise ValueError(f"invalid timestamp {self.seconds}s {self.nanos}ns")
        return _EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanos // 1000)

    def to_json(self) -> str:
        base = self.to_datetime().strftime("%Y-%m-%dT%H:%M:%S")
        if self.nanos == 0:
            frac = ""
        elif self.nanos % 1_000_000 == 0:
            frac = f".{self.nanos // 1_000_000:03d}"
        elif self.nanos % 1000 == 0:
            frac = f".{self.nanos // 1000:06d}"
        else:
            frac = f".{self.nanos:09d}"
        return f"{base}{frac}Z"


class Verdict(IntEnum):
    VERDICT_UNKNOWN = 0
    FORWARDED = 1
    DROPPED = 2
    ERROR = 3
    AUDIT = 4


class FlowType(IntEnum):
    UNKNOWN_TYPE = 0
    L3_L4 = 1
    L7 = 2
    SOCK = 3


class L7FlowType(IntEnum):
    UNKNOWN_L7_TYPE = 0
    REQUEST = 1
    RESPONSE = 2
    SAMPLE = 3


class L7Record(Enum):
    NONE = "none"
    HTTP = "http"
    DNS = "dns"
    KAFKA = "kafka"


class DebugCapturePoint(IntEnum):
    DBG_CAPTURE_POINT_UNKNOWN = 0
    DBG_CAPTURE_DELIVERY = 4
    DBG_CAPTURE_FROM_LB = 5
    DBG_CAPTURE_AFTER_V46 = 6
    DBG_CAPTURE_AFTER_V64 = 7
    DBG_CAPTURE_PROXY_PRE = 8
    DBG_CAPTURE_PROXY_POST = 9
    DBG_CAPTURE_SNAT_PRE = 10
    DBG_CAPTURE_SNAT_POST = 11


class AgentEventType(IntEnum):
    AGENT_EVENT_UNKNOWN = 0
    AGENT_STARTED = 2
    POLICY_UPDATED = 3
    POLICY_DELETED = 4
    ENDPOINT_REGENERATE_SUCCESS = 5
    ENDPOINT_REGENERATE_FAILURE = 6
    ENDPOINT_CREATED = 7
    ENDPOINT_DELETED = 8
    IPCACHE_UPSERTED = 9
    IPCACHE_DELETED = 10
    SERVICE_UPSERTED = 11
    SERVICE_DELETED = 12


class DebugEventType(IntEnum):
    DBG_EVENT_UNKNOWN = 0
    DBG_GENERIC = 1
    DBG_LOCAL_DELIVERY = 2
    DBG_ENCAP = 3
    DBG_LXC_FOUND = 4
    DBG_POLICY_DENIED = 5
    DBG_CT_LOOKUP = 6
    DBG_CT_LOOKUP_REV = 7
    DBG_CT_MATCH = 8
    DBG_CT_CREATED = 9
    DBG_CT_CREATED2 = 10
    DBG_ICMP6_HANDLE = 11
    DBG_ICMP6_REQUEST = 12
    DBG_ICMP6_NS = 13
    DBG_ICMP6_TIME_EXCEEDED = 14
    DBG_CT_VERDICT = 15


class NodeState(IntEnum):
    UNKNOWN_NODE_STATE = 0
    NODE_CONNECTED = 1
    NODE_UNAVAILABLE = 2
    NODE_GONE = 3
    NODE_ERROR = 4


# Field kinds: "scalar" is omitted when zero, "present" only when None,
# "int64" is a scalar rendered as a string.
def _is_default(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return not value
    if isinstance(value, (bool, int, str)):
        return not value
    return False


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Timestamp):
        return value.to_json()
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    if isinstance(value, _Message):
        return value._to_json()
    return value


class _Message:
    _JSON: ClassVar[tuple] = ()

    def _to_json(self) -> dict:
        out = {}
        for attr, key, kind in self._JSON:
            value = getattr(self, attr)
            if kind == "present":
                if value is None:
                    continue
            elif _is_default(value):
                continue
            if kind == "int64":
                value = str(value)
            out[key] = _encode(value)
        return out


@dataclass
class Endpoint(_Message):
    id: int = 0
    identity: int = 0
    namespace: str = ""
    labels: list[str] = field(default_factory=list)
    pod_name: str = ""
    _JSON: ClassVar[tuple] = (
        ("id", "ID", "scalar"), ("identity", "identity", "scalar"),
        ("namespace", "namespace", "scalar"), ("labels", "labels", "scalar"),
        ("pod_name", "pod_name", "scalar"),
    )


@dataclass
class Service(_Message):
    name: str = ""
    namespace: str = ""
    _JSON: ClassVar[tuple] = (("name", "name", "scalar"), ("namespace", "namespace", "scalar"))


@dataclass
class IP(_Message):
    source: str = ""
    destination: str = ""
    _JSON: ClassVar[tuple] = (("source", "source", "scalar"),
                              ("destination", "destination", "scalar"))


@dataclass
class Ethernet(_Message):
    source: str = ""
    destination: str = ""
    _JSON: ClassVar[tuple] = (("source", "source", "scalar"),
                              ("destination", "destination", "scalar"))


@dataclass
class Layer4(_Message):
    """Layer 4 data; protocol is "TCP", "UDP" or another protocol name."""

    protocol: str = ""
    source_port: int = 0
    destination_port: int = 0

    def _to_json(self) -> dict:
        if not self.protocol:
            return {}
        ports = {}
        if self.source_port:
            ports["source_port"] = self.source_port
        if self.destination_port:
            ports["destination_port"] = self.destination_port
        return {self.protocol: ports}


@dataclass
class Layer7(_Message):
    type: L7FlowType = L7FlowType.UNKNOWN_L7_TYPE
    latency_ns: int = 0
    record: L7Record = L7Record.NONE

    def _to_json(self) -> dict:
        out: dict = {}
        if self.type:
            out["type"] = self.type.name
        if self.latency_ns:
            out["latency_ns"] = str(self.latency_ns)
        if self.record is not L7Record.NONE:
            out[self.record.value] = {}
        return out


@dataclass
class CiliumEventType(_Message):
    type: int = 0
    sub_type: int = 0
    _JSON: ClassVar[tuple] = (("type", "type", "scalar"), ("sub_type", "sub_type", "scalar"))


@dataclass
class Flow(_Message):
    time: Optional[Timestamp] = None
    verdict: Verdict = Verdict.VERDICT_UNKNOWN
    drop_reason: int = 0
    ethernet: Optional[Ethernet] = None
    ip: Optional[IP] = None
    l4: Optional[Layer4] = None
    source: Optional[Endpoint] = None
    destination: Optional[Endpoint] = None
    type: FlowType = FlowType.UNKNOWN_TYPE
    node_name: str = ""
    source_names: list[str] = field(default_factory=list)
    destination_names: list[str] = field(default_factory=list)
    l7: Optional[Layer7] = None
    event_type: Optional[CiliumEventType] = None
    source_service: Optional[Service] = None
    destination_service: Optional[Service] = None
    policy_match_type: int = 0
    is_reply: Optional[bool] = None
    debug_capture_point: DebugCapturePoint = DebugCapturePoint.DBG_CAPTURE_POINT_UNKNOWN
    summary: str = ""
    _JSON: ClassVar[tuple] = (
        ("time", "time", "present"), ("verdict", "verdict", "scalar"),
        ("drop_reason", "drop_reason", "scalar"), ("ethernet", "ethernet", "present"),
        ("ip", "IP", "present"), ("l4", "l4", "present"),
        ("source", "source", "present"), ("destination", "destination", "present"),
        ("type", "Type", "scalar"), ("node_name", "node_name", "scalar"),
        ("source_names", "source_names", "scalar"),
        ("destination_names", "destination_names", "scalar"),
        ("l7", "l7", "present"), ("event_type", "event_type", "present"),
        ("source_service", "source_service", "present"),
        ("destination_service", "destination_service", "present"),
        ("policy_match_type", "policy_match_type", "scalar"),
        ("is_reply", "is_reply", "present"),
        ("debug_capture_point", "debug_capture_point", "scalar"),
        ("summary", "Summary", "scalar"),
    )


@dataclass
class NodeStatusEvent(_Message):
    state_change: NodeState = NodeState.UNKNOWN_NODE_STATE
    node_names: list[str] = field(default_factory=list)
    message: str = ""
    _JSON: ClassVar[tuple] = (
        ("state_change", "state_change", "scalar"),
        ("node_names", "node_names", "scalar"), ("message", "message", "scalar"),
    )


@dataclass
class FlowsResponse(_Message):
    flow: Optional[Flow] = None
    node_status: Optional[NodeStatusEvent] = None
    node_name: str = ""
    time: Optional[Timestamp] = None
    _JSON: ClassVar[tuple] = (
        ("flow", "flow", "present"), ("node_status", "node_status", "present"),
        ("node_name", "node_name", "scalar"), ("time", "time", "present"),
    )


@dataclass
class UnknownNotification(_Message):
    type: str = ""
    notification: str = ""
    _JSON: ClassVar[tuple] = (("type", "type", "scalar"),
                              ("notification", "notification", "scalar"))


@dataclass
class TimeNotification(_Message):
    time: Optional[Timestamp] = None
    _JSON: ClassVar[tuple] = (("time", "time", "present"),)


@dataclass
class PolicyUpdateNotification(_Message):
    labels: list[str] = field(default_factory=list)
    revision: int = 0
    rule_count: int = 0
    _JSON: ClassVar[tuple] = (
        ("labels", "labels", "scalar"), ("revision", "revision", "int64"),
        ("rule_count", "rule_count", "int64"),
    )


@dataclass
class EndpointRegenNotification(_Message):
    id: int = 0
    labels: list[str] = field(default_factory=list)
    error: str = ""
    _JSON: ClassVar[tuple] = (("id", "id", "int64"), ("labels", "labels", "scalar"),
                              ("error", "error", "scalar"))


@dataclass
class EndpointUpdateNotification(_Message):
    id: int = 0
    labels: list[str] = field(default_factory=list)
    error: str = ""
    pod_name: str = ""
    namespace: str = ""
    _JSON: ClassVar[tuple] = (
        ("id", "id", "int64"), ("labels", "labels", "scalar"), ("error", "error", "scalar"),
        ("pod_name", "pod_name", "scalar"), ("namespace", "namespace", "scalar"),
    )


@dataclass
class IPCacheNotification(_Message):
    cidr: str = ""
    identity: int = 0
    old_identity: Optional[int] = None
    host_ip: str = ""
    old_host_ip: str = ""
    encrypt_key: int = 0
    namespace: str = ""
    pod_name: str = ""
    _JSON: ClassVar[tuple] = (
        ("cidr", "cidr", "scalar"), ("identity", "identity", "scalar"),
        ("old_identity", "old_identity", "present"), ("host_ip", "host_ip", "scalar"),
        ("old_host_ip", "old_host_ip", "scalar"), ("encrypt_key", "encrypt_key", "scalar"),
        ("namespace", "namespace", "scalar"), ("pod_name", "pod_name", "scalar"),
    )


@dataclass
class ServiceAddress(_Message):
    ip: str = ""
    port: int = 0
    _JSON: ClassVar[tuple] = (("ip", "ip", "scalar"), ("port", "port", "scalar"))


@dataclass
class ServiceUpsertNotification(_Message):
    id: int = 0
    frontend_address: Optional[ServiceAddress] = None
    backend_addresses: list[ServiceAddress] = field(default_factory=list)
    type: str = ""
    traffic_policy: str = ""
    name: str = ""
    namespace: str = ""
    _JSON: ClassVar[tuple] = (
        ("id", "id", "scalar"), ("frontend_address", "frontend_address", "present"),
        ("backend_addresses", "backend_addresses", "scalar"), ("type", "type", "scalar"),
        ("traffic_policy", "traffic_policy", "scalar"), ("name", "name", "scalar"),
        ("namespace", "namespace", "scalar"),
    )


@dataclass
class ServiceDeleteNotification(_Message):
    id: int = 0
    _JSON: ClassVar[tuple] = (("id", "id", "scalar"),)


Notification = Union[
    UnknownNotification, TimeNotification, PolicyUpdateNotification,
    EndpointRegenNotification, EndpointUpdateNotification, IPCacheNotification,
    ServiceUpsertNotification, ServiceDeleteNotification,
]

_NOTIFICATION_KEYS = {
    UnknownNotification: "unknown",
    TimeNotification: "agent_start",
    PolicyUpdateNotification: "policy_update",
    EndpointRegenNotification: "endpoint_regenerate",
    EndpointUpdateNotification: "endpoint_update",
    IPCacheNotification: "ipcache_update",
    ServiceUpsertNotification: "service_upsert",
    ServiceDeleteNotification: "service_delete",
}


@dataclass
class AgentEvent(_Message):
    type: AgentEventType = AgentEventType.AGENT_EVENT_UNKNOWN
    notification: Optional[Notification] = None

    def _to_json(self) -> dict:
        out: dict = {}
        if self.type:
            out["type"] = self.type.name
        if self.notification is not None:
            out[_NOTIFICATION_KEYS[type(self.notification)]] = self.notification._to_json()
        return out


@dataclass
class AgentEventsResponse(_Message):
    agent_event: Optional[AgentEvent] = None
    node_name: str = ""
    time: Optional[Timestamp] = None
    _JSON: ClassVar[tuple] = (
        ("agent_event", "agent_event", "present"), ("node_name", "node_name", "scalar"),
        ("time", "time", "present"),
    )


@dataclass
class DebugEvent(_Message):
    type: DebugEventType = DebugEventType.DBG_EVENT_UNKNOWN
    source: Optional[Endpoint] = None
    hash: Optional[int] = None
    arg1: Optional[int] = None
    arg2: Optional[int] = None
    arg3: Optional[int] = None
    message: str = ""
    cpu: Optional[int] = None
    _JSON: ClassVar[tuple] = (
        ("type", "type", "scalar"), ("source", "source", "present"),
        ("hash", "hash", "present"), ("arg1", "arg1", "present"),
        ("arg2", "arg2", "present"), ("arg3", "arg3", "present"),
        ("message", "message", "scalar"), ("cpu", "cpu", "present"),
    )


@dataclass
class DebugEventsResponse(_Message):
    debug_event: Optional[DebugEvent] = None
    node_name: str = ""
    time: Optional[Timestamp] = None
    _JSON: ClassVar[tuple] = (
        ("debug_event", "debug_event", "present"), ("node_name", "node_name", "scalar"),
        ("time", "time", "present"),
    )


def to_json(message: Any) -> dict:
    """Return the proto3 JSON mapping of a record as an ordered dict."""
    if not isinstance(message, _Message):
        raise TypeError(f"cannot encode {type(message).__name__}")
    return message._to_json()