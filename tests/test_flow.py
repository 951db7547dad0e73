import json
from datetime import datetime, timezone

import pytest

from hubblecli import flow as fl


def dumps(message):
    return json.dumps(fl.to_json(message), separators=(",", ":"))


def sample_flow():
    return fl.Flow(
        time=fl.Timestamp(1234, 567800000),
        type=fl.FlowType.L3_L4,
        node_name="k8s1",
        verdict=fl.Verdict.DROPPED,
        ip=fl.IP(source="1.1.1.1", destination="2.2.2.2"),
        l4=fl.Layer4("TCP", 31793, 8080),
        event_type=fl.CiliumEventType(type=1, sub_type=133),
        summary="TCP Flags: SYN",
        is_reply=False,
    )


FLOW_JSON = (
    '{"time":"1970-01-01T00:20:34.567800Z",'
    '"verdict":"DROPPED",'
    '"IP":{"source":"1.1.1.1","destination":"2.2.2.2"},'
    '"l4":{"TCP":{"source_port":31793,"destination_port":8080}},'
    '"Type":"L3_L4","node_name":"k8s1",'
    '"event_type":{"type":1,"sub_type":133},'
    '"is_reply":false,"Summary":"TCP Flags: SYN"}'
)


def test_flow_json():
    assert dumps(sample_flow()) == FLOW_JSON


def test_flows_response_json():
    assert dumps(fl.FlowsResponse(flow=sample_flow())) == '{"flow":' + FLOW_JSON + "}"


def test_debug_event_json():
    event = fl.DebugEvent(
        type=fl.DebugEventType.DBG_CT_VERDICT,
        source=fl.Endpoint(id=690, identity=1332, namespace="cilium-test",
                           labels=["k8s:name=pod-to-a-denied-cnp"],
                           pod_name="pod-to-a-denied-cnp-75cb89dfd-vqhd9"),
        hash=180354257, arg1=0, arg2=0, arg3=0,
        message="CT verdict: New, revnat=0", cpu=1,
    )
    response = fl.DebugEventsResponse(debug_event=event, node_name="k8s1",
                                      time=fl.Timestamp(1234, 567800000))
    assert dumps(response) == (
        '{"debug_event":{"type":"DBG_CT_VERDICT",'
        '"source":{"ID":690,"identity":1332,"namespace":"cilium-test",'
        '"labels":["k8s:name=pod-to-a-denied-cnp"],'
        '"pod_name":"pod-to-a-denied-cnp-75cb89dfd-vqhd9"},'
        '"hash":180354257,"arg1":0,"arg2":0,"arg3":0,'
        '"message":"CT verdict: New, revnat=0","cpu":1},'
        '"node_name":"k8s1","time":"1970-01-01T00:20:34.567800Z"}'
    )


def test_agent_event_uses_oneof_key_and_int64_strings():
    event = fl.AgentEvent(
        type=fl.AgentEventType.POLICY_UPDATED,
        notification=fl.PolicyUpdateNotification(revision=42, rule_count=1),
    )
    out = fl.to_json(event)
    assert out["type"] == "POLICY_UPDATED"
    assert out["policy_update"]["revision"] == "42"


def test_timestamp_validity():
    assert not fl.Timestamp(-1, -1).is_valid()
    with pytest.raises(ValueError):
        fl.Timestamp(-1, -1).to_datetime()
    assert fl.Timestamp(0, 0).to_datetime() == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert fl.Timestamp(0, 0).to_json() == "1970-01-01T00:00:00Z"


def test_to_json_rejects_non_message():
    with pytest.raises(TypeError):
        fl.to_json({"a": 1})