import io
import json

import pytest

from hubblecli import defaults
from hubblecli.cli import build_parser, main
from hubblecli.version import GIT_BRANCH, GIT_HASH, VERSION, version_line


def write_json(tmp_path, data):
    path = tmp_path / "input.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_server_flag_before_and_after_command():
    parser = build_parser()
    assert parser.parse_args(["--server", "foo", "status"]).server == "foo"
    assert parser.parse_args(["status", "--server", "bar"]).server == "bar"


def test_server_default():
    assert build_parser().parse_args(["status"]).server == defaults.SERVER_ADDRESS


def test_timeout_parsed_as_duration():
    assert build_parser().parse_args(["--timeout", "5s", "status"]).timeout == 5.0


def test_invalid_timeout_rejected():
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(["--timeout", "soon", "status"])
    assert info.value.code == 2


def test_version_command(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out == version_line("hubble", VERSION, GIT_BRANCH, GIT_HASH) + "\n"


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: hubble" in capsys.readouterr().out


def test_status_healthy(tmp_path, capsys):
    path = write_json(tmp_path, {
        "health": "SERVING",
        "server_status": {"num_flows": "5", "max_flows": "0", "seen_flows": "0",
                          "uptime_ns": "0"},
    })
    assert main(["status", "--input", path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        f"Healthcheck (via {defaults.SERVER_ADDRESS}): Ok",
        "Current/Max Flows: 5/0",
        "Flows/s: N/A",
    ]


def test_status_uses_server_flag(tmp_path, capsys):
    path = write_json(tmp_path, {"health": "SERVING", "server_status": {}})
    assert main(["status", "--server", "relay:4245", "--input", path]) == 0
    assert capsys.readouterr().out.startswith("Healthcheck (via relay:4245): Ok\n")


def test_status_unhealthy(tmp_path, capsys):
    path = write_json(tmp_path, {"health": "NOT_SERVING"})
    assert main(["status", "--input", path]) == 1
    captured = capsys.readouterr()
    assert "Unavailable: NOT_SERVING" in captured.out
    assert captured.err.strip() == "not healthy"


def test_status_missing_health(tmp_path, capsys):
    path = write_json(tmp_path, {"server_status": {}})
    assert main(["status", "--input", path]) == 1
    assert "failed getting status" in capsys.readouterr().err


def test_status_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(
        {"health": "SERVING", "server_status": {"num_connected_nodes": 3}})))
    assert main(["status"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "Connected Nodes: 3"


def test_watch_peers(tmp_path, capsys):
    path = tmp_path / "peers.jsonl"
    path.write_text(
        json.dumps({"name": "foo.bar", "address": "1.2.3.4", "type": "PEER_ADDED",
                    "tls": {"server_name": "tls.foo.bar"}}) + "\n\n"
        + json.dumps({"name": "foo.bar", "address": "1.2.3.4", "type": "PEER_ADDED"}) + "\n",
        encoding="utf-8",
    )
    assert main(["watch", "peers", "--input", str(path)]) == 0
    assert capsys.readouterr().out == (
        "PEER_ADDED   1.2.3.4 foo.bar (TLS.ServerName: tls.foo.bar)\n"
        "PEER_ADDED   1.2.3.4 foo.bar\n"
    )


def test_watch_aliases(tmp_path, capsys):
    path = tmp_path / "peers.jsonl"
    path.write_text(json.dumps({"name": "foo.bar", "address": "1.2.3.4", "type": 1}) + "\n",
                    encoding="utf-8")
    assert main(["w", "peer", "--input", str(path)]) == 0
    assert capsys.readouterr().out == "PEER_ADDED   1.2.3.4 foo.bar\n"


def test_watch_peers_bad_input(tmp_path, capsys):
    path = tmp_path / "peers.jsonl"
    path.write_text("not json\n", encoding="utf-8")
    assert main(["watch", "peers", "--input", str(path)]) == 1
    assert capsys.readouterr().err != ""


def test_missing_input_file(tmp_path, capsys):
    assert main(["status", "--input", str(tmp_path / "absent.json")]) == 1
    assert "absent.json" in capsys.readouterr().err