# hubblecli

A library and small command-line tool for presenting network traffic data
reported by a Hubble server. It formats flows, node status events, agent
events and debug events as aligned tables, compact one-liners, key/value
blocks or JSON. It also builds the server health/status report and prints
peer change notifications.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command line

```
hubblecli --help
hubblecli version
hubblecli status --input status.json
hubblecli watch peers --input peers.jsonl
```

Global options, accepted before or after a command:

- `-D`, `--debug`: enable debug log messages on standard error.
- `--server`: server address (default `localhost:4245`). `status` shows it
  in the `Healthcheck (via ...)` line.
- `--timeout`: a duration such as `5s` or `1m30s` (default 5 seconds). It
  is checked to be a valid duration.
- `--version`: print `hubble v<version>`.

Commands:

- `version` prints a detailed version line. The line includes git
  information when it is set, the Python version and the platform.
- `status` reads a JSON document from `--input` (a file, or `-` for
  standard input, which is the default) and prints the status report. The
  document has a `health` string (`"SERVING"` means healthy) and an optional
  `server_status` object. That object may hold `num_flows`, `max_flows`,
  `seen_flows`, `uptime_ns`, `num_connected_nodes`, `num_unavailable_nodes`
  and `unavailable_nodes`. The command exits with status 1 when the server
  is not healthy or the status is missing.
- `watch peers` (aliases `w`, `peer`) reads JSON lines from `--input`. Each
  line may have `name`, `address`, `type` and `tls` keys. `type` is a name
  such as `PEER_ADDED` or a number. `tls` is an object with a `server_name`
  key. Each line is printed as it is read.

### What the tool does not do

The tool does not connect to a server. It has no network client, so it
cannot stream flows or events. `status` and `watch peers` work only on JSON
that you supply. There is no command that observes live flows. To print
flows or events, use the `Printer` class on records you build yourself.

## Library use

`hubblecli.printer.Printer` writes flows and events to any text stream:

```python
import io

from hubblecli.flow import Flow, FlowsResponse, IP, Timestamp, Verdict
from hubblecli.options import Options, Output
from hubblecli.printer import Printer

out = io.StringIO()
with Printer(Options(output=Output.COMPACT, writer=out, color="never")) as printer:
    flow = Flow(
        time=Timestamp(seconds=1234, nanos=567800000),
        verdict=Verdict.FORWARDED,
        ip=IP(source="10.0.0.1", destination="10.0.0.2"),
        summary="TCP Flags: SYN",
    )
    printer.write_proto_flow(FlowsResponse(flow=flow))
print(out.getvalue())
```

The output mode is set by `Options.output`, one of `Output.TAB`,
`Output.JSON`, `Output.COMPACT`, `Output.DICT` and `Output.JSONPB`. Other
settings in `Options`:

- `node_name` adds the node column.
- `enable_ip_translation` shows pod, service or DNS names instead of IPs.
- `enable_debug` also prints informational node status events.
- `time_format` takes a layout such as those from
  `hubblecli.timeutil.format_name_to_layout`.
- `color` is `"auto"`, `"always"` or `"never"`. Tab output never uses
  colour.

Tab output is buffered until `Printer.close()`.

`Printer` also offers `write_proto_node_status_event`,
`write_proto_agent_event`, `write_proto_debug_event` and
`write_get_flows_response`. The records are the dataclasses in
`hubblecli.flow`. `hubblecli.flow.to_json` gives their proto3-style JSON
form.

Other useful pieces:

- `hubblecli.printer.get_flow_type` describes a flow's type, such as
  `http-request`, `to-host` or a drop reason (`hubblecli.monitor`).
- `hubblecli.printer.agent_event_details` summarises an agent event.
- `hubblecli.timeutil.from_string` takes a relative duration in the past,
  such as `5m`, or an RFC 3339 or RFC 1123Z timestamp, and returns a
  datetime. `hubblecli.timeutil.format_time` formats a datetime with a
  layout.
- `hubblecli.status.render_status` builds the server status report. It
  raises `StatusError` when the server is not healthy.
- `hubblecli.peer.watch_peers` prints peer change notifications from any
  iterable.

## Defaults

`hubblecli.defaults.get_socket_path` returns the local server socket,
`unix:///var/run/cilium/hubble.sock`. Set `HUBBLE_DEFAULT_SOCKET_PATH` to
use a different one.

`hubblecli.defaults.config_file` returns the configuration file path:
`hubble/config.yaml` in the user configuration directory, or
`~/.hubble/config.yaml` when that directory is not known. The tool does not
read this file.