import io

import pytest

from hubblecli.peer import (
    ChangeNotification,
    ChangeNotificationType,
    TLSInfo,
    format_change,
    process_response,
    watch_peers,
)

WITH_TLS = ChangeNotification(
    name="foo.bar",
    address="1.2.3.4",
    type=ChangeNotificationType.PEER_ADDED,
    tls=TLSInfo(server_name="tls.foo.bar"),
)
WITHOUT_TLS = ChangeNotification(
    name="foo.bar",
    address="1.2.3.4",
    type=ChangeNotificationType.PEER_ADDED,
)


def _stream_then_raise(error):
    yield WITHOUT_TLS
    raise error


@pytest.mark.parametrize(
    "notification, expected",
    [
        (WITH_TLS, "PEER_ADDED   1.2.3.4 foo.bar (TLS.ServerName: tls.foo.bar)\n"),
        (WITHOUT_TLS, "PEER_ADDED   1.2.3.4 foo.bar\n"),
        (None, "UNKNOWN       \n"),
    ],
    ids=["happy path with tls", "happy path with no tls", "unknown change notification"],
)
def test_process_response(notification, expected):
    buf = io.StringIO()
    process_response(buf, notification)
    assert buf.getvalue() == expected


def test_format_change_matches_process_response():
    buf = io.StringIO()
    process_response(buf, WITH_TLS)
    assert format_change(WITH_TLS) == buf.getvalue()


def test_watch_peers_writes_all_in_order():
    buf = io.StringIO()
    watch_peers([WITH_TLS, WITHOUT_TLS], buf)
    assert buf.getvalue() == format_change(WITH_TLS) + format_change(WITHOUT_TLS)


def test_watch_peers_stops_on_interrupt():
    buf = io.StringIO()
    watch_peers(_stream_then_raise(KeyboardInterrupt()), buf)
    assert buf.getvalue() == "PEER_ADDED   1.2.3.4 foo.bar\n"


def test_watch_peers_propagates_other_errors():
    with pytest.raises(ConnectionError):
        watch_peers(_stream_then_raise(ConnectionError("broken")), io.StringIO())