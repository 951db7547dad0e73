"""Watching peer change notifications."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, TextIO


class ChangeNotificationType(IntEnum):
    UNKNOWN = 0
    PEER_ADDED = 1
    PEER_DELETED = 2
    PEER_UPDATED = 3


@dataclass
class TLSInfo:
    server_name: str = ""


@dataclass
class ChangeNotification:
    name: str = ""
    address: str = ""
    type: ChangeNotificationType = ChangeNotificationType.UNKNOWN
    tls: Optional[TLSInfo] = None


def format_change(notification: Optional[ChangeNotification]) -> str:
    """Return the printed line for a peer change notification."""
    if notification is None:
        notification = ChangeNotification()
    tls = ""
    if notification.tls is not None:
        tls = f" (TLS.ServerName: {notification.tls.server_name})"
    return (f"{notification.type.name:<12} {notification.address} "
            f"{notification.name}{tls}\n")


def process_response(out: TextIO, notification: Optional[ChangeNotification]) -> None:
    """Write one change notification to ``out``."""
    out.write(format_change(notification))


def watch_peers(notifications: Iterable[Optional[ChangeNotification]], out: TextIO) -> None:
    """Print every notification until the stream ends or is interrupted."""
    try:
        for notification in notifications:
            process_response(out, notification)
    except KeyboardInterrupt:
        return