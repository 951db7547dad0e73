"""Output modes and settings for the printer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO

from hubblecli.timeutil import STAMP_MILLI


class Output(Enum):
    """How records are printed."""

    TAB = 0
    JSON = 1
    COMPACT = 2
    DICT = 3
    JSONPB = 4


@dataclass
class Options:
    """Printer settings.

    ``writer`` and ``err_writer`` default to standard output and standard
    error. ``color`` is "auto", "always" or "never"; it only applies to the
    dict and compact modes.
    """

    output: Output = Output.TAB
    writer: Optional[TextIO] = None
    err_writer: Optional[TextIO] = None
    ignore_stderr: bool = False
    enable_debug: bool = False
    enable_ip_translation: bool = False
    node_name: bool = False
    time_format: str = STAMP_MILLI
    color: str = ""