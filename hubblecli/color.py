"""Terminal colouring for printed flow fields."""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

_RESET = "\x1b[0m"


def _colors_unwanted() -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return True
    isatty = getattr(sys.stdout, "isatty", None)
    return not (isatty and isatty())


class _Color:
    """A single foreground colour that can be switched on and off."""

    def __init__(self, code: int) -> None:
        self.code = code
        self.enabled: Optional[bool] = None

    def sprint(self, value: Any) -> str:
        enabled = self.enabled if self.enabled is not None else not _colors_unwanted()
        text = str(value)
        if not enabled:
            return text
        return f"\x1b[{self.code}m{text}{_RESET}"


class Colorer:
    """Colours host names, ports and verdicts according to a colour mode.

    The mode is "always", "never" or "auto"; any other value leaves the
    decision to the terminal at the time of printing.
    """

    def __init__(self, when: str = "") -> None:
        self._red = _Color(31)
        self._green = _Color(32)
        self._yellow = _Color(33)
        self._blue = _Color(34)
        self._magenta = _Color(35)
        self._cyan = _Color(36)
        self._colors = (self._red, self._green, self._blue,
                        self._cyan, self._magenta, self._yellow)
        mode = when.lower()
        if mode == "always":
            self.enable()
        elif mode == "never":
            self.disable()
        elif mode == "auto":
            self.auto()

    def _set(self, enabled: bool) -> None:
        for color in self._colors:
            color.enabled = enabled

    def enable(self) -> None:
        self._set(True)

    def disable(self) -> None:
        self._set(False)

    def auto(self) -> None:
        self._set(not _colors_unwanted())

    def port(self, value: Any) -> str:
        return self._yellow.sprint(value)

    def host(self, value: Any) -> str:
        return self._cyan.sprint(value)

    def verdict_forwarded(self, value: Any) -> str:
        return self._green.sprint(value)

    def verdict_dropped(self, value: Any) -> str:
        return self._red.sprint(value)

    def verdict_audit(self, value: Any) -> str:
        return self._yellow.sprint(value)