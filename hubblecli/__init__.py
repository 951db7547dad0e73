"""Formatting of network flows and events, server status reports and peer changes."""

__version__ = "0.8.0"