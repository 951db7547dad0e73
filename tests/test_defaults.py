import os
import sys

from hubblecli import defaults


def test_socket_path_default(monkeypatch):
    monkeypatch.delenv("HUBBLE_DEFAULT_SOCKET_PATH", raising=False)
    assert defaults.get_socket_path() == "unix:///var/run/cilium/hubble.sock"


def test_socket_path_override(monkeypatch):
    monkeypatch.setenv("HUBBLE_DEFAULT_SOCKET_PATH", "unix:///tmp/x.sock")
    assert defaults.get_socket_path() == "unix:///tmp/x.sock"


def test_config_dirs_linux(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    assert defaults.config_dir() == os.path.join(str(tmp_path / "cfg"), "hubble")
    assert defaults.config_dir_fallback() == os.path.join(str(tmp_path), ".hubble")
    assert defaults.config_file() == os.path.join(defaults.config_dir(), "config.yaml")


def test_config_file_falls_back(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert defaults.config_dir() is None
    assert defaults.config_file() is None