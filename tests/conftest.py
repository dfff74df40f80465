"""Shared fixtures: a scripted command runner and a context factory."""

import logging

import pytest

from dhcp_checks import CheckSettings, SystemContext


class FakeDebugger:
    """Answers _run_command from a table of canned (code, stdout, stderr) tuples."""

    def __init__(self, responses=None):
        self.responses = {tuple(cmd): result for cmd, result in (responses or {}).items()}
        self.calls = []

    def _run_command(self, cmd, timeout=30, check=False):
        cmd = tuple(cmd.split() if isinstance(cmd, str) else cmd)
        self.calls.append(cmd)
        return self.responses.get(cmd, (-1, "", f"{cmd[0]}: command not found"))

    def ran(self, *prefix):
        return [call for call in self.calls if call[:len(prefix)] == prefix]


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every file-system location into tmp_path."""
    return CheckSettings(
        lease_dirs=[str(tmp_path / "dhclient"), str(tmp_path / "NetworkManager")],
        nm_connections_dir=str(tmp_path / "system-connections"),
        network_scripts_dir=str(tmp_path / "network-scripts"),
        messages_log=str(tmp_path / "messages"),
    )


@pytest.fixture
def tools(monkeypatch: pytest.MonkeyPatch):
    """Set which executables shutil.which reports as installed."""
    installed = set()

    def fake_which(tool):
        return f"/usr/bin/{tool}" if tool in installed else None

    monkeypatch.setattr("shutil.which", fake_which)

    def install(*names):
        installed.update(names)

    return install


@pytest.fixture
def make_context(settings, tools):
    def factory(responses=None, target=None, interfaces=None):
        if interfaces is None:
            interfaces = (target,) if target else ()
        debugger = FakeDebugger(responses)
        context = SystemContext(
            target_interface=target,
            interfaces=tuple(interfaces),
            logger=logging.getLogger("dhcp_debug.tests"),
            settings=settings,
            _debugger=debugger,
        )
        return context, debugger

    return factory


def messages(findings, severity=None):
    return [f.message for f in findings if severity is None or f.severity == severity]
