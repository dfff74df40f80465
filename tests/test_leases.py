"""Tests for lease file discovery."""

from pathlib import Path

from conftest import messages

from dhcp_checks import Severity
from dhcp_checks import leases

LEASE = """\
lease {
  interface "eth0";
  fixed-address 192.168.1.50;
  option subnet-mask 255.255.255.0;
  option routers 192.168.1.1;
  option dhcp-lease-time 86400;
  option dhcp-server-identifier 192.168.1.1;
  renew 3 2026/10/21 02:11:45;
  rebind 3 2026/10/21 13:02:13;
  expire 3 2026/10/21 16:02:13;
}
"""


def file_entries(findings):
    return [f for f in findings if f.message.startswith("File: ")]


def test_no_lease_directories(make_context):
    context, _ = make_context()

    findings = leases.analyze(context)

    assert messages(findings, Severity.WARNING) == ["No DHCP lease files found"]
    assert file_entries(findings) == []


def test_empty_lease_directories(make_context, settings):
    for directory in settings.lease_dirs:
        Path(directory).mkdir()
    context, _ = make_context()

    findings = leases.analyze(context)

    assert messages(findings, Severity.WARNING) == ["No DHCP lease files found"]
    assert file_entries(findings) == []


def test_lease_files_from_both_directories(make_context, settings):
    dhclient_dir, nm_dir = (Path(d) for d in settings.lease_dirs)
    dhclient_dir.mkdir()
    (nm_dir / "internal").mkdir(parents=True)
    (dhclient_dir / "dhclient--eth0.lease").write_text(LEASE)
    (dhclient_dir / "dhclient.leases").write_text(LEASE * 3)
    (nm_dir / "internal" / "internal-0b1d8a5e-eth0.lease").write_text("ADDRESS=192.168.1.50\n")
    (nm_dir / "NetworkManager.state").write_text("[main]\n")
    context, _ = make_context()

    findings = leases.analyze(context)

    entries = file_entries(findings)
    assert len(entries) == 3
    assert messages(findings, Severity.WARNING) == []
    assert all(len(e.technical_details.splitlines()) <= 20 for e in entries)
    assert entries[0].message == f"File: {dhclient_dir / 'dhclient--eth0.lease'}"


def test_tail_is_last_lines(tmp_path):
    lease = tmp_path / "dhclient.leases"
    lease.write_text("\n".join(f"line {n}" for n in range(1, 31)) + "\n")

    tail = leases.tail_file(lease, 20).splitlines()

    assert len(tail) == 20
    assert tail[0] == "line 11"
    assert tail[-1] == "line 30"


def test_tail_of_missing_file(tmp_path):
    assert leases.tail_file(tmp_path / "gone.lease", 20) is None


def test_lease_directory_named_like_a_lease_is_ignored(make_context, settings):
    dhclient_dir = Path(settings.lease_dirs[0])
    (dhclient_dir / "old.leases.d").mkdir(parents=True)
    context, _ = make_context()

    assert messages(leases.analyze(context), Severity.WARNING) == ["No DHCP lease files found"]


def test_dangling_lease_symlink_is_skipped(make_context, settings):
    dhclient_dir = Path(settings.lease_dirs[0])
    dhclient_dir.mkdir()
    (dhclient_dir / "a.lease").write_text(LEASE)
    (dhclient_dir / "b.lease").mkdir()
    (dhclient_dir / "c.lease").symlink_to(dhclient_dir / "removed.lease")
    context, _ = make_context()

    findings = leases.analyze(context)

    assert messages(findings) == ["Found DHCP lease files:", f"File: {dhclient_dir / 'a.lease'}"]
    assert messages(findings, Severity.WARNING) == []


def test_unreadable_lease_file_is_listed_without_content(make_context, settings, monkeypatch):
    dhclient_dir = Path(settings.lease_dirs[0])
    dhclient_dir.mkdir()
    (dhclient_dir / "dhclient--eth0.lease").write_text(LEASE)

    def denied(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(leases, "open", denied, raising=False)
    context, _ = make_context()

    findings = leases.analyze(context)

    entries = file_entries(findings)
    assert [e.message for e in entries] == [f"File: {dhclient_dir / 'dhclient--eth0.lease'}"]
    assert entries[0].technical_details is None
    assert messages(findings, Severity.WARNING) == []
