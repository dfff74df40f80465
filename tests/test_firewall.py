"""Tests for the firewalld / packet-filter check."""

from conftest import messages

from dhcp_checks import Severity
from dhcp_checks import firewall

FIREWALLD_ACTIVE = ("systemctl", "is-active", "--quiet", "firewalld")

ACTIVE_ZONES = """\
public
  interfaces: eth0
trusted
  sources: 10.0.0.0/8
"""

IPTABLES = """\
Chain INPUT (policy ACCEPT)
target     prot opt source               destination
ACCEPT     udp  --  0.0.0.0/0            0.0.0.0/0            udp dpt:67
ACCEPT     tcp  --  0.0.0.0/0            0.0.0.0/0            tcp dpt:22

Chain FORWARD (policy ACCEPT)
target     prot opt source               destination
"""


def test_parse_active_zones():
    assert firewall.parse_active_zones(ACTIVE_ZONES) == ["public", "trusted"]
    assert firewall.parse_active_zones("") == []


def test_has_dhcp_service():
    assert firewall.has_dhcp_service("cockpit dhcpv6-client ssh\n")
    assert firewall.has_dhcp_service("dhcp ssh")
    assert not firewall.has_dhcp_service("ssh http https")


def test_filter_dhcp_rules():
    assert firewall.filter_dhcp_rules(IPTABLES) == [IPTABLES.splitlines()[2]]
    assert firewall.filter_dhcp_rules("udp dport { 67, 68 } accept\n") == ["udp dport { 67, 68 } accept"]
    assert firewall.filter_dhcp_rules("tcp dport 6789 accept\n") == []


def test_firewalld_zones(make_context, tools):
    tools("firewall-cmd", "iptables")
    context, debugger = make_context({
        FIREWALLD_ACTIVE: (0, "", ""),
        ("firewall-cmd", "--get-active-zones"): (0, ACTIVE_ZONES, ""),
        ("firewall-cmd", "--zone=public", "--list-services"): (0, "cockpit dhcpv6-client ssh\n", ""),
        ("firewall-cmd", "--zone=trusted", "--list-services"): (0, "ssh\n", ""),
    })

    findings = firewall.analyze(context)

    assert messages(findings, Severity.SUCCESS) == ["firewalld is active", "DHCP allowed in zone: public"]
    assert messages(findings, Severity.WARNING) == ["DHCP not explicitly allowed in zone: trusted"]
    assert findings[-1].recommendation == "Allow it with: sudo firewall-cmd --zone=trusted --add-service=dhcp --permanent"
    assert debugger.ran("iptables") == []


def test_firewalld_inactive_falls_back_to_iptables(make_context, tools):
    tools("firewall-cmd", "iptables")
    context, _ = make_context({
        FIREWALLD_ACTIVE: (3, "", ""),
        ("iptables", "-L", "-n"): (0, IPTABLES, ""),
    })

    findings = firewall.analyze(context)

    assert messages(findings, Severity.WARNING) == ["firewalld is not active"]
    rules = next(f for f in findings if f.message == "iptables rules:")
    assert "dpt:67" in rules.technical_details


def test_firewalld_not_installed(make_context, tools):
    tools("iptables")
    context, debugger = make_context({
        ("iptables", "-L", "-n"): (0, IPTABLES.replace("dpt:67", "dpt:80"), ""),
    })

    findings = firewall.analyze(context)

    assert messages(findings, Severity.WARNING) == ["firewalld not installed"]
    assert "No specific DHCP rules found" in messages(findings, Severity.INFO)
    assert messages(findings, Severity.ERROR) == []
    assert debugger.ran("systemctl") == []


def test_nft_used_when_iptables_missing(make_context, tools):
    tools("nft")
    context, _ = make_context({
        ("nft", "list", "ruleset"): (0, "table inet filter {\n  udp dport 67 accept\n}\n", ""),
    })

    findings = firewall.analyze(context)

    rules = next(f for f in findings if f.message == "nftables rules:")
    assert rules.technical_details == "  udp dport 67 accept"


def test_no_firewall_tools_at_all(make_context):
    context, _ = make_context()

    assert messages(firewall.analyze(context)) == ["firewalld not installed"]
