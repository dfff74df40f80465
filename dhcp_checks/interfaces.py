"""
Network interface checks.

This module confirms that each interface under examination exists at the
link layer, reports its operational state and lists its IPv4 addresses.
"""

import re
from typing import List, Optional

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Network Interfaces"
ORDER = 10

_STATE_RE = re.compile(r'\bstate\s+(\S+)')


def parse_link_names(output: str) -> List[str]:
    """Interface names from `ip -o link show`, loopback excluded.

    Expected format, one link per line:
        2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 ... state UP ...
        5: veth1@if4: <...>
    """
    names = []
    for line in output.splitlines():
        parts = line.split(': ')
        if len(parts) < 2:
            continue
        name = parts[1].strip().split('@')[0]
        if name and name != 'lo' and name not in names:
            names.append(name)
    return names


def parse_link_state(output: str) -> Optional[str]:
    """Operational state token following `state` in `ip link show` output"""
    match = _STATE_RE.search(output)
    return match.group(1) if match else None


def parse_ipv4_addresses(output: str) -> List[str]:
    """CIDR addresses from the `inet` lines of `ip addr show` output"""
    addresses = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == 'inet':
            addresses.append(parts[1])
    return addresses


def analyze(context) -> List[DiagnosticResult]:
    """Report existence, state and IPv4 addressing for each interface"""
    findings = Findings(SECTION)

    if context.target_interface:
        findings.info(f"Checking interface: {context.target_interface}")
    else:
        findings.info("Detecting all network interfaces...")

    if not context.interfaces:
        findings.warning("No network interfaces found")
        return findings

    for iface in context.interfaces:
        findings.info(f"Interface: {iface}")

        link_output = context.link_info(iface)
        if link_output is None:
            findings.error(f"Interface {iface} does not exist")
            continue

        state = parse_link_state(link_output) or 'UNKNOWN'
        if state == 'UP':
            findings.success(f"Interface {iface} is UP")
        else:
            findings.warning(f"Interface {iface} is {state}",
                             recommendation=f"Bring it up with: sudo ip link set {iface} up")

        code, stdout, _ = context.run_command(['ip', 'addr', 'show', iface])
        addresses = parse_ipv4_addresses(stdout) if code == 0 else []
        if addresses:
            findings.success(f"IP Address: {', '.join(addresses)}")
        else:
            findings.warning(f"No IP address assigned to {iface}",
                             recommendation=f"Request a lease with: sudo dhclient -v {iface}")

    return findings
