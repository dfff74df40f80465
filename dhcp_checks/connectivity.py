"""
Network connectivity checks.

For each interface: default gateway lookup, gateway ping and the DNS
resolvers NetworkManager has configured.
"""

from typing import List, Optional

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Network Connectivity Tests"
ORDER = 80


def parse_default_gateway(route_output: str) -> Optional[str]:
    """Gateway of the default route in `ip route show dev <iface>` output.

    Expected line: "default via 192.168.1.1 proto dhcp metric 100"
    """
    for line in route_output.splitlines():
        parts = line.split()
        if parts and parts[0] == 'default' and 'via' in parts:
            index = parts.index('via')
            if index + 1 < len(parts):
                return parts[index + 1]
    return None


def parse_dns_servers(nmcli_output: str) -> List[str]:
    """Resolvers from `nmcli -g IP4.DNS device show`, one per line or ' | ' separated"""
    servers = []
    for line in nmcli_output.splitlines():
        for server in line.split('|'):
            server = server.strip()
            if server:
                servers.append(server)
    return servers


def ping_gateway(context, gateway: str) -> bool:
    count = context.settings.ping_count
    timeout = context.settings.ping_timeout
    code, _, _ = context.run_command(
        ['ping', '-c', str(count), '-W', str(timeout), gateway],
        timeout=count * timeout + 2
    )
    return code == 0


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)

    for iface in context.interfaces:
        if iface == 'lo':
            continue

        findings.info(f"Testing interface: {iface}")

        if not context.interface_exists(iface):
            findings.info(f"Skipping {iface}: interface not present")
            continue

        code, stdout, _ = context.run_command(['ip', 'route', 'show', 'dev', iface])
        gateway = parse_default_gateway(stdout) if code == 0 else None
        if gateway:
            findings.success(f"Default gateway: {gateway}")
            if ping_gateway(context, gateway):
                findings.success(f"Gateway {gateway} is reachable")
            else:
                findings.error(f"Cannot reach gateway {gateway}",
                               recommendation=f"Check the physical link with: sudo ethtool {iface} | grep 'Link detected'")
        else:
            findings.warning(f"No default gateway configured for {iface}")

        code, stdout, _ = context.run_command(['nmcli', '-g', 'IP4.DNS', 'device', 'show', iface])
        servers = parse_dns_servers(stdout) if code == 0 else []
        if servers:
            findings.success(f"DNS servers: {', '.join(servers)}")
        else:
            findings.warning(f"No DNS servers configured for {iface}")

    return findings
