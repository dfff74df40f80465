"""
Firewall checks.

With firewalld running, every active zone is checked for a DHCP service.
Otherwise the raw packet-filter ruleset is searched for DHCP-related rules.
"""

import re
from typing import List

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Firewall Configuration"
ORDER = 50

# Service names or the bootps/bootpc ports 67 and 68
_DHCP_RULE_RE = re.compile(r'dhcp|bootp|\b6[78]\b', re.IGNORECASE)


def parse_active_zones(output: str) -> List[str]:
    """Zone names from `firewall-cmd --get-active-zones`.

    Zones are the non-indented lines; indented lines list their members:
        public
          interfaces: eth0
    """
    zones = []
    for line in output.splitlines():
        if line.strip() and not line[0].isspace():
            zones.append(line.split()[0])
    return zones


def has_dhcp_service(services_output: str) -> bool:
    return any('dhcp' in service for service in services_output.split())


def filter_dhcp_rules(ruleset: str) -> List[str]:
    return [line for line in ruleset.splitlines() if _DHCP_RULE_RE.search(line)]


def _check_firewalld(context, findings: Findings):
    findings.success("firewalld is active")

    code, stdout, stderr = context.run_command(['firewall-cmd', '--get-active-zones'])
    findings.info("Firewall zones:", technical_details=(stdout if code == 0 else stderr).rstrip())

    zones = parse_active_zones(stdout) if code == 0 else []
    for zone in zones:
        code, services, _ = context.run_command(['firewall-cmd', f'--zone={zone}', '--list-services'])
        if code == 0 and has_dhcp_service(services):
            findings.success(f"DHCP allowed in zone: {zone}")
        else:
            findings.warning(
                f"DHCP not explicitly allowed in zone: {zone}",
                recommendation=f"Allow it with: sudo firewall-cmd --zone={zone} --add-service=dhcp --permanent"
            )


def _check_packet_filter(context, findings: Findings):
    if context.which('iptables'):
        label, cmd = "iptables rules:", ['iptables', '-L', '-n']
    elif context.which('nft'):
        label, cmd = "nftables rules:", ['nft', 'list', 'ruleset']
    else:
        context.logger.debug("Neither iptables nor nft available, skipping packet filter scan")
        return

    code, stdout, _ = context.run_command(cmd)
    matches = filter_dhcp_rules(stdout) if code == 0 else []
    if matches:
        findings.info(label, technical_details='\n'.join(matches))
    else:
        findings.info("No specific DHCP rules found")


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)

    firewalld_active = False
    if context.which('firewall-cmd'):
        firewalld_active = context.is_service_active('firewalld')
        if firewalld_active:
            _check_firewalld(context, findings)
        else:
            findings.warning("firewalld is not active")
    else:
        findings.warning("firewalld not installed")

    if not firewalld_active:
        _check_packet_filter(context, findings)

    return findings
