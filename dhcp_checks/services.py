"""
DHCP client service checks.

Reports whether NetworkManager is running (with its connection list and,
for a target interface, its device status) and whether any legacy dhclient
processes are present.
"""

from typing import List

from dhcp_checks import DiagnosticResult, Findings

SECTION = "DHCP Client Services"
ORDER = 20


def find_processes(ps_output: str, name: str) -> List[str]:
    """Lines of `ps aux` output whose command mentions name"""
    return [line for line in ps_output.splitlines() if name in line]


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)

    if context.is_service_active('NetworkManager'):
        findings.success("NetworkManager is active")

        code, stdout, stderr = context.run_command(['nmcli', 'connection', 'show'])
        findings.info("NetworkManager connections:",
                      technical_details=(stdout if code == 0 else stderr).rstrip())

        iface = context.target_interface
        if iface:
            code, stdout, _ = context.run_command(['nmcli', 'device', 'show', iface])
            if code == 0:
                findings.info(f"NetworkManager device status for {iface}:",
                              technical_details=stdout.rstrip())
            else:
                findings.warning(f"Could not get device status for {iface}")
    else:
        findings.warning("NetworkManager is not active",
                         recommendation="Start it with: sudo systemctl start NetworkManager")

    code, stdout, _ = context.run_command(['ps', 'aux'])
    processes = find_processes(stdout, 'dhclient') if code == 0 else []
    if processes:
        findings.success("dhclient processes found:",
                         technical_details='\n'.join(processes))
    else:
        findings.warning("No dhclient processes running")

    return findings
