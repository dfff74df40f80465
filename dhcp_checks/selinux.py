"""
SELinux checks.

Reports the current SELinux mode and, when enforcing, searches the audit
log for recent DHCP-related AVC denials.
"""

from typing import List

from dhcp_checks import DiagnosticResult, Findings

SECTION = "SELinux Status"
ORDER = 60


def filter_dhcp_denials(ausearch_output: str) -> List[str]:
    return [line for line in ausearch_output.splitlines() if 'dhcp' in line.lower()]


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)

    if not context.which('getenforce'):
        findings.warning("SELinux tools not found")
        return findings

    _, stdout, _ = context.run_command(['getenforce'])
    mode = stdout.strip()
    findings.info(f"SELinux status: {mode}")

    if mode == 'Enforcing':
        findings.warning("SELinux is in enforcing mode - check for denials")

        if context.which('ausearch'):
            window = context.settings.audit_window
            # ausearch exits non-zero when nothing matches
            _, stdout, _ = context.run_command(['ausearch', '-m', 'avc', '-ts', window])
            denials = filter_dhcp_denials(stdout)
            if denials:
                findings.info(f"Recent SELinux denials ({window}):",
                              technical_details='\n'.join(denials))
            else:
                findings.info("No DHCP-related denials found")
    elif mode == 'Permissive':
        findings.warning("SELinux is in permissive mode")
    else:
        findings.success("SELinux is disabled")

    return findings
