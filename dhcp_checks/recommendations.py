"""
Troubleshooting recommendations.

A fixed checklist of common DHCP remedies, printed on every run regardless
of what the other checks found.
"""

from typing import List

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Troubleshooting Recommendations"
ORDER = 90
ALWAYS_RUN = True

COMPLETE_SECTION = "Script Complete"

REMEDIES = (
    ("Restart NetworkManager:", (
        "sudo systemctl restart NetworkManager",
    )),
    ("Release and renew DHCP lease:", (
        "sudo nmcli connection down <connection-name>",
        "sudo nmcli connection up <connection-name>",
        "Or: sudo dhclient -r <interface> && sudo dhclient <interface>",
    )),
    ("Check physical connection:", (
        "sudo ethtool <interface> | grep 'Link detected'",
    )),
    ("Verify DHCP server is reachable:", (
        "sudo nmap -sU -p 67 <dhcp-server-ip>",
    )),
    ("Check for NetworkManager conflicts:", (
        "sudo systemctl stop NetworkManager",
        "sudo dhclient -v <interface>",
    )),
    ("Review full system logs:", (
        "sudo journalctl -u NetworkManager -f",
        "sudo journalctl -xe",
    )),
    ("Test DHCP discovery manually:", (
        "sudo dhclient -v -d <interface>",
    )),
)

FINAL_CHECKLIST = (
    "Interface is physically connected",
    "DHCP server is operational",
    "Network configuration is set to use DHCP",
    "Firewall allows DHCP traffic (UDP ports 67-68)",
    "No conflicting network management tools are running",
)


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)
    findings.info("Common solutions to try:")
    for number, (title, commands) in enumerate(REMEDIES, 1):
        findings.info(f"{number}. {title}", technical_details='\n'.join(commands))

    closing = Findings(COMPLETE_SECTION)
    closing.info("If issues persist, review the output above for errors and warnings.")
    closing.info("Check that:",
                 technical_details='\n'.join(f"- {item}" for item in FINAL_CHECKLIST))

    return findings + closing
