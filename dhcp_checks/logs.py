"""
System log checks.

Best-effort keyword scans of the systemd journal and /var/log/messages.
"""

import re
from pathlib import Path
from typing import List

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Recent DHCP-Related Log Entries"
ORDER = 70

_JOURNAL_RE = re.compile(r'dhcp|NetworkManager', re.IGNORECASE)
_MESSAGES_RE = re.compile(r'dhcp', re.IGNORECASE)


def grep_lines(text: str, pattern) -> List[str]:
    return [line for line in text.splitlines() if pattern.search(line)]


def _scan_journal(context, findings: Findings):
    lines = context.settings.journal_lines
    code, stdout, _ = context.run_command(['journalctl', '-n', str(lines), '--no-pager'])
    matches = grep_lines(stdout, _JOURNAL_RE) if code == 0 else []
    if matches:
        findings.info(f"Journal entries mentioning DHCP (last {lines} entries):",
                      technical_details='\n'.join(matches))
    else:
        findings.warning("No recent DHCP log entries found")


def _scan_messages(context, findings: Findings):
    messages = Path(context.settings.messages_log)
    if not messages.is_file():
        findings.warning(f"{messages} not found")
        return

    try:
        content = messages.read_text(errors='replace')
    except IOError as e:
        findings.warning(f"Could not read {messages}: {e}")
        return

    matches = grep_lines(content, _MESSAGES_RE)
    if matches:
        tail = context.settings.messages_tail_lines
        findings.info(f"{messages} entries mentioning DHCP (last {tail}):",
                      technical_details='\n'.join(matches[-tail:]))
    else:
        findings.warning(f"No DHCP entries in {messages}")


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)
    _scan_journal(context, findings)
    _scan_messages(context, findings)
    return findings
