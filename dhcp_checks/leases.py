"""
DHCP lease file discovery.

Searches the dhclient and NetworkManager lease directories and shows the
tail of every lease file found. Missing directories and unreadable files
are expected on many hosts and never escalate beyond a warning.
"""

from pathlib import Path
from typing import List, Optional

from dhcp_checks import DiagnosticResult, Findings

SECTION = "DHCP Lease Information"
ORDER = 30


def find_lease_files(directories: List[str], pattern: str) -> List[Path]:
    """Regular files matching pattern anywhere below the given directories"""
    lease_files = []
    for directory in directories:
        base = Path(directory)
        if not base.is_dir():
            continue
        for path in sorted(base.rglob(pattern)):
            if path.is_file():
                lease_files.append(path)
    return lease_files


def tail_file(path: Path, lines: int) -> Optional[str]:
    """Last lines of a text file, or None when it cannot be read"""
    try:
        with open(path, 'r', errors='replace') as f:
            content = f.read().splitlines()
    except (FileNotFoundError, IOError):
        return None
    return '\n'.join(content[-lines:])


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)
    settings = context.settings

    lease_files = find_lease_files(settings.lease_dirs, settings.lease_pattern)
    if not lease_files:
        findings.warning("No DHCP lease files found")
        return findings

    findings.info("Found DHCP lease files:")
    for lease in lease_files:
        content = tail_file(lease, settings.lease_tail_lines)
        if content is None:
            context.logger.debug(f"Lease file {lease} is not readable")
        findings.info(f"File: {lease}", technical_details=content)

    return findings
