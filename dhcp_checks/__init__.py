"""
DHCP diagnostic checks package.

This package contains the modular checks run by dhcp_debug. Each check module
exports SECTION (the report heading), ORDER (its position in the pipeline) and
an analyze() function that takes a SystemContext and returns a list of
DiagnosticResult objects. The shared types live here so that check modules and
the runner agree on a single Severity enum.
"""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

__version__ = "1.0.0"


class Severity(Enum):
    """Severity levels for diagnostic findings"""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    SUCCESS = "SUCCESS"


@dataclass
class DiagnosticResult:
    """Diagnostic finding"""
    category: str
    severity: Severity
    message: str
    recommendation: Optional[str] = None
    technical_details: Optional[str] = None


@dataclass
class CheckSettings:
    """Locations and probe parameters used by the checks"""
    lease_dirs: List[str] = field(default_factory=lambda: [
        '/var/lib/dhclient',
        '/var/lib/NetworkManager',
    ])
    lease_pattern: str = '*.lease*'
    lease_tail_lines: int = 20
    nm_connections_dir: str = '/etc/NetworkManager/system-connections'
    network_scripts_dir: str = '/etc/sysconfig/network-scripts'
    messages_log: str = '/var/log/messages'
    messages_tail_lines: int = 20
    journal_lines: int = 50
    ping_count: int = 2
    ping_timeout: int = 2
    audit_window: str = 'recent'


class Findings(list):
    """List of DiagnosticResult bound to one report section"""

    def __init__(self, category: str):
        super().__init__()
        self.category = category

    def add(self, severity: Severity, message: str,
            recommendation: Optional[str] = None,
            technical_details: Optional[str] = None):
        self.append(DiagnosticResult(
            category=self.category,
            severity=severity,
            message=message,
            recommendation=recommendation,
            technical_details=technical_details
        ))

    def success(self, message: str, **kwargs):
        self.add(Severity.SUCCESS, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.add(Severity.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self.add(Severity.ERROR, message, **kwargs)

    def info(self, message: str, **kwargs):
        self.add(Severity.INFO, message, **kwargs)


@dataclass
class SystemContext:
    """Shared, read-only input for checks with caching of link lookups"""
    target_interface: Optional[str]
    interfaces: Tuple[str, ...]
    logger: logging.Logger
    settings: CheckSettings = field(default_factory=CheckSettings)

    # Object providing _run_command(cmd, timeout, check)
    _debugger: Optional[Any] = None

    _cached_links: Dict[str, Optional[str]] = field(default_factory=dict)
    _cached_services: Dict[str, bool] = field(default_factory=dict)

    def run_command(self, cmd: Union[str, List[str]], timeout: int = 30, check: bool = False) -> Tuple[int, str, str]:
        """Run command through debugger instance"""
        if self._debugger:
            return self._debugger._run_command(cmd, timeout, check)
        return -1, "", "No debugger instance available"

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def link_info(self, interface: str) -> Optional[str]:
        """Return `ip link show` output for interface, or None if it does not exist"""
        if interface not in self._cached_links:
            code, stdout, _ = self.run_command(['ip', 'link', 'show', interface])
            self._cached_links[interface] = stdout if code == 0 else None
        return self._cached_links[interface]

    def interface_exists(self, interface: str) -> bool:
        return self.link_info(interface) is not None

    def is_service_active(self, service: str) -> bool:
        """Check a systemd unit with caching"""
        if service not in self._cached_services:
            code, _, _ = self.run_command(['systemctl', 'is-active', '--quiet', service])
            self._cached_services[service] = code == 0
        return self._cached_services[service]
