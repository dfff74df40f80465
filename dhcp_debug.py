#!/usr/bin/env python3
"""
DHCP Debug Tool for Linux
=========================

A read-only CLI tool that inspects the DHCP-related networking state of a
Linux host and reports categorized findings with remediation suggestions.

Version: 1.0.0
License: MIT
Python: 3.7+

Features:
- Interface state and IPv4 address checks
- NetworkManager and dhclient service detection
- Lease file discovery for dhclient and NetworkManager
- ifcfg and NetworkManager profile inspection
- firewalld zone, iptables/nftables, and SELinux checks
- Journal and /var/log/messages scans
- Gateway reachability and DNS resolver checks
- Colored console report or JSON export
"""

import argparse
import dataclasses
import importlib
import json
import logging
import os
import pkgutil
import re
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import yaml

import dhcp_checks
from dhcp_checks import CheckSettings, DiagnosticResult, Severity, SystemContext
from dhcp_checks.interfaces import parse_link_names

# Tool version
VERSION = "1.0.0"

INTERFACE_NAME_RE = re.compile(r'[A-Za-z0-9._-]+')


# Color codes for terminal output
class Colors:
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


# Severity icons
class SeverityIcons:
    ERROR = "✗"
    WARNING = "⚠"
    SUCCESS = "✓"


class DhcpDebugError(Exception):
    """Base class for errors that abort the run"""


class InvalidArgumentError(DhcpDebugError):
    """Interface name argument failed validation"""


class PermissionDeniedError(DhcpDebugError):
    """Tool is not running with root privileges"""


class ConfigError(DhcpDebugError):
    """Configuration file could not be loaded"""


class ColorManager:
    """Manages color output based on terminal capabilities and user preferences"""

    def __init__(self):
        self.colors_enabled = self._should_use_colors()

    def _should_use_colors(self) -> bool:
        """Determine if colors should be used based on terminal and environment"""
        # Check NO_COLOR environment variable (per no-color.org)
        if os.environ.get('NO_COLOR'):
            return False

        if not sys.stdout.isatty():
            return False

        term = os.environ.get('TERM', '')
        if term in ['dumb', 'unknown']:
            return False

        return True

    def set_colors_enabled(self, enabled: bool):
        """Override color settings (for --no-color flag)"""
        self.colors_enabled = enabled

    def colorize(self, text: str, severity: Severity) -> str:
        """Apply color coding based on severity"""
        color_map = {
            Severity.ERROR: Colors.RED,
            Severity.WARNING: Colors.YELLOW,
            Severity.SUCCESS: Colors.GREEN
        }

        color = color_map.get(severity)
        if not self.colors_enabled or color is None:
            return text
        return f"{color}{text}{Colors.RESET}"

    def color(self, color_code: str, text: str) -> str:
        """Apply specific color if colors are enabled"""
        if not self.colors_enabled:
            return text
        return f"{color_code}{text}{Colors.RESET}"

    def format_finding(self, finding: DiagnosticResult) -> str:
        """Icon-prefixed, colored line for a finding"""
        icon_map = {
            Severity.ERROR: SeverityIcons.ERROR,
            Severity.WARNING: SeverityIcons.WARNING,
            Severity.SUCCESS: SeverityIcons.SUCCESS
        }

        icon = icon_map.get(finding.severity)
        text = f"{icon} {finding.message}" if icon else finding.message
        return self.colorize(text, finding.severity)


@dataclass
class DhcpDiagnostic:
    """Complete DHCP diagnostic data"""
    timestamp: str
    hostname: str
    target_interface: Optional[str]
    interfaces: List[str]
    findings: List[DiagnosticResult]

    def count(self, severity: Severity) -> int:
        return sum(1 for finding in self.findings if finding.severity == severity)


def validate_interface_name(name: Optional[str]):
    """Reject interface names that are unsafe to pass to system tools"""
    if name is None:
        return
    if not INTERFACE_NAME_RE.fullmatch(name):
        raise InvalidArgumentError(
            f"Invalid interface name '{name}'\n"
            "Interface names should only contain alphanumeric characters, "
            "hyphens, underscores, and dots"
        )


def require_root():
    """Several checks read root-only state; refuse to run without it"""
    geteuid = getattr(os, 'geteuid', None)
    if geteuid is None or geteuid() != 0:
        raise PermissionDeniedError(
            "This tool must be run as root\n"
            f"Please run with: sudo {os.path.basename(sys.argv[0])}"
        )


def _json_default(value):
    if isinstance(value, Enum):
        return value.value
    return str(value)


class DhcpDebugger:
    """Main DHCP debugging class"""

    def __init__(self, verbose: bool = False, no_color: bool = False,
                 skip_checks: Optional[List[str]] = None, config_file: Optional[str] = None):
        self.verbose = verbose
        self.logger = self._setup_logging()
        self.color_manager = ColorManager()
        self.settings = CheckSettings()

        # Override color settings if --no-color flag is used
        if no_color:
            self.color_manager.set_colors_enabled(False)

        self.check_registry = CheckRegistry(self.logger)
        self.check_registry.load_checks()

        if config_file:
            self.settings = self.check_registry.load_config(config_file, self.settings)

        if skip_checks:
            for check in skip_checks:
                self.check_registry.disable_check(check)

    def _setup_logging(self) -> logging.Logger:
        """Configure logging"""
        logger = logging.getLogger('dhcp_debug')
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def _run_command(self, cmd: Union[str, List[str]],
                     timeout: int = 30,
                     check: bool = False) -> Tuple[int, str, str]:
        """Execute system command with timeout and error handling"""
        try:
            if isinstance(cmd, str):
                cmd = cmd.split()

            self.logger.debug(f"Executing command: {' '.join(cmd)}")

            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=check
            )

            self.logger.debug(f"Command exit code: {result.returncode}")
            if result.stdout:
                self.logger.debug(f"Command stdout: {result.stdout[:500]}...")
            if result.stderr:
                self.logger.debug(f"Command stderr: {result.stderr[:500]}...")

            return result.returncode, result.stdout, result.stderr

        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out after {timeout}s: {' '.join(cmd)}")
            return -1, "", f"Command timed out after {timeout}s"
        except subprocess.CalledProcessError as e:
            self.logger.debug(f"Command failed: {' '.join(cmd)}, error: {e}")
            return e.returncode, e.stdout or "", e.stderr or ""
        except FileNotFoundError as e:
            # Every tool this program calls is optional on some distribution
            self.logger.debug(f"Tool not found: {cmd[0]}")
            return -1, "", str(e)
        except Exception as e:
            self.logger.error(f"Unexpected error running command: {e}")
            return -1, "", str(e)

    def discover_interfaces(self, target_interface: Optional[str] = None) -> Tuple[str, ...]:
        """Interfaces to examine: the target alone, or every non-loopback link"""
        if target_interface:
            return (target_interface,)

        code, stdout, _ = self._run_command(['ip', '-o', 'link', 'show'])
        if code != 0:
            self.logger.warning("Could not list network interfaces")
            return ()
        return tuple(parse_link_names(stdout))

    def diagnose(self, target_interface: Optional[str] = None) -> DhcpDiagnostic:
        """Run every enabled check in order and collect the findings"""
        interfaces = self.discover_interfaces(target_interface)
        self.logger.debug(f"Interfaces to examine: {', '.join(interfaces) or 'none'}")

        context = SystemContext(
            target_interface=target_interface,
            interfaces=interfaces,
            logger=self.logger,
            settings=self.settings,
            _debugger=self
        )

        findings = self.check_registry.run_all(context)

        return DhcpDiagnostic(
            timestamp=time.strftime('%Y-%m-%d %H:%M:%S'),
            hostname=os.uname().nodename,
            target_interface=target_interface,
            interfaces=list(interfaces),
            findings=findings
        )

    def to_json(self, diagnostic: DhcpDiagnostic) -> str:
        return json.dumps(asdict(diagnostic), indent=2, default=_json_default)

    def _print_diagnostic_summary(self, diagnostic: DhcpDiagnostic):
        """Print diagnostic summary with severity counts"""
        errors = diagnostic.count(Severity.ERROR)
        warnings = diagnostic.count(Severity.WARNING)
        successes = diagnostic.count(Severity.SUCCESS)

        summary_parts = []
        if errors > 0:
            summary_parts.append(f"{errors} Error{'s' if errors > 1 else ''}")
        if warnings > 0:
            summary_parts.append(f"{warnings} Warning{'s' if warnings > 1 else ''}")
        if successes > 0:
            summary_parts.append(f"{successes} Success")

        if summary_parts:
            summary_text = f"Summary: {', '.join(summary_parts)}"
        else:
            summary_text = 'Summary: No findings'
        print(f"\n{self.color_manager.color(Colors.BOLD, summary_text)}")

    def print_results(self, diagnostic: DhcpDiagnostic):
        """Print diagnostic results section by section with color coding"""
        header = "DHCP Troubleshooting Report"
        separator = "=" * 42

        print(self.color_manager.color(Colors.BOLD, separator))
        print(self.color_manager.color(Colors.BOLD, header))
        print(self.color_manager.color(Colors.BOLD, separator))
        print(f"Hostname: {diagnostic.hostname}")
        print(f"Timestamp: {diagnostic.timestamp}")
        if diagnostic.target_interface:
            print(f"Target interface: {diagnostic.target_interface}")

        current_category = None
        for finding in diagnostic.findings:
            if finding.category != current_category:
                current_category = finding.category
                print(f"\n{self.color_manager.color(Colors.BLUE, f'==== {current_category} ====')}")

            print(self.color_manager.format_finding(finding))
            if finding.technical_details:
                for line in finding.technical_details.splitlines():
                    print(f"  {line}")
            if finding.recommendation:
                recommendation_text = self.color_manager.color(Colors.BLUE, finding.recommendation)
                print(f"  → {recommendation_text}")

        self._print_diagnostic_summary(diagnostic)

    def list_checks(self):
        """List all available checks in run order"""
        available_checks = self.check_registry.get_available_checks()
        disabled_checks = self.check_registry.disabled_checks

        print(f"{self.color_manager.color(Colors.BOLD, 'Available DHCP Checks:')}")
        print(f"Total: {len(available_checks)} checks")

        for name in available_checks:
            section = self.check_registry.checks[name].SECTION
            if name in disabled_checks:
                print(f"  {self.color_manager.color(Colors.RED, '✗')} {name} ({section})")
            else:
                print(f"  {self.color_manager.color(Colors.GREEN, '✓')} {name} ({section})")

        if not available_checks:
            warning_text = self.color_manager.color(Colors.YELLOW, "No checks loaded. Check the dhcp_checks package.")
            print(f"\n{warning_text}")


class CheckRegistry:
    """Registry for dynamically loaded DHCP checks"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.checks = {}
        self.disabled_checks = set()

    def load_checks(self, package=dhcp_checks):
        """Import every public module of the checks package that exports analyze()"""
        for module_info in pkgutil.iter_modules(package.__path__):
            module_name = module_info.name
            if module_name.startswith('_'):
                continue

            try:
                module = importlib.import_module(f"{package.__name__}.{module_name}")
            except Exception as e:
                self.logger.error(f"Failed to load check module {module_name}: {e}")
                continue

            if callable(getattr(module, 'analyze', None)):
                self.checks[module_name] = module
                self.logger.debug(f"Loaded check module: {module_name}")
            else:
                self.logger.warning(f"Check module {module_name} missing analyze() function")

    def disable_check(self, check_name: str):
        """Disable a specific check"""
        module = self.checks.get(check_name)
        if module is None:
            self.logger.warning(f"Unknown check: {check_name}")
            return
        if getattr(module, 'ALWAYS_RUN', False):
            self.logger.warning(f"Check {check_name} always runs and cannot be disabled")
            return
        self.disabled_checks.add(check_name)
        self.logger.info(f"Disabled check: {check_name}")

    def get_available_checks(self) -> List[str]:
        """Get list of all check names in run order"""
        return sorted(self.checks, key=lambda name: (getattr(self.checks[name], 'ORDER', 1000), name))

    def get_enabled_checks(self) -> List[str]:
        """Get list of enabled check names in run order"""
        return [name for name in self.get_available_checks() if name not in self.disabled_checks]

    def run_all(self, context: SystemContext) -> List[DiagnosticResult]:
        """Run all enabled checks in order, containing failures to their own section"""
        all_findings = []

        for check_name in self.get_enabled_checks():
            module = self.checks[check_name]
            try:
                findings = module.analyze(context)
                all_findings.extend(findings)
                self.logger.debug(f"Check {check_name} produced {len(findings)} finding(s)")
            except Exception as e:
                self.logger.error(f"Check {check_name} failed: {e}")
                all_findings.append(DiagnosticResult(
                    category=getattr(module, 'SECTION', check_name),
                    severity=Severity.ERROR,
                    message=f"{check_name} check failed: {e}"
                ))

        return all_findings

    def load_config(self, config_path: str, settings: CheckSettings) -> CheckSettings:
        """Load disabled checks and check settings from a YAML file"""
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except (FileNotFoundError, IOError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        for check in config.get('disabled_checks') or []:
            self.disable_check(check)

        settings = _apply_settings(settings, config.get('settings') or {}, self.logger)

        self.logger.info(f"Loaded configuration from {config_path}")
        return settings


def _apply_settings(settings: CheckSettings, overrides: Dict, logger: logging.Logger) -> CheckSettings:
    if not isinstance(overrides, dict):
        raise ConfigError("'settings' must be a mapping")

    known = {f.name: f for f in dataclasses.fields(CheckSettings)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting: {key}")
            continue

        expected = type(getattr(settings, key))
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"Setting '{key}' must be an integer")
        if expected is str and not isinstance(value, str):
            raise ConfigError(f"Setting '{key}' must be a string")
        if expected is list:
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ConfigError(f"Setting '{key}' must be a list of strings")
        changes[key] = value

    return dataclasses.replace(settings, **changes)


def main():
    """Main entry point"""
    if sys.version_info < (3, 7):
        print("Error: This tool requires Python 3.7 or higher", file=sys.stderr)
        sys.exit(1)

    parser = argparse.ArgumentParser(
        description="DHCP Debug Tool for Linux",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sudo %(prog)s                         # Check all interfaces
  sudo %(prog)s eth0                    # Check a single interface
  sudo %(prog)s eth0 --json -o out.json # Export the report as JSON
  sudo %(prog)s --skip-check selinux    # Skip a check
  sudo %(prog)s --config dhcp.yaml      # Use custom configuration file
  %(prog)s --list-checks                # List all available checks
  sudo %(prog)s -- -eth0                # Interface name starting with a hyphen
        """
    )

    parser.add_argument(
        'interface',
        nargs='?',
        help='Interface to check (default: all interfaces except loopback)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'DHCP Debug Tool v{VERSION}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the report as JSON instead of text'
    )

    parser.add_argument(
        '--output', '-o',
        help='Output file for JSON export'
    )

    parser.add_argument(
        '--skip-check',
        action='append',
        dest='skip_checks',
        help='Skip a specific check (can be used multiple times)'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--list-checks',
        action='store_true',
        help='List all available checks'
    )

    parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit with status 1 if any error was found'
    )

    args, extras = parser.parse_known_args()
    # argparse reads a name such as "-eth0" as an unknown option
    if len(extras) == 1 and args.interface is None and not extras[0].startswith('--'):
        args.interface = extras[0]
    elif extras:
        parser.error(f"unrecognized arguments: {' '.join(extras)}")

    color_manager = ColorManager()
    if args.no_color:
        color_manager.set_colors_enabled(False)

    try:
        if args.list_checks:
            debugger = DhcpDebugger(verbose=args.verbose, no_color=args.no_color,
                                    skip_checks=args.skip_checks, config_file=args.config)
            debugger.list_checks()
            return

        validate_interface_name(args.interface)
        require_root()

        debugger = DhcpDebugger(
            verbose=args.verbose,
            no_color=args.no_color or args.json,
            skip_checks=args.skip_checks,
            config_file=args.config
        )

        if not args.json:
            print(debugger.color_manager.color(Colors.BOLD, 'Performing DHCP diagnosis...'))

        diagnostic = debugger.diagnose(args.interface)
        json_data = debugger.to_json(diagnostic)

        if args.json:
            print(json_data)
        else:
            debugger.print_results(diagnostic)

        if args.output:
            with open(args.output, 'w') as f:
                f.write(json_data)
            print(f"\nDiagnostic results exported to {args.output}", file=sys.stderr if args.json else sys.stdout)

        if args.strict and diagnostic.count(Severity.ERROR):
            sys.exit(1)

    except DhcpDebugError as e:
        print(color_manager.color(Colors.RED, f"Error: {e}"), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print(f"\n{color_manager.color(Colors.YELLOW, 'Operation cancelled by user')}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"\n{color_manager.color(Colors.RED, f'Error: {e}')}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
