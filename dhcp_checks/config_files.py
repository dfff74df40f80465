"""
Network configuration file checks.

Inspects NetworkManager keyfile profiles and legacy ifcfg network scripts
to see whether interfaces are configured for DHCP or static addressing.
"""

import configparser
import re
from pathlib import Path
from typing import Dict, List, Optional

from dhcp_checks import DiagnosticResult, Findings

SECTION = "Network Configuration Files"
ORDER = 40

_BOOTPROTO_RE = re.compile(r'^\s*BOOTPROTO\s*=\s*(.*?)\s*$', re.MULTILINE)

STATIC_PROTOCOLS = ('static', 'none')


def parse_bootproto(content: str) -> Optional[str]:
    """Lower-cased BOOTPROTO value of an ifcfg file, quotes removed"""
    match = _BOOTPROTO_RE.search(content)
    if not match:
        return None
    return match.group(1).strip('"\'').lower()


def parse_nm_profile(path: Path) -> Dict[str, str]:
    """Flatten a .nmconnection keyfile into section.key entries"""
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path)

    profile = {}
    for section in parser.sections():
        for key, value in parser.items(section):
            profile[f"{section}.{key}"] = value
    return profile


def _list_directory(directory: Path, pattern: str = '*') -> List[str]:
    return [path.name for path in sorted(directory.glob(pattern))]


def _check_nm_profiles(context, findings: Findings, nm_dir: Path):
    for profile_path in sorted(nm_dir.glob('*.nmconnection')):
        try:
            profile = parse_nm_profile(profile_path)
        except (configparser.Error, UnicodeDecodeError, IOError) as e:
            context.logger.debug(f"Failed to parse {profile_path}: {e}")
            continue

        iface = profile.get('connection.interface-name')
        if context.target_interface and iface != context.target_interface:
            continue

        name = profile.get('connection.id', profile_path.stem)
        method = profile.get('ipv4.method')
        if method == 'auto':
            findings.success(f"Profile {name} uses DHCP (ipv4.method=auto)")
        elif method == 'manual':
            findings.warning(f"Profile {name} uses static addressing (ipv4.method=manual)")


def _check_network_scripts(context, findings: Findings, scripts_dir: Path):
    iface = context.target_interface
    findings.info(f"Network scripts in {scripts_dir}/:")

    if not iface:
        config_files = _list_directory(scripts_dir, 'ifcfg-*')
        if config_files:
            findings.info("Interface configuration files:",
                          technical_details='\n'.join(config_files))
        else:
            findings.warning("No interface configuration files found")
        return

    config_file = scripts_dir / f"ifcfg-{iface}"
    if not config_file.is_file():
        findings.warning(f"No configuration file found for {iface}")
        return

    try:
        content = config_file.read_text(errors='replace')
    except IOError as e:
        findings.warning(f"Could not read {config_file}: {e}")
        return

    findings.info(f"Configuration for {iface}:", technical_details=content.rstrip())

    bootproto = parse_bootproto(content)
    if bootproto == 'dhcp':
        findings.success("Interface configured for DHCP")
    elif bootproto in STATIC_PROTOCOLS:
        findings.warning("Interface configured for static IP, not DHCP")
    else:
        context.logger.debug(f"Unrecognized BOOTPROTO for {iface}: {bootproto}")


def analyze(context) -> List[DiagnosticResult]:
    findings = Findings(SECTION)
    settings = context.settings

    nm_dir = Path(settings.nm_connections_dir)
    if nm_dir.is_dir():
        findings.info("NetworkManager system connections:",
                      technical_details='\n'.join(_list_directory(nm_dir)) or None)
        _check_nm_profiles(context, findings, nm_dir)

    scripts_dir = Path(settings.network_scripts_dir)
    if scripts_dir.is_dir():
        _check_network_scripts(context, findings, scripts_dir)
    else:
        context.logger.debug(f"{scripts_dir} not present, skipping network scripts")

    return findings
