"""Detect the current Wi-Fi network and compare it with the office network(s).

Each OS query is tried in a fixed order; a missing tool, permission error or
unexpected output just moves on to the next one.
"""
import os
import re
import logging
import argparse
import subprocess
from typing import Optional

from dotenv import load_dotenv

from config import configure_logging, split_list

logger = logging.getLogger(__name__)

AIRPORT_PATH = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/Current/Resources/airport"
COMMAND_TIMEOUT = 10

_NOT_CONNECTED = ("not associated", "not connected")


def _run(args) -> str:
    result = subprocess.run(args, capture_output=True, text=True, check=True, timeout=COMMAND_TIMEOUT)
    return result.stdout or ""


def _usable(ssid: Optional[str]) -> Optional[str]:
    if not ssid:
        return None
    ssid = ssid.strip()
    lowered = ssid.lower()
    if not ssid or lowered in ("off", "none") or "error" in lowered:
        return None
    if any(marker in lowered for marker in _NOT_CONNECTED):
        return None
    return ssid


def _from_networksetup() -> Optional[str]:
    interfaces = []
    try:
        ports = _run(["/usr/sbin/networksetup", "-listallhardwareports"])
        match = re.search(r"Hardware Port: (?:Wi-Fi|AirPort)\s+Device: (\w+)", ports)
        if match:
            interfaces.append(match.group(1))
            logger.debug(f"Found Wi-Fi interface: {match.group(1)}")
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Error listing hardware ports: {e}")

    for iface in interfaces or ["en0", "en1"]:
        try:
            output = _run(["/usr/sbin/networksetup", "-getairportnetwork", iface])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Error checking interface {iface}: {e}")
            continue
        logger.debug(f'Raw output for {iface}: "{output.strip()}"')
        if any(marker in output for marker in _NOT_CONNECTED):
            logger.debug(f"Interface {iface} exists but not connected to Wi-Fi")
            continue
        for pattern in (r"Current (?:Wi-Fi|AirPort) Network:\s*(.+)", r"Current Network:\s*(.+)",
                        r"Network Name:\s*(.+)", r"SSID:\s*(.+)"):
            match = re.search(pattern, output)
            if match and _usable(match.group(1)):
                return _usable(match.group(1))
    return None


def _from_system_profiler() -> Optional[str]:
    output = _run(["/usr/sbin/system_profiler", "SPAirPortDataType"])
    match = re.search(r"Current Network Information:\s*\n\s*(.+?):\s*\n", output)
    if match:
        return _usable(match.group(1))
    match = re.search(r"Current Network Information:\s*\n\s*Network Name:\s*(.+)", output)
    return _usable(match.group(1)) if match else None


def _from_scutil() -> Optional[str]:
    listing = _run(["/usr/sbin/scutil", "--nc", "list"])
    for line in listing.splitlines():
        if ("Wi-Fi" in line or "AirPort" in line) and "Connected" in line:
            match = re.search(r'"([^"]+)"', line)
            if not match:
                continue
            try:
                info = _run(["/usr/sbin/scutil", "--nc", "show", match.group(1)])
            except (OSError, subprocess.SubprocessError):
                logger.debug(f"Could not get SSID for service {match.group(1)}")
                continue
            ssid = re.search(r"SSID:\s*(.+)", info)
            if ssid and _usable(ssid.group(1)):
                return _usable(ssid.group(1))
    return None


def _from_wdutil() -> Optional[str]:
    output = _run(["/usr/bin/wdutil", "info"])
    match = re.search(r"^\s*SSID\s*:\s*(.+)$", output, re.MULTILINE)
    return _usable(match.group(1)) if match else None


def _from_airport() -> Optional[str]:
    output = _run([AIRPORT_PATH, "-I"])
    match = re.search(r"^\s*SSID:\s*(.+)$", output, re.MULTILINE)
    return _usable(match.group(1)) if match else None


def _from_iwgetid() -> Optional[str]:
    return _usable(_run(["iwgetid", "-r"]))


def _from_nmcli() -> Optional[str]:
    output = _run(["nmcli", "-t", "-f", "active,ssid", "dev", "wifi"])
    for line in output.splitlines():
        active, _, ssid = line.partition(":")
        if active == "yes" and _usable(ssid):
            return _usable(ssid)
    return None


MECHANISMS = (
    ("networksetup", _from_networksetup),
    ("system_profiler", _from_system_profiler),
    ("scutil", _from_scutil),
    ("wdutil", _from_wdutil),
    ("airport", _from_airport),
    ("iwgetid", _from_iwgetid),
    ("nmcli", _from_nmcli),
)


def current_network_name() -> Optional[str]:
    """Return the connected SSID, or None if no mechanism could tell."""
    for name, mechanism in MECHANISMS:
        try:
            ssid = mechanism()
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            logger.debug(f"{name} fallback failed: {e}")
            continue
        if ssid:
            logger.debug(f"Detected Wi-Fi SSID via {name}: {ssid}")
            return ssid
    return None


def expected_networks(expected) -> frozenset:
    if not expected:
        return frozenset()
    if isinstance(expected, str):
        return frozenset(split_list(expected))
    return frozenset(str(e).strip() for e in expected if str(e).strip())


def is_on_expected_network(name: Optional[str], expected) -> bool:
    """Exact membership of ``name`` in the expected set; unknown never matches."""
    networks = expected_networks(expected)
    if not networks:
        logger.error("Office Wi-Fi SSID not configured")
        return False
    if not name:
        logger.error("Could not detect current Wi-Fi network")
        return False
    if name in networks:
        logger.info(f"Connected to office Wi-Fi ({name})")
        return True
    logger.info(f"Current Wi-Fi ({name}) does not match any office Wi-Fi networks")
    logger.info(f"Office Wi-Fi networks: {', '.join(sorted(networks))}")
    return False


def is_on_office_wifi(expected) -> bool:
    return is_on_expected_network(current_network_name(), expected)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check the current Wi-Fi against OFFICE_WIFI_SSID")
    parser.add_argument("-t", "--test", action="store_true", help="Only print the detected Wi-Fi network")
    parser.add_argument("--debug", action="store_true", help="Show each detection attempt")
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(args.debug)

    if args.test:
        ssid = current_network_name()
        if ssid:
            logger.info(f"Current Wi-Fi SSID: {ssid}")
            return 0
        logger.error("Could not detect Wi-Fi network")
        return 1

    office = os.environ.get("OFFICE_WIFI_SSID", "")
    if not office:
        logger.error("OFFICE_WIFI_SSID environment variable not set (comma-separate several networks)")
        return 1
    return 0 if is_on_office_wifi(office) else 1


if __name__ == "__main__":
    raise SystemExit(main())
