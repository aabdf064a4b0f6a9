"""MAC address validation and normalisation."""

import re

_MAC_RE = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")


def is_valid_mac(mac_address: str) -> bool:
    """Accept "AA:BB:CC:DD:EE:FF" or "AA-BB-CC-DD-EE-FF" (any case)."""
    return bool(_MAC_RE.match(mac_address.strip()))


def normalize_mac(mac_address: str) -> str:
    """
    Canonical binding key: upper case, colon separated.

    Raises:
        ValueError: if the address is not a valid MAC.
    """
    mac = mac_address.strip()
    if not is_valid_mac(mac):
        raise ValueError(f"Invalid MAC address: {mac_address}")
    return mac.upper().replace("-", ":")
