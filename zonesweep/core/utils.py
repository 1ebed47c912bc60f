"""
Utility functions for ZoneSweep.
"""

import ipaddress
import socket
from datetime import datetime
from pathlib import Path
from typing import List, Union


def is_valid_ip(ip: str) -> bool:
    """
    Check if string is a valid IP address (IPv4 or IPv6).

    Args:
        ip: IP address string

    Returns:
        True if valid IPv4 or IPv6, False otherwise

    Examples:
        >>> is_valid_ip("192.0.2.1")
        True
        >>> is_valid_ip("2001:db8::1")
        True
        >>> is_valid_ip("ns1.example.com")
        False
    """
    # Handle bracketed IPv6
    if ip.startswith('[') and ip.endswith(']'):
        ip = ip[1:-1]

    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False


def resolve_hostname(hostname: str) -> str:
    """
    Resolve hostname to an IP address, IPv4 first.

    Args:
        hostname: Hostname to resolve

    Returns:
        Resolved IP address

    Raises:
        socket.gaierror: If hostname cannot be resolved
    """
    try:
        return socket.gethostbyname(hostname)
    except socket.gaierror:
        pass
    # Fall back to IPv6
    result = socket.getaddrinfo(hostname, None, socket.AF_INET6)
    if result:
        return result[0][4][0]
    raise socket.gaierror(f"Cannot resolve hostname: {hostname}")


def read_domains_from_file(filepath: Union[str, Path]) -> List[str]:
    """
    Read domain tokens from a file, one per line.

    Lines may be ``domain`` or ``domain@nameserver``. Empty lines and
    comments (lines starting with #) are ignored.

    Args:
        filepath: Path to the domain list

    Returns:
        Domain tokens in file order

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the path is not a file or is not UTF-8
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Domain file not found: {filepath}")

    if not filepath.is_file():
        raise ValueError(f"Not a file: {filepath}")

    tokens = []
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                tokens.append(line)
    except UnicodeDecodeError:
        raise ValueError(f"File encoding error: {filepath}. Use UTF-8 encoding.")

    return tokens


def get_timestamp() -> str:
    """Get formatted timestamp for reports."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def get_timestamp_filename() -> str:
    """Get formatted timestamp for filenames."""
    return datetime.now().strftime("%Y%m%d-%H%M%S")
