"""Network helpers used when deriving the advertised short URL host."""

import logging
import socket


logger = logging.getLogger(__name__)

WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


def get_local_ip() -> str:
    """Return the primary non-loopback IPv4 address of this machine.

    No packets are sent: connecting a UDP socket only selects a route.
    Falls back to 127.0.0.1 when no interface is routable.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError as e:
        logger.warning(f"Problem getting network interfaces: {e}")
        address = "127.0.0.1"
    finally:
        sock.close()
    return address


def default_base_url(host: str, port: int, scheme: str = "http") -> str:
    """Build the base URL short links are issued under.

    Args:
        host: Listen host; wildcard addresses are replaced by the local IP
        port: Listen port
        scheme: URL scheme

    Returns:
        Base URL such as http://10.0.0.5:8080
    """
    advertised = get_local_ip() if host in WILDCARD_HOSTS else host
    return f"{scheme}://{advertised}:{port}"
