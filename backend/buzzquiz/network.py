import socket


def get_lan_ip() -> str:
    """Best-effort IPv4 address other devices on the LAN can reach us at."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            # UDP connect sends nothing; it only selects the outbound interface
            sock.connect(("8.8.8.8", 80))
            ip = sock.getsockname()[0]
        finally:
            sock.close()
        if ip and not ip.startswith("127."):
            return ip
    except OSError:
        pass
    return "localhost"


def server_address(config) -> str:
    configured = (config.get('SERVER_ADDRESS') or '').strip()
    if configured:
        return configured
    return get_lan_ip()
