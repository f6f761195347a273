import ipaddress
import re
import secrets
import string
from urllib.parse import urlparse

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

CODE_RE = re.compile(r"[A-Za-z0-9]{6,8}")
URL_SCHEMES = {"http", "https"}

# Top-level paths served by the app itself; a link under one of them could never redirect.
RESERVED_PATHS = {"", "docs", "openapi.json", "redoc", "config", "links", "favicon.ico", "health"}

HOST_LABEL = r"(?!-)[\w-]{1,63}(?<!-)"
HOST_RE = re.compile(rf"{HOST_LABEL}(\.{HOST_LABEL})*\.?")


def generate_code(length: int = 6) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_reserved(code) -> bool:
    return code in RESERVED_PATHS


def is_valid_code(code) -> bool:
    return isinstance(code, str) and CODE_RE.fullmatch(code) is not None


def is_valid_host(host: str | None) -> bool:
    if not host:
        return False
    if ":" in host:
        try:
            return ipaddress.ip_address(host).version == 6
        except ValueError:
            return False
    return HOST_RE.fullmatch(host) is not None


def is_valid_url(url) -> bool:
    """Absolute http(s) URL with a well-formed host. Anything unparsable is rejected."""
    if not isinstance(url, str) or not url:
        return False
    try:
        parsed = urlparse(url)
        # raises ValueError on a malformed port
        parsed.port
    except ValueError:
        return False
    return parsed.scheme in URL_SCHEMES and is_valid_host(parsed.hostname)
