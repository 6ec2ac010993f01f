"""
Host-spec grammar and SSH alias derivation

Handles parsing of target strings in the accepted formats:
- user@host
- user@host:port
- host.with.dots
- shorthand (alphanumeric/hyphen token, expands to the managed domain)
"""
import re
from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    ALIAS_PREFIX,
    DEFAULT_MANAGED_DOMAIN,
    DEFAULT_SSH_PORT,
    DEFAULT_USER,
)
from .models import ConnectionConfig

_FULL_RE = re.compile(r"([^@]+)@([^:]+)(?::([0-9]+))?")
_SHORTHAND_RE = re.compile(r"[a-zA-Z0-9-]+")
_HOST_ONLY_RE = re.compile(
    r"([a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?\.)*[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?"
)


@dataclass(frozen=True)
class HostSpec:
    """Parsed target"""
    user: str
    host: str
    port: int = DEFAULT_SSH_PORT


def parse_host_spec(
    text: str,
    default_user: str = DEFAULT_USER,
    managed_domain: str = DEFAULT_MANAGED_DOMAIN,
) -> Optional[HostSpec]:
    """
    Parse a target string.

    Args:
        text: Target string
        default_user: User for targets without an explicit user
        managed_domain: Domain that shorthand tokens expand under

    Returns:
        HostSpec, or None if the string matches no accepted form

    Examples:
        parse_host_spec("alice@10.0.0.5:2222") -> HostSpec("alice", "10.0.0.5", 2222)
        parse_host_spec("box.example.com") -> HostSpec("abc", "box.example.com", 22)
        parse_host_spec("myproject-alice") -> HostSpec("abc", "ssh-myproject-alice.envhaven.app", 22)
    """
    full = _FULL_RE.fullmatch(text)
    if full:
        user, host, port_str = full.groups()
        port = int(port_str) if port_str else DEFAULT_SSH_PORT
        if not (1 <= port <= 65535):
            return None
        return HostSpec(user=user, host=host, port=port)

    if "@" not in text and ":" not in text and "." not in text:
        if _SHORTHAND_RE.fullmatch(text):
            return HostSpec(
                user=default_user,
                host=f"ssh-{text}.{managed_domain}",
                port=DEFAULT_SSH_PORT,
            )

    if _HOST_ONLY_RE.fullmatch(text):
        return HostSpec(user=default_user, host=text, port=DEFAULT_SSH_PORT)

    return None


def _rolling_hash(text: str) -> str:
    """
    32-bit signed h*31+c hash over UTF-16 code units, base36 of |h|.

    Matches the alias and filename hashing of earlier releases so that
    existing SSH config blocks keep their names.
    """
    data = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    value = abs(value)

    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def derive_alias(host: str, port: int) -> str:
    """Deterministic SSH config host name for a (host, port) pair"""
    return f"{ALIAS_PREFIX}{_rolling_hash(f'{host}:{port}')}"


def build_ssh_string(config: ConnectionConfig) -> str:
    """Render as ``user@host`` or ``user@host -p port``"""
    port_part = f" -p {config.port}" if config.port != DEFAULT_SSH_PORT else ""
    return f"{config.user}@{config.host}{port_part}"


def workspace_url(target: Optional[str], managed_domain: str = DEFAULT_MANAGED_DOMAIN) -> Optional[str]:
    """Browser URL of a managed workspace, when the target names one"""
    if not target:
        return None

    if "@" not in target and "." not in target:
        return f"https://{target}.{managed_domain}"

    suffix = f".{managed_domain}"
    if target.startswith("ssh-") and target.endswith(suffix):
        subdomain = target[len("ssh-"):-len(suffix)]
        return f"https://{subdomain}.{managed_domain}"

    return None
