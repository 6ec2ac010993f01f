"""
POSIX shell quoting for remote commands
"""
import re
from typing import Sequence

_SAFE_RE = re.compile(r"[a-zA-Z0-9_\-.,/:=@]+")


def posix_quote(arg: str) -> str:
    """Single-quote arg unless it consists only of shell-safe characters"""
    if _SAFE_RE.fullmatch(arg):
        return arg
    return "'" + arg.replace("'", "'\"'\"'") + "'"


def posix_quote_args(args: Sequence[str]) -> str:
    return " ".join(posix_quote(arg) for arg in args)


def build_remote_command(cwd: str, args: Sequence[str]) -> str:
    """Command line that runs args inside cwd, creating it if needed"""
    quoted_cwd = posix_quote(cwd)
    return f"mkdir -p {quoted_cwd} && cd {quoted_cwd} && {posix_quote_args(args)}"
