"""
SSH identity, host configuration and client adapters
"""
from .identity import SshIdentity, EnsureResult
from .host_config import SshHostConfig
from .client import OpenSshClient

__all__ = ["SshIdentity", "EnsureResult", "SshHostConfig", "OpenSshClient"]
