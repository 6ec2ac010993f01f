"""
haven - connect local directories to remote development workspaces

Provides:
- SSH identity discovery and managed key generation
- Managed SSH host configuration with probing and guided remediation
- Two-way file sync through a locally installed mutagen binary
- Per-directory connection and session state
"""

__version__ = "0.1.0"
