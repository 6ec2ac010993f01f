"""
Project constants definitions
"""

# ============================================================
# Application
# ============================================================

APP_NAME = "haven"
ALIAS_PREFIX = "haven-"

# ============================================================
# Default Values
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_USER = "abc"
DEFAULT_MANAGED_DOMAIN = "envhaven.app"
DEFAULT_REMOTE_ROOT = "/config/workspace"
DEFAULT_PROBE_TIMEOUT = 10
DEFAULT_WATCH_INTERVAL = 2.0

# ============================================================
# Local State
# ============================================================

CONNECTIONS_FILE = "connections.json"
SESSIONS_DIR = "sessions"
SETTINGS_FILE = "config.toml"

# ============================================================
# SSH
# ============================================================

DEFAULT_SSH_DIR = "~/.ssh"
DEFAULT_KEY_NAMES = ("id_ed25519", "id_rsa", "id_ecdsa")
MANAGED_KEY_NAME = "haven_ed25519"
MANAGED_KEY_COMMENT = "haven-cli"
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644

SSH_CONFIG_DIR_NAME = "config.d"
SSH_CONFIG_FRAGMENT_NAME = "haven.conf"
SSH_CONFIG_DIR_MODE = 0o700
SSH_CONFIG_MODE = 0o600
INCLUDE_DIRECTIVE = "Include ~/.ssh/config.d/*"

HOST_HARDENING_OPTIONS = (
    ("ForwardAgent", "no"),
    ("ForwardX11", "no"),
    ("StrictHostKeyChecking", "accept-new"),
    ("ServerAliveInterval", "5"),
    ("ServerAliveCountMax", "3"),
)

HOST_KEY_FAILURE_PHRASE = "Host key verification failed"
IDLE_TIMEOUT_ENV = "HAVEN_IDLE_TIMEOUT"

# ============================================================
# Sync Engine
# ============================================================

DEFAULT_MUTAGEN_VERSION = "0.17.6"
MUTAGEN_RELEASE_URL = (
    "https://github.com/mutagen-io/mutagen/releases/download/"
    "v{version}/mutagen_{platform}_{arch}_v{version}.tar.gz"
)
MUTAGEN_DOWNLOAD_TIMEOUT = 120
SYNC_MODE = "two-way-resolved"
SESSION_LABEL = "haven.managed=true"

IGNORE_FILE_NAME = ".havenignore"
DEFAULT_IGNORE_PATTERNS = (
    ".git/",
    "node_modules/",
    ".pnpm-store/",
    "__pycache__/",
    "*.pyc",
    ".pytest_cache/",
    ".mypy_cache/",
    "dist/",
    "build/",
    ".next/",
    ".nuxt/",
    ".output/",
    "target/",
    ".gradle/",
    ".idea/",
    "*.log",
    "*.tmp",
    "*.swp",
    "*.swo",
    ".DS_Store",
    ".haven/",
)
