"""
Lazy download of the mutagen release for this platform
"""
import platform
import tarfile
from pathlib import Path
from typing import Callable, Optional

import requests

from ...core.constants import (
    DEFAULT_MUTAGEN_VERSION,
    MUTAGEN_DOWNLOAD_TIMEOUT,
    MUTAGEN_RELEASE_URL,
)
from ...core.exceptions import SyncInstallError
from ...core.logging import get_logger

logger = get_logger(__name__)

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def detect_platform() -> str:
    system = platform.system().lower()
    if system in ("darwin", "linux"):
        return system
    raise SyncInstallError(f"Unsupported platform: {system}. Only macOS and Linux are supported.")


def detect_arch() -> str:
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine)
    if arch is None:
        raise SyncInstallError(f"Unsupported architecture: {machine}. Only x64 and arm64 are supported.")
    return arch


class MutagenInstaller:
    """
    Installs mutagen into <data_dir>/mutagen/bin exactly once.

    Layout after install:
    - {bin_dir}/mutagen - main binary (0755)
    - {bin_dir}/mutagen-agents.tar.gz - remote agent bundle
    """

    def __init__(
        self,
        data_dir: Path,
        version: str = DEFAULT_MUTAGEN_VERSION,
        http: Optional[requests.Session] = None,
    ):
        """
        Args:
            data_dir: Application data directory
            version: Mutagen release version
            http: Optional requests session (injectable for tests)
        """
        self.data_dir = Path(data_dir).expanduser()
        self.version = version
        self.http = http or requests.Session()

    @property
    def bin_dir(self) -> Path:
        return self.data_dir / "mutagen" / "bin"

    @property
    def binary_path(self) -> Path:
        return self.bin_dir / "mutagen"

    def is_installed(self) -> bool:
        return self.binary_path.exists()

    def download_url(self, platform_name: Optional[str] = None, arch: Optional[str] = None) -> str:
        return MUTAGEN_RELEASE_URL.format(
            version=self.version,
            platform=platform_name or detect_platform(),
            arch=arch or detect_arch(),
        )

    def install(self, on_progress: Optional[Callable[[str], None]] = None) -> Path:
        """
        Download, extract and mark the binary executable.

        Raises:
            SyncInstallError: On network, extraction or filesystem failure
        """
        url = self.download_url()
        if on_progress:
            on_progress("Setting up file sync (one-time)...")
        logger.info("Downloading mutagen %s from %s", self.version, url)

        archive = self.bin_dir / "mutagen.tar.gz"
        try:
            self.bin_dir.mkdir(parents=True, exist_ok=True)
            with self.http.get(url, timeout=MUTAGEN_DOWNLOAD_TIMEOUT, stream=True) as response:
                response.raise_for_status()
                with open(archive, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=1 << 16):
                        fh.write(chunk)

            if on_progress:
                on_progress("Installing...")

            with tarfile.open(archive, mode="r:gz") as tar:
                if hasattr(tarfile, "data_filter"):
                    tar.extractall(self.bin_dir, filter="data")
                else:
                    tar.extractall(self.bin_dir)
        except requests.exceptions.RequestException as e:
            raise SyncInstallError(f"Failed to download Mutagen: {e}") from e
        except tarfile.TarError as e:
            raise SyncInstallError(f"Failed to extract Mutagen: {e}") from e
        except OSError as e:
            raise SyncInstallError(f"Failed to install Mutagen: {e}") from e
        finally:
            archive.unlink(missing_ok=True)

        if not self.binary_path.exists():
            raise SyncInstallError(f"Mutagen archive did not contain {self.binary_path.name}")
        self.binary_path.chmod(0o755)

        if on_progress:
            on_progress("File sync ready")
        return self.binary_path

    def ensure_installed(self, on_progress: Optional[Callable[[str], None]] = None) -> Path:
        """Install unless the binary is already present"""
        if self.is_installed():
            return self.binary_path
        return self.install(on_progress)
