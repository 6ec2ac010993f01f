"""
Sync engine adapters
"""
from .ignore import IgnorePatternSet
from .installer import MutagenInstaller
from .mutagen import MutagenEngine, format_sync_status

__all__ = ["IgnorePatternSet", "MutagenInstaller", "MutagenEngine", "format_sync_status"]
