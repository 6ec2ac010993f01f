from .loader import ConfigLoader, load_settings

__all__ = ["ConfigLoader", "load_settings"]
