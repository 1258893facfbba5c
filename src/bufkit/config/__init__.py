"""
Global configuration. Defaults can be overridden with ``BUFKIT_*``
environment variables or a ``bufkit.toml`` settings file.
"""

from ._settings import InvalidPolicy, settings

__all__ = ["InvalidPolicy", "settings"]
