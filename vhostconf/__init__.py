"""
vhostconf: loader and validator for nginx-style virtual-server configuration.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
