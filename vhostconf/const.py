"""
Application constants and metadata.
"""

# Application info
APP_NAME = "vhostconf"
APP_VERSION = "0.1.0"

# Default values
DEFAULT_CONFIG_PATH = "conf/default.conf"
WILDCARD_ADDRESS = "0.0.0.0"
MIN_PORT = 1
MAX_PORT = 65535
