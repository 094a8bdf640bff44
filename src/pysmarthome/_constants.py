"""Internal constants shared across the library."""

#: Message a controller sends when it has nothing to report.
HEARTBEAT = "OK\n"

DEFAULT_WS_PATH = "/smart-home"

# ------------------------------------------------------------------
# Liveness probe tokens (``/hc``)
# ------------------------------------------------------------------

HEALTH_OK = "OK"
HEALTH_NOT_OK = "NOT_OK"

#: Default XOR key. Override with ``HUB_OBFUSCATION_KEY``; the controller
#: firmware must be flashed with the same value.
DEFAULT_OBFUSCATION_KEY = "smart-home-hub"
