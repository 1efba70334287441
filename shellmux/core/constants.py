"""
Project constants definitions
"""

# ============================================================
# Transport Session
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_SSH_TIMEOUT = 10
DEFAULT_KEEPALIVE_INTERVAL_MS = 120 * 1000
DEFAULT_KEEPALIVE_MAX_MISSED = 1000

# ============================================================
# Channel Runners
# ============================================================

DEFAULT_PTY_TYPE = "dumb"
DEFAULT_SESSION_TIMEOUT_MS = 100000
DEFAULT_MAX_WAIT_SECONDS = 10
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_CHUNK_SIZE = 1024
EXIT_COMMAND = "exit"

# Exit code reported before any invocation has set one
LAST_EXIT_CODE_UNSET = -999

# ============================================================
# Command Markers
# ============================================================

START_MARKER = "@START{index}@"
END_MARKER = "@END{index}@"
MARKER_TIMESTAMP = "T= $( date +%T )"

# ============================================================
# SSH Config
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
ENV_PREFIX = "SHELLMUX_"

# ============================================================
# CLI
# ============================================================

# Exit code for a shell run cut short by its wait bound, as timeout(1) reports
TIMED_OUT_EXIT_CODE = 124
