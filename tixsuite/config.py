"""
Design (config.py)
- Purpose: Centralize constants and configuration.
- Inputs: None.
- Outputs: Constants (storage keys, bounds, defaults, durations).
- Side effects: None.
- Thread-safety: N/A (read-only constants).
"""

APP_TITLE = "Tix/Voucher Suite"

# Persistence: logical keys inside the key-value store
STORAGE_KEY = "tix-voucher-suite-v1"
SETTINGS_KEY = "tix-voucher-settings-v1"

# Persistence: filename for the JSON-backed store (path resolved in storage module)
DATA_FILENAME = "tixsuite-data.json"
DATA_DIR_NAME = "Tix Voucher Suite"

## Generation bounds (product decision, override per ledger if needed)
MIN_GENERATE_COUNT = 1
MAX_GENERATE_COUNT = 200
DEFAULT_GENERATE_COUNT = 10
DEFAULT_PREFIX = "TIX"
NUMBER_WIDTH = 6          # TIX-000001

DEFAULT_ORGANIZATION_NAME = "My Organization"
DEFAULT_MAX_USERS = 1
MAX_USERS_RANGE = (1, 20)  # advisory only, nothing enforces it

EXPORT_VERSION = 1
EXPORT_FILENAME_PREFIX = "tix-voucher-export-"

# Toasts auto-dismiss after this many seconds; desktop notifications use their own timeout
TOAST_DURATION_SEC = 3
DESKTOP_NOTIFY_TIMEOUT_SEC = 5

SCAN_HISTORY_SIZE = 10
CAMERA_POLL_INTERVAL_SEC = 0.2

# maximum number of log lines kept in the Logs panel (oldest trimmed)
LOG_MAX_LINES = 1000
