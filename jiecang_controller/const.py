"""Constants for Jiecang desk controllers (Lierda LSD4BT BLE module)."""

# === LIERDA BLE UUIDS ===
UUID_SERVICE = "0000fe60-0000-1000-8000-00805f9b34fb"
UUID_DATA_IN = "0000fe61-0000-1000-8000-00805f9b34fb"  # commands are written here
UUID_DATA_OUT = "0000fe62-0000-1000-8000-00805f9b34fb"  # frames are notified here

# === TIMING (seconds) ===
POLL_INTERVAL = 0.2
SETTLE_DELAY = 0.2
OPERATION_TIMEOUT = 60.0
CONNECT_TIMEOUT = 30.0
CONNECT_RETRIES = 2
SCAN_TIMEOUT = 10.0
INITIAL_STATE_TIMEOUT = 2.0

# === PRESETS ===
PRESETS = (1, 2, 3)
