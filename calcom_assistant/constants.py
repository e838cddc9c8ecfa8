"""Constants shared across the Cal.com assistant modules."""

from __future__ import annotations

from typing import Dict

# -----------------------------------------------------------------------------
# Cal.com API
# -----------------------------------------------------------------------------

CALCOM_API_BASE_URL = "https://api.cal.com"

# Each resource category pins its own cal-api-version header; they are not
# interchangeable.
API_VERSIONS: Dict[str, str] = {
    "schedules": "2024-06-11",
    "eventTypes": "2024-06-14",
    "slots": "2024-09-04",
    "bookings": "2024-08-13",
}

API_VERSION_HEADER = "cal-api-version"


# -----------------------------------------------------------------------------
# Local config and environment
# -----------------------------------------------------------------------------

DEFAULT_TIMEZONE = "Europe/Oslo"

ENV_API_KEY = "CALCOM_API_KEY"
ENV_CONFIG_PATH = "CALCOM_CONFIG"

CONFIG_DIR_NAME = "calcom-cli"
CONFIG_FILE_NAME = "config.json"

CONFIG_DIR_MODE = 0o700
CONFIG_FILE_MODE = 0o600


# -----------------------------------------------------------------------------
# Domain
# -----------------------------------------------------------------------------

# Weekday tokens accepted by the schedules API, in calendar order
WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

MIN_API_KEY_LENGTH = 10
