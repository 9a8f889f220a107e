"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"
DEFAULT_LOCALE = "es-AR"
DEFAULT_WEEK_STARTS_ON = 1

# Spreadsheet rows start at 1 and the first row holds the headers.
HEADER_ROW_OFFSET = 2

DEFAULT_MAX_UPLOAD_MB = 5
DEFAULT_CLEANUP_DAYS = 365
MIDNIGHT = "00:00"

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
HHMM_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"

APP_VERSION = "1.0.0"
