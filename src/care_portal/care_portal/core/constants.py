"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RESIDENT_LOG_LIMIT = 50
DEFAULT_LOG_LIMIT = 100
DEFAULT_ADMIN_LOG_LIMIT = 20
DEFAULT_AUDIT_LIMIT = 1000
RECENT_ACTIVITY_COUNT = 5
RECENT_LOG_DAYS = 7

ISP_DUE_DAYS = 30

PAIRING_TOKEN_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PAIRING_TOKEN_LENGTH = 8
PAIRING_TOKEN_TTL_MINUTES = 15
KIOSK_DEVICE_ID_HEX_LENGTH = 16
KIOSK_AUDIT_EVENTS = ("selfie", "auto-lock", "kiosk_unlock", "kiosk_lock")
KIOSK_AUDIT_DETAILS_MAX = 500

INVITE_TTL_HOURS = 24
RESET_TOKEN_TTL_MINUTES = 60
MIN_PASSWORD_LENGTH = 8

DEFAULT_ALERT_WEEKDAY = 1
DEFAULT_ALERT_HOUR = 9
DEFAULT_ALERT_MINUTE = 0

SYSTEM_DEVICE_ID = "system"
WEB_DEVICE_ID = "web"
WEB_BROWSER_DEVICE_ID = "web-browser"

ISP_REVIEW_DAYS = 180
FIRE_EVAC_REVIEW_DAYS = 365
COMPLIANCE_DUE_SOON_DAYS = 30

LONG_SHIFT_HOURS = 12
MISSED_CLOCK_OUT_HOURS = 16
TIME_EXCEPTION_LOOKBACK_DAYS = 14
