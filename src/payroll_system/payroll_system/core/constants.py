"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Jurisdictional payroll rules live in ``payroll.policy`` instead.
"""

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 200

# Attendance day classification (hours worked in one record)
FULL_DAY_HOURS = 7
HALF_DAY_HOURS = 4

# Hours beyond this in a single record count as overtime on check-out
STANDARD_DAY_HOURS = 8

DEFAULT_NATIONALITY = "vietnamese"
DEFAULT_CONTRACT_STATUS = "official"

ALLOWANCE_FIELDS = ("food", "clothes", "parking", "fuel", "house_rent", "phone")
