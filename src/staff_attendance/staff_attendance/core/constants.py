"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60

# The storage query interface never returns more rows than this per request.
DEFAULT_MONTHLY_PAGE_SIZE = 1000

DEFAULT_AUTOSAVE_DELAY_MS = 600

DEFAULT_ORG_TIMEZONE = "America/New_York"
