"""Application-wide constants.

These are fixed values that don't change between environments.
For configurable values, see config.py Settings.
"""

# ─────────────────────────────────────────────────────────────
# API Rate Limits (external constraints)
# ─────────────────────────────────────────────────────────────
FINNHUB_RATE_LIMIT_CALLS_PER_MINUTE = 60  # Free tier limit
FMP_RATE_LIMIT_CALLS_PER_MINUTE = 300

# ─────────────────────────────────────────────────────────────
# Market session boundaries (minutes since midnight, local time)
# ─────────────────────────────────────────────────────────────
PRE_MARKET_START = 4 * 60  # 04:00
MARKET_OPEN = 9 * 60 + 30  # 09:30
MARKET_CLOSE = 16 * 60  # 16:00
AFTER_HOURS_END = 20 * 60  # 20:00
DEFAULT_MARKET_TIMEZONE = "America/New_York"

# ─────────────────────────────────────────────────────────────
# Dashboard refresh cadence (seconds)
# ─────────────────────────────────────────────────────────────
REFRESH_MARKET_HOURS = 60.0
REFRESH_EARNINGS_TIME = 30.0
REFRESH_OFF_HOURS = 300.0

# Mock calendars kept per service; older days are regenerated on request
MOCK_CALENDAR_DAYS = 7

# ─────────────────────────────────────────────────────────────
# Gateway Cache-Control max-age (seconds)
# ─────────────────────────────────────────────────────────────
QUOTE_CACHE_MAX_AGE = 60
HISTORY_CACHE_MAX_AGE = 300
FINNHUB_CALENDAR_CACHE_MAX_AGE = 3600  # 1 hour
FMP_CALENDAR_CACHE_MAX_AGE = 300  # 5 minutes
SP500_CACHE_MAX_AGE = 86400  # constituents change rarely

# ─────────────────────────────────────────────────────────────
# Calendar filtering
# ─────────────────────────────────────────────────────────────
# Exchange suffixes that mark a foreign listing (Toronto, Canada CSE,
# Frankfurt/Xetra, Paris, London, Helsinki, Shanghai, Shenzhen, Frankfurt floor)
FOREIGN_EXCHANGE_SUFFIXES = frozenset({"TO", "CN", "DE", "PA", "L", "HE", "SS", "SZ", "F"})
MAX_CLASS_SUFFIX_LENGTH = 2  # BRK.A, BF.B

# ─────────────────────────────────────────────────────────────
# API URL Defaults (used as defaults in Settings)
# ─────────────────────────────────────────────────────────────
DEFAULT_API_BASE_URL = "http://localhost:8000/api"
DEFAULT_FINNHUB_API_URL = "https://finnhub.io/api/v1"
DEFAULT_FMP_API_URL = "https://financialmodelingprep.com/api/v3"
DEFAULT_SERPER_URL = "https://google.serper.dev/search"
DEFAULT_SP500_CSV_URL = (
    "https://raw.githubusercontent.com/datasets/s-and-p-500-companies/main/data/constituents.csv"
)

# ─────────────────────────────────────────────────────────────
# Report analysis
# ─────────────────────────────────────────────────────────────
REPORT_MAX_PROMPT_CHARS = 60_000
REPORT_SEARCH_AVOID = ("seekingalpha", "motleyfool")
REPORT_SEARCH_PREFER = ("investor", "news", "press")
