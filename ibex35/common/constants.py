"""Shared constants: endpoints, payload keys, scan caps and analytic thresholds."""

DEFAULT_API_URL = "https://ibex35-sheets-api.anurnberg.workers.dev"

# Remote endpoints (GET only)
COMPANIES_ENDPOINT = "/api/companies"
NETWORK_ENDPOINT = "/api/network"
SHAREHOLDER_POSITIONS_ENDPOINT = "/api/shareholder-positions"
HISTORICAL_PRICES_ENDPOINT = "/api/historical-prices/company"
NEWS_ENDPOINT = "/api/news"
COMPANY_NEWS_ENDPOINT = "/api/news/company"
NEWS_SENTIMENT_ENDPOINT = "/api/news/sentiment"
LOBBYING_ENDPOINT = "/api/lobbying"
REPORTS_ENDPOINT = "/api/reports"

# Payload keys per endpoint, in priority order (first present key wins)
ENVELOPE_KEYS: dict[str, tuple[str, ...]] = {
    COMPANIES_ENDPOINT: ("data",),
    NETWORK_ENDPOINT: ("directors",),
    SHAREHOLDER_POSITIONS_ENDPOINT: ("shareholderPositions", "positions"),
    HISTORICAL_PRICES_ENDPOINT: ("historicalData",),
    NEWS_ENDPOINT: ("news",),
    COMPANY_NEWS_ENDPOINT: ("news",),
    NEWS_SENTIMENT_ENDPOINT: ("news",),
    LOBBYING_ENDPOINT: ("meetings", "lobbying"),
    REPORTS_ENDPOINT: ("reports",),
}

# Number of constituents in the index. Network density divides by this
# instead of the number of companies actually returned.
INDEX_SIZE = 35

# Outbound call caps for multi-company scans
TOP_PERFORMERS_SCAN_CAP = 20
MARKET_SCAN_CAP = 20
SECTOR_SCAN_CAP = 10

TRADING_DAYS_PER_YEAR = 252

# Herfindahl-Hirschman Index thresholds (strict >)
HHI_SCALE = 10000
HHI_HIGHLY_CONCENTRATED = 2500
HHI_MODERATELY_CONCENTRATED = 1500

# Governance red flags
SEVERITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}
INTERLOCK_FLAG_THRESHOLD = 3
MARKET_DOMINANCE_CAP = 50_000_000_000

# Trend analysis
TREND_THRESHOLD = 0.05
RESISTANCE_ZONE = 0.7
SUPPORT_ZONE = 0.3
FORECAST_WINDOW = 5

# Market direction bands (average % change)
STRONG_MOVE_PCT = 2.0
MILD_MOVE_PCT = 0.5

# Company risk label
LARGE_BOARD_SIZE = 15
SMALL_BOARD_SIZE = 5
SMALL_CAP_THRESHOLD = 1_000_000_000

# Governance score
GOVERNANCE_BASE_SCORE = 8.0
EXCESSIVE_INTERLOCKS = 5

# Opportunity scoring
OPPORTUNITY_BASE_SCORE = 5.0
LOW_PE_THRESHOLD = 15
HIGH_PE_THRESHOLD = 25
LARGE_CAP_THRESHOLD = 10_000_000_000
FAVORED_SECTORS = frozenset({"banking", "technology", "healthcare"})
SCORE_MIN = 0.0
SCORE_MAX = 10.0

# Sector competition
HIGH_COMPETITION_COUNT = 10
MEDIUM_COMPETITION_COUNT = 5
LEADER_RANK = 3
CHALLENGER_RANK = 10

# Overall risk level
HIGH_RISK_SCORE = 7
MEDIUM_RISK_SCORE = 4
DEFAULT_DIMENSION_SCORE = 5.0
