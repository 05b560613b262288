"""Internal constants shared across the library."""

import re

BASE_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds/"
STATUS_PAGE_URL = "https://new.mta.info/"
USER_AGENT = "pylinestatus/1.0 (+aiohttp)"
API_KEY_HEADER = "x-api-key"

# Only the alerts feed carries delay information.
FEED_IDS: tuple[str, ...] = ("camsys%2Fsubway-alerts",)

SUBWAY_LINES: tuple[str, ...] = (
    "1", "2", "3", "4", "5", "6", "7",
    "A", "B", "C", "D", "E", "F", "G", "J", "L", "M", "N", "Q", "R", "W", "Z",
    "SI",
)  # fmt: skip

# Stays under the upstream 60-second staleness floor.
REFRESH_INTERVAL_MS = 59 * 1000

# Uptime is not reported until a line has been observed for this long.
MIN_BASELINE_MS = 1000

# ------------------------------------------------------------------
# Alert feed classification
# ------------------------------------------------------------------

DELAY_HEADER_PATTERN = re.compile(r"^delays\b", re.IGNORECASE)

# ------------------------------------------------------------------
# Status page scraping
# ------------------------------------------------------------------

SERVICE_STATUS_HEADING = "Service Status"
DELAYS_CATEGORY = "Delays"
LINE_BUTTON_PATTERN = re.compile(r"^(?P<line>[0-9A-Z]{1,2})\s+(?i:subway|train|line)\b")
PAGE_LOAD_TIMEOUT_MS = 30 * 1000
