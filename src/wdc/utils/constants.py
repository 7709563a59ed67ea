"""WDC Constants and Reporting Values."""

# Release tag reported to bid endpoints as the request source
REPO_AND_VERSION: str = "wdc_prebid_1.0.0"

# Analytics adapter registration code
ANALYTICS_ADAPTER_CODE: str = "ga"

# Default name of the reporting global when no provider is given
DEFAULT_SINK_NAME: str = "ga"

# Sink call shape: (tracker_send, HIT_TYPE, category, action, label, value?, options)
HIT_TYPE: str = "event"

# Reporting categories
BIDS_CATEGORY: str = "Prebid.js Bids"
LOAD_TIME_DISTRIBUTION_CATEGORY: str = "Prebid.js Load Time Distribution"
CPM_DISTRIBUTION_CATEGORY: str = "Prebid.js CPM Distribution"
ROLLUP_CATEGORY: str = "WDC_PREBID"

# Reporting actions
ACTION_REQUESTS: str = "Requests"
ACTION_BIDS: str = "Bids"
ACTION_BID_LOAD_TIME: str = "Bid Load Time"
ACTION_TIMEOUTS: str = "Timeouts"
ACTION_WINS: str = "Wins"
ACTION_ROLLUP: str = "Bid Round Total"

# Placement naming convention counted towards the rollup sum
DEFAULT_ROLLUP_PLACEMENT_PATTERN: str = "gpt-ad"

# Load time buckets: (lower bound in ms, label), ascending.
# Each bucket covers [lower, next lower).
LOAD_TIME_BUCKETS: list[tuple[float, str]] = [
    (0, "0-200ms"),
    (200, "0200-300ms"),
    (300, "0300-400ms"),
    (400, "0400-500ms"),
    (500, "0500-600ms"),
    (600, "0600-800ms"),
    (800, "0800-1000ms"),
    (1000, "1000-1200ms"),
    (1200, "1200-1500ms"),
    (1500, "1500-2000ms"),
    (2000, "2000ms above"),
]

# CPM buckets in currency units, same layout as LOAD_TIME_BUCKETS
CPM_BUCKETS: list[tuple[float, str]] = [
    (0, "$0-0.5"),
    (0.5, "$0.5-1"),
    (1, "$1-1.5"),
    (1.5, "$1.5-2"),
    (2, "$2-2.5"),
    (2.5, "$2.5-3"),
    (3, "$3-4"),
    (4, "$4-6"),
    (6, "$6-8"),
    (8, "$8 above"),
]
