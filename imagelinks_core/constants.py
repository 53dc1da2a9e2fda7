"""Core Constants"""

# Store keys
KEY_IMAGE_LIST = "images_list"
KEY_API_HITS = "api_hits"
SESSION_KEY_PREFIX = "session_"
SESSION_VALID_MARKER = "valid"

# Record normalization
DEFAULT_TAG = "default"
VALID_URL_SCHEMES = ("http://", "https://")

# Selection
RATIO_TOLERANCE = 0.05

# Liveness sweep
PROBE_TIMEOUT_SECONDS = 5.0
DEFAULT_SWEEP_CONCURRENCY = 32
MAX_SWEEP_CONCURRENCY = 512
PROBE_USER_AGENT = "imagelinks-sweep/1.0"

# Session cookie
SESSION_COOKIE_NAME = "session_token"
DEFAULT_SESSION_EXPIRY_SECONDS = 3600
