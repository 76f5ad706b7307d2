import json
import os

# Load configuration from config.json
_config = None


def load_config():
    global _config
    if _config is None:
        config_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config.json")
        with open(config_path, "r", encoding="utf-8") as f:
            _config = json.load(f)
    return _config


# Load configuration
config = load_config()
DB_PATH = os.getenv("SOUTU_DB_PATH") or config["DB_PATH"]

# Image proxy constants
IMAGE_PROXY_PREFIX = config.get("IMAGE_PROXY_PREFIX", "/tgimg")
IMAGE_PROXY_TTL_SEC = int(config.get("IMAGE_PROXY_TTL_SEC", 12 * 60 * 60))
IMAGE_PROXY_CACHE_TTL_SEC = int(config.get("IMAGE_PROXY_CACHE_TTL_SEC", 7 * 24 * 3600))
IMAGE_PROXY_RATE_LIMIT = int(config.get("IMAGE_PROXY_RATE_LIMIT", 3))
IMAGE_PROXY_RATE_WINDOW = int(config.get("IMAGE_PROXY_RATE_WINDOW", 60))
IMAGE_PROXY_UPSTREAM_TIMEOUT_SEC = float(config.get("IMAGE_PROXY_UPSTREAM_TIMEOUT_SEC", 20))
FILE_PATH_CACHE_TTL = int(config.get("FILE_PATH_CACHE_TTL", 7 * 24 * 3600))

# Query parameter names of a signed proxy URL, in canonical order
PARAM_FILE_ID = "file_id"
PARAM_EXPIRY = "exp"
PARAM_TOKEN = "token"
PARAM_SIGNATURE = "sig"

# Bot reply configuration
SEARCH_REPLY_TEXT = config.get("SEARCH_REPLY_TEXT", "Reverse image search, pick an engine below.")
SEARCH_BUTTONS = config.get(
    "SEARCH_BUTTONS",
    [
        {"text": "Google Lens", "engine": "google"},
        {"text": "Yandex", "engine": "yandex"},
    ],
)
SEARCH_USAGE_TEXT = "Send a photo, or reply to one with /s, to search for it."
START_TEXT = (
    "Hi! Send me a photo (or reply to one in a group with /s) and I'll give you "
    "reverse image search links for it."
)
