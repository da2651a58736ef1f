import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get('GAMERBOY_CONFIG_DIR', os.path.join(APP_DIR, 'config'))
DB_FILE = os.path.join(CONFIG_DIR, 'gamerboy.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')

GAMERBOY_DB = 'sqlite:///' + DB_FILE

BUILD_VERSION = '20261018_0900'

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
DEFAULT_RELATED_LIMIT = 4
DEFAULT_FEATURED_LIMIT = 10

# Category filter value meaning "no filter"
ALL_CATEGORIES = 'all'

# Ratings
MIN_RATING = 1
MAX_RATING = 5

# Largest id the database integer columns can hold (signed 64 bit)
MAX_ID = 2 ** 63 - 1

# Response cache TTLs (seconds), mirrored by the Cache-Control headers below
CACHE_TTL_GAMES = 3600
CACHE_TTL_GAMES_BY_IDS = 7200
CACHE_TTL_RATINGS = 300

CACHE_CONTROL_GAMES = 'public, s-maxage=3600, stale-while-revalidate=7200'
CACHE_CONTROL_GAMES_BY_IDS = 'public, s-maxage=7200, stale-while-revalidate=14400'
CACHE_CONTROL_RATINGS = 'public, s-maxage=300, stale-while-revalidate=600'
CACHE_CONTROL_NO_STORE = 'no-store'

# Rate limiting: (max requests, window seconds)
RATE_LIMIT_PRESETS = {
    'strict': (10, 60),
    'moderate': (100, 60),
    'relaxed': (300, 60),
}
UNKNOWN_CLIENT = 'unknown'

GAME_PLAYER_URL = 'https://html5.gamedistribution.com'

# Client side bookkeeping
FAVORITES_KEY = 'gamerboy_favorites'
RECENTLY_PLAYED_KEY = 'gamerboy_recently_played'
FINGERPRINT_KEY = 'user_fingerprint'
MAX_RECENTLY_PLAYED = 20

DEFAULT_SETTINGS = {
    "database": {
        "url": GAMERBOY_DB,
    },
    "cache": {
        "redis_url": None,
    },
    "rate_limit": {
        "enabled": True,
        "storage_uri": "memory://",
    },
    "site": {
        "base_url": "",
    },
    "logging": {
        "level": "INFO",
        "format": "console",
    },
}
