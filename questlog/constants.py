import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get('QUESTLOG_CONFIG_DIR', os.path.join(APP_DIR, 'config'))
DB_FILE = os.path.join(CONFIG_DIR, 'questlog.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')

QUESTLOG_DB = 'sqlite:///' + DB_FILE

BUILD_VERSION = '20261019_0900'

# Upstream endpoints
TWITCH_TOKEN_URL = 'https://id.twitch.tv/oauth2/token'
IGDB_BASE_URL = 'https://api.igdb.com/v4'
IGDB_IMAGE_URL = 'https://images.igdb.com/igdb/image/upload/{size}/{image_id}.jpg'

# IGDB rejects a limit above this
IGDB_MAX_LIMIT_PER_REQUEST = 500

MODE_TOP_GAMES = 'top-games'
MODE_NEW_RELEASES = 'new-releases'
CATALOG_MODES = (MODE_TOP_GAMES, MODE_NEW_RELEASES)

DEFAULT_SETTINGS = {
    "igdb": {
        "client_id": "",
        "client_secret": "",
        "cover_size": "t_cover_big",
        "timeout": 10,
    },
    "catalog": {
        "cache_ttl": 300,
        "page_size": 20,
        "candidate_limit": IGDB_MAX_LIMIT_PER_REQUEST,
        "baseline_limit": 500,
        "min_votes": 2000,
        "token_expiry_margin": 60,
    },
    "server": {
        "host": "0.0.0.0",
        "port": 8465,
        "rate_limits": ["600 per hour", "60 per minute"],
    },
}

# Per-user preferences
THEMES = [
    {"id": "dark", "label": "Dark"},
    {"id": "midnight", "label": "Midnight"},
    {"id": "purple", "label": "Purple"},
    {"id": "forest", "label": "Forest"},
    {"id": "rose", "label": "Rose"},
    {"id": "light", "label": "Light"},
    {"id": "paper", "label": "Paper"},
]
DEFAULT_THEME = 'dark'
FONTS = ['default', 'readable']
DEFAULT_FONT = 'default'
USERNAME_MAX_LENGTH = 24

# Collection entries
PLAYTHROUGH_STATUSES = [
    'planned',
    'playing',
    'completed',
    'on_hold',
    'dropped',
]
USER_RATING_MIN = 0
USER_RATING_MAX = 10
COMPLETION_MAX = 100
COUNTER_MAX = 1000000
