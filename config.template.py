# Album List Playlist Builder Configuration Template
# Copy this file to config.py and update with your settings.
# Without a config.py, the same names are read from the environment
# (a .env file in the project root is loaded first).

# ========== SPOTIFY APPLICATION ==========
# From https://developer.spotify.com/dashboard (no client secret needed)
SPOTIFY_CLIENT_ID = "YOUR_CLIENT_ID_HERE"

# Must match a redirect URI registered for the app. The local receiver binds
# to this host and port and answers exactly one request on this path.
SPOTIFY_REDIRECT_URI = "http://127.0.0.1:5173/callback"

SPOTIFY_SCOPES = "playlist-modify-private playlist-modify-public"

# ========== AUTHORIZATION ==========
# Seconds to wait for the browser redirect; None waits indefinitely
AUTH_TIMEOUT = None

# ========== SEARCH ==========
SEARCH_LIMIT = 10               # Albums fetched per search query

# ========== API BEHAVIOUR ==========
REQUEST_TIMEOUT = 30            # Seconds per HTTP request
MAX_RETRIES = 3                 # Attempts for rate-limited / 5xx responses
RETRY_DELAY = 2.0               # Base delay for exponential backoff

# ========== PLAYLIST ==========
PLAYLIST_DESCRIPTION = "Generated from album list"

# ========== LOGGING SETTINGS ==========
LOG_LEVEL = "INFO"              # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
