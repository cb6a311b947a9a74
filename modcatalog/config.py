"""
Paths and constants for the mod catalogue service.

Every path can be overridden through an environment variable so that a
deployment (or a test run) can point the service at its own catalogue
file and local storage file without touching the code.
"""

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

DATA_FILE = Path(
    os.environ.get("MODCATALOG_DATA_FILE", PACKAGE_DIR / "data" / "sample_mods.json")
)

# Durable "local storage": one JSON object mapping storage keys to strings.
STORAGE_FILE = Path(
    os.environ.get("MODCATALOG_STORAGE_FILE", Path.cwd() / "data" / "local_storage.json")
)

LOG_LEVEL = os.environ.get("MODCATALOG_LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# Catalogue constants
# ---------------------------------------------------------------------------

DOWNLOAD_STORAGE_KEY = "the-entropy-lab::downloads"

# Pixels kept above the main content region when scrolling to it.
SCROLL_BUFFER = 16

# Size of the "New Uploads" and "Trending Weekly" carousels.
CAROUSEL_LIMIT = 10

FEATURED_TAG = "Featured"

DEFAULT_AUTHOR_NAME = "Night Market Curator"
DEFAULT_THUMBNAIL = "https://picsum.photos/seed/cyberpunk/800/600"
DEFAULT_VERSION = "1.0.0"
DEFAULT_GAME_VERSION = "2.1"
AVATAR_URL_TEMPLATE = "https://avatar.vercel.sh/{author_id}"
