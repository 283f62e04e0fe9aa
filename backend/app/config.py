"""App configuration from environment."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root for phonetic, dictionary, server, sources
ROOT_DIR = Path(__file__).resolve().parent.parent.parent

# Load .env from backend directory
load_dotenv(str(ROOT_DIR / "backend" / ".env"))

# DB (food records and rebuild job rows)
DATABASE_URL = os.environ.get(
    "FOODINDEX_DATABASE_URL", f"sqlite:///{ROOT_DIR / 'backend' / 'data' / 'foodindex.db'}"
)
if DATABASE_URL.startswith("sqlite:///") and not os.environ.get("FOODINDEX_DATABASE_URL"):
    (ROOT_DIR / "backend" / "data").mkdir(parents=True, exist_ok=True)

# Snapshots of published indices
STORAGE_DIR = Path(os.environ.get("FOODINDEX_STORAGE_DIR", str(ROOT_DIR / "backend" / "data" / "index")))
USE_SQLITE_SNAPSHOTS = os.environ.get("FOODINDEX_USE_SQLITE_SNAPSHOTS", "0").lower() in ("1", "true", "yes")

# Locale configuration file; empty means built-in defaults only
LOCALES_CONFIG = os.environ.get("FOODINDEX_LOCALES_CONFIG", str(ROOT_DIR / "data" / "locales.json")) or None

# Rebuild policy
REBUILD_MAX_ATTEMPTS = int(os.environ.get("FOODINDEX_MAX_ATTEMPTS", 3))
REBUILD_BACKOFF_BASE = float(os.environ.get("FOODINDEX_BACKOFF_BASE", 0.5))
REBUILD_BACKOFF_MAX = float(os.environ.get("FOODINDEX_BACKOFF_MAX", 30.0))
DEGRADED_THRESHOLD = float(os.environ.get("FOODINDEX_DEGRADED_THRESHOLD", 0.1))
REBUILD_WORKERS = int(os.environ.get("FOODINDEX_WORKERS", 2))
# Seconds between periodic rebuilds of all locales; 0 disables
REBUILD_INTERVAL = float(os.environ.get("FOODINDEX_REBUILD_INTERVAL", 0))

# Scoring weights
WEIGHT_EXACT = float(os.environ.get("FOODINDEX_WEIGHT_EXACT", 1.0))
WEIGHT_SYNONYM = float(os.environ.get("FOODINDEX_WEIGHT_SYNONYM", 0.6))
WEIGHT_PHONETIC = float(os.environ.get("FOODINDEX_WEIGHT_PHONETIC", 0.3))
WEIGHT_LENGTH_PENALTY = float(os.environ.get("FOODINDEX_WEIGHT_LENGTH_PENALTY", 0.1))

# Input validation
MAX_SEARCH_QUERY_LENGTH = int(os.environ.get("FOODINDEX_MAX_QUERY_LENGTH", 500))
DEFAULT_SEARCH_LIMIT = int(os.environ.get("FOODINDEX_DEFAULT_LIMIT", 20))
MAX_SEARCH_LIMIT = int(os.environ.get("FOODINDEX_MAX_LIMIT", 100))

LOG_LEVEL = os.environ.get("FOODINDEX_LOG_LEVEL", "INFO").upper()
