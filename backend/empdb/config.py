import os
from pathlib import Path

# === Base project path ===
PROJECT_ROOT = Path(__file__).resolve().parents[1]

# === Data directory (relative database paths resolve here) ===
DATA_DIR = Path(os.environ.get("EMPDB_DATA_DIR", PROJECT_ROOT / "out"))

# === Default database file ===
DEFAULT_DB_PATH = Path(os.environ.get("EMPDB_PATH", DATA_DIR / "employees.db"))

# === Logging ===
LOG_LEVEL = os.environ.get("EMPDB_LOG_LEVEL", "INFO").upper()
LOG_PATH = Path(os.environ["EMPDB_LOG_PATH"]) if os.environ.get("EMPDB_LOG_PATH") else None

# === Seconds read-only requests wait for a writer's lock ===
LOCK_TIMEOUT = float(os.environ.get("EMPDB_LOCK_TIMEOUT", "1.0"))


def resolve_db_path(path=None) -> Path:
    """Absolute path for a database, relative ones taken from DATA_DIR."""
    if not path:
        return DEFAULT_DB_PATH
    p = Path(path).expanduser()
    return p if p.is_absolute() else DATA_DIR / p