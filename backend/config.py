import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{ROOT_DIR / 'club_portal.db'}")

JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 30))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.environ.get("REFRESH_TOKEN_EXPIRE_DAYS", 7))

# Empty means an in-process cache; "redis://..." shares invalidation across workers.
VIEW_CACHE_URL = os.environ.get("VIEW_CACHE_URL", "").strip()
VIEW_CACHE_TTL_SECONDS = int(os.environ.get("VIEW_CACHE_TTL_SECONDS", 300))

DUPLICATE_REGISTRATION_CHECK = _env_flag("DUPLICATE_REGISTRATION_CHECK", False)

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
