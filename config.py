import os
from functools import lru_cache
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


class Settings:
    def __init__(
        self,
        database_url: str,
        static_dir: Path,
        log_level: str,
        auto_create_schema: bool,
        seed_defaults: bool,
    ) -> None:
        self.database_url = database_url
        self.static_dir = static_dir
        self.log_level = log_level
        self.auto_create_schema = auto_create_schema
        self.seed_defaults = seed_defaults


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("BUDGET_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    database_url = os.getenv("BUDGET_DATABASE_URL")
    if not database_url:
        default_db = _ensure_data_dir() / "budget.db"
        database_url = f"sqlite:///{default_db}"
    static_dir = Path(os.getenv("BUDGET_STATIC_DIR", str(BASE_DIR / "static")))
    log_level = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
    return Settings(
        database_url=database_url,
        static_dir=static_dir,
        log_level=log_level,
        auto_create_schema=_env_flag("BUDGET_AUTO_CREATE_SCHEMA", "1"),
        seed_defaults=_env_flag("BUDGET_SEED_DEFAULTS", "0"),
    )
