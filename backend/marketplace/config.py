import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class StoreConfig:
    """Where the marketplace documents live."""

    db_path: str
    database_id: str
    users_collection_id: str
    services_collection_id: str
    bookings_collection_id: str


def load_store_config() -> StoreConfig:
    default_db = str(Path(__file__).resolve().parents[1] / "data" / "marketplace.sqlite3")
    return StoreConfig(
        db_path=os.getenv("MARKETPLACE_DB_PATH", default_db),
        database_id=os.getenv("MARKETPLACE_DATABASE_ID", "marketplace"),
        users_collection_id=os.getenv("MARKETPLACE_USERS_COLLECTION_ID", "users"),
        services_collection_id=os.getenv("MARKETPLACE_SERVICES_COLLECTION_ID", "services"),
        bookings_collection_id=os.getenv("MARKETPLACE_BOOKINGS_COLLECTION_ID", "bookings"),
    )


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SERVICES_LIST_LIMIT = _env_int("MARKETPLACE_SERVICES_LIST_LIMIT", 100)
ENFORCE_BOOKING_TRANSITIONS = _env_bool("MARKETPLACE_ENFORCE_BOOKING_TRANSITIONS", False)
