from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True, frozen=True)
class Settings:
    database_url: str
    audit_log_limit: int
    audit_sink: str
    audit_user: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./queen_of_hearts.db"),
        audit_log_limit=int(os.getenv("AUDIT_LOG_LIMIT", "1000")),
        audit_sink=os.getenv("AUDIT_SINK", "memory").lower(),
        audit_user=os.getenv("AUDIT_USER", "system"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
