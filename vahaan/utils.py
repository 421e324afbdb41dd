# vahaan/utils.py
"""Shared utilities: logging setup, identifiers and timestamps."""
import os
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("vahaan")


def new_id() -> str:
    return str(uuid.uuid4())


def canonical_id(value: str) -> Optional[str]:
    """Lowercase hyphenated form of a UUID string, or None when it is not one."""
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        return None


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round halves upwards: 2.5 -> 3, -2.5 -> -2."""
    return math.floor(value + 0.5)
