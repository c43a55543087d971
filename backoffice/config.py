from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _get_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value else None


def _get_bool(name: str, default: bool = False) -> bool:
    value = _get_env(name)
    if value is None:
        return default
    return value.lower() in _TRUTHY


def _get_int(name: str, default: int) -> int:
    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid %s value: %s", name, value)
        return default


APP_VERSION = _get_env("APP_VERSION") or "0.1.0"
LOG_LEVEL = (_get_env("LOG_LEVEL") or "INFO").upper()
SEED_SAMPLE_DATA = _get_bool("SEED_SAMPLE_DATA", default=True)
PAYMENT_TERMS_DAYS = _get_int("PAYMENT_TERMS_DAYS", 30)
DOCUMENT_ALERT_DAYS = _get_int("DOCUMENT_ALERT_DAYS", 30)
COMPANY_NAME = _get_env("COMPANY_NAME") or "Vahan Sarthi Logistics"
COMPANY_GSTIN = _get_env("COMPANY_GSTIN") or ""
