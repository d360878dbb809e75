from __future__ import annotations
import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StoreConfig:
    data_file: str | None = None


def get_store_config() -> StoreConfig:
    return StoreConfig(data_file=os.getenv("AQUAGROWTH_DATA_FILE") or None)


@dataclass(frozen=True)
class AdvisoryConfig:
    api_key: str | None = None
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_sec: float = 30.0


def get_advisory_config() -> AdvisoryConfig:
    return AdvisoryConfig(
        api_key=os.getenv("GEMINI_API_KEY") or None,
        model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        base_url=os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
        timeout_sec=float(os.getenv("ADVISORY_TIMEOUT_SEC", "30")),
    )


def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
