from __future__ import annotations
from typing import Any, Dict, Optional
import logging

import httpx

from aquagrowth.advisory.prompt import build_prompt
from aquagrowth.config.env import AdvisoryConfig, get_advisory_config
from aquagrowth.metrics.cumulative import CumulativePerformance
from aquagrowth.metrics.interval import IntervalMetrics
from aquagrowth.records.models import Batch, Sample

logger = logging.getLogger(__name__)

NO_ANALYSIS = "No analysis generated."


class AdvisoryUnavailable(RuntimeError):
    """The text-generation service could not be reached or refused the request."""


def build_generate_url(cfg: AdvisoryConfig) -> str:
    return f"{cfg.base_url.rstrip('/')}/models/{cfg.model}:generateContent"


def build_request_body(prompt: str) -> Dict[str, Any]:
    return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}


def parse_generate_response(payload: Dict[str, Any]) -> Optional[str]:
    """Text of the first candidate, or None when the reply carries none."""
    candidates = payload.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    return text.strip() or None


def analyze_growth(
    batch: Batch,
    latest: Sample,
    interval: IntervalMetrics,
    cumulative: CumulativePerformance,
    cfg: AdvisoryConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> str:
    cfg = cfg or get_advisory_config()
    if not cfg.api_key:
        raise AdvisoryUnavailable("GEMINI_API_KEY is not configured")

    body = build_request_body(build_prompt(batch, latest, interval, cumulative))
    try:
        with httpx.Client(timeout=cfg.timeout_sec, transport=transport) as client:
            resp = client.post(build_generate_url(cfg), json=body, headers={"x-goog-api-key": cfg.api_key})
            resp.raise_for_status()
            payload = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("advisory request for batch %s failed: %s", batch.id, e)
        raise AdvisoryUnavailable(str(e)) from e

    return parse_generate_response(payload) or NO_ANALYSIS
