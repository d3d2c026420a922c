"""Sentry setup for the Karbon API."""

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from karbon.core.errors import Conflict, InvalidDateRange, InvalidValue, NotEligible, NotFound

logger = structlog.get_logger()

_REDACTED = "[REDACTED]"
_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}

# Domain errors are answered with a 4xx envelope and are not incidents
_EXPECTED_ERRORS = (NotFound, InvalidValue, InvalidDateRange, Conflict, NotEligible)


def _scrub_event(event: dict, hint: dict) -> dict | None:
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], _EXPECTED_ERRORS):
        return None

    headers = event.get("request", {}).get("headers", {})
    for header in list(headers):
        if header.lower() in _SENSITIVE_HEADERS:
            headers[header] = _REDACTED

    # httpx breadcrumbs for the AI gateway carry the bearer token in their data
    for crumb in event.get("breadcrumbs", {}).get("values", []):
        data = crumb.get("data") or {}
        for key in list(data):
            if key.lower() in _SENSITIVE_HEADERS:
                data[key] = _REDACTED
    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry before the FastAPI app is created; no-op without a DSN."""
    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    traces_sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            HttpxIntegration(),
        ],
        send_default_pii=False,
        before_send=_scrub_event,
    )
    sentry_sdk.set_tag("service", "karbon-api")
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=traces_sample_rate)
