# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Create a Python project at sentry.io
#   2. Copy DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry(settings) is called from the app lifespan
#   (tasklist/api/app.py); without a DSN nothing is sent.
#
# =============================================================================

from __future__ import annotations

import logging
from functools import partial
from typing import Callable

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from tasklist.config import Settings
from tasklist.core.errors import TasklistError

logger = logging.getLogger(__name__)

SCRUBBED_HEADERS = ("authorization", "cookie")


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,

        # Sample 10% of transactions in prod
        traces_sample_rate=0.1 if settings.is_production else 1.0,

        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],

        # Don't send PII by default
        send_default_pii=False,

        before_send=event_filter(settings),
        before_send_transaction=_filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def event_filter(settings: Settings) -> Callable[[dict, dict], dict | None]:
    """before_send hook that also scrubs the configured token header."""
    return partial(
        _filter_events,
        scrubbed_headers=(*SCRUBBED_HEADERS, settings.auth_header.lower()),
    )


def _filter_events(
    event: dict,
    hint: dict,
    scrubbed_headers: tuple[str, ...] = SCRUBBED_HEADERS,
) -> dict | None:
    """Filter out expected errors and scrub credentials."""
    if "exc_info" in hint:
        exc_type, exc_value, _ = hint["exc_info"]

        # 400/401/404 outcomes are normal traffic
        if isinstance(exc_value, TasklistError):
            return None
        from fastapi import HTTPException
        if isinstance(exc_value, HTTPException) and exc_value.status_code < 500:
            return None

    request = event.get("request")
    if request and "headers" in request:
        headers = request["headers"]
        for key in list(headers.keys()):
            if key.lower() in scrubbed_headers:
                headers[key] = "[Filtered]"

    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Filter out noisy transactions."""
    if event.get("transaction", "") in ("/health", "/healthz"):
        return None
    return event


def set_user(user_id: str) -> None:
    """Set the current user context for error reports."""
    if sentry_sdk.get_client().is_active():
        sentry_sdk.set_user({"id": user_id})
