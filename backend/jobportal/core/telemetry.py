"""
Logging and error-telemetry setup.

Sentry is only initialised when SENTRY_DSN is configured; every capture call
below is a no-op otherwise.
"""

import logging
from typing import Any

import sentry_sdk

from jobportal.core.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(debug: bool = False) -> None:
    logger = logging.getLogger("jobportal")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Avoid duplicate handlers when the app is created more than once
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)


def init_sentry(settings: Settings) -> bool:
    if not settings.SENTRY_DSN:
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=True,
        environment="development" if settings.DEBUG else "production",
    )
    logging.getLogger("jobportal").info("✅ Sentry error reporting enabled")
    return True


def report_event(name: str, level: str = "warning", **context: Any) -> None:
    """Send a structured event (tagged with ``event``) to Sentry."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("event", name)
        scope.set_context(name, context)
        sentry_sdk.capture_message(name, level=level)
