import logging

from prometheus_client import Counter
from slowapi import Limiter
from slowapi.util import get_remote_address

from gstledger.core.config import settings

logger = logging.getLogger(__name__)

_PROM_RATE_LIMIT = Counter("gstledger_rate_limit_exceeded_events", "Rate limit exceeded events (handler invocations)")


def _storage_uri() -> str:
    if settings.ENV.lower() != "prod":
        logger.info("Rate limiter using in-memory storage (dev/test mode)")
        return "memory://"
    return settings.RATE_LIMIT_STORAGE_URI or "memory://"


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=_storage_uri(),
)


def increment_rate_limit_exceeded():
    _PROM_RATE_LIMIT.inc()
