"""Retry policy for connecting to the durable store.

Only the startup PING is retried. Live write-through calls are not; their
failures are logged and the next rehydration reconciles the store.
"""

import logging

from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

# 5 attempts, 2^x seconds apart clamped to 2..32s, then the last error propagates
service_startup_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=32),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
