"""Resilience utilities for tracker startup checks.

User-facing record store calls are never retried automatically: a failure is
surfaced to the caller, who offers a manual retry. The policy below is only
for startup connectivity checks (record store, Redis device storage).
"""

import logging

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

logger = logging.getLogger(__name__)


# Standard retry policy for startup connections
# - Wait 2^x * 1 seconds between retries (2s, 4s, 8s, 16s)
# - Stop after 5 attempts
# - Re-raise the exception if all retries fail
service_startup_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=16),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
