"""Exceptions a reset step logs and continues past."""

import asyncio

from redis.exceptions import RedisError

from ..exceptions import ApplicationError

RESET_STEP_ERRORS = (
    ApplicationError,
    ConnectionError,
    OSError,
    RedisError,
    RuntimeError,
    ValueError,
    TimeoutError,
    asyncio.TimeoutError,
)

__all__ = ["RESET_STEP_ERRORS"]
