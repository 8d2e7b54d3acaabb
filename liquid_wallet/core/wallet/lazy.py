"""Lazily built, memoized async resources (SDK, algod client, providers)."""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union


logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyResource(Generic[T]):
    """
    Builds a value on first ``get()`` and returns the same value afterwards.

    Concurrent first calls share one initialization: the factory runs under an
    asyncio.Lock and the value is re-checked after the lock is acquired. A
    failed initialization leaves the cell empty so the next call retries.
    """

    def __init__(self, factory: Callable[[], Union[T, Awaitable[T]]], name: str = "resource"):
        self._factory = factory
        self._name = name
        self._value: Optional[T] = None
        self._initialized = False
        # Created on first get() so it binds to the loop that uses it
        self._lock: Optional[asyncio.Lock] = None

    async def get(self) -> T:
        if self._initialized:
            return self._value  # type: ignore[return-value]

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            if not self._initialized:
                logger.debug(f"Initializing {self._name}")
                value = self._factory()
                if inspect.isawaitable(value):
                    value = await value
                self._value = value
                self._initialized = True
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        self._value = None
        self._initialized = False
