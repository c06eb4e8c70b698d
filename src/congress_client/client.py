from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, AsyncIterator, List, Mapping, Optional

import requests

from .config import ClientConfig
from .dispatcher import Dispatcher
from .envelope import Envelope, QueryValue, RequestDescriptor
from .errors import CongressApiError, ErrorKind
from .normalizer import as_collection, normalize
from .pagination import fetch_next, fetch_previous, iter_items, iter_pages
from .retry import RetryEngine, RetryPolicy, Sleep
from .utils import LOGGER_NAME, logger_setup


class CongressClient:
    """
    Async request engine for the Congress.gov v3 API.

    One instance is meant to be built at startup and handed to whatever needs
    it. The only state it holds is its immutable config and the pooled HTTP
    session, so concurrent calls need no locking. Every call either returns an
    Envelope or raises CongressApiError.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        sleep: Optional[Sleep] = None,
        rng: Optional[random.Random] = None,
        log_level: int = logging.INFO,
    ):
        self.config = config
        self.logger = logger_setup(logger_name=LOGGER_NAME, log_level=log_level)
        self.dispatcher = Dispatcher(config, session=session, logger=self.logger)
        self.retry = RetryEngine(self.dispatcher, RetryPolicy.from_config(config),
                                 sleep=sleep, rng=rng, logger=self.logger)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **kwargs: Any) -> "CongressClient":
        return cls(ClientConfig.from_env(dotenv_path), **kwargs)

    # ------------- lifecycle -------------
    def close(self) -> None:
        self.dispatcher.close()

    def __enter__(self) -> "CongressClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> "CongressClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.close()

    # ------------- core -------------
    async def _run(self, descriptor: RequestDescriptor, data_key: Optional[str]) -> Envelope[Any]:
        outcome = await self.retry.execute(descriptor)
        if isinstance(outcome, CongressApiError):
            raise outcome
        result = normalize(outcome, base_url=self.config.base_url, data_key=data_key)
        if isinstance(result, CongressApiError):
            raise result
        return result

    async def request(self, descriptor: RequestDescriptor, *, data_key: Optional[str] = None,
                      timeout: Optional[float] = None) -> Envelope[Any]:
        """
        Run one logical call: dispatch, retry transient failures, normalize.

        ``timeout`` bounds the whole call, retries and backoff included. When it
        expires the call is abandoned (no pending retry fires) and a
        NETWORK_ERROR is raised.
        """
        if timeout is None:
            return await self._run(descriptor, data_key)
        try:
            return await asyncio.wait_for(self._run(descriptor, data_key), timeout)
        except asyncio.TimeoutError:
            raise CongressApiError(
                ErrorKind.NETWORK_ERROR,
                f"Call to /{descriptor.path} abandoned after {timeout}s",
            ) from None

    async def get_collection(self, path: str, params: Optional[Mapping[str, QueryValue]] = None, *,
                             data_key: Optional[str] = None,
                             timeout: Optional[float] = None) -> Envelope[List[Any]]:
        """Like ``request`` but ``data`` is always a list."""
        envelope = await self.request(RequestDescriptor(path, params or {}),
                                      data_key=data_key, timeout=timeout)
        return as_collection(envelope)

    # ------------- paging -------------
    async def fetch_next(self, envelope: Envelope[Any], *, timeout: Optional[float] = None) -> Envelope[Any]:
        return await fetch_next(self, envelope, timeout=timeout)

    async def fetch_previous(self, envelope: Envelope[Any], *,
                             timeout: Optional[float] = None) -> Envelope[Any]:
        return await fetch_previous(self, envelope, timeout=timeout)

    def iter_pages(self, path: str, params: Optional[Mapping[str, QueryValue]] = None, *,
                   data_key: Optional[str] = None,
                   max_pages: Optional[int] = None) -> AsyncIterator[Envelope[List[Any]]]:
        return iter_pages(self, RequestDescriptor(path, params or {}),
                          data_key=data_key, max_pages=max_pages)

    def iter_items(self, path: str, params: Optional[Mapping[str, QueryValue]] = None, *,
                   data_key: Optional[str] = None,
                   max_pages: Optional[int] = None) -> AsyncIterator[Any]:
        return iter_items(self, RequestDescriptor(path, params or {}),
                          data_key=data_key, max_pages=max_pages)
