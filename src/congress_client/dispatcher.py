from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

import requests
from requests import RequestException
from requests.adapters import HTTPAdapter

from .config import RESPONSE_FORMAT, ClientConfig
from .envelope import RequestDescriptor
from .utils import LOGGER_NAME, redact_params


@dataclass(frozen=True)
class RawResponse:
    """A 2xx answer, untouched."""
    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""


@dataclass(frozen=True)
class RawFailure:
    """
    A non-2xx answer, or a transport problem when ``status`` is None.

    Body and headers are kept verbatim for classification.
    """
    url: str
    status: Optional[int]
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""
    network_error: Optional[str] = None


RawOutcome = Union[RawResponse, RawFailure]
ACCEPT_HEADERS = {"Accept": "application/json"}


def join_url(base_url: str, path: str) -> str:
    """Join with exactly one slash, whatever slashes either side carries."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class Dispatcher:
    """
    Sends exactly one GET per ``send`` call with credentials and defaults merged in.

    No retries and no classification happen here; the outcome is reported raw.

    requests blocks, so each send runs on a thread pool owned by this dispatcher
    rather than on asyncio's shared default executor. ``config.max_concurrency``
    sizes both that pool and the connection pool of a session created here; it is
    the number of HTTP exchanges that can be on the wire at once. A call abandoned
    by its caller still holds its worker until the exchange ends (at most
    ``config.timeout`` seconds).
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=config.max_concurrency,
                                  pool_maxsize=config.max_concurrency)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session
        self.executor = ThreadPoolExecutor(max_workers=config.max_concurrency,
                                           thread_name_prefix="congress-client")
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def build_params(self, descriptor: RequestDescriptor) -> Dict[str, Union[str, int, List[str]]]:
        p: Dict[str, Union[str, int, List[str]]] = dict(self.config.default_params)
        p.update({k: v for k, v in descriptor.params.items() if v is not None})
        p["api_key"] = self.config.api_key
        p["format"] = RESPONSE_FORMAT
        return p

    def build_url(self, descriptor: RequestDescriptor) -> str:
        return join_url(self.config.base_url, descriptor.path)

    def _send_blocking(self, url: str, params: Dict[str, Union[str, int, List[str]]]) -> RawOutcome:
        try:
            resp = self.session.request("GET", url, params=params, headers=ACCEPT_HEADERS,
                                        timeout=self.config.timeout)
        except (requests.ConnectionError, requests.Timeout, RequestException) as e:
            self.logger.warning(f"Request error for {url}: {type(e).__name__}: {e}")
            return RawFailure(url=url, status=None, network_error=f"{type(e).__name__}: {e}")

        headers = dict(resp.headers)
        if 200 <= resp.status_code < 300:
            return RawResponse(url=url, status=resp.status_code, headers=headers, text=resp.text)
        return RawFailure(url=url, status=resp.status_code, headers=headers, text=resp.text)

    async def send(self, descriptor: RequestDescriptor) -> RawOutcome:
        url = self.build_url(descriptor)
        params = self.build_params(descriptor)
        self.logger.debug(f"GET {url} params={redact_params(params)}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self._send_blocking, url, params)

    def close(self) -> None:
        self.executor.shutdown(wait=False)
        self.session.close()
