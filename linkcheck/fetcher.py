"""
HTTP fetch with one overall deadline.

A Fetcher owns one requests.Session configured from an immutable
FetcherConfig. Sessions are not shared between threads: the worker pool
builds one Fetcher per worker.

requests only bounds each socket read, so a server dripping bytes can
outlast any per-read timeout. Each GET therefore runs on a helper thread
and the caller stops waiting once `config.timeout` has elapsed since the
call started, first for the headers and then for the body. A request the
caller walked away from keeps its session; the Fetcher starts a new one.
"""
import logging
import queue
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterator, Mapping, Optional

import requests
import urllib3

from .config import FetcherConfig
from .errors import ParseError, TransportError

log = logging.getLogger(__name__)

# urllib3 lets some URL errors (e.g. LocationParseError) through unwrapped
TRANSPORT_ERRORS = (requests.RequestException, urllib3.exceptions.HTTPError, ValueError, OSError)

_BODY = "body"
_RELEASE = "release"


@dataclass(frozen=True)
class FetchResponse:
    status_code: int
    duration: float  # seconds, call start until headers received
    headers: Mapping[str, str]
    read_body: Callable[[], bytes]

    @property
    def content_type(self) -> str:
        return (self.headers.get("Content-Type") or "").lower()


class _Exchange:
    """One GET on a helper thread. Closes its response, and an orphaned session, when done."""

    def __init__(self, session: requests.Session, url: str, timeout: float):
        self.url = url
        self.response: Optional[requests.Response] = None
        self.error: Optional[Exception] = None
        self.body: Optional[bytes] = None
        self.body_error: Optional[Exception] = None
        self.headers_in = threading.Event()
        self.body_in = threading.Event()
        self._commands: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._finished = False
        self._orphan: Optional[requests.Session] = None
        self._thread = threading.Thread(
            target=self._run, args=(session, timeout),
            name=f"{threading.current_thread().name}-http", daemon=True,
        )
        self._thread.start()

    def _run(self, session: requests.Session, timeout: float):
        try:
            try:
                self.response = session.get(self.url, timeout=timeout, stream=True)
            except Exception as e:
                self.error = e
                return
            finally:
                self.headers_in.set()

            with self.response:
                if self._commands.get() == _BODY:
                    try:
                        self.body = self.response.content
                    except Exception as e:
                        self.body_error = e
                    finally:
                        self.body_in.set()
        finally:
            with self._lock:
                self._finished = True
                orphan = self._orphan
            if orphan is not None:
                orphan.close()

    def request_body(self) -> None:
        self._commands.put(_BODY)

    def release(self) -> None:
        self._commands.put(_RELEASE)

    def orphan(self, session: requests.Session) -> None:
        """Close `session` as soon as this exchange stops using it."""
        with self._lock:
            if not self._finished:
                self._orphan = session
                return
        session.close()


class Fetcher:
    def __init__(self, config: Optional[FetcherConfig] = None):
        self.config = config or FetcherConfig()
        self._session = self._new_session()

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(self.config.headers)
        return session

    def _abandon(self, exchange: _Exchange) -> None:
        exchange.orphan(self._session)
        self._session = self._new_session()

    @contextmanager
    def fetch(self, url: str) -> Iterator[FetchResponse]:
        """
        GET `url` and yield the response once headers are in.
        The body is only read through `read_body()` and is always
        released when the block exits.
        Raises TransportError if no response arrived before the deadline.
        """
        timeout = self.config.timeout
        start = time.perf_counter()
        exchange = _Exchange(self._session, url, timeout)
        try:
            if not exchange.headers_in.wait(timeout):
                self._abandon(exchange)
                raise TransportError(url, TimeoutError(f"no response within {timeout:g}s"))
            duration = time.perf_counter() - start

            if exchange.error is not None:
                if isinstance(exchange.error, TRANSPORT_ERRORS):
                    raise TransportError(url, exchange.error) from exchange.error
                raise exchange.error

            response = exchange.response
            log.debug("GET %s -> %s in %.3fs", url, response.status_code, duration)
            yield FetchResponse(
                status_code=response.status_code,
                duration=duration,
                headers=response.headers,
                read_body=partial(self._read_body, exchange, start + timeout),
            )
        finally:
            exchange.release()

    def _read_body(self, exchange: _Exchange, deadline: float) -> bytes:
        exchange.request_body()
        if not exchange.body_in.wait(max(0.0, deadline - time.perf_counter())):
            self._abandon(exchange)
            raise ParseError(f"body not received within {self.config.timeout:g}s")

        if exchange.body_error is not None:
            if isinstance(exchange.body_error, TRANSPORT_ERRORS):
                raise ParseError(f"could not read body: {exchange.body_error}") from exchange.body_error
            raise exchange.body_error
        return exchange.body

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
