import logging
import time
from typing import Iterable, Iterator, Optional

import urllib3
from urllib3.util.retry import Retry

from .config import FetchConfig
from .errors import HttpStatusError, ResourceNotFoundError
from .metrics import FetchMetrics
from .stream import stream_transform
from .types import FetchedData, Resource, ResourceStatus


logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = (404, 410)


class DefaultFetcher:
    """Plain HTTP fetcher on top of a urllib3 pool.

    ``fetch_raw`` does the network work and raises on failure. ``fetch`` never
    raises for a failed fetch: the error is classified into a status code and
    returned as an empty ``FetchedData``. ``fetch_stream`` maps ``fetch`` lazily
    over an iterable of resources.
    """

    def __init__(self, config: Optional[FetchConfig] = None, metrics: Optional[FetchMetrics] = None):
        self.config = config or FetchConfig()
        self.metrics = metrics
        self.timeout = self.config.timeout
        # no retries; only redirects are followed
        self.retries = Retry(
            total=None,
            connect=0,
            read=0,
            status=0,
            other=0,
            redirect=self.config.max_redirects,
            raise_on_status=False,
        )
        self.http = urllib3.PoolManager(
            num_pools=1,
            maxsize=1,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "*/*",
                "Connection": "close",
            },
        )

    def fetch_stream(self, resources: Iterable[Resource]) -> Iterator[FetchedData]:
        return stream_transform(resources, self.fetch)

    def fetch_raw(self, resource: Resource) -> FetchedData:
        url = resource.url
        logger.info("Fetching %s", url)
        response = self.http.request(
            "GET",
            url,
            timeout=self.timeout,
            retries=self.retries,
            preload_content=False,
            decode_content=False,
        )
        try:
            status = response.status
            logger.debug("Status code %d for %s", status, url)
            if status in NOT_FOUND_STATUSES:
                raise ResourceNotFoundError(url, f"HTTP {status} for {url}")
            if status >= 400:
                raise HttpStatusError(url, status)

            buffer = bytearray()
            truncated = False
            for chunk in response.stream(self.config.chunk_size, decode_content=False):
                buffer.extend(chunk)
                # checked after each chunk, so the payload may overshoot the limit by one chunk
                if len(buffer) >= self.config.content_limit:
                    logger.info(
                        "Size is greater than the allowed limit of %d bytes. Truncating %s",
                        self.config.content_limit,
                        url,
                    )
                    truncated = True
                    break
            content_type = response.headers.get("Content-Type", "")
        finally:
            # unread bytes are dropped along with the socket
            response.close()
            response.release_conn()

        resource.status = ResourceStatus.FETCHED
        return FetchedData(
            content=bytes(buffer),
            content_type=content_type,
            status_code=status,
            resource=resource,
            truncated=truncated,
        )

    def fetch(self, resource: Resource) -> FetchedData:
        t0 = time.perf_counter()
        try:
            fetched = self.fetch_raw(resource)
        except Exception as exc:
            fetched = self._error_outcome(resource, exc)
        if self.metrics is not None:
            dt_ms = (time.perf_counter() - t0) * 1000.0
            ok = fetched.resource.status is ResourceStatus.FETCHED
            self.metrics.record_fetch(ok, fetched.size_bytes, dt_ms, truncated=fetched.truncated)
        return fetched

    def classify_error(self, exc: Exception) -> int:
        if isinstance(exc, ResourceNotFoundError):
            return self.config.not_found_code
        return self.config.default_error_code

    def _error_outcome(self, resource: Resource, exc: Exception) -> FetchedData:
        status_code = self.classify_error(exc)
        logger.warning("Fetch error for %s (status %d)", resource.url, status_code)
        logger.debug("%s", exc, exc_info=exc)
        resource.status = ResourceStatus.ERROR
        return FetchedData(content=b"", content_type="", status_code=status_code, resource=resource)
