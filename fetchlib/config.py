from dataclasses import dataclass

import urllib3


DEFAULT_USER_AGENT = "fetchlib/1.0 (+https://example.com; contact: crawler@example.com)"

DEFAULT_CONNECT_TIMEOUT_MS = 5000
DEFAULT_READ_TIMEOUT_MS = 10000
DEFAULT_CONTENT_LIMIT = 8 * 1024 * 1024
DEFAULT_CHUNK_SIZE = 4096
DEFAULT_ERROR_CODE = 400
NOT_FOUND_CODE = 404
DEFAULT_MAX_REDIRECTS = 20


@dataclass(frozen=True)
class FetchConfig:
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS
    content_limit: int = DEFAULT_CONTENT_LIMIT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    default_error_code: int = DEFAULT_ERROR_CODE
    not_found_code: int = NOT_FOUND_CODE
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.content_limit <= 0:
            raise ValueError("content_limit must be positive")

    @property
    def timeout(self) -> urllib3.Timeout:
        return urllib3.Timeout(
            connect=self.connect_timeout_ms / 1000.0,
            read=self.read_timeout_ms / 1000.0,
        )
