class FetchError(Exception):
    """Raised by ``DefaultFetcher.fetch_raw`` for an unusable HTTP response."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class ResourceNotFoundError(FetchError):
    """The server reported that the resource does not exist (404/410)."""


class HttpStatusError(FetchError):
    def __init__(self, url: str, status: int):
        super().__init__(url, f"HTTP {status} for {url}")
        self.status = status
