from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Protocol


class ResourceStatus(str, Enum):
    UNFETCHED = "UNFETCHED"
    FETCHED = "FETCHED"
    ERROR = "ERROR"


@dataclass
class Resource:
    url: str
    status: ResourceStatus = ResourceStatus.UNFETCHED

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Resource url must be a non-empty string")


@dataclass
class FetchedData:
    content: bytes
    content_type: str
    status_code: int
    resource: Resource = field(repr=False)
    truncated: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class FetcherProtocol(Protocol):
    def fetch(self, resource: Resource) -> FetchedData: ...

    def fetch_stream(self, resources: Iterable[Resource]) -> Iterator[FetchedData]: ...
