from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class ObjectContent:
    body: bytes
    # headers to set on the outgoing response
    headers: dict[str, str] = field(default_factory=dict)


class Backend(Protocol):
    """Resolves an identifier (object key or relative file path) to content."""

    async def get(self, identifier: str) -> ObjectContent: ...

    async def close(self) -> None: ...
