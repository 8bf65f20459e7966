"""Browser driver contract consumed by the synchronization engine and page objects.

Every method is a coroutine and every one of them may fail with a
``DriverError``. Implementations classify their failures: a
``TransientDriverError`` is retried by actions, anything else propagates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ElementHandle(Protocol):
    """A live reference to one element of the current page."""

    async def is_visible(self) -> bool: ...

    async def is_enabled(self) -> bool: ...

    async def text_content(self) -> str | None: ...


@dataclass(frozen=True)
class DownloadInfo:
    """A completed file download."""

    suggested_filename: str
    path: str | None = None


@runtime_checkable
class Driver(Protocol):
    """One exclusively owned browser page/session."""

    async def navigate(self, url: str) -> None: ...

    async def query(self, selector: str) -> ElementHandle | None: ...

    async def count(self, selector: str) -> int: ...

    async def click(self, element: ElementHandle) -> None: ...

    async def fill(self, element: ElementHandle, text: str) -> None: ...

    async def wait_for_network_idle(self, timeout_ms: int) -> None: ...

    async def current_url(self) -> str: ...

    async def screenshot_compare(self, name: str) -> None: ...

    async def wait_for_download(self, timeout_ms: int) -> DownloadInfo: ...

    async def set_viewport(self, width: int, height: int) -> None: ...

    async def clear_storage(self) -> None: ...

    async def route_json(self, pattern: str, payload: Any, status: int = 200) -> None: ...
