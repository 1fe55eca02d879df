from typing import Any, Iterable, Mapping, Optional, Protocol


class ObserverRegistry(Protocol):
    def fire(self, event: str, payload: Any = None) -> None: ...


class Renderable(Protocol):
    headers: dict

    def render(self) -> str: ...


class ViewAccumulatorInterface(Protocol):
    shared: dict

    def list_pending(self) -> Iterable[Renderable]: ...

    def pending_headers(self) -> Mapping[str, str]: ...


class SessionStoreInterface(Protocol):
    def save(self) -> None: ...

    def get_id(self) -> str: ...

    def get_handler(self) -> Any: ...


class CookieQueueInterface(Protocol):
    def make(self, name: str, value: str, minutes: int = 0, path: str = "/",
             domain: Optional[str] = None, secure: bool = False, http_only: bool = True) -> Any: ...

    def queue(self, cookie: Any) -> None: ...
