from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    minutes: int = 0
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = True

    @property
    def max_age(self) -> Optional[int]:
        # 0 minutes is a browser-session cookie
        return self.minutes * 60 if self.minutes else None


class CookieJar:
    """Cookies queued during a request and written onto the outgoing response."""

    def __init__(self, path: str = "/", domain: Optional[str] = None, secure: bool = False):
        self.path = path
        self.domain = domain
        self.secure = secure
        self._queued: dict[str, Cookie] = {}

    def make(self, name, value, minutes=0, path=None, domain=None, secure=None, http_only=True) -> Cookie:
        return Cookie(
            name=name,
            value=value,
            minutes=minutes,
            path=path if path is not None else self.path,
            domain=domain if domain is not None else self.domain,
            secure=self.secure if secure is None else secure,
            http_only=http_only,
        )

    def forget(self, name, path=None, domain=None) -> Cookie:
        return self.make(name, "", -2628000, path, domain)

    def queue(self, cookie: Cookie):
        self._queued[cookie.name] = cookie

    def unqueue(self, name: str):
        self._queued.pop(name, None)

    def has_queued(self, name: str) -> bool:
        return name in self._queued

    def queued(self, name: str = None):
        if name is not None:
            return self._queued.get(name)
        return list(self._queued.values())

    def apply(self, response):
        """Write every queued cookie onto a Werkzeug response."""
        for cookie in self._queued.values():
            if cookie.minutes < 0:
                response.delete_cookie(cookie.name, path=cookie.path, domain=cookie.domain)
                continue
            response.set_cookie(
                cookie.name,
                cookie.value,
                max_age=cookie.max_age,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
            )
        return response
