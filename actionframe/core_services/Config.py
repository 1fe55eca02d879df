import copy
import os
from dataclasses import dataclass, field
from typing import Any, Optional


TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Lottery:
    """Odds of running session garbage collection on a given request."""
    numerator: int
    denominator: int

    def __post_init__(self):
        if self.denominator < 1:
            raise ValueError(f"Lottery denominator must be at least 1, got {self.denominator}")
        if not 0 <= self.numerator <= self.denominator:
            raise ValueError(
                f"Lottery numerator must be between 0 and {self.denominator}, got {self.numerator}"
            )

    @classmethod
    def parse(cls, value) -> "Lottery":
        """Accepts a Lottery, a (numerator, denominator) pair or a "2,100" string."""
        if isinstance(value, Lottery):
            return value
        if isinstance(value, str):
            parts = [p.strip() for p in value.replace("/", ",").split(",")]
            if len(parts) != 2:
                raise ValueError(f"Invalid lottery value: {value!r}")
            value = parts
        numerator, denominator = value
        return cls(int(numerator), int(denominator))


@dataclass(frozen=True)
class SessionConfig:
    cookie: str
    lifetime: int
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    lottery: Lottery = field(default_factory=lambda: Lottery(2, 100))
    driver: str = "file"
    files: Optional[str] = None

    def __post_init__(self):
        if self.lifetime < 0:
            raise ValueError(f"Session lifetime must not be negative, got {self.lifetime}")
        if self.driver not in ("file", "array"):
            raise ValueError(f"Unsupported session driver: {self.driver}")


def default_settings() -> dict:
    return {
        "app": {
            "template": "default",
            "debug": False,
            "views": {},
        },
        "session": {
            "driver": "file",
            "files": os.path.join(os.getcwd(), "storage", "sessions"),
            "cookie": "actionframe_session",
            "lifetime": 120,
            "path": "/",
            "domain": None,
            "secure": False,
            "lottery": (2, 100),
        },
    }


# dotted key -> (environment variable, cast)
ENV_OVERRIDES = {
    "app.template": ("APP_TEMPLATE", str),
    "app.debug": ("APP_DEBUG", lambda v: v.lower() in TRUTHY),
    "session.driver": ("SESSION_DRIVER", str),
    "session.files": ("SESSION_FILES", str),
    "session.cookie": ("SESSION_COOKIE", str),
    "session.lifetime": ("SESSION_LIFETIME", int),
    "session.path": ("SESSION_PATH", str),
    "session.domain": ("SESSION_DOMAIN", lambda v: v or None),
    "session.secure": ("SESSION_SECURE", lambda v: v.lower() in TRUTHY),
    "session.lottery": ("SESSION_LOTTERY", Lottery.parse),
}


class Config:
    def __init__(self, settings: dict = None, environ=None):
        self._items = default_settings()
        self._load_environment(os.environ if environ is None else environ)
        for key, value in self._flatten(settings or {}):
            self.set(key, value)

    def _load_environment(self, environ):
        for key, (env_name, cast) in ENV_OVERRIDES.items():
            raw = environ.get(env_name)
            if raw is None:
                continue
            try:
                self.set(key, cast(raw))
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_name}: {raw!r} ({e})") from e

    def _flatten(self, settings: dict, prefix: str = ""):
        for key, value in settings.items():
            dotted = f"{prefix}{key}"
            # app.views is a mapping value, not a config section
            if isinstance(value, dict) and dotted != "app.views":
                yield from self._flatten(value, prefix=f"{dotted}.")
            else:
                yield dotted, value

    def get(self, key: str, default: Any = None) -> Any:
        node = self._items
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any):
        parts = key.split(".")
        node = self._items
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
        return self

    def has(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __getitem__(self, key: str):
        if not self.has(key):
            raise KeyError(key)
        return self.get(key)

    def all(self) -> dict:
        return copy.deepcopy(self._items)

    @property
    def session(self) -> SessionConfig:
        options = self.get("session", {})
        return SessionConfig(
            cookie=options["cookie"],
            lifetime=int(options["lifetime"]),
            path=options.get("path", "/"),
            domain=options.get("domain"),
            secure=bool(options.get("secure", False)),
            lottery=Lottery.parse(options.get("lottery", (2, 100))),
            driver=options.get("driver", "file"),
            files=options.get("files"),
        )
