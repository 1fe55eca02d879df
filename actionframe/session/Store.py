import json
import re
import secrets
from typing import Any

from actionframe.session.Handlers import SessionHandlerInterface

SESSION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]{40}$")


class Store:
    def __init__(self, name: str, handler: SessionHandlerInterface, session_id: str = None):
        self.name = name
        self.handler = handler
        self.attributes: dict[str, Any] = {}
        self.started = False
        self.dirty = False
        self.set_id(session_id)

    @staticmethod
    def generate_session_id() -> str:
        return secrets.token_hex(20)

    @staticmethod
    def is_valid_id(session_id) -> bool:
        return isinstance(session_id, str) and bool(SESSION_ID_PATTERN.match(session_id))

    def get_id(self) -> str:
        return self.id

    def set_id(self, session_id):
        self.id = session_id if self.is_valid_id(session_id) else self.generate_session_id()
        return self

    def get_name(self) -> str:
        return self.name

    def get_handler(self) -> SessionHandlerInterface:
        return self.handler

    def start(self):
        raw = self.handler.read(self.id)
        self.attributes = {}
        if raw:
            try:
                loaded = json.loads(raw)
            except ValueError:
                loaded = {}
            if isinstance(loaded, dict):
                self.attributes = loaded
        self.started = True
        self.dirty = False
        return self

    def save(self):
        """Write the attributes through the handler."""
        self.handler.write(self.id, json.dumps(self.attributes, default=str))
        self.dirty = False
        self.started = False

    @property
    def is_dirty(self) -> bool:
        return self.dirty

    def all(self) -> dict:
        return dict(self.attributes)

    def has(self, key: str) -> bool:
        return self.attributes.get(key) is not None

    def get(self, key: str, default=None):
        return self.attributes.get(key, default)

    def put(self, key, value=None):
        if isinstance(key, dict):
            self.attributes.update(key)
        else:
            self.attributes[key] = value
        self.dirty = True
        return self

    def pull(self, key: str, default=None):
        value = self.attributes.pop(key, default)
        self.dirty = True
        return value

    def forget(self, *keys):
        for key in keys:
            self.attributes.pop(key, None)
        self.dirty = True
        return self

    def flush(self):
        self.attributes = {}
        self.dirty = True
        return self

    def regenerate(self, destroy: bool = False):
        """Give the session a new id, optionally dropping the old record."""
        if destroy:
            self.handler.destroy(self.id)
        self.id = self.generate_session_id()
        self.dirty = True
        return self

    def invalidate(self):
        self.flush()
        return self.regenerate(destroy=True)
