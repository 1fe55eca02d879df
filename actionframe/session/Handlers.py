import os
import time
from abc import ABC, abstractmethod
from pathlib import Path

from actionframe.service_container._Injector import singleton


class SessionHandlerInterface(ABC):
    @abstractmethod
    def read(self, session_id: str) -> str:
        """Return the serialized session data, or an empty string."""
        pass

    @abstractmethod
    def write(self, session_id: str, data: str) -> bool:
        pass

    @abstractmethod
    def destroy(self, session_id: str) -> bool:
        pass

    @abstractmethod
    def gc(self, lifetime: int) -> int:
        """Remove sessions untouched for more than `lifetime` seconds; returns how many."""
        pass


@singleton
class ArraySessionHandler(SessionHandlerInterface):
    """Keeps sessions in process memory. Meant for tests and single process dev servers."""

    def __init__(self, clock=time.time):
        self.clock = clock
        self.storage: dict[str, dict] = {}

    def read(self, session_id: str) -> str:
        record = self.storage.get(session_id)
        return record["data"] if record else ""

    def write(self, session_id: str, data: str) -> bool:
        self.storage[session_id] = {"data": data, "time": self.clock()}
        return True

    def destroy(self, session_id: str) -> bool:
        self.storage.pop(session_id, None)
        return True

    def gc(self, lifetime: int) -> int:
        expiration = self.clock() - lifetime
        expired = [sid for sid, record in self.storage.items() if record["time"] <= expiration]
        for session_id in expired:
            del self.storage[session_id]
        return len(expired)


class FileSessionHandler(SessionHandlerInterface):
    """One file per session id inside `path`; expiry is based on the file mtime."""

    def __init__(self, path: str, clock=time.time):
        self.path = Path(path)
        self.clock = clock
        self.path.mkdir(parents=True, exist_ok=True)

    def _file(self, session_id: str) -> Path:
        return self.path / session_id

    def read(self, session_id: str) -> str:
        file = self._file(session_id)
        if file.is_file():
            return file.read_text(encoding="utf-8")
        return ""

    def write(self, session_id: str, data: str) -> bool:
        self._file(session_id).write_text(data, encoding="utf-8")
        return True

    def destroy(self, session_id: str) -> bool:
        self._file(session_id).unlink(missing_ok=True)
        return True

    def gc(self, lifetime: int) -> int:
        expiration = self.clock() - lifetime
        removed = 0
        for file in self.path.iterdir():
            if file.is_file() and file.stat().st_mtime <= expiration:
                try:
                    os.remove(file)
                except FileNotFoundError:
                    # removed by a concurrent collector
                    continue
                removed += 1
        return removed
