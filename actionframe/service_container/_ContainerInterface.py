from abc import ABC, abstractmethod

class ContainerInterface(ABC):
    @abstractmethod
    def get(self, id):
        """Find and return the entry for the given id."""
        pass

    @abstractmethod
    def has(self, id) -> bool:
        """Return True if the container has a per-call factory for the given id."""
        pass

    @abstractmethod
    def has_singleton(self, id) -> bool:
        """Return True if the container shares one instance for the given id."""
        pass

    def __getitem__(self, id):
        if id not in self:
            raise KeyError(f"[Container] No service registered for '{id}'")
        return self.get(id)

    def __contains__(self, id) -> bool:
        return self.has(id) or self.has_singleton(id)
