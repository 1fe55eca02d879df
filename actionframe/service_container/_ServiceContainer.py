from ._ContainerInterface import ContainerInterface


class ServiceContainer(ContainerInterface):
    def __init__(self):
        self._services = {}
        self._singletons = {}
        self._instances = {}

    def add(self, id, service, singleton=None):
        """
        Register a factory under `id`. Unless `singleton` is given, factories
        marked with @singleton are built once and shared, the rest are called
        on every get().
        """
        if singleton is None:
            singleton = getattr(service, "__singleton__", False)

        self._instances.pop(id, None)
        if singleton:
            self._services.pop(id, None)
            self._singletons[id] = service
        else:
            self._singletons.pop(id, None)
            self._services[id] = service

    def instance(self, id, obj):
        """Register an already built object as the shared entry for `id`."""
        self._services.pop(id, None)
        self._singletons[id] = type(obj)
        self._instances[id] = obj
        return obj

    def get(self, id):
        if self.has_singleton(id):
            if id not in self._instances:
                self._instances[id] = self._singletons[id]()
            return self._instances[id]

        if self.has(id):
            service = self._services[id]
            return service() if callable(service) else service

        return None

    def has(self, id) -> bool:
        return id in self._services

    def has_singleton(self, id) -> bool:
        return id in self._singletons
