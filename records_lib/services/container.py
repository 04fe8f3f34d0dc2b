from typing import Any, Callable, Dict, TypeVar, cast

T = TypeVar("T")


class ServiceContainer:
    """A tiny, explicit DI container for registering singletons and factories.

    Register by key (string) and resolve via `get`. Factories are evaluated
    once and their result cached as singletons.
    """

    def __init__(self) -> None:
        self._singletons: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance

    def register_factory(self, key: str, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory

    def has(self, key: str) -> bool:
        return key in self._singletons or key in self._factories

    def get(self, key: str) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            inst = self._factories[key]()
            self._singletons[key] = inst
            return inst
        raise KeyError(f"No service registered for key '{key}'")

    def get_typed(self, key: str, expected: type[T]) -> T:
        """Resolve and check against the expected type."""
        inst = self.get(key)
        if not isinstance(inst, expected):
            raise TypeError(f"Service '{key}' is {type(inst).__name__}, expected {expected.__name__}")
        return cast(T, inst)
