from typing import Any, Callable, Dict, Iterator, List, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Maps configuration names to implementation classes."""

    def __init__(self, kind: str):
        self._kind = kind
        self._classes: Dict[str, Type[Any]] = {}

    def register(self, name: str) -> Callable[[Type[T]], Type[T]]:
        """
        Class decorator that makes ``cls`` available under ``name``.

        Raises:
            ValueError: If ``name`` is already taken in this registry.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if name in self._classes:
                raise ValueError(f"{self._kind.capitalize()} '{name}' is already registered.")
            self._classes[name] = cls
            return cls
        return decorator

    def get(self, name: str) -> Type[Any]:
        try:
            return self._classes[name]
        except KeyError:
            raise KeyError(f"Unknown {self._kind} '{name}'. Available: {self.names()}") from None

    def create(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return self.get(name)(*args, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._classes)

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)


provider_registry = Registry("provider")
source_registry = Registry("source")
backend_registry = Registry("backend")
