from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

from ._errors import InvalidArgumentError


if TYPE_CHECKING:
    from collections.abc import Callable


T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@runtime_checkable
class Provider(Protocol[T_co]):
    """Anything that can hand out a value on demand."""

    def get(self) -> T_co: ...


@runtime_checkable
class Injectable(Protocol):
    """Post-construction hook.

    Instances exposing ``init_injected_fields`` get it called once, right after
    the registry produced them (and, for singletons, after they were cached), so
    they can pull in dependencies that would otherwise form a cycle.
    """

    def init_injected_fields(self) -> None: ...


@dataclass(frozen=True)
class BindingKey:
    """Identity of a binding: the requested type plus an optional name.

    ``None`` and ``""`` are different names.
    """

    type: Any
    name: str | None = None

    def __repr__(self) -> str:
        type_name = getattr(self.type, "__qualname__", repr(self.type))
        if self.name is None:
            return f"BindingKey({type_name})"
        return f"BindingKey({type_name}, name={self.name!r})"


@dataclass(frozen=True)
class Binding:
    key: BindingKey
    lifetime: Lifetime

    @property
    def singleton(self) -> bool:
        return self.lifetime is Lifetime.SINGLETON

    @property
    def source_type(self) -> Any:
        return self.key.type


@dataclass(frozen=True)
class TypeBinding(Binding):
    """Resolve ``key`` by resolving ``target_type`` (unnamed) instead."""

    target_type: type


@dataclass(frozen=True)
class ProviderBinding(Binding):
    """Resolve ``key`` by calling ``provider.get()``."""

    provider: Provider[Any]


@dataclass(frozen=True)
class FactoryProvider(Generic[T]):
    """Adapts a zero-argument callable to the provider interface."""

    func: Callable[[], T]

    def get(self) -> T:
        return self.func()


@dataclass(frozen=True)
class InstanceProvider(Generic[T]):
    """Always returns the same pre-built value."""

    value: T

    def get(self) -> T:
        return self.value


def as_provider(factory: object) -> Provider[Any]:
    """Normalize a registration ``factory`` argument into a provider.

    Provider instances are used as-is; classes and other callables are wrapped
    and invoked without arguments.
    """
    if not inspect.isclass(factory) and isinstance(factory, Provider) and callable(factory.get):
        _check_zero_argument_get(factory)
        return factory
    if callable(factory):
        return FactoryProvider(factory)
    msg = f"Factory {factory!r} is neither a provider nor callable."
    raise InvalidArgumentError(msg)


def _check_zero_argument_get(provider: object) -> None:
    try:
        sig = inspect.signature(provider.get)  # type: ignore[attr-defined]
    except (TypeError, ValueError):
        return

    try:
        sig.bind()
    except TypeError as e:
        msg = f"Provider {provider!r} must have a get() callable without arguments (signature {sig})."
        raise InvalidArgumentError(msg) from e
