from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._binding import (
    Binding,
    BindingKey,
    InstanceProvider,
    Lifetime,
    ProviderBinding,
    TypeBinding,
    as_provider,
)
from ._construct import validate_impl
from ._errors import InvalidArgumentError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._binding import Provider
    from ._registry import Registry

    T = TypeVar("T")

    Factory = Provider[T] | Callable[[], T]


class Module(ABC):
    """A set of bindings, populated by :meth:`init`.

    Subclasses register everything they provide from ``init``::

        class ShapeModule(Module):
            def init(self, registry):
                self.bind_singleton(Shape, Circle)
                self.bind_dynamic(Shape, Square, name="sq")
                self.bind_singleton(Canvas, factory=lambda: Canvas(registry.get_provider(Shape)))

    Registering the same ``(type, name)`` twice keeps the last binding.
    """

    def __init__(self) -> None:
        self._bindings: dict[BindingKey, Binding] = {}

    @abstractmethod
    def init(self, registry: Registry) -> None:
        """Register the bindings of this module.

        Called once by every :class:`Registry` this module backs, with that
        registry, so factories can close over it.
        """

    @overload
    def bind(
        self,
        type_: type[T],
        impl: type[T],
        *,
        name: str | None = ...,
        factory: None = ...,
        lifetime: Lifetime = ...,
    ) -> None: ...

    @overload
    def bind(
        self,
        type_: type[T],
        impl: None = ...,
        *,
        name: str | None = ...,
        factory: Factory[T],
        lifetime: Lifetime = ...,
    ) -> None: ...

    @overload
    def bind(
        self,
        type_: Any,
        impl: type | None = ...,
        *,
        name: str | None = ...,
        factory: Any = ...,
        lifetime: Lifetime = ...,
    ) -> None: ...

    def bind(
        self,
        type_: Any,
        impl: type | None = None,
        *,
        name: str | None = None,
        factory: Any = None,
        lifetime: Lifetime = Lifetime.SINGLETON,
    ) -> None:
        """Bind ``type_`` (optionally under ``name``) to a class or a factory.

        Example:
          module.bind(Shape, Circle)
          module.bind(Shape, factory=make_square, name="sq", lifetime=Lifetime.TRANSIENT)

        """
        if type_ is None:
            msg = "The type parameter can not be None."
            raise InvalidArgumentError(msg)

        if name is not None and not isinstance(name, str):
            msg = f"Binding names must be strings, got {name!r}."
            raise InvalidArgumentError(msg)

        if impl is not None and factory is not None:
            msg = "Provide either `impl` or `factory`, not both."
            raise InvalidArgumentError(msg)

        if impl is None and factory is None:
            msg = "Either `impl` or `factory` must be provided."
            raise InvalidArgumentError(msg)

        key = BindingKey(type_, name)

        if impl is not None:
            if not inspect.isclass(impl):
                msg = f"The impl parameter must be a class, got {impl!r}."
                raise InvalidArgumentError(msg)
            # Non-type tokens (like strings) cannot be validated statically.
            if inspect.isclass(type_):
                validate_impl(type_, impl)
            self._add(TypeBinding(key, lifetime, impl))
        else:
            self._add(ProviderBinding(key, lifetime, as_provider(factory)))

    def bind_singleton(
        self,
        type_: Any,
        impl: type | None = None,
        *,
        name: str | None = None,
        factory: Any = None,
    ) -> None:
        """Bind ``type_`` so that its first resolution is cached and reused."""
        self.bind(type_, impl, name=name, factory=factory, lifetime=Lifetime.SINGLETON)

    def bind_dynamic(
        self,
        type_: Any,
        impl: type | None = None,
        *,
        name: str | None = None,
        factory: Any = None,
    ) -> None:
        """Bind ``type_`` so that every resolution produces a fresh value."""
        self.bind(type_, impl, name=name, factory=factory, lifetime=Lifetime.TRANSIENT)

    def bind_instance(self, type_: Any, instance: object, *, name: str | None = None) -> None:
        """Bind ``type_`` to a pre-built instance (always singleton)."""
        if instance is None:
            msg = "The instance parameter can not be None."
            raise InvalidArgumentError(msg)
        self.bind(type_, name=name, factory=InstanceProvider(instance), lifetime=Lifetime.SINGLETON)

    def merge(self, registry: Registry, module: Module) -> None:
        """Let ``module`` register against ``registry``, then take over its bindings.

        Bindings of ``module`` replace bindings of this module with the same key.
        """
        if module is None:
            msg = "The module parameter can not be None."
            raise InvalidArgumentError(msg)

        module.init(registry)
        bindings = module.get_bindings()
        for binding in bindings:
            self._add(binding)
        logger.debug("Merged %d binding(s) from %s into %s", len(bindings), module, self)

    def get_bind(self, type_: Any, name: str | None = None) -> Binding | None:
        return self._bindings.get(BindingKey(type_, name))

    def get_bindings(self) -> tuple[Binding, ...]:
        return tuple(self._bindings.values())

    def _add(self, binding: Binding) -> None:
        self._bindings[binding.key] = binding

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} with {len(self._bindings)} binding(s)>"


class _FunctionModule(Module):
    def __init__(self, func: Callable[[Module, Registry], None]) -> None:
        super().__init__()
        self._func = func

    def init(self, registry: Registry) -> None:
        self._func(self, registry)

    def __repr__(self) -> str:
        return f"<module {self._func.__qualname__} with {len(self._bindings)} binding(s)>"


def module(func: Callable[[Module, Registry], None]) -> Module:
    """Decorator turning a registration function into a :class:`Module` instance.

    Example:
        @module
        def shapes(m: Module, registry: Registry) -> None:
            m.bind_singleton(Shape, Circle)
    """
    return _FunctionModule(func)
