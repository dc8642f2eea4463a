from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from ._binding import BindingKey, Injectable, InstanceProvider, ProviderBinding, TypeBinding
from ._construct import Constructor
from ._errors import (
    ConstructionFailedError,
    InvalidArgumentError,
    SmartFactoryError,
    UnknownBindingVariantError,
)
from ._module import Module


logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class RegistryProvider(Generic[T]):
    """Lazy handle on ``registry.get_instance(type_, name)``.

    Nothing is resolved until :meth:`get` is called, and every call resolves again,
    so singleton and transient bindings behave exactly as with ``get_instance``.
    """

    def __init__(self, registry: Registry, type_: type[T], name: str | None) -> None:
        self._registry = registry
        self._type = type_
        self._name = name

    def get(self) -> T:
        return self._registry.get_instance(self._type, self._name)

    __call__ = get

    def __repr__(self) -> str:
        return f"RegistryProvider({BindingKey(self._type, self._name)!r})"


class Registry:
    """Resolves types to instances against the bindings of a root module.

    - bound types delegate to their target type, singleton results are cached
    - provider bindings call their provider, singleton results are cached
    - unbound concrete classes are built through their zero-argument constructor,
      never cached
    - instances implementing ``init_injected_fields`` get it called once.
    """

    def __init__(self, module: Module, *modules: Module) -> None:
        if module is None:
            msg = "The module parameter can not be None."
            raise InvalidArgumentError(msg)

        self._module = module
        self._instance_cache: dict[BindingKey, Any] = {}
        self._provider_cache: dict[BindingKey, RegistryProvider[Any]] = {}
        # Re-entrant: delegation, factories and hooks resolve recursively on the same thread.
        self._instance_lock = threading.RLock()
        self._provider_lock = threading.Lock()
        self._constructor = Constructor()

        self._module.init(self)
        for other in modules:
            self.merge(other)
        logger.debug("Created registry for %s", module)

    @property
    def module(self) -> Module:
        """The root module; merges mutate it in place."""
        return self._module

    @overload
    def get_instance(self, type_: type[T], name: str | None = None) -> T: ...

    @overload
    def get_instance(self, type_: Any, name: str | None = None) -> Any: ...

    def get_instance(self, type_: Any, name: str | None = None) -> Any:
        """Return a new or cached instance bound to ``type_`` (and ``name``).

        Resolution order: instance cache, module binding, zero-argument construction.
        """
        key = _make_key(type_, name)

        instance = self._instance_cache.get(key, _MISSING)
        if instance is not _MISSING:
            return instance

        with self._instance_lock:
            instance = self._instance_cache.get(key, _MISSING)
            if instance is not _MISSING:
                return instance
            return self._resolve(key)

    def __getitem__(self, item: Any) -> Any:
        """``registry[Shape]`` or ``registry[Shape, "sq"]``.

        A 2-tuple ending in a ``str`` or ``None`` is always read as ``(type, name)``,
        so tuple tokens of that shape need ``get_instance(token)`` instead.
        """
        if isinstance(item, tuple) and len(item) == 2 and (item[1] is None or isinstance(item[1], str)):
            return self.get_instance(item[0], item[1])
        return self.get_instance(item)

    def _resolve(self, key: BindingKey) -> Any:
        binding = self._module.get_bind(key.type, key.name)

        if binding is None:
            instance = self._constructor.construct(key.type)
            self._run_hook(key, instance, cached=False)
            return instance

        if isinstance(binding, TypeBinding):
            if binding.target_type is key.type and key.name is None:
                # Bound to itself: build it here, delegating would find this binding again.
                instance = self._constructor.construct(key.type)
                if binding.singleton:
                    self._cache(key, instance)
                self._run_hook(key, instance, cached=binding.singleton)
                return instance

            instance = self.get_instance(binding.target_type)
            if binding.singleton:
                self._cache(key, instance)
            return instance

        if isinstance(binding, ProviderBinding):
            try:
                instance = binding.provider.get()
            except (SmartFactoryError, RecursionError):
                raise
            except Exception as e:
                msg = f"The provider bound to {key!r} raised"
                raise ConstructionFailedError(msg) from e
            if binding.singleton:
                self._cache(key, instance)
            # Pre-built instances were initialized by whoever built them.
            if not isinstance(binding.provider, InstanceProvider):
                self._run_hook(key, instance, cached=binding.singleton)
            return instance

        msg = f"Unknown binding type {type(binding).__qualname__} for {key!r}"
        raise UnknownBindingVariantError(msg)

    def _cache(self, key: BindingKey, instance: Any) -> None:
        logger.debug("Caching singleton for %r", key)
        self._instance_cache[key] = instance

    def _run_hook(self, key: BindingKey, instance: Any, *, cached: bool) -> None:
        if not isinstance(instance, Injectable):
            return
        try:
            instance.init_injected_fields()
        except Exception as e:
            if cached:
                self._instance_cache.pop(key, None)
            if isinstance(e, (SmartFactoryError, RecursionError)):
                raise
            msg = f"init_injected_fields of {type(instance).__qualname__} raised while resolving {key!r}"
            raise ConstructionFailedError(msg) from e

    @overload
    def get_provider(self, type_: type[T], name: str | None = None) -> RegistryProvider[T]: ...

    @overload
    def get_provider(self, type_: Any, name: str | None = None) -> RegistryProvider[Any]: ...

    def get_provider(self, type_: Any, name: str | None = None) -> RegistryProvider[Any]:
        """Return the cached provider resolving ``type_`` (and ``name``) on each ``get()``."""
        key = _make_key(type_, name)

        provider = self._provider_cache.get(key)
        if provider is None:
            with self._provider_lock:
                provider = self._provider_cache.get(key)
                if provider is None:
                    provider = RegistryProvider(self, type_, name)
                    self._provider_cache[key] = provider
        return provider

    def merge(self, module: Module) -> None:
        """Merge ``module`` into the root module; its bindings win on conflicting keys.

        Instances cached before the merge are kept until :meth:`clear_cache`.
        """
        if module is None:
            msg = "The module parameter can not be None."
            raise InvalidArgumentError(msg)

        self._module.merge(self, module)

        stale = [binding.key for binding in module.get_bindings() if binding.key in self._instance_cache]
        if stale:
            logger.warning(
                "Merging %s rebinds %d already cached key(s) (%s); cached instances stay until clear_cache()",
                module,
                len(stale),
                ", ".join(repr(k) for k in stale),
            )

    def clear_cache(self) -> None:
        """Drop every cached instance and provider. Bindings are kept."""
        with self._instance_lock, self._provider_lock:
            self._instance_cache.clear()
            self._provider_cache.clear()
        logger.debug("Cleared caches of registry for %s", self._module)


def _make_key(type_: Any, name: str | None) -> BindingKey:
    if type_ is None:
        msg = "The type parameter can not be None."
        raise InvalidArgumentError(msg)
    if name is not None and not isinstance(name, str):
        msg = f"Binding names must be strings, got {name!r}."
        raise InvalidArgumentError(msg)
    return BindingKey(type_, name)


_registries: dict[int, tuple[Module, Registry]] = {}
_registries_lock = threading.Lock()


def get_registry(module: Module, *modules: Module) -> Registry:
    """Return the registry backing ``module``.

    Without extra modules the registry is created once per module object (identity,
    not equality) and reused for the life of the process. With extra modules a new
    registry is built every time, with the extras merged in order.
    """
    if module is None:
        msg = "The module parameter can not be None."
        raise InvalidArgumentError(msg)

    if modules:
        return Registry(module, *modules)

    # The entry keeps the module alive, so its id() can't be reused while cached.
    entry = _registries.get(id(module))
    if entry is None:
        with _registries_lock:
            entry = _registries.get(id(module))
            if entry is None:
                entry = (module, Registry(module))
                _registries[id(module)] = entry
    return entry[1]
