"""Minimal dependency injection registry.

Modules declare which types resolve to which implementations or factories;
a registry resolves them on demand, caching singleton bindings so they are
built exactly once, even under concurrent first access.

Exports:
- `Module`: Base class for a set of bindings, populated in `init(registry)`.
- `module`: Decorator turning a registration function into a `Module`.
- `Registry`: Resolution engine (`get_instance`, `get_provider`, `merge`, `clear_cache`).
- `get_registry`: Process-wide registry lookup keyed by module identity.
- `Lifetime`: Enum for singleton or transient bindings.
- `Injectable`: Protocol for the `init_injected_fields()` post-construction hook.
- `Provider`: Protocol for objects handing out values through `get()`.
"""

from ._binding import (
    Binding,
    BindingKey,
    FactoryProvider,
    Injectable,
    InstanceProvider,
    Lifetime,
    Provider,
    ProviderBinding,
    TypeBinding,
)
from ._errors import (
    ConstructionFailedError,
    ConstructionUnavailableError,
    InvalidArgumentError,
    InvalidBindingError,
    ResolutionError,
    SmartFactoryError,
    UnknownBindingVariantError,
    UnresolvableBindingError,
)
from ._module import Module, module
from ._registry import Registry, RegistryProvider, get_registry


__all__ = [
    "Binding",
    "BindingKey",
    "ConstructionFailedError",
    "ConstructionUnavailableError",
    "FactoryProvider",
    "Injectable",
    "InstanceProvider",
    "InvalidArgumentError",
    "InvalidBindingError",
    "Lifetime",
    "Module",
    "Provider",
    "ProviderBinding",
    "Registry",
    "RegistryProvider",
    "ResolutionError",
    "SmartFactoryError",
    "TypeBinding",
    "UnknownBindingVariantError",
    "UnresolvableBindingError",
    "get_registry",
    "module",
]
