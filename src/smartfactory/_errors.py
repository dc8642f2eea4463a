from __future__ import annotations


class SmartFactoryError(Exception):
    """Base class for every error raised by smartfactory."""


class InvalidArgumentError(SmartFactoryError, ValueError):
    """A required argument is missing or has the wrong kind."""


class InvalidBindingError(SmartFactoryError, TypeError):
    """The bound implementation does not satisfy the bound type."""


class ResolutionError(SmartFactoryError, RuntimeError):
    pass


class UnresolvableBindingError(ResolutionError, LookupError):
    """No binding exists and the requested type cannot be constructed directly
    (interfaces, protocols, abstract classes, non-class tokens).
    """


class ConstructionUnavailableError(ResolutionError):
    """The concrete type has no zero-argument constructor."""


class ConstructionFailedError(ResolutionError):
    """A constructor, a provider or a post-construction hook raised.

    The original exception is kept as ``__cause__``.
    """


class UnknownBindingVariantError(ResolutionError):
    pass
