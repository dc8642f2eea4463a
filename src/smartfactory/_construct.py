from __future__ import annotations

import inspect
import logging
import typing
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from ._errors import (
    ConstructionFailedError,
    ConstructionUnavailableError,
    InvalidBindingError,
    UnresolvableBindingError,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    T = TypeVar("T")


class Constructor:
    """Builds instances of unbound concrete classes through their zero-argument constructor."""

    def construct(self, cls: type[T]) -> T:
        if not inspect.isclass(cls):
            msg = f"No binding found for token: {cls!r}"
            raise UnresolvableBindingError(msg)

        if is_protocol(cls):
            msg = f"No binding found for protocol: {cls.__qualname__}"
            raise UnresolvableBindingError(msg)

        if inspect.isabstract(cls):
            msg = f"No binding found for abstract class: {cls.__qualname__}"
            raise UnresolvableBindingError(msg)

        self._check_zero_argument_signature(cls)

        try:
            return cls()
        except Exception as e:
            msg = f"An exception was raised from the constructor of {cls.__qualname__}"
            raise ConstructionFailedError(msg) from e

    def _check_zero_argument_signature(self, cls: type) -> None:
        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            # Some builtins and extension types expose no signature; let the call decide.
            logger.debug("No signature available for %s, constructing blindly", cls.__qualname__)
            return

        try:
            sig.bind()
        except TypeError as e:
            msg = f"Can't find a zero-argument constructor for {cls.__qualname__} (signature {sig})"
            raise ConstructionUnavailableError(msg) from e


def is_protocol(tp: object) -> bool:
    """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
    if not inspect.isclass(tp):
        return False
    if hasattr(typing, "is_protocol"):
        # https://docs.python.org/3/library/typing.html#typing.is_protocol
        return typing.is_protocol(tp)
    # Protocol subclasses that are not protocols themselves get _is_protocol = False.
    return bool(tp.__dict__.get("_is_protocol", False)) and tp is not Protocol


def validate_impl(cls: type, impl: type) -> None:
    """Validate that 'impl' can stand in for 'cls'.

    - For normal classes/ABCs: require issubclass(impl, cls).
    - For Protocols: accept nominal conformance via the MRO, otherwise require every
      public protocol member to be present on the implementation.
    """
    if not is_protocol(cls):
        if not issubclass(impl, cls):
            msg = f"Implementation {impl.__qualname__} must be a subclass of {cls.__qualname__}"
            raise InvalidBindingError(msg)
        return

    if cls in getattr(impl, "__mro__", ()):
        return

    missing = [name for name in _protocol_members(cls) if not hasattr(impl, name)]
    if missing:
        msg = (
            f"Implementation {impl.__qualname__} does not structurally conform to protocol "
            f"{cls.__qualname__}: missing members: {', '.join(missing)}"
        )
        raise InvalidBindingError(msg)


def _protocol_members(proto_cls: type) -> list[str]:
    members: dict[str, Any] = {}
    for base in reversed(proto_cls.__mro__):
        if base is object or base is Protocol or not is_protocol(base):
            continue
        members.update(getattr(base, "__annotations__", {}))
        members.update(base.__dict__)
    return [name for name in members if not name.startswith("_")]
