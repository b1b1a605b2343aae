"""
Registry pattern utility for creating type registries.

Decoders for descriptor values, tagged blocks and blend functions are looked
up by key from registries built with :py:func:`new_registry`::

    READERS, register = new_registry(attribute="ostype")

    @register(b"bool")
    def read_bool(reader):
        return reader.read_u8() != 0

    value = READERS[b"bool"](reader)
"""

from typing import Any, Callable, Dict, Tuple, TypeVar, Union

T = TypeVar("T")


def new_registry(attribute: Union[str, None] = None) -> Tuple[Dict[Any, Any], Callable]:
    """
    Returns an empty dict and a @register decorator.

    :param attribute: Optional attribute name to set on registered objects.
        The key will be stored as this attribute on the object.
    :return: Tuple of (registry_dict, register_decorator)
    """
    registry: Dict[Any, Any] = {}

    def register(*keys: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            for key in keys:
                registry[key] = func
            if attribute:
                setattr(func, attribute, keys[0])
            return func

        return decorator

    return registry, register
