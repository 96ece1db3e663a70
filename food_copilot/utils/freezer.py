"""
Immutability guard for validated directive props.

Validated directives are handed to the renderer and retained in turn
history; nothing downstream may edit them in place.
"""

from typing import Any


def deep_freeze(obj: Any) -> Any:
    """
    Recursively freezes dicts and lists:
    - Dict -> FrozenDict (read-only dict)
    - List/Tuple -> Tuple
    """
    if isinstance(obj, dict):
        return FrozenDict({k: deep_freeze(v) for k, v in obj.items()})
    elif isinstance(obj, (list, tuple)):
        return tuple(deep_freeze(i) for i in obj)
    return obj


def thaw(obj: Any) -> Any:
    """Inverse of deep_freeze: plain dicts and lists, safe for json.dumps and editing."""
    if isinstance(obj, dict):
        return {k: thaw(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [thaw(i) for i in obj]
    return obj


class FrozenDict(dict):
    """
    A dictionary that does not allow modification.
    """
    def __setitem__(self, key, value):
        raise TypeError(f"Attempted to mutate a FROZEN directive prop. Key: {key}")

    def __delitem__(self, key):
        raise TypeError(f"Attempted to delete from a FROZEN directive prop. Key: {key}")

    def update(self, *args, **kwargs):
        raise TypeError("Attempted to update a FROZEN directive prop.")

    def pop(self, *args, **kwargs):
        raise TypeError("Attempted to pop from a FROZEN directive prop.")

    def popitem(self):
        raise TypeError("Attempted to popitem from a FROZEN directive prop.")

    def clear(self):
        raise TypeError("Attempted to clear a FROZEN directive prop.")

    def setdefault(self, *args, **kwargs):
        raise TypeError("Attempted to setdefault on a FROZEN directive prop.")

    def __ior__(self, other):
        raise TypeError("Attempted to update a FROZEN directive prop.")
