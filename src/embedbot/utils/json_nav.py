"""Path based navigation through decoded JSON documents."""

from typing import Any, Optional, Union

from ..errors import ParseError


PathElement = Union[str, int]

_TYPE_NAMES = {dict: "object", list: "array", str: "str", bool: "bool"}


class JsonNavError(ParseError):
    """Raised when a JSON path cannot be followed."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(f"{message} at {path}")


def json_nav(value: Any, *path: PathElement, expect: Optional[type] = None, root: str = "json") -> Any:
    """
    Follow a path of object keys and array indices.

    Args:
        value: Decoded JSON value to start from
        *path: Keys (str) and indices (int) to follow in order
        expect: Required type of the final value (dict, list, str or bool)
        root: Name of the starting value used in error messages

    Returns:
        The value found at the end of the path

    Raises:
        JsonNavError: A key or index is missing, or a type does not match
    """
    current = value
    walked = root

    for element in path:
        walked = f"{walked}.{element}"

        if isinstance(element, int):
            if not isinstance(current, list):
                raise JsonNavError("expected array", walked)
            if not -len(current) <= element < len(current):
                raise JsonNavError("index out of range", walked)
            current = current[element]
        else:
            if not isinstance(current, dict):
                raise JsonNavError("expected object", walked)
            if element not in current:
                raise JsonNavError("missing key", walked)
            current = current[element]

    if expect is not None and not isinstance(current, expect):
        raise JsonNavError(f"expected {_TYPE_NAMES.get(expect, expect.__name__)}", walked)

    return current


def json_get(value: Any, *path: PathElement, default: Any = None, expect: Optional[type] = None) -> Any:
    """Like json_nav, but return default instead of raising."""
    try:
        return json_nav(value, *path, expect=expect)
    except JsonNavError:
        return default
