"""Lookups of values inside parsed JSON response bodies by path.

A path is a chain of object keys separated by dots, where any step may be
followed by one or more ``[n]`` array indexes. A leading ``$`` names the
body itself and may be dropped. ``*`` or ``$`` alone select the whole body.

Anything outside that grammar, such as ``$..name``, ``items[abc]`` or
``a..b``, is rejected with ``ValueError`` instead of being half-read.

Examples:
    >>> resolve_body_path({"owner": {"id": 42}}, "owner.id")
    42
    >>> resolve_body_path({"items": [{"name": "a"}, {"name": "b"}]}, "$.items[1].name")
    'b'
    >>> resolve_body_path([{"id": 1}, {"id": 2}], "$[1].id")
    2
"""

import re
from typing import Any


def resolve_body_path(body: Any, path: str) -> Any:
    """Resolve a dot-notation path with optional array indexing from a body.

    Args:
        body: The parsed JSON body.
        path: The path string. "*" and "$" return the full body.

    Returns:
        The resolved value at the given path.

    Raises:
        KeyError: If an object key in the path is not found.
        IndexError: If an array index is out of range.
        TypeError: If the path tries to index into a scalar value.
        ValueError: If the path is empty or not valid path syntax.
    """
    if path in ("*", "$"):
        return body

    if path.startswith("$."):
        path = path[2:]
    elif path.startswith("$["):
        path = path[1:]

    current = body
    for token in _tokenize_path(path):
        if isinstance(token, int):
            if not isinstance(current, list):
                raise TypeError(
                    f"Cannot index into {type(current).__name__} with integer index [{token}]"
                )
            current = current[token]
        else:
            if not isinstance(current, dict):
                raise TypeError(
                    f"Cannot access key '{token}' on {type(current).__name__}"
                )
            current = current[token]

    return current


_KEY_PATTERN = re.compile(r"[^.\[\]]+")
_INDEX_PATTERN = re.compile(r"\[(\d+)\]")


def _tokenize_path(path: str) -> list[str | int]:
    tokens: list[str | int] = []
    position = 0

    while position < len(path):
        index = _INDEX_PATTERN.match(path, position)
        if index is not None:
            tokens.append(int(index.group(1)))
            position = index.end()
            continue

        # keys after the first token must follow a dot
        start = position
        if tokens:
            if path[position] != ".":
                break
            start += 1

        key = _KEY_PATTERN.match(path, start)
        if key is None:
            break
        tokens.append(key.group())
        position = key.end()

    if not tokens or position != len(path):
        raise ValueError(f"Invalid path '{path}' at position {position}")

    return tokens
