"""
Naming Helpers

Case conversions used to turn method names into field and method names.
"""

import re


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[-_\s]+")


def snake(value: str) -> str:
    """
    Convert ``FullName`` or ``full_name`` to ``full_name``.
    
    >>> snake("FullName")
    'full_name'
    """
    value = _CAMEL_BOUNDARY.sub("_", value.strip())
    return _SEPARATORS.sub("_", value).strip("_").lower()


def studly(value: str) -> str:
    """Convert ``where_owner_id`` to ``WhereOwnerId``."""
    parts = _SEPARATORS.split(value.strip())
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def camel(value: str) -> str:
    """
    Convert ``where_owner_id`` to ``whereOwnerId``.
    
    >>> camel("popular_posts")
    'popularPosts'
    """
    result = studly(value)
    return result[:1].lower() + result[1:]
