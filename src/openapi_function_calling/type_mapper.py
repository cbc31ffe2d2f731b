"""
Mapping of OpenAPI primitive types to the types accepted in tool declarations.
"""

from typing import Optional

STRING = "STRING"
NUMBER = "NUMBER"
BOOLEAN = "BOOLEAN"

_TYPE_MAP = {
    "string": STRING,
    "number": NUMBER,
    "integer": NUMBER,
    "boolean": BOOLEAN,
}


def map_type(source_type: Optional[str]) -> str:
    """Map an OpenAPI parameter type to a tool declaration type.

    Unknown or missing types fall back to STRING. The lookup ignores case, so
    mapping an already mapped type returns it unchanged.

    Args:
        source_type: The OpenAPI schema type (e.g. "integer")

    Returns:
        One of STRING, NUMBER or BOOLEAN
    """
    if not source_type:
        return STRING
    return _TYPE_MAP.get(source_type.strip().lower(), STRING)
