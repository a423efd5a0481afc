"""structcopy: deep copy of structured values through runtime type introspection.

Usage:
    from dataclasses import dataclass, field
    from structcopy import copy_into, copy_of

    @dataclass
    class Request:
        url: str
        headers: dict[str, str] = field(default_factory=dict)
        retries: int = 0

    @dataclass
    class Attempt:
        url: str = ""
        headers: dict[str, str] = field(default_factory=dict)
        attempt: int = 1

    request = Request("https://example.org", {"Accept": "text/plain"})
    resend = copy_of(request)          # independent Request
    attempt = Attempt()
    copy_into(attempt, request)        # url and headers; retries ignored
"""

__version__ = "0.1.0"

# Core primitives
from structcopy.core import (
    SKIP,
    AliasPredicate,
    Copy,
    Readable,
    Shape,
    is_readable_stream,
    shape_of_type,
    shape_of_value,
    struct_fields,
    zero_value,
)

# Copier
from structcopy.copier import (
    Copier,
    PreconditionError,
    StructCopyError,
    copy_into,
    copy_of,
)

__all__ = [
    # Version
    "__version__",
    # Copier
    "Copier",
    "copy_into",
    "copy_of",
    "StructCopyError",
    "PreconditionError",
    # Core
    "Copy",
    "SKIP",
    "Shape",
    "Readable",
    "AliasPredicate",
    "is_readable_stream",
    "shape_of_value",
    "shape_of_type",
    "struct_fields",
    "zero_value",
]
