"""Identifier naming conventions."""
import re

# Word boundaries, both zero-width:
#   1. before an uppercase letter that follows a lowercase letter/digit (firstName -> first|Name)
#   2. before an uppercase letter that starts a capitalized word (HTTPServer -> HTTP|Server)
# Neither splits at the start of the string or right after an underscore.
_WORD_BOUNDARY = re.compile(
    r"(?<!^)(?<![A-Z_])(?=[A-Z])"
    r"|(?<!^)(?<!_)(?=[A-Z][a-z])"
)


def to_snake_case(name: str) -> str:
    """
    Convert a camelCase / PascalCase identifier to snake_case.

        >>> to_snake_case("firstName")
        'first_name'
        >>> to_snake_case("HTTPServer")
        'http_server'
        >>> to_snake_case("userID")
        'user_id'
        >>> to_snake_case("created_at")
        'created_at'
    """
    return "_".join(_WORD_BOUNDARY.split(name)).lower()
