"""Naming policy for generated identifiers."""

import keyword
import re
from collections.abc import Callable, Mapping


def to_snake_case(name: str) -> str:
    """Convert camelCase to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    return re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1).lower()


def to_pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    # First convert to snake_case, then to PascalCase
    snake = to_snake_case(name)
    return "".join(word.capitalize() for word in snake.split("_"))


def safe_identifier(name: str) -> str:
    """Make a name usable as a Python identifier by suffixing keywords with underscore."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


NAMING_CONVENTIONS: dict[str, Callable[[str], str]] = {
    "keep": lambda name: name,
    "pascal_case": to_pascal_case,
}


def make_namer(
    convention: str = "pascal_case",
    rename: Mapping[str, str] | None = None,
) -> Callable[[str], str]:
    """Build the ``name(raw) -> rendered`` function for type names.

    Explicit renames win over the convention.
    """
    try:
        convert = NAMING_CONVENTIONS[convention]
    except KeyError:
        raise ValueError(f"Unknown naming convention: {convention!r}") from None
    overrides = dict(rename or {})

    def name(raw: str) -> str:
        if raw in overrides:
            return overrides[raw]
        return convert(raw)

    return name
