"""Argument classification: which arguments render as flags, enums or JSON.

Flags are rendered bare (``status:ACTIVE``, ``tags:[a,b]``), enums by
plain string coercion, everything else as a JSON literal. The sets are
derived from the arguments of the schema's root operations.

Example usage:
    from gql_fragments.core.classifier import Classification

    classification = Classification.from_schema(ir, ["sort"])
    classification.classify("status")  # ArgumentKind.FLAG
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .ir import BUILTIN_SCALARS, IRSchema, TypeKind

logger = logging.getLogger(__name__)

# Argument names that are always flags once a schema has been analyzed
COMMON_FLAG_NAMES = ("flags", "type", "status", "mode", "kind")

# Used when no schema has been analyzed
FALLBACK_FLAGS = ("flags", "type")
FALLBACK_ENUMS = ("sectionType",)


class ArgumentKind(Enum):
    """How an argument value is rendered."""
    FLAG = "flag"
    ENUM = "enum"
    PLAIN = "plain"


def _ordered_unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True)
class Classification:
    """Immutable flag and enum name sets."""
    flags: tuple[str, ...] = FALLBACK_FLAGS
    enums: tuple[str, ...] = FALLBACK_ENUMS

    def classify(self, name: str) -> ArgumentKind:
        """Flags take precedence over enums; anything else is plain."""
        if name in self.flags:
            return ArgumentKind.FLAG
        if name in self.enums:
            return ArgumentKind.ENUM
        return ArgumentKind.PLAIN

    @classmethod
    def default(cls) -> "Classification":
        """The static classification used before any schema analysis."""
        return cls()

    @classmethod
    def from_schema(
        cls,
        ir: IRSchema,
        custom_flag_types: Iterable[str] = (),
    ) -> "Classification":
        """Analyze a schema, recomputing both sets from scratch."""
        return cls(
            flags=tuple(analyze_schema_flags(ir, custom_flag_types)),
            enums=tuple(analyze_schema_enums(ir)),
        )


def analyze_schema_flags(ir: IRSchema, custom_flag_types: Iterable[str] = ()) -> list[str]:
    """Collect argument names to render as flags.

    The result is the custom names, the common flag names, and every root
    operation argument whose type is a custom (non built-in) scalar.
    """
    names = list(custom_flag_types)
    names.extend(COMMON_FLAG_NAMES)
    for operation in ir.all_operations:
        for arg in operation.arguments:
            if ir.kind_of(arg.type_name) is TypeKind.SCALAR and arg.type_name not in BUILTIN_SCALARS:
                names.append(arg.name)
    return list(_ordered_unique(names))


def analyze_schema_enums(ir: IRSchema) -> list[str]:
    """Collect enum type names and the root operation arguments that take an enum."""
    names = [t.name for t in ir.enums if not t.name.startswith("__")]
    for operation in ir.all_operations:
        for arg in operation.arguments:
            if ir.kind_of(arg.type_name) is TypeKind.ENUM:
                names.append(arg.name)
    return list(_ordered_unique(names))


# Shared classification for the module-level render helpers. It is only
# ever replaced as a whole, never mutated; initialize it before serving
# concurrent renders.
_active = Classification.default()


def initialize_schema_analysis(
    ir: IRSchema,
    custom_flag_types: Iterable[str] = (),
) -> Classification:
    """Analyze a schema and make the result the shared classification."""
    global _active
    _active = Classification.from_schema(ir, custom_flag_types)
    logger.debug(
        "Classified %d flag and %d enum argument names",
        len(_active.flags),
        len(_active.enums),
    )
    return _active


def reset_schema_analysis():
    """Restore the static defaults."""
    global _active
    _active = Classification.default()


def active_classification() -> Classification:
    return _active


def get_query_flags() -> tuple[str, ...]:
    """Current flag names (for testing or debugging purposes)."""
    return _active.flags


def get_query_enums() -> tuple[str, ...]:
    """Current enum names (for testing or debugging purposes)."""
    return _active.enums
