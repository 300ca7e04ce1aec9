"""Intermediate Representation (IR) for GraphQL schemas.

This module defines dataclasses that describe the type graph of a schema:
named types, their ordered fields and the root operations. Wrapper
modifiers (non-null, list) are stripped to the underlying named type;
the flags that record them are informational only.
"""

from dataclasses import dataclass, field
from enum import Enum

# The five scalars every GraphQL schema provides
BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")


class TypeKind(Enum):
    """Kinds of named types."""
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    INPUT_OBJECT = "input_object"
    SCALAR = "scalar"
    ENUM = "enum"


@dataclass
class IRArgument:
    """Represents an argument to a field or operation."""
    name: str
    type_name: str
    is_list: bool = False
    is_optional: bool = True
    description: str | None = None


@dataclass
class IRField:
    """Represents a field in a GraphQL type."""
    name: str
    type_name: str
    is_list: bool = False
    is_optional: bool = True  # True if nullable (no ! in GraphQL)
    description: str | None = None
    arguments: list[IRArgument] = field(default_factory=list)


@dataclass
class IRType:
    """Represents a named type of any kind."""
    name: str
    kind: TypeKind
    fields: list[IRField] = field(default_factory=list)
    description: str | None = None
    # Enum values, empty for every other kind
    values: list[str] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.kind in (TypeKind.SCALAR, TypeKind.ENUM)

    @property
    def is_object(self) -> bool:
        return self.kind is TypeKind.OBJECT


@dataclass
class IROperation:
    """Represents a root field of the Query or Mutation type."""
    name: str
    operation_type: str  # 'query' or 'mutation'
    arguments: list[IRArgument]
    return_type: str
    is_return_list: bool = False
    is_return_optional: bool = True
    description: str | None = None


@dataclass
class IRSchema:
    """Complete intermediate representation of a GraphQL schema."""
    types: dict[str, IRType] = field(default_factory=dict)
    query_type: str | None = None
    mutation_type: str | None = None
    queries: list[IROperation] = field(default_factory=list)
    mutations: list[IROperation] = field(default_factory=list)

    def get_type_by_name(self, name: str) -> IRType | None:
        """Look up a named type."""
        return self.types.get(name)

    @property
    def object_types(self) -> list[IRType]:
        """Return object types in schema order."""
        return [t for t in self.types.values() if t.is_object]

    @property
    def enums(self) -> list[IRType]:
        return [t for t in self.types.values() if t.kind is TypeKind.ENUM]

    @property
    def root_types(self) -> list[IRType]:
        """Return the Query and Mutation types that exist, in that order."""
        roots = []
        for name in (self.query_type, self.mutation_type):
            if name and name in self.types:
                roots.append(self.types[name])
        return roots

    @property
    def all_operations(self) -> list[IROperation]:
        """Return all queries and mutations."""
        return self.queries + self.mutations

    def is_leaf(self, type_name: str) -> bool:
        """Check if a type is a scalar or enum (no subfields)."""
        if type_name in BUILTIN_SCALARS:
            return True
        ir_type = self.types.get(type_name)
        return ir_type is not None and ir_type.is_leaf

    def kind_of(self, type_name: str) -> TypeKind | None:
        ir_type = self.types.get(type_name)
        if ir_type is None:
            return TypeKind.SCALAR if type_name in BUILTIN_SCALARS else None
        return ir_type.kind
