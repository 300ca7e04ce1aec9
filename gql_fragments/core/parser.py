"""GraphQL schema parser using graphql-core.

Loads SDL files (or an introspection result) into a ``GraphQLSchema`` and
reads its type graph into an IRSchema.
"""

import json
import logging
import os
from typing import Any

from graphql import (
    GraphQLError,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLSchema,
    Source,
    build_ast_schema,
    build_client_schema,
    concat_ast,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
    parse,
)

from .ir import (
    IRArgument,
    IRField,
    IROperation,
    IRSchema,
    IRType,
    TypeKind,
)

logger = logging.getLogger(__name__)

SDL_EXTENSIONS = (".graphqls", ".graphql", ".gql")


class SchemaLoadError(Exception):
    """Raised when a schema cannot be read or built."""

    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(message)


def unwrap_type(type_: Any) -> tuple[GraphQLNamedType, bool, bool]:
    """Strip non-null and list wrappers to reach the named type.

    Returns the named type plus whether the outermost value is a list and
    whether it is nullable. Wrappers may nest to any depth.
    """
    is_optional = not isinstance(type_, GraphQLNonNull)
    is_list = False
    while isinstance(type_, (GraphQLNonNull, GraphQLList)):
        if isinstance(type_, GraphQLList):
            is_list = True
        type_ = type_.of_type
    return type_, is_list, is_optional


def _kind_of(named: GraphQLNamedType) -> TypeKind:
    if is_object_type(named):
        return TypeKind.OBJECT
    if is_interface_type(named):
        return TypeKind.INTERFACE
    if is_union_type(named):
        return TypeKind.UNION
    if is_input_object_type(named):
        return TypeKind.INPUT_OBJECT
    if is_enum_type(named):
        return TypeKind.ENUM
    if is_scalar_type(named):
        return TypeKind.SCALAR
    raise TypeError(f"Unknown GraphQL type kind: {named!r}")


def _read_arguments(args: dict) -> list[IRArgument]:
    result = []
    for arg_name, arg in args.items():
        named, is_list, is_optional = unwrap_type(arg.type)
        result.append(
            IRArgument(
                name=arg_name,
                type_name=named.name,
                is_list=is_list,
                is_optional=is_optional,
                description=arg.description,
            )
        )
    return result


def _read_fields(named: GraphQLNamedType) -> list[IRField]:
    fields = []
    for field_name, gql_field in named.fields.items():
        if field_name.startswith("__"):
            continue
        if gql_field.type is None:
            logger.debug("Skipping %s.%s: no declared type", named.name, field_name)
            continue
        target, is_list, is_optional = unwrap_type(gql_field.type)
        fields.append(
            IRField(
                name=field_name,
                type_name=target.name,
                is_list=is_list,
                is_optional=is_optional,
                description=gql_field.description,
                arguments=_read_arguments(getattr(gql_field, "args", None) or {}),
            )
        )
    return fields


def _read_operations(root: GraphQLNamedType, op_type: str) -> list[IROperation]:
    operations = []
    for field_name, gql_field in root.fields.items():
        if field_name.startswith("__"):
            continue
        target, is_list, is_optional = unwrap_type(gql_field.type)
        operations.append(
            IROperation(
                name=field_name,
                operation_type=op_type,
                arguments=_read_arguments(gql_field.args),
                return_type=target.name,
                is_return_list=is_list,
                is_return_optional=is_optional,
                description=gql_field.description,
            )
        )
    return operations


def read_schema(schema: GraphQLSchema) -> IRSchema:
    """Read the type graph of a loaded schema into IR.

    Introspection types (``__`` prefix) are skipped. Missing root types
    simply produce no operations.
    """
    ir = IRSchema()
    for name, named in schema.type_map.items():
        if name.startswith("__"):
            continue
        kind = _kind_of(named)
        ir_type = IRType(name=name, kind=kind, description=named.description)
        if kind in (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.INPUT_OBJECT):
            ir_type.fields = _read_fields(named)
        elif kind is TypeKind.ENUM:
            ir_type.values = list(named.values)
        ir.types[name] = ir_type

    if schema.query_type is not None:
        ir.query_type = schema.query_type.name
        ir.queries = _read_operations(schema.query_type, "query")
    if schema.mutation_type is not None:
        ir.mutation_type = schema.mutation_type.name
        ir.mutations = _read_operations(schema.mutation_type, "mutation")
    return ir


class SchemaParser:
    """Parses GraphQL schema files into IR."""

    def __init__(self, schema_path: str):
        """Initialize a parser with a path to a schema file or directory."""
        self.schema_path = schema_path
        self.schema: GraphQLSchema | None = None

    def parse_all(self) -> IRSchema:
        """Load all schema files and return the complete IR."""
        self.schema = self.load_schema()
        ir = read_schema(self.schema)
        logger.info(
            "Read %d types, %d queries, %d mutations from %s",
            len(ir.types),
            len(ir.queries),
            len(ir.mutations),
            self.schema_path,
        )
        return ir

    def load_schema(self) -> GraphQLSchema:
        """Build a graphql-core schema from SDL files or introspection JSON."""
        if os.path.isfile(self.schema_path) and self.schema_path.endswith(".json"):
            return self._load_introspection(self.schema_path)

        schema_files = self._collect_schema_files()
        if not schema_files:
            raise SchemaLoadError(
                f"No schema files found at {self.schema_path}", self.schema_path
            )

        documents = []
        for file_path in schema_files:
            logger.debug("Reading %s", file_path)
            with open(file_path, encoding="utf-8") as f:
                content = f.read()
            try:
                documents.append(parse(Source(content, os.path.basename(file_path))))
            except GraphQLError as e:
                raise SchemaLoadError(
                    f"Error parsing {os.path.basename(file_path)}: {e.message}", file_path
                ) from e

        try:
            return build_ast_schema(concat_ast(documents))
        except (GraphQLError, TypeError) as e:
            raise SchemaLoadError(f"Invalid schema: {e}", self.schema_path) from e

    def _collect_schema_files(self) -> list[str]:
        """Collect all SDL files from path."""
        files = []
        if os.path.isfile(self.schema_path):
            if self.schema_path.endswith(SDL_EXTENSIONS):
                files.append(self.schema_path)
        else:
            for root, _, filenames in os.walk(self.schema_path):
                for filename in filenames:
                    if filename.endswith(SDL_EXTENSIONS):
                        files.append(os.path.join(root, filename))
        return sorted(files)

    @staticmethod
    def _load_introspection(file_path: str) -> GraphQLSchema:
        with open(file_path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise SchemaLoadError(f"Invalid JSON in {file_path}: {e}", file_path) from e
        if isinstance(data, dict) and "data" in data:
            data = data["data"]
        if not isinstance(data, dict) or "__schema" not in data:
            raise SchemaLoadError(
                f"{file_path} is not an introspection result", file_path
            )
        try:
            return build_client_schema(data)
        except (GraphQLError, TypeError) as e:
            raise SchemaLoadError(f"Invalid introspection result: {e}", file_path) from e
