"""Core modules for selection-map generation and query rendering."""

from .classifier import (
    ArgumentKind,
    Classification,
    analyze_schema_enums,
    analyze_schema_flags,
    get_query_enums,
    get_query_flags,
    initialize_schema_analysis,
    reset_schema_analysis,
)
from .config import FragmentsConfig
from .generator import FragmentsGenerator, ImportResolutionError, as_module_specifier
from .graph import collect_dependencies, emission_order, topological_order
from .hooks import (
    AddHeaderHook,
    FilterTypesHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .ir import (
    IRArgument,
    IRField,
    IROperation,
    IRSchema,
    IRType,
    TypeKind,
)
from .naming import make_namer, to_pascal_case, to_snake_case
from .parser import SchemaLoadError, SchemaParser, read_schema, unwrap_type
from .renderer import (
    GqlCommand,
    QueryRenderer,
    RenderedOperation,
    create_schema_aware_renderer,
    render_arguments,
    render_gql,
    render_gql_from,
    render_operation,
    render_selection,
)
from .selection import (
    BuildMode,
    CompiledSelections,
    Field,
    GQLMap,
    Nested,
    Reference,
    SelectionArena,
    build_selection,
    compile_selections,
    map_name,
)

__all__ = [
    # IR types
    "IRArgument",
    "IRField",
    "IROperation",
    "IRSchema",
    "IRType",
    "TypeKind",
    # Parser
    "SchemaLoadError",
    "SchemaParser",
    "read_schema",
    "unwrap_type",
    # Graph
    "collect_dependencies",
    "emission_order",
    "topological_order",
    # Selections
    "BuildMode",
    "CompiledSelections",
    "Field",
    "GQLMap",
    "Nested",
    "Reference",
    "SelectionArena",
    "build_selection",
    "compile_selections",
    "map_name",
    # Naming
    "make_namer",
    "to_pascal_case",
    "to_snake_case",
    # Classification
    "ArgumentKind",
    "Classification",
    "analyze_schema_enums",
    "analyze_schema_flags",
    "get_query_enums",
    "get_query_flags",
    "initialize_schema_analysis",
    "reset_schema_analysis",
    # Rendering
    "GqlCommand",
    "QueryRenderer",
    "RenderedOperation",
    "create_schema_aware_renderer",
    "render_arguments",
    "render_gql",
    "render_gql_from",
    "render_operation",
    "render_selection",
    # Config
    "FragmentsConfig",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FilterTypesHook",
    "HookRunner",
    # Generator
    "FragmentsGenerator",
    "ImportResolutionError",
    "as_module_specifier",
]
