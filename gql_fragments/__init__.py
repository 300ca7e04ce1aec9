"""Selection maps and query rendering for GraphQL schemas.

Generated fragment modules import their runtime helpers from here.
"""

from .core.classifier import initialize_schema_analysis
from .core.renderer import (
    GqlCommand,
    QueryRenderer,
    RenderedOperation,
    create_schema_aware_renderer,
    render_gql,
    render_gql_from,
    render_operation,
)
from .core.selection import GQLMap, SelectionNode

__all__ = [
    "GQLMap",
    "GqlCommand",
    "QueryRenderer",
    "RenderedOperation",
    "SelectionNode",
    "create_schema_aware_renderer",
    "initialize_schema_analysis",
    "render_gql",
    "render_gql_from",
    "render_operation",
]
