"""Render selection maps and call arguments into GraphQL query strings.

    render_gql("loadItem", ["id", {"audio": ["url"]}], {"id": "abc", "type": "FULL"})
    # '{loadItem(id:"abc" type:FULL) { id audio { url } }}'

Selections are lists whose elements are field names or single-key dicts
mapping a field name to a child list (the typed ``Field``/``Nested``
elements are accepted too). Elements of any other shape render as an
empty string instead of failing the whole query.

Generated maps reference each other, so a selection is cut at a depth: the
``depth`` argument, or else the depth recorded on a ``GQLMap`` body. A map
without a depth is walked until a list repeats on the current path.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic_core import to_json

from .classifier import ArgumentKind, Classification, active_classification
from .ir import IRSchema
from .selection import Field, GQLMap, Nested, Reference


# =============================================================================
# Argument values
# =============================================================================


def _coerce(value: Any) -> str:
    """Plain string coercion with GraphQL spelling for booleans and null."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def render_flag(value: Any) -> str:
    """Bare token, or a bracketed comma-joined list of bare tokens."""
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_coerce(v) for v in value) + "]"
    return _coerce(value)


def render_enum(value: Any) -> str:
    return _coerce(value)


def render_plain(value: Any) -> str:
    """JSON literal; pydantic models, datetimes and UUIDs are encoded as JSON."""
    return to_json(value, by_alias=True, serialize_unknown=True).decode()


VALUE_RENDERERS: dict[ArgumentKind, Callable[[Any], str]] = {
    ArgumentKind.FLAG: render_flag,
    ArgumentKind.ENUM: render_enum,
    ArgumentKind.PLAIN: render_plain,
}


# =============================================================================
# Selections
# =============================================================================


def _as_selection_object(node: Any) -> tuple[str, Sequence] | None:
    """Return (name, children) for a single-key mapping to a list."""
    if not isinstance(node, Mapping) or len(node) != 1:
        return None
    name, children = next(iter(node.items()))
    if not isinstance(children, (list, tuple)):
        return None
    return str(name), children


def _render_node(node: Any, path: tuple[int, ...], budget: int | None) -> str:
    if isinstance(node, str):
        return node
    if isinstance(node, Field):
        return node.name
    if isinstance(node, Reference):
        # Unresolved reference
        return ""
    if isinstance(node, Nested):
        name, children = node.name, node.children
    else:
        selection = _as_selection_object(node)
        if selection is None:
            return ""
        name, children = selection
    if budget is not None and budget <= 1:
        return name
    return _render_block(name, children, path, None if budget is None else budget - 1)


def _render_block(
    name: str,
    children: Sequence,
    path: tuple[int, ...] = (),
    budget: int | None = None,
) -> str:
    """Render ``name { children }``.

    ``budget`` counts the levels left including this block's children; a
    composite child is expanded only while more than one level remains.
    """
    if isinstance(children, list):
        # A map reached again through itself selects the field by name
        if id(children) in path:
            return name
        path = path + (id(children),)
    parts = [_render_node(child, path, budget) for child in children]
    return f"{name} {{ {' '.join(parts)} }}"


def _as_children(body: Any) -> Sequence:
    if isinstance(body, (list, tuple)):
        return body
    if body is None:
        return []
    return [body]


def _depth_budget(body: Any, depth: int | None) -> int | None:
    """Explicit depth, else the depth recorded on a ``GQLMap``, else unbounded."""
    if depth is not None:
        return depth
    if isinstance(body, GQLMap):
        return body.depth
    return None


def render_selection(node: Any, depth: int | None = None) -> str:
    """Render one selection element, e.g. ``{"audio": ["url"]}`` -> ``audio { url }``."""
    return _render_node(node, (), depth)


# =============================================================================
# Queries
# =============================================================================


@dataclass
class GqlCommand:
    """A named root command and the selection to fetch for it."""
    cmd: str
    body: Any
    key: str | None = None


@dataclass
class RenderedOperation:
    """A parameterized operation ready to post to a GraphQL endpoint."""
    query: str
    variables: dict[str, Any] = field(default_factory=dict)

    def as_payload(self) -> dict[str, Any]:
        return {"query": self.query, "variables": self.variables}


class QueryRenderer:
    """Renders queries with a fixed argument classification.

    Without a classification the shared one from
    ``initialize_schema_analysis`` (or the static defaults) is used.
    """

    def __init__(self, classification: Classification | None = None):
        self.classification = classification

    def _classification(self) -> Classification:
        if self.classification is None:
            return active_classification()
        return self.classification

    def render_arguments(self, params: Mapping[str, Any] | None) -> str:
        """Render ``(key:value key:value)``, or nothing if no values are present.

        ``None`` values are omitted, as are values that render empty.
        """
        if not params:
            return ""
        classification = self._classification()
        parts = []
        for key, value in params.items():
            if value is None:
                continue
            rendered = VALUE_RENDERERS[classification.classify(key)](value)
            if rendered:
                parts.append(f"{key}:{rendered}")
        if not parts:
            return ""
        return f"({' '.join(parts)})"

    def render(
        self,
        cmd: str,
        body: Any,
        params: Mapping[str, Any] | None = None,
        depth: int | None = None,
    ) -> str:
        """Render ``{cmd(args) { selection }}``.

        The selection is cut at ``depth`` levels, defaulting to the depth
        recorded on a ``GQLMap`` body; composite fields at the last level
        are selected by name.
        """
        root = f"{cmd}{self.render_arguments(params)}"
        block = _render_block(root, _as_children(body), budget=_depth_budget(body, depth))
        return "{" + block + "}"

    def render_from(
        self,
        commands: Mapping[str, GqlCommand | Mapping[str, Any]],
        cmd: str,
        params: Mapping[str, Any] | None = None,
        depth: int | None = None,
    ) -> str:
        """Render a command looked up by key in a command table."""
        command = commands[cmd]
        if isinstance(command, Mapping):
            command = GqlCommand(cmd=command["cmd"], body=command["body"], key=command.get("key"))
        return self.render(command.cmd, command.body, params, depth)

    def render_operation(
        self,
        root: str,
        body: Any,
        variables: Mapping[str, Any],
        var_spec: Mapping[str, str],
        operation_name: str | None = None,
        operation_type: str = "query",
        depth: int | None = None,
    ) -> RenderedOperation:
        """Render a named operation that passes its arguments as variables.

        ``var_spec`` maps variable names to GraphQL type strings and drives
        the declarations; the call-site arguments follow ``variables``. The
        selection is rendered exactly as ``render`` renders it.
        """
        var_defs = ", ".join(f"${name}: {type_str}" for name, type_str in var_spec.items())
        call_args = ", ".join(f"{name}: ${name}" for name in variables)

        call = f"{root}({call_args})" if call_args else root
        block = _render_block(call, _as_children(body), budget=_depth_budget(body, depth))

        query = f"{operation_type} {operation_name or root}"
        if var_defs:
            query += f"({var_defs})"
        query += f" {{ {block} }}"
        return RenderedOperation(query=query, variables=dict(variables))


def create_schema_aware_renderer(
    ir: IRSchema,
    custom_flag_types: Sequence[str] = (),
) -> QueryRenderer:
    """Create a renderer bound to the classification of one schema."""
    return QueryRenderer(Classification.from_schema(ir, custom_flag_types))


_shared = QueryRenderer()


def render_arguments(params: Mapping[str, Any] | None) -> str:
    return _shared.render_arguments(params)


def render_gql(
    cmd: str,
    body: Any,
    params: Mapping[str, Any] | None = None,
    depth: int | None = None,
) -> str:
    return _shared.render(cmd, body, params, depth)


def render_gql_from(
    commands: Mapping[str, GqlCommand | Mapping[str, Any]],
    cmd: str,
    params: Mapping[str, Any] | None = None,
    depth: int | None = None,
) -> str:
    return _shared.render_from(commands, cmd, params, depth)


def render_operation(
    root: str,
    body: Any,
    variables: Mapping[str, Any],
    var_spec: Mapping[str, str],
    operation_name: str | None = None,
    operation_type: str = "query",
    depth: int | None = None,
) -> RenderedOperation:
    return _shared.render_operation(
        root, body, variables, var_spec, operation_name, operation_type, depth
    )
