"""Selection maps: which fields to fetch for a type or a root operation.

A selection is built from three kinds of elements:

    Field("id")                        -> id
    Nested("audio", (Field("url"),))   -> audio { url }
    Reference("audio", "AudioMap")     -> audio { <contents of AudioMap> }

Two construction modes exist. ``SUB`` builds the reusable per-type maps
(submodels); ``PARENT`` builds root operation maps, whose composite fields
always reference the submodels. With references disabled, ``SUB`` inlines
composite fields instead, bounded by a depth budget.

Compiled maps live in a ``SelectionArena``: every name is registered
before any map is filled in, so maps of types that reference each other
in a cycle can be built in any order. ``SelectionArena.resolve`` turns a
map into the plain runtime shape (a ``GQLMap`` of strings and single-key
dicts) that the renderer and generated modules use.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

from .graph import emission_order
from .ir import IRSchema
from .naming import to_pascal_case

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

# Plain runtime shape: a field name, or {field name: child selection}
SelectionNode = Union[str, dict[str, list["SelectionNode"]]]


class GQLMap(list, Generic[_T]):
    """A selection in its plain runtime shape.

    ``depth`` is advisory metadata recorded for root operation maps; it
    does not change what the list contains.
    """

    def __init__(self, iterable: Iterable[SelectionNode] = (), depth: int | None = None):
        super().__init__(iterable)
        self.depth = depth


@dataclass(frozen=True)
class Field:
    """A scalar or enum field, selected by name."""
    name: str


@dataclass(frozen=True)
class Nested:
    """A composite field with an inlined child selection."""
    name: str
    children: tuple["SelectionElement", ...] = ()


@dataclass(frozen=True)
class Reference:
    """A composite field whose selection is the map named ``target``."""
    field: str
    target: str


SelectionElement = Union[Field, Nested, Reference]


class BuildMode(Enum):
    """Selection construction modes."""
    PARENT = "parent"  # Root operation maps
    SUB = "sub"        # Per-type submodel maps


def map_name(type_name: str, namer: Callable[[str], str] = to_pascal_case) -> str:
    """Name of the submodel map for a type, e.g. ``UserMap``."""
    return f"{namer(type_name)}Map"


def build_selection(
    ir: IRSchema,
    type_name: str,
    max_depth: int,
    namer: Callable[[str], str] = to_pascal_case,
    mode: BuildMode = BuildMode.PARENT,
    allow_refs: bool = False,
) -> list[SelectionElement]:
    """Build the selection for one object type.

    Fields keep their declaration order. Scalar and enum fields become
    ``Field``. Object-typed fields become a ``Reference`` to the target's
    map in ``PARENT`` mode or when ``allow_refs`` is set; otherwise they
    are inlined while ``max_depth > 1`` and degrade to a bare ``Field``
    once the budget reaches 1. Interface and union fields are selected by
    name only. Fields whose type is unknown are skipped.
    """
    ir_type = ir.get_type_by_name(type_name)
    if ir_type is None:
        return []

    elements: list[SelectionElement] = []
    for ir_field in ir_type.fields:
        if ir_field.name.startswith("__"):
            continue
        if ir.is_leaf(ir_field.type_name):
            elements.append(Field(ir_field.name))
            continue

        target = ir.get_type_by_name(ir_field.type_name)
        if target is None:
            logger.debug(
                "Skipping %s.%s: unknown type %s", type_name, ir_field.name, ir_field.type_name
            )
            continue

        if not target.is_object:
            elements.append(Field(ir_field.name))
        elif mode is BuildMode.PARENT or allow_refs:
            elements.append(Reference(ir_field.name, map_name(target.name, namer)))
        elif max_depth > 1:
            children = build_selection(
                ir, target.name, max_depth - 1, namer, BuildMode.SUB, allow_refs
            )
            elements.append(Nested(ir_field.name, tuple(children)))
        else:
            elements.append(Field(ir_field.name))
    return elements


class SelectionArena:
    """Named selection maps, registered up front and filled in any order."""

    def __init__(self):
        self._maps: dict[str, list[SelectionElement]] = {}

    def register(self, name: str):
        """Reserve a name with an empty map."""
        self._maps.setdefault(name, [])

    def fill(self, name: str, elements: Iterable[SelectionElement]):
        """Set the contents of a registered map."""
        if name not in self._maps:
            raise KeyError(f"Selection map {name!r} was not registered")
        self._maps[name][:] = list(elements)

    def get(self, name: str) -> list[SelectionElement]:
        return self._maps[name]

    def names(self) -> list[str]:
        return list(self._maps)

    def __contains__(self, name: object) -> bool:
        return name in self._maps

    def __len__(self) -> int:
        return len(self._maps)

    def resolve(
        self,
        selection: str | Iterable[SelectionElement],
        depth: int,
    ) -> GQLMap:
        """Expand references into a finite plain tree.

        ``depth`` counts levels including the top one. A referenced map is
        expanded while the remaining budget is greater than 1; at 1 the
        field degrades to its bare name, as does a reference to a map that
        is not in the arena.
        """
        if isinstance(selection, str):
            selection = self.get(selection)
        return GQLMap(self._resolve(selection, depth))

    def _resolve(self, elements: Iterable[SelectionElement], depth: int) -> list[SelectionNode]:
        result: list[SelectionNode] = []
        for element in elements:
            if isinstance(element, Field):
                result.append(element.name)
            elif isinstance(element, Nested):
                result.append({element.name: self._resolve(element.children, depth - 1)})
            elif isinstance(element, Reference):
                if depth > 1 and element.target in self._maps:
                    children = self._resolve(self._maps[element.target], depth - 1)
                    result.append({element.field: children})
                else:
                    result.append(element.field)
        return result


@dataclass
class SubmodelSelection:
    """The reusable map of one object type."""
    type_name: str
    rendered_name: str
    name: str
    elements: list[SelectionElement]


@dataclass
class RootSelection:
    """The map of one root operation field."""
    name: str
    operation_type: str
    type_name: str
    rendered_type_name: str
    depth: int
    elements: list[SelectionElement]


@dataclass
class CompiledSelections:
    """All maps of a schema: submodels in emission order, then roots."""
    submodels: list[SubmodelSelection] = field(default_factory=list)
    roots: list[RootSelection] = field(default_factory=list)
    arena: SelectionArena = field(default_factory=SelectionArena)

    def get_root(self, name: str) -> RootSelection | None:
        for root in self.roots:
            if root.name == name:
                return root
        return None

    def resolve_root(self, name: str, depth: int | None = None) -> GQLMap:
        """Plain selection of a root operation, ``depth`` defaulting to its own."""
        root = self.get_root(name)
        if root is None:
            raise KeyError(f"Unknown root operation: {name}")
        budget = root.depth if depth is None else depth
        return GQLMap(self.arena.resolve(root.elements, budget), depth=budget)


def compile_selections(
    ir: IRSchema,
    depth: int = 2,
    sub_model_depth: int = 1,
    namer: Callable[[str], str] = to_pascal_case,
) -> CompiledSelections:
    """Build every submodel map and every root operation map of a schema."""
    compiled = CompiledSelections()
    order = emission_order(ir)

    for type_name in order:
        compiled.arena.register(map_name(type_name, namer))

    for type_name in order:
        ir_type = ir.get_type_by_name(type_name)
        if ir_type is None or not ir_type.is_object or type_name.startswith("__"):
            continue
        name = map_name(type_name, namer)
        elements = build_selection(
            ir, type_name, sub_model_depth, namer, BuildMode.SUB, allow_refs=True
        )
        compiled.arena.fill(name, elements)
        compiled.submodels.append(
            SubmodelSelection(
                type_name=type_name,
                rendered_name=namer(type_name),
                name=name,
                elements=elements,
            )
        )

    for operation in ir.all_operations:
        target = ir.get_type_by_name(operation.return_type)
        if target is None or not target.is_object:
            continue
        elements = build_selection(
            ir, target.name, depth, namer, BuildMode.PARENT, allow_refs=True
        )
        compiled.roots.append(
            RootSelection(
                name=operation.name,
                operation_type=operation.operation_type,
                type_name=target.name,
                rendered_type_name=namer(target.name),
                depth=depth,
                elements=elements,
            )
        )

    logger.debug(
        "Compiled %d submodel maps and %d root maps",
        len(compiled.submodels),
        len(compiled.roots),
    )
    return compiled
