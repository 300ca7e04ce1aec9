"""Writes the selection-map module.

The compiled maps are rendered through ``templates/fragments.py.j2``: one
``<Type>Map`` per object type, declared before any of them is filled in,
then one map per root operation field.

A directory passed as ``template_dir`` is searched before the packaged
templates, so dropping a ``fragments.py.j2`` there replaces the layout:

    FragmentsGenerator(ir, config, template_dir="./my_templates")
"""

import ast
import logging
import os
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .classifier import Classification
from .config import FragmentsConfig
from .hooks import HookRunner
from .ir import IRSchema
from .naming import safe_identifier
from .selection import (
    CompiledSelections,
    Field,
    Nested,
    Reference,
    SelectionElement,
    compile_selections,
)

logger = logging.getLogger(__name__)

INDENT = "    "


def print_map(elements: list[SelectionElement], indent: int = 0) -> str:
    """Print a selection as a Python list literal, references as bare names."""
    if not elements:
        return "[]"
    pad = INDENT * (indent + 1)
    items = [pad + _print_element(element, indent + 1) for element in elements]
    return "[\n" + ",\n".join(items) + ",\n" + INDENT * indent + "]"


def _print_element(element: SelectionElement, indent: int) -> str:
    if isinstance(element, Reference):
        return f"{{{element.field!r}: {element.target}}}"
    if isinstance(element, Nested):
        return f"{{{element.name!r}: {print_map(list(element.children), indent)}}}"
    if isinstance(element, Field):
        return repr(element.name)
    raise TypeError(f"Not a selection element: {element!r}")


def tuple_literal(names) -> str:
    """Print names as a Python tuple literal."""
    names = list(names)
    if len(names) == 1:
        return f"({names[0]!r},)"
    return "(" + ", ".join(repr(n) for n in names) + ")"


def as_module_specifier(spec: str | None, out_file: str | Path, base_dir: str | Path) -> str:
    """Turn a configured import location into a module for ``from ... import``.

    Specifiers starting with ``.`` or ``/`` are paths: they are resolved
    against ``base_dir`` and made relative to the output file's directory,
    e.g. ``../lib/helpers`` becomes ``..lib.helpers``. Anything else is an
    absolute module path and is returned unchanged.
    """
    if not spec:
        return ""
    if not spec.startswith((".", "/")):
        return spec

    base = Path(base_dir)
    out_path = Path(out_file)
    if not out_path.is_absolute():
        out_path = base / out_path
    target = Path(os.path.normpath(base / spec))
    if target.suffix == ".py":
        target = target.with_suffix("")
    if target.name == "__init__":
        target = target.parent

    rel = Path(os.path.relpath(target, os.path.normpath(out_path.parent)))
    parts = [p for p in rel.parts if p != "."]
    ups = 0
    while parts and parts[0] == "..":
        ups += 1
        parts.pop(0)
    return "." * (ups + 1) + ".".join(parts)


class ImportResolutionError(ValueError):
    """A configured import location cannot be imported from the output module."""


def types_import_line(module: str) -> str:
    """Import statement binding the types module to ``T``."""
    if not module:
        return ""
    if not module.startswith("."):
        return f"import {module} as T"
    stripped = module.lstrip(".")
    dots = module[: len(module) - len(stripped)]
    if not stripped:
        raise ImportResolutionError(f"Types import {module!r} does not name a module")
    package, _, name = stripped.rpartition(".")
    return f"from {dots}{package} import {name} as T"


class FragmentsGenerator:
    """Renders compiled selection maps into a Python module.

    Example:
        generator = FragmentsGenerator(ir, FragmentsConfig(depth=3))
        generator.generate("./generated/fragments.py")
    """

    TEMPLATE_NAME = "fragments.py.j2"

    def __init__(
        self,
        ir: IRSchema,
        config: FragmentsConfig | None = None,
        template_dir: str | None = None,
        hooks: HookRunner | None = None,
    ):
        """
        Args:
            ir: Schema IR; pre-generation hooks may replace it
            config: Depth, naming and import options
            template_dir: Directory searched for ``fragments.py.j2`` before
                the packaged template
            hooks: Pre/post generation hooks
        """
        self.ir = ir
        self.config = config or FragmentsConfig()
        self.template_dir = template_dir
        self.hooks = hooks or HookRunner()
        self._compiled: CompiledSelections | None = None

        # User templates first
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_fragments", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["print_map"] = print_map
        self.env.filters["safe_identifier"] = safe_identifier
        self.env.filters["annotation"] = self._annotation
        self.env.filters["tuple_literal"] = tuple_literal

    def _annotation(self, rendered_type_name: str) -> str:
        if self.config.types_import:
            return f"GQLMap[T.{rendered_type_name}]"
        return "GQLMap"

    def compile(self) -> CompiledSelections:
        """Run pre-generation hooks and build every selection map."""
        if self._compiled is None:
            self.ir = self.hooks.run_pre_hooks(self.ir)
            self._compiled = compile_selections(
                self.ir,
                depth=self.config.depth,
                sub_model_depth=self.config.sub_model_depth,
                namer=self.config.namer(),
            )
        return self._compiled

    def generate_code(self, output_file: str | Path | None = None) -> str:
        """Render the module source for the given output location."""
        output_file = Path(output_file or self.config.output_file)
        compiled = self.compile()
        base_dir = self.config.resolved_base_dir
        classification = Classification.from_schema(self.ir, self.config.flags)

        helpers_module = as_module_specifier(self.config.helpers_import, output_file, base_dir)
        types_module = as_module_specifier(self.config.types_import, output_file, base_dir)
        if types_module and not types_module.strip("."):
            raise ImportResolutionError(
                f"types_import {self.config.types_import!r} resolves to the directory of "
                f"{output_file}, not to a module; name the module itself, e.g. './gen/models'"
            )
        context: dict[str, Any] = {
            "helpers_module": helpers_module,
            "types_import_line": types_import_line(types_module),
            "submodels": compiled.submodels,
            "roots": compiled.roots,
            "query_flags": classification.flags,
            "query_enums": classification.enums,
        }
        content = self.env.get_template(self.TEMPLATE_NAME).render(context)
        content = self.hooks.run_post_hooks(output_file.name, content)

        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ValueError(
                f"Generated invalid Python for {output_file}: {e}\n"
                f"Template: {self.TEMPLATE_NAME}"
            ) from e
        return content

    def generate(self, output_file: str | Path | None = None) -> Path:
        """Generate the module and write it to disk."""
        output_path = Path(output_file or self.config.output_file)
        content = self.generate_code(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
        compiled = self.compile()
        logger.info(
            "Wrote %d submodel maps and %d root maps to %s",
            len(compiled.submodels),
            len(compiled.roots),
            output_path,
        )
        return output_path
