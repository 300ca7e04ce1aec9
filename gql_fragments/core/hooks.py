"""Hooks around selection-map generation.

A pre-generation hook sees the IR before any map is compiled and returns
the IR to compile (for example with internal types removed). A
post-generation hook sees the rendered module source and returns the
source to validate and write.

    from gql_fragments.core.hooks import FilterTypesHook, HookRunner

    hooks = HookRunner(pre_hooks=[FilterTypesHook(exclude_prefix="_")])
    FragmentsGenerator(ir, config, hooks=hooks).generate("fragments.py")
"""

import logging
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from .ir import IRSchema, TypeKind

logger = logging.getLogger(__name__)


@runtime_checkable
class PreGenerateHook(Protocol):
    """Receives the IR before selection maps are compiled."""

    def pre_generate(self, ir: IRSchema) -> IRSchema:
        """Return the IR to compile; modifying ``ir`` in place is fine."""
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Receives the generated module source before it is validated and written.

    Example:
        class FormatWithBlack:
            def post_generate(self, filename: str, content: str) -> str:
                import black
                return black.format_str(content, mode=black.FileMode())
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Return the source to write for ``filename``."""
        ...


class AddHeaderHook:
    """Prepend a comment block to the generated module.

    Lines that are not already comments are turned into comments, so
    ``AddHeaderHook("Copyright ACME")`` still yields valid Python.
    """

    def __init__(self, header: str):
        self.header = header

    def _comment_lines(self) -> list[str]:
        lines = []
        for line in self.header.rstrip("\n").splitlines():
            if line.strip() and not line.lstrip().startswith("#"):
                line = f"# {line}"
            lines.append(line)
        return lines

    def post_generate(self, _filename: str, content: str) -> str:
        return "\n".join(self._comment_lines()) + "\n\n" + content


class FilterTypesHook:
    """Drop named types from the IR by prefix or suffix.

    Scalars and the root types always survive. A field whose type was
    dropped disappears from the selection maps, and so does a root map
    whose return type was dropped.

    Example:
        # Leave out every type starting with an underscore
        hook = FilterTypesHook(exclude_prefix="_")
    """

    def __init__(
        self,
        exclude_prefix: str | None = None,
        exclude_suffix: str | None = None,
        include_prefix: str | None = None,
        include_suffix: str | None = None,
    ):
        self._rules: list[Callable[[str], bool]] = []
        if exclude_prefix:
            self._rules.append(lambda name: not name.startswith(exclude_prefix))
        if exclude_suffix:
            self._rules.append(lambda name: not name.endswith(exclude_suffix))
        if include_prefix:
            self._rules.append(lambda name: name.startswith(include_prefix))
        if include_suffix:
            self._rules.append(lambda name: name.endswith(include_suffix))

    def keeps(self, name: str) -> bool:
        return all(rule(name) for rule in self._rules)

    def pre_generate(self, ir: IRSchema) -> IRSchema:
        pinned = {ir.query_type, ir.mutation_type}
        dropped = [
            name
            for name, ir_type in ir.types.items()
            if ir_type.kind is not TypeKind.SCALAR and name not in pinned and not self.keeps(name)
        ]
        for name in dropped:
            del ir.types[name]
        if dropped:
            logger.debug("Filtered out %d types: %s", len(dropped), ", ".join(dropped))
        return ir


class HookRunner:
    """Applies pre hooks to the IR and post hooks to generated source, in order."""

    def __init__(
        self,
        pre_hooks: Iterable[PreGenerateHook] = (),
        post_hooks: Iterable[PostGenerateHook] = (),
    ):
        self.pre_hooks: list[PreGenerateHook] = list(pre_hooks)
        self.post_hooks: list[PostGenerateHook] = list(post_hooks)

    def add_pre_hook(self, hook: PreGenerateHook):
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        self.post_hooks.append(hook)

    def run_pre_hooks(self, ir: IRSchema) -> IRSchema:
        for hook in self.pre_hooks:
            ir = hook.pre_generate(ir)
        return ir

    def run_post_hooks(self, filename: str, content: str) -> str:
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
