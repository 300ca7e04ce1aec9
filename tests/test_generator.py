"""Tests for the selection-map module generator."""

import ast
import importlib.util

import pytest
from graphql import build_schema

from gql_fragments import render_gql
from gql_fragments.core.config import FragmentsConfig
from gql_fragments.core.generator import (
    FragmentsGenerator,
    ImportResolutionError,
    as_module_specifier,
    print_map,
    tuple_literal,
    types_import_line,
)
from gql_fragments.core.hooks import AddHeaderHook, FilterTypesHook, HookRunner
from gql_fragments.core.parser import read_schema
from gql_fragments.core.selection import Field, Nested, Reference


def load_module(path, name="generated_fragments"):
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def config(tmp_path):
    return FragmentsConfig(base_dir=tmp_path)


# =============================================================================
# Tests: printing helpers
# =============================================================================


class TestPrintMap:
    """Tests for printing selections as Python literals."""

    def test_empty(self):
        assert print_map([]) == "[]"

    def test_elements(self):
        elements = [Field("id"), Reference("audio", "AudioMap"), Nested("meta", (Field("x"),))]
        assert print_map(elements) == (
            "[\n"
            "    'id',\n"
            "    {'audio': AudioMap},\n"
            "    {'meta': [\n"
            "        'x',\n"
            "    ]},\n"
            "]"
        )

    def test_empty_nested(self):
        assert print_map([Nested("meta")]) == "[\n    {'meta': []},\n]"

    def test_output_is_python(self):
        elements = [Field("id"), Nested("a", (Nested("b", (Field("c"),)),))]
        assert ast.literal_eval(print_map(elements)) == ["id", {"a": [{"b": ["c"]}]}]


class TestTupleLiteral:
    """Tests for printing name tuples."""

    def test_shapes(self):
        assert tuple_literal([]) == "()"
        assert tuple_literal(["a"]) == "('a',)"
        assert tuple_literal(("a", "b")) == "('a', 'b')"


class TestModuleSpecifiers:
    """Tests for resolving configured import locations."""

    def test_module_path_unchanged(self):
        assert as_module_specifier("gql_fragments", "gen/fragments.py", "/proj") == "gql_fragments"

    def test_empty(self):
        assert as_module_specifier(None, "gen/fragments.py", "/proj") == ""
        assert as_module_specifier("", "gen/fragments.py", "/proj") == ""

    def test_sibling(self):
        assert as_module_specifier("./gen/models", "gen/fragments.py", "/proj") == ".models"

    def test_parent_directory(self):
        assert as_module_specifier("./lib/helpers.py", "gen/fragments.py", "/proj") == "..lib.helpers"

    def test_package_init(self):
        assert as_module_specifier("./gen/pkg/__init__.py", "gen/fragments.py", "/proj") == ".pkg"

    def test_absolute_paths(self):
        assert as_module_specifier("/proj/lib/helpers", "/proj/fragments.py", "/elsewhere") == ".lib.helpers"

    def test_types_import_line(self):
        assert types_import_line("") == ""
        assert types_import_line("models") == "import models as T"
        assert types_import_line("myapp.models") == "import myapp.models as T"
        assert types_import_line(".models") == "from . import models as T"
        assert types_import_line("..lib.models") == "from ..lib import models as T"

    def test_types_import_line_without_module(self):
        with pytest.raises(ImportResolutionError):
            types_import_line("..")


# =============================================================================
# Tests: FragmentsGenerator
# =============================================================================


class TestFragmentsGenerator:
    """Tests for generating the selection-map module."""

    def test_generates_valid_python(self, library_ir, config, tmp_path):
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")
        ast.parse(code)

    def test_module_layout(self, library_ir, config, tmp_path):
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")

        assert code.startswith("# AUTO-GENERATED")
        assert "from gql_fragments import GQLMap" in code
        assert "from . import models as T" in code
        assert "ItemMap: GQLMap[T.Item] = GQLMap()" in code
        assert "    {'author': UserMap},\n" in code
        assert "loadItem: GQLMap[T.Item] = GQLMap([" in code
        assert "], depth=2)" in code
        assert "QUERY_FLAGS = ('flags', 'type', 'status', 'mode', 'kind', 'since')" in code
        assert "QUERY_ENUMS = ('SectionType', 'Status', 'status', 'section')" in code

    def test_declarations_precede_fills(self, library_ir, config, tmp_path):
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")

        last_declaration = code.index("MutationMap: GQLMap[T.Mutation] = GQLMap()")
        first_fill = code.index("AudioMap.extend(")
        assert last_declaration < first_fill
        assert code.index("AudioMap.extend(") < code.index("ItemMap.extend(") < code.index("UserMap.extend(")

    def test_skipped_roots(self, library_ir, config, tmp_path):
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")
        assert "\nsearch:" not in code
        assert "\nnode:" not in code
        assert "\nversion:" not in code

    def test_generated_module_executes(self, library_ir, config, tmp_path):
        path = FragmentsGenerator(library_ir, config).generate(tmp_path / "fragments.py")
        module = load_module(path)

        assert module.AudioMap == ["url", "duration"]
        assert module.ItemMap[6]["author"] is module.UserMap
        assert module.ItemMap[5]["related"] is module.ItemMap
        assert module.UserMap[2]["items"] is module.ItemMap
        assert module.loadItem.depth == 2
        assert module.loadItem[2]["audio"] is module.AudioMap
        assert module.updateItem[0] == "id"
        assert module.QUERY_FLAGS[-1] == "since"

    def test_generated_maps_render(self, library_ir, config, tmp_path):
        path = FragmentsGenerator(library_ir, config).generate(tmp_path / "fragments.py")
        module = load_module(path, "generated_fragments_render")

        assert render_gql("item", module.ItemMap) == (
            "{item { id title audio { url duration } tags section related "
            "author { id name items createdAt } }}"
        )

    def test_root_maps_render_to_their_depth(self, library_ir, config, tmp_path):
        generator = FragmentsGenerator(library_ir, config)
        path = generator.generate(tmp_path / "fragments.py")
        module = load_module(path, "generated_fragments_roots")

        query = render_gql("loadItem", module.loadItem, {"id": "1"})
        assert query == (
            '{loadItem(id:"1") { id title audio { url duration } tags section '
            "related { id title audio tags section related author } "
            "author { id name items createdAt } }}"
        )
        resolved = generator.compile().resolve_root("loadItem")
        assert query == render_gql("loadItem", resolved, {"id": "1"})

    def test_densely_cyclic_schema_renders_bounded(self, config, tmp_path):
        count = 8
        links = " ".join(f"t{i}: T{i}" for i in range(count))
        sdl = "\n".join(f"type T{i} {{ id: ID {links} }}" for i in range(count))
        ir = read_schema(build_schema(sdl + "\ntype Query { root: T0 }"))
        path = FragmentsGenerator(ir, config).generate(tmp_path / "fragments.py")
        module = load_module(path, "generated_fragments_dense")

        assert module.root.depth == 2
        names = " ".join(f"t{i}" for i in range(count))
        expected = " ".join(f"t{i} {{ id {names} }}" for i in range(count))
        query = render_gql("root", module.root)
        assert query == f"{{root {{ id {expected} }}}}"

        def max_nesting(text):
            level = deepest = 0
            for char in text:
                if char == "{":
                    level += 1
                    deepest = max(deepest, level)
                elif char == "}":
                    level -= 1
            return deepest

        assert max_nesting(query) == 3
        deeper = render_gql("root", module.root, depth=3)
        assert max_nesting(deeper) == 4
        assert len(deeper) < 5000

    def test_types_import_naming_output_directory(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, types_import="./gen")
        generator = FragmentsGenerator(library_ir, config)

        with pytest.raises(ImportResolutionError, match="'./gen' resolves to the directory"):
            generator.generate_code(tmp_path / "gen" / "fragments.py")
        assert not (tmp_path / "gen").exists()

    def test_without_types_import(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, types_import="")
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")

        assert "import models" not in code
        assert "    pass\n" in code
        assert "ItemMap: GQLMap = GQLMap()" in code
        ast.parse(code)

    def test_relative_helpers_import(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, helpers_import="./lib/helpers.py")
        code = FragmentsGenerator(library_ir, config).generate_code("gen/fragments.py")
        assert "from ..lib.helpers import GQLMap" in code

    def test_rename(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, rename={"Item": "Article"})
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")

        assert "ArticleMap: GQLMap[T.Article] = GQLMap()" in code
        assert "{'related': ArticleMap}" in code
        assert "ItemMap" not in code

    def test_keep_naming(self, tmp_path):
        ir = read_schema(build_schema("""
            type user_profile { id: ID }
            type Query { me: user_profile }
        """))
        config = FragmentsConfig(base_dir=tmp_path, naming_convention="keep")
        code = FragmentsGenerator(ir, config).generate_code(tmp_path / "fragments.py")

        assert "user_profileMap: GQLMap[T.user_profile] = GQLMap()" in code
        assert "me: GQLMap[T.user_profile] = GQLMap(" in code

    def test_keyword_root_name(self, tmp_path):
        ir = read_schema(build_schema("""
            type Item { id: ID }
            type Query { from: Item }
        """))
        config = FragmentsConfig(base_dir=tmp_path)
        code = FragmentsGenerator(ir, config).generate_code(tmp_path / "fragments.py")

        assert "from_: GQLMap[T.Item] = GQLMap(" in code
        ast.parse(code)

    def test_depth_option(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, depth=4)
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")
        assert "], depth=4)" in code

    def test_custom_flags(self, library_ir, tmp_path):
        config = FragmentsConfig(base_dir=tmp_path, flags=["sort"])
        code = FragmentsGenerator(library_ir, config).generate_code(tmp_path / "fragments.py")
        assert "QUERY_FLAGS = ('sort', 'flags'," in code

    def test_generate_writes_file(self, library_ir, config, tmp_path):
        output = tmp_path / "out" / "nested" / "fragments.py"
        path = FragmentsGenerator(library_ir, config).generate(output)

        assert path == output
        assert output.exists()
        assert "ItemMap" in output.read_text()

    def test_header_hook(self, library_ir, config, tmp_path):
        hooks = HookRunner()
        hooks.add_post_hook(AddHeaderHook("# Copyright Example"))
        code = FragmentsGenerator(library_ir, config, hooks=hooks).generate_code(tmp_path / "fragments.py")
        assert code.startswith("# Copyright Example\n\n# AUTO-GENERATED")

    def test_filter_hook(self, library_ir, config, tmp_path):
        hooks = HookRunner()
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix="Aud"))
        generator = FragmentsGenerator(library_ir, config, hooks=hooks)
        code = generator.generate_code(tmp_path / "fragments.py")

        assert "AudioMap" not in code
        assert "'audio'" not in code
        assert [s.name for s in generator.compile().submodels] == [
            "ItemMap", "UserMap", "QueryMap", "MutationMap",
        ]

    def test_custom_template(self, library_ir, config, tmp_path):
        template_dir = tmp_path / "templates"
        template_dir.mkdir()
        (template_dir / "fragments.py.j2").write_text(
            "MAP_NAMES = [{% for sub in submodels %}'{{ sub.name }}', {% endfor %}]\n"
        )
        code = FragmentsGenerator(library_ir, config, template_dir=str(template_dir)).generate_code(
            tmp_path / "fragments.py"
        )
        assert ast.literal_eval(code.split(" = ", 1)[1]) == [
            "AudioMap", "ItemMap", "UserMap", "QueryMap", "MutationMap",
        ]

    def test_invalid_template_output(self, library_ir, config, tmp_path):
        template_dir = tmp_path / "templates"
        template_dir.mkdir()
        (template_dir / "fragments.py.j2").write_text("def broken(:\n")

        generator = FragmentsGenerator(library_ir, config, template_dir=str(template_dir))
        with pytest.raises(ValueError, match="Generated invalid Python"):
            generator.generate_code(tmp_path / "fragments.py")
