"""Command-line interface for gql-fragments."""

import logging
import shutil
import tarfile
import tempfile
import tomllib
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from pydantic import ValidationError

from .core.classifier import Classification
from .core.config import FragmentsConfig
from .core.generator import FragmentsGenerator, ImportResolutionError
from .core.graph import emission_order
from .core.hooks import AddHeaderHook, HookRunner
from .core.ir import IRSchema
from .core.parser import SchemaLoadError, SchemaParser

ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz")


def extract_archive(archive_path: Path) -> str:
    """Extract archive to temp directory. Returns path to extracted content."""
    temp_dir = tempfile.mkdtemp()
    if archive_path.suffix == ".zip":
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            zip_ref.extractall(temp_dir)
    elif archive_path.name.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, "r:gz") as tar_ref:
            tar_ref.extractall(temp_dir, filter="data")
    else:
        shutil.rmtree(temp_dir)
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")
    return temp_dir


@contextmanager
def load_schema(schema: str, verbose: bool = False) -> Iterator[IRSchema]:
    """Parse a schema file, directory or archive into IR."""
    schema_path = Path(schema).resolve()
    temp_dir = None
    try:
        # Handle archives
        actual_schema_path = schema_path
        if schema_path.is_file() and schema_path.name.lower().endswith(ARCHIVE_SUFFIXES):
            click.echo(f"Extracting archive {schema_path.name}...", err=True)
            temp_dir = extract_archive(schema_path)
            actual_schema_path = Path(temp_dir)
            if verbose:
                click.echo(f"  Extracted to: {temp_dir}", err=True)

        parser = SchemaParser(str(actual_schema_path))
        try:
            ir = parser.parse_all()
        except SchemaLoadError as e:
            raise click.ClickException(str(e)) from e
        yield ir
    finally:
        # Clean up temp directory
        if temp_dir:
            shutil.rmtree(temp_dir)


def _parse_renames(values: tuple[str, ...]) -> dict[str, str]:
    renames = {}
    for value in values:
        name, sep, rendered = value.partition("=")
        if not sep or not name or not rendered:
            raise click.BadParameter(f"Expected NAME=RENAMED, got {value!r}", param_hint="--rename")
        renames[name] = rendered
    return renames


@click.group()
@click.version_option(package_name="gql-fragments")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Selection-map generator for GraphQL schemas.

    Generate reusable field selections for every type and root operation.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


schema_option = click.option(
    "--schema",
    "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to GraphQL schema file, directory, introspection JSON or archive (.zip, .tar.gz, .tgz).",
)


@main.command()
@schema_option
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file for the generated module (default: fragments.py or the config's output_file).",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="TOML config file; command-line options take precedence.",
)
@click.option("--depth", type=click.IntRange(min=1), help="Depth recorded on root operation maps (default: 2).")
@click.option("--sub-model-depth", type=click.IntRange(min=1), help="Inline depth for submodel maps (default: 1).")
@click.option(
    "--naming-convention",
    type=click.Choice(["keep", "pascal_case"]),
    help="How type names are rendered (default: pascal_case).",
)
@click.option("--rename", multiple=True, metavar="NAME=RENAMED", help="Rename a type. Repeatable.")
@click.option("--flag", "flags", multiple=True, metavar="NAME", help="Extra argument name to render as a flag. Repeatable.")
@click.option("--helpers-import", help="Module the generated code imports GQLMap from.")
@click.option("--types-import", help="Module with the generated type classes, imported as T.")
@click.option("--base-dir", type=click.Path(file_okay=False), help="Directory relative import paths are resolved against.")
@click.option("--template-dir", type=click.Path(exists=True, file_okay=False), help="Directory with template overrides.")
@click.option("--header", help="Header comment to prepend to the generated module.")
@click.pass_context
def generate(
    ctx: click.Context,
    schema: str,
    output: str | None,
    config_file: str | None,
    depth: int | None,
    sub_model_depth: int | None,
    naming_convention: str | None,
    rename: tuple[str, ...],
    flags: tuple[str, ...],
    helpers_import: str | None,
    types_import: str | None,
    base_dir: str | None,
    template_dir: str | None,
    header: str | None,
):
    """Generate selection maps from a GraphQL schema.

    Examples:

        gql-fragments generate --schema ./schema --output ./generated/fragments.py

        gql-fragments generate -s ./schema.graphqls -c fragments.toml

        gql-fragments generate -s ./schema.tgz -o ./fragments.py --rename user_profile=Profile
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config = FragmentsConfig.from_file(config_file) if config_file else FragmentsConfig()
        config = config.merged(
            depth=depth,
            sub_model_depth=sub_model_depth,
            naming_convention=naming_convention,
            rename={**config.rename, **_parse_renames(rename)},
            flags=[*config.flags, *flags],
            helpers_import=helpers_import,
            types_import=types_import,
            base_dir=base_dir,
            output_file=output,
        )
    except (ValidationError, tomllib.TOMLDecodeError) as e:
        raise click.BadParameter(str(e), param_hint="configuration") from e

    output_path = Path(config.output_file)
    if verbose:
        click.echo(f"Schema: {Path(schema).resolve()}")
        click.echo(f"Output: {output_path.resolve()}")

    hooks = HookRunner()
    if header:
        hooks.add_post_hook(AddHeaderHook(header))

    click.echo("Parsing schema...")
    with load_schema(schema, verbose) as ir:
        if verbose:
            click.echo(f"  Types: {len(ir.types)}")
            click.echo(f"  Object types: {len(ir.object_types)}")
            click.echo(f"  Queries: {len(ir.queries)}")
            click.echo(f"  Mutations: {len(ir.mutations)}")

        click.echo("Generating selection maps...")
        generator = FragmentsGenerator(ir, config, template_dir=template_dir, hooks=hooks)
        try:
            generator.generate(output_path)
        except ImportResolutionError as e:
            raise click.BadParameter(str(e), param_hint="--types-import") from e
        except ValueError as e:
            raise click.ClickException(str(e)) from e

    compiled = generator.compile()
    click.echo(
        f"Done! Generated {len(compiled.submodels)} submodel maps and "
        f"{len(compiled.roots)} root maps in {output_path}"
    )


@main.command()
@schema_option
@click.pass_context
def order(ctx: click.Context, schema: str):
    """Print object types in the order their maps are emitted."""
    with load_schema(schema, ctx.obj.get("verbose", False)) as ir:
        for type_name in emission_order(ir):
            click.echo(type_name)


@main.command()
@schema_option
@click.option("--flag", "flags", multiple=True, metavar="NAME", help="Extra argument name to render as a flag. Repeatable.")
@click.pass_context
def classify(ctx: click.Context, schema: str, flags: tuple[str, ...]):
    """Print the argument names rendered as flags and as enums."""
    with load_schema(schema, ctx.obj.get("verbose", False)) as ir:
        classification = Classification.from_schema(ir, flags)
    click.echo("Flags: " + ", ".join(classification.flags))
    click.echo("Enums: " + ", ".join(classification.enums))


if __name__ == "__main__":
    main()
