"""Generator configuration.

Keys may be given in snake_case or in the camelCase spelling used by
codegen plugin configs (``subModelDepth``, ``typesImport``, ...).

Example ``fragments.toml``:

    depth = 2
    naming_convention = "keep"
    flags = ["sort"]

    [rename]
    user_profile = "Profile"

The same keys may live under ``[tool.gql-fragments]`` in pyproject.toml.
"""

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .naming import make_namer

NAMING_ALIASES = {
    "change-case-all#pascalCase": "pascal_case",
    "pascalCase": "pascal_case",
}


class FragmentsConfig(BaseModel):
    """Options for compiling selection maps and writing the generated module."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    depth: int = Field(default=2, ge=1)
    sub_model_depth: int = Field(default=1, ge=1)
    naming_convention: Literal["keep", "pascal_case"] = "pascal_case"
    rename: dict[str, str] = Field(default_factory=dict)
    flags: list[str] = Field(default_factory=list)
    helpers_import: str = "gql_fragments"
    types_import: str | None = "./models"
    base_dir: Path | None = None
    output_file: str = "fragments.py"

    @field_validator("naming_convention", mode="before")
    @classmethod
    def _normalize_convention(cls, value: Any) -> Any:
        if isinstance(value, str):
            return NAMING_ALIASES.get(value, value)
        return value

    @field_validator("types_import", mode="before")
    @classmethod
    def _empty_types_import(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def resolved_base_dir(self) -> Path:
        return self.base_dir if self.base_dir is not None else Path.cwd()

    def namer(self):
        """The type naming function for this configuration."""
        return make_namer(self.naming_convention, self.rename)

    def merged(self, **overrides: Any) -> "FragmentsConfig":
        """Return a copy with the given options replaced, ignoring ``None`` values."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return FragmentsConfig.model_validate(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "FragmentsConfig":
        """Load a TOML config file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        section = data.get("tool", {}).get("gql-fragments")
        if section is not None:
            data = section
        return cls.model_validate(data)
