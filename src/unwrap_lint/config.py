"""
Runtime Configuration Store.

Resolves the identifiers the rule recognizes (`wrap_name`, `unwrap_name`) and
the engine settings from, in increasing priority: built-in defaults, the
`[tool.unwrap_lint]` table of the nearest `pyproject.toml`, and CLI overrides.
"""

import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

# ESLint-style option keys accepted in the TOML table.
_OPTION_ALIASES = {
  "wrapName": "wrap_name",
  "unwrapName": "unwrap_name",
  "maxFixPasses": "max_fix_passes",
}

DEFAULT_EXTENSIONS = [".ts", ".tsx", ".mts", ".cts"]


class LintConfig(BaseModel):
  """
  Global configuration container for lint runs.
  """

  wrap_name: str = Field("wrap", description="The name `wrap` is imported under.")
  unwrap_name: str = Field("unwrap", description="The name `unwrap` is imported under.")
  max_fix_passes: int = Field(10, ge=1, description="Upper bound of parse/fix iterations per file.")
  extensions: List[str] = Field(
    default_factory=lambda: list(DEFAULT_EXTENSIONS),
    description="File suffixes checked when linting a directory.",
  )

  @field_validator("wrap_name", "unwrap_name")
  @classmethod
  def validate_identifier(cls, v: str) -> str:
    """
    Ensures the configured name is usable as a bare identifier.

    Args:
        v (str): The raw name.

    Returns:
        str: The stripped name.

    Raises:
        ValueError: If the name is not a valid JavaScript identifier.
    """
    v_clean = v.strip()
    if not _IDENTIFIER_RE.match(v_clean):
      raise ValueError(f"'{v}' is not a valid JavaScript identifier")
    return v_clean

  @field_validator("extensions")
  @classmethod
  def normalize_extensions(cls, v: List[str]) -> List[str]:
    """Adds the leading dot to bare suffixes (`ts` -> `.ts`)."""
    return [ext if ext.startswith(".") else f".{ext}" for ext in v]

  def rule_options(self) -> Dict[str, str]:
    """
    Renders the option object consumed by the `consistent-unwrap` rule.

    Returns:
        Dict[str, str]: `{"wrapName": ..., "unwrapName": ...}`.
    """
    return {"wrapName": self.wrap_name, "unwrapName": self.unwrap_name}

  @classmethod
  def load(
    cls,
    wrap_name: Optional[str] = None,
    unwrap_name: Optional[str] = None,
    max_fix_passes: Optional[int] = None,
    search_path: Optional[Path] = None,
  ) -> "LintConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        wrap_name (Optional[str]): Override for the wrap identifier.
        unwrap_name (Optional[str]): Override for the unwrap identifier.
        max_fix_passes (Optional[int]): Override for the fix iteration limit.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        LintConfig: The fully resolved configuration object.

    Raises:
        ValueError: If a resolved value fails validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    settings = {_OPTION_ALIASES.get(key, key): value for key, value in toml_config.items()}
    settings = {key: value for key, value in settings.items() if key in cls.model_fields}

    overrides = {"wrap_name": wrap_name, "unwrap_name": unwrap_name, "max_fix_passes": max_fix_passes}
    settings.update({key: value for key, value in overrides.items() if value is not None})

    return cls(**settings)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches `start_path` and its parents for 'pyproject.toml' and extracts config.

  The first `pyproject.toml` found wins, even when it has no `[tool.unwrap_lint]`
  table.

  Args:
      start_path (Path): Directory (or file) to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()
  if current.is_file():
    current = current.parent

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("unwrap_lint", {}), parent

  return {}, None
