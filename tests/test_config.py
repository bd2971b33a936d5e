"""
Tests for Configuration Loading.

Verifies:
1.  Defaults and identifier validation.
2.  `[tool.unwrap_lint]` discovery in parent directories, with camelCase aliases.
3.  CLI overrides take precedence over TOML values.
4.  Unreadable TOML falls back to defaults.
"""

import pytest

from unwrap_lint.config import LintConfig


def test_defaults():
  config = LintConfig()
  assert config.wrap_name == "wrap"
  assert config.unwrap_name == "unwrap"
  assert config.max_fix_passes == 10
  assert config.extensions == [".ts", ".tsx", ".mts", ".cts"]
  assert config.rule_options() == {"wrapName": "wrap", "unwrapName": "unwrap"}


def test_invalid_names_rejected():
  with pytest.raises(ValueError):
    LintConfig(wrap_name="1wrap")
  with pytest.raises(ValueError):
    LintConfig(unwrap_name="un wrap")
  with pytest.raises(ValueError):
    LintConfig(max_fix_passes=0)


def test_name_whitespace_stripped_and_extensions_normalized():
  config = LintConfig(wrap_name=" $wrap ", extensions=["ts", ".mts"])
  assert config.wrap_name == "$wrap"
  assert config.extensions == [".ts", ".mts"]


def test_load_from_parent_pyproject(tmp_path):
  (tmp_path / "pyproject.toml").write_text(
    '[tool.unwrap_lint]\nwrapName = "safe"\nunwrap_name = "must"\nmaxFixPasses = 3\nunknown_key = 1\n',
    encoding="utf-8",
  )
  nested = tmp_path / "packages" / "api"
  nested.mkdir(parents=True)

  config = LintConfig.load(search_path=nested)
  assert config.wrap_name == "safe"
  assert config.unwrap_name == "must"
  assert config.max_fix_passes == 3


def test_cli_overrides_win(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.unwrap_lint]\nwrapName = "safe"\n', encoding="utf-8")
  config = LintConfig.load(wrap_name="guard", search_path=tmp_path)
  assert config.wrap_name == "guard"
  assert config.unwrap_name == "unwrap"


def test_search_from_file_path(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.unwrap_lint]\nunwrapName = "must"\n', encoding="utf-8")
  source = tmp_path / "index.ts"
  source.write_text("", encoding="utf-8")
  assert LintConfig.load(search_path=source).unwrap_name == "must"


def test_nearest_pyproject_without_table_gives_defaults(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.unwrap_lint]\nwrapName = "safe"\n', encoding="utf-8")
  child = tmp_path / "child"
  child.mkdir()
  (child / "pyproject.toml").write_text('[project]\nname = "child"\n', encoding="utf-8")
  assert LintConfig.load(search_path=child).wrap_name == "wrap"


def test_malformed_toml_falls_back_to_defaults(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.unwrap_lint\nwrapName = ", encoding="utf-8")
  assert LintConfig.load(search_path=tmp_path) == LintConfig()


def test_invalid_toml_value_raises(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.unwrap_lint]\nwrapName = "not valid"\n', encoding="utf-8")
  with pytest.raises(ValueError):
    LintConfig.load(search_path=tmp_path)
