from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from velite.config import Config, ModuleFormat, OutputConfig, is_production, load_config
from velite.schema import Collection, ListField, Schema, SourceFormat, StringField, type_name_for


def _write_project_config(root: Path) -> Path:
    config_text = (
        "root: content\n"
        "output:\n"
        "  data: .velite\n"
        "  static: public/static\n"
        "  public: public\n"
        "  format: cjs\n"
        "schemas:\n"
        "  posts:\n"
        "    name: Post\n"
        "    pattern: posts/**/*.md\n"
        "    type: markdown\n"
        "    fields:\n"
        "      title:\n"
        "        type: string\n"
        "        required: true\n"
        "      tags:\n"
        "        type: list\n"
        "        of: string\n"
        "        default: []\n"
        "  options:\n"
        "    name: Options\n"
        "    pattern: options/index.yml\n"
        "    type: yaml\n"
        "collections:\n"
        "  posts:\n"
        "    schema: posts\n"
        "  options:\n"
        "    schema: options\n"
        "    single: true\n"
    )
    cfg_path = root / "velite.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_resolves_paths_relative_to_config_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    cfg = load_config(project)

    assert cfg.root == (project / "content").resolve()
    assert cfg.output.data == (project / ".velite").resolve()
    assert cfg.output.static == (project / "public" / "static").resolve()
    assert cfg.output.public == (project / "public").resolve()
    assert cfg.output.format is ModuleFormat.COMMONJS


def test_load_config_binds_collections_to_schemas(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    config_file = _write_project_config(project)

    cfg = load_config(config_file)

    posts = cfg.collections["posts"]
    assert posts.single is False
    assert posts.schema_ is not None
    assert posts.schema_.type is SourceFormat.MARKDOWN
    assert isinstance(posts.schema_.fields["tags"], ListField)
    assert cfg.collections["options"].single is True
    assert cfg.collection_types() == {"posts": "Post", "options": "Options"}


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    project = tmp_path / "emptyproj"
    project.mkdir()

    cfg = load_config(project)

    assert cfg.root == (project / "content").resolve()
    assert cfg.output.data == (project / ".velite").resolve()
    assert cfg.output.format is ModuleFormat.ESMODULE
    assert cfg.collections == {}


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_collections_default_to_one_per_schema() -> None:
    cfg = Config(
        schemas={
            "posts": Schema(name="Post", pattern="posts/*.md", fields={"title": StringField()}),
        }
    )

    assert list(cfg.collections) == ["posts"]
    assert cfg.collections["posts"].type_name("posts") == "Post"


def test_unknown_schema_reference_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Config(collections={"posts": {"schema": "articles"}})


def test_collection_keys_must_be_identifiers() -> None:
    with pytest.raises(ValidationError):
        Config(collections={"blog-posts": Collection(name="Post")})


def test_type_name_generation() -> None:
    assert type_name_for("posts") == "Post"
    assert type_name_for("categories") == "Category"
    assert type_name_for("site_options", single=True) == "SiteOptions"
    assert type_name_for("news_boxes") == "NewsBox"
    assert Collection().type_name("authors") == "Author"


def test_module_format_aliases() -> None:
    assert ModuleFormat("cjs") is ModuleFormat.COMMONJS
    assert ModuleFormat("esm") is ModuleFormat.ESMODULE
    with pytest.raises(ValueError):
        ModuleFormat("amd")


def test_explicit_minify_wins_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VELITE_ENV", "production")
    is_production.cache_clear()
    try:
        assert is_production() is True
        assert OutputConfig().compact is True
        assert OutputConfig(minify=False).compact is False
    finally:
        is_production.cache_clear()


def test_production_flag_is_resolved_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VELITE_ENV", raising=False)
    monkeypatch.setenv("NODE_ENV", "development")
    is_production.cache_clear()
    try:
        assert is_production() is False
        monkeypatch.setenv("NODE_ENV", "production")
        assert is_production() is False
    finally:
        is_production.cache_clear()
