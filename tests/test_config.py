"""Tests for layered settings resolution."""

import os
from pathlib import Path

import pytest

from declorder_core.config import (
    PROJECT_CONFIG_NAME,
    RecoverySettings,
    SettingsResolver,
    default_config_path,
)
from declorder_core.errors import ConfigurationError
from declorder_core.recovery import ArchiveBinaryProvider, DirectoryBinaryProvider
from declorder_core.types import TypeIdentity


@pytest.fixture
def layout(tmp_path: Path) -> tuple[Path, Path]:
    user_config = tmp_path / "user" / "config.toml"
    user_config.parent.mkdir()
    project = tmp_path / "project"
    (project / "sub").mkdir(parents=True)
    return user_config, project


def test_setting_precedence(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    user_config.write_text('encoding = "user"\n')
    (project / PROJECT_CONFIG_NAME).write_text('encoding = "project"\n')
    start = project / "sub"

    def resolver(cli=None, env=None) -> SettingsResolver:
        return SettingsResolver(user_config_path=user_config, cli_overrides=cli, env=env or {})

    assert resolver({"encoding": "cli"}, {"DECLORDER_ENCODING": "env"}).resolve_setting("encoding", start) == "cli"
    assert resolver({}, {"DECLORDER_ENCODING": "env"}).resolve_setting("encoding", start) == "env"
    assert resolver().resolve_setting("encoding", start) == "project"

    (project / PROJECT_CONFIG_NAME).unlink()
    assert resolver().resolve_setting("encoding", start) == "user"

    user_config.unlink()
    assert resolver().resolve_setting("encoding", start) == "utf-8"


def test_empty_cli_values_do_not_override(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    (project / PROJECT_CONFIG_NAME).write_text('log_level = "DEBUG"\n')
    resolver = SettingsResolver(
        user_config_path=user_config,
        cli_overrides={"log_level": None, "source_path": []},
        env={},
    )
    settings = resolver.resolve(project)
    assert settings.log_level == "DEBUG"
    assert settings.source_path == ()


def test_paths_resolve_relative_to_their_config_file(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    (project / PROJECT_CONFIG_NAME).write_text(
        'source_path = ["src/main/java", "/abs/src"]\nclass_path = ["build/classes", "lib/dep.jar"]\n'
    )
    settings = SettingsResolver(user_config_path=user_config, env={}).resolve(project / "sub")
    assert settings.source_path == (project / "src/main/java", Path("/abs/src"))
    assert settings.class_path == (project / "build/classes", project / "lib/dep.jar")


def test_env_path_lists_use_pathsep(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    env = {"DECLORDER_SOURCE_PATH": os.pathsep.join(["/one", "/two"])}
    settings = SettingsResolver(user_config_path=user_config, env=env).resolve(project)
    assert settings.source_path == (Path("/one"), Path("/two"))


def test_bad_toml_raises(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    (project / PROJECT_CONFIG_NAME).write_text("encoding = \n")
    with pytest.raises(ConfigurationError, match=PROJECT_CONFIG_NAME):
        SettingsResolver(user_config_path=user_config, env={}).resolve(project)


def test_unknown_keys_raise(layout: tuple[Path, Path]) -> None:
    user_config, project = layout
    user_config.write_text('sourcepath = "typo"\n')
    with pytest.raises(ConfigurationError, match="unknown settings sourcepath"):
        SettingsResolver(user_config_path=user_config, env={}).resolve(project)


def test_binary_provider_picks_archives_by_suffix(tmp_path: Path) -> None:
    settings = RecoverySettings(class_path=(tmp_path / "classes", tmp_path / "dep.JAR", tmp_path / "more.zip"))
    provider = settings.binary_provider()
    kinds = [type(item) for item in provider.providers]
    assert kinds == [DirectoryBinaryProvider, ArchiveBinaryProvider, ArchiveBinaryProvider]


def test_build_recovery_uses_source_roots(tmp_path: Path) -> None:
    (tmp_path / "p").mkdir()
    (tmp_path / "p" / "T.java").write_text("package p; interface T { String b(); String a(); }")
    recovery = RecoverySettings(source_path=(tmp_path,)).build_recovery()
    order = recovery.recover_order(TypeIdentity.of("p", "T"))
    assert order is not None
    assert list(order) == ["b", "a"]


def test_default_config_path_uses_platform_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("declorder_core.config.user_config_dir", lambda *args, **kwargs: str(tmp_path))
    assert default_config_path() == tmp_path / "config.toml"
