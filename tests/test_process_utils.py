from pathlib import Path

import pytest

from devhost.local.config import effective_settings
from devhost.local.supervisor import LaunchError
from devhost.local.supervisor.process_utils import (
    LaunchPaths,
    build_child_env,
    build_command,
    check_launch_paths,
    resolve_paths,
)


def test_relative_paths_resolve_against_cwd(tmp_path: Path) -> None:
    paths = resolve_paths("src/index.js", "companion/manifest.json", str(tmp_path))
    assert paths.cwd == tmp_path
    assert paths.entry == tmp_path / "src" / "index.js"
    assert paths.manifest == tmp_path / "companion" / "manifest.json"


def test_absolute_paths_are_kept(tmp_path: Path) -> None:
    entry = tmp_path / "elsewhere" / "index.js"
    paths = resolve_paths(str(entry), "manifest.json", str(tmp_path / "work"))
    assert paths.entry == entry
    assert paths.manifest == tmp_path / "work" / "manifest.json"


def test_cwd_defaults_to_current_directory(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    paths = resolve_paths("index.js", "manifest.json")
    assert paths.cwd == Path.cwd()
    assert paths.entry == Path.cwd() / "index.js"


def test_check_launch_paths(tmp_path: Path, manifest: Path) -> None:
    entry = tmp_path / "index.js"
    with pytest.raises(LaunchError, match="Module entry not found"):
        check_launch_paths(LaunchPaths(tmp_path, entry, manifest))

    entry.write_text("", encoding="utf-8")
    with pytest.raises(LaunchError, match="Manifest not found"):
        check_launch_paths(LaunchPaths(tmp_path, entry, tmp_path / "missing.json"))

    check_launch_paths(LaunchPaths(tmp_path, entry, manifest))


def test_child_env_carries_identity_under_both_keys(tmp_path: Path) -> None:
    paths = LaunchPaths(tmp_path, tmp_path / "index.js", tmp_path / "manifest.json")
    env = build_child_env(paths, "devhost-1-abc", base_env={"PATH": "/bin"})
    assert env["PATH"] == "/bin"
    assert env["MODULE_MANIFEST"] == str(tmp_path / "manifest.json")
    assert env["CONNECTION_ID"] == "devhost-1-abc"
    assert env["MODULE_INSTANCE_ID"] == "devhost-1-abc"
    assert env["NODE_ENV"] == "development"


def test_child_env_keeps_existing_execution_mode(tmp_path: Path) -> None:
    paths = LaunchPaths(tmp_path, tmp_path / "index.js", tmp_path / "manifest.json")
    env = build_child_env(paths, "id", base_env={"NODE_ENV": "production"})
    assert env["NODE_ENV"] == "production"


def test_build_command(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(effective_settings, "INTERPRETER", "node")
    monkeypatch.setattr(effective_settings, "INTERPRETER_FLAGS", ["--trace-warnings"])
    paths = LaunchPaths(tmp_path, tmp_path / "index.js", tmp_path / "manifest.json")

    assert build_command(paths) == ["node", "--trace-warnings", str(tmp_path / "index.js")]
    assert build_command(paths, source_maps=True) == [
        "node", "--trace-warnings", "--enable-source-maps", str(tmp_path / "index.js")
    ]
