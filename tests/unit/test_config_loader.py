# tests/unit/test_config_loader.py
"""
Unit tests for ConfigRepository and the config schema.

Search paths are always passed explicitly so the developer's real
~/.prtrc.json never leaks into a test.
"""

import json
import os
import sys
from pathlib import Path

import pytest

from roadmap_tracker.config import (
    ConfigRepository,
    PrtConfig,
    get_default_config_repository,
    get_default_search_paths,
    merge_configs,
    reset_default_config_repository,
    validate_config,
)
from roadmap_tracker.errors import ConfigNotFoundError, InvalidJsonError, ValidationError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def layers(tmp_path: Path) -> tuple[Path, Path, Path]:
    """(project, user, system) candidate paths, highest precedence first."""
    return (
        tmp_path / "project" / ".prtrc.json",
        tmp_path / "user" / ".prtrc.json",
        tmp_path / "system" / ".prtrc.json",
    )


def _write(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def _bump_mtime(path: Path) -> None:
    later = os.stat(path).st_mtime_ns + 2_000_000_000
    os.utime(path, ns=(later, later))


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_higher_precedence_wins(layers):
    project, user, system = layers
    _write(project, {"path": "./project.json"})
    _write(system, {"path": "/srv/system.json", "metadata": {"name": "System"}})

    config = await ConfigRepository(search_paths=list(layers)).load()

    assert config.path == "./project.json"
    assert config.metadata.name == "System"


@pytest.mark.asyncio
async def test_cache_section_merges_key_by_key(layers):
    project, user, _ = layers
    _write(user, {"path": "./prt.json", "cache": {"enabled": True, "maxSize": 5}})
    _write(project, {"path": "./prt.json", "cache": {"enabled": False}})

    config = await ConfigRepository(search_paths=list(layers)).load()

    assert config.cache.enabled is False
    assert config.cache.max_size == 5


def test_merge_configs_replaces_other_objects_wholesale():
    merged = merge_configs([
        {"path": "a", "metadata": {"description": "high"}},
        {"path": "b", "metadata": {"name": "low"}, "other": {"x": 1}},
    ])

    assert merged == {"path": "a", "metadata": {"name": "low", "description": "high"}, "other": {"x": 1}}


def test_null_section_keeps_lower_layer():
    merged = merge_configs([
        {"path": "a", "cache": None},
        {"path": "b", "cache": {"enabled": True, "maxSize": 5}},
    ])

    assert merged == {"path": "a", "cache": {"enabled": True, "maxSize": 5}}


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_missing_files_are_skipped(layers):
    _, _, system = layers
    _write(system, {"path": "./prt.json"})

    config = await ConfigRepository(search_paths=list(layers)).load()

    assert config.path == "./prt.json"


@pytest.mark.asyncio
async def test_no_config_found(layers):
    with pytest.raises(ConfigNotFoundError) as exc_info:
        await ConfigRepository(search_paths=list(layers)).load()

    assert exc_info.value.context["searched"] == [str(p) for p in layers]


@pytest.mark.asyncio
async def test_invalid_json_is_not_skipped(layers):
    project, user, _ = layers
    _write(project, "{ broken")
    _write(user, {"path": "./prt.json"})

    with pytest.raises(InvalidJsonError, match="not valid JSON"):
        await ConfigRepository(search_paths=list(layers)).load()


@pytest.mark.asyncio
async def test_validation_reports_every_error(layers):
    project, _, _ = layers
    _write(project, {"cache": {"enabled": "yes", "maxSize": 0}, "unknown": 1})

    with pytest.raises(ValidationError) as exc_info:
        await ConfigRepository(search_paths=list(layers)).load()

    fields = {e.field for e in exc_info.value.errors}
    assert fields == {"/path", "/cache/enabled", "/cache/maxSize", "/unknown"}
    assert all(e.type == "structure" for e in exc_info.value.errors)


@pytest.mark.asyncio
async def test_top_level_must_be_object(layers):
    project, _, _ = layers
    _write(project, [1, 2, 3])

    with pytest.raises(ValidationError):
        await ConfigRepository(search_paths=list(layers)).load()


def test_schema_is_strict():
    with pytest.raises(ValidationError):
        validate_config({"path": "./prt.json", "cache": {"maxSize": 2.5}})

    config = validate_config({"$schema": "x", "path": "./prt.json", "cache": {"watchFiles": False}})
    assert config.schema_url == "x"
    assert config.cache.watch_files is False
    assert config.cache.enabled is None


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unchanged_source_returns_cached_config(layers):
    project, _, _ = layers
    _write(project, {"path": "./prt.json"})
    repo = ConfigRepository(search_paths=list(layers))

    first = await repo.load()
    second = await repo.load()

    assert second is first
    assert repo.get_cached_config() is first


@pytest.mark.asyncio
async def test_changed_source_is_reread(layers):
    project, _, _ = layers
    _write(project, {"path": "./one.json"})
    repo = ConfigRepository(search_paths=list(layers))
    await repo.load()

    _write(project, {"path": "./two.json"})
    _bump_mtime(project)

    assert (await repo.load()).path == "./two.json"


@pytest.mark.asyncio
async def test_reload_rereads_lower_layers(layers):
    project, user, _ = layers
    _write(project, {"path": "./prt.json"})
    _write(user, {"path": "./ignored.json", "metadata": {"name": "Before"}})
    repo = ConfigRepository(search_paths=list(layers))
    await repo.load()

    _write(user, {"path": "./ignored.json", "metadata": {"name": "After"}})
    _bump_mtime(user)

    assert (await repo.load()).metadata.name == "Before"
    assert (await repo.reload()).metadata.name == "After"


@pytest.mark.asyncio
async def test_cache_disabled(layers):
    project, _, _ = layers
    _write(project, {"path": "./prt.json"})
    repo = ConfigRepository(cache_enabled=False, search_paths=list(layers))

    first = await repo.load()
    second = await repo.load()

    assert first == second
    assert second is not first
    assert repo.get_cached_config() is None


@pytest.mark.asyncio
async def test_invalidate_cache(layers):
    project, _, _ = layers
    _write(project, {"path": "./prt.json"})
    repo = ConfigRepository(search_paths=list(layers))
    await repo.load()

    repo.invalidate_cache()

    assert repo.get_cached_config() is None


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

def test_default_search_paths(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "platform", "linux")

    paths = get_default_search_paths()

    assert paths[0] == tmp_path / ".prtrc.json"
    assert paths[1] == Path.home() / ".prtrc.json"
    assert paths[-1] == Path("/etc/prt/.prtrc.json")
    assert len(paths) == 4


def test_default_search_paths_skip_system_on_windows(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")

    paths = get_default_search_paths()

    assert len(paths) == 3
    assert Path("/etc/prt/.prtrc.json") not in paths


def test_default_config_repository_reset():
    reset_default_config_repository()
    first = get_default_config_repository()
    assert get_default_config_repository() is first

    reset_default_config_repository()
    assert get_default_config_repository() is not first
    reset_default_config_repository()


def test_config_model_accepts_field_names():
    config = PrtConfig(path="./prt.json")
    assert config.cache is None
    assert config.metadata is None
