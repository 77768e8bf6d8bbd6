"""Unit tests for loading scan settings."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from workshop_ids.settings import ScanSettings, SettingsError, load_settings

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml")

    assert settings == ScanSettings()
    assert settings.settle_delay == 0.3
    assert settings.workers == 1
    assert settings.on_fetch_failure == "skip"
    assert load_settings(None) == ScanSettings()


def test_file_values_override_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        scan:
          base_url: https://example.invalid/sharedfiles
          workers: 4
          timeout: 12
          settle_delay: 0
          on_invalid_selection: abort
          unrelated: ignored
        """,
    )

    settings = load_settings(path)

    assert settings.base_url == "https://example.invalid/sharedfiles"
    assert settings.workers == 4
    assert settings.timeout == 12.0
    assert settings.settle_delay == 0.0
    assert settings.on_invalid_selection == "abort"
    assert settings.retries == 3, "expected unspecified keys to keep defaults"


@pytest.mark.parametrize(
    "body",
    [
        "scan:\n  workers: 0",
        "scan:\n  workers: many",
        "scan:\n  on_fetch_failure: retry",
        "scan: [1, 2]",
        "- not a mapping",
        "scan: {workers: [",
        "scan:\n  workers: true",
        "scan:\n  timeout: .inf",
        "scan:\n  settle_delay: .nan",
        "scan:\n  retries: .inf",
    ],
)
def test_invalid_settings_raise(tmp_path: Path, body: str) -> None:
    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, body))


def test_merged_applies_only_given_overrides() -> None:
    base = ScanSettings(workers=2)

    merged = base.merged(workers=None, timeout=5.0, base_url=None)

    assert merged.workers == 2
    assert merged.timeout == 5.0
    assert base.timeout == 30.0, "expected the original settings untouched"


def test_merged_validates_values() -> None:
    with pytest.raises(SettingsError):
        ScanSettings().merged(on_invalid_selection="ignore")
    with pytest.raises(SettingsError, match="Unknown"):
        ScanSettings().merged(colour="blue")


def test_unreadable_settings_raise_settings_error(tmp_path: Path) -> None:
    """Directories and undecodable files surface as SettingsError."""
    with pytest.raises(SettingsError, match="could not be read"):
        load_settings(tmp_path)

    binary = tmp_path / "settings.yaml"
    binary.write_bytes(b"scan:\n  base_url: \xff\xfe\n")
    with pytest.raises(SettingsError):
        load_settings(binary)


@pytest.mark.parametrize(
    "overrides",
    [{"workers": True}, {"timeout": float("inf")}, {"settle_delay": float("nan")}],
)
def test_constructor_rejects_booleans_and_non_finite_numbers(
    overrides: dict[str, object],
) -> None:
    with pytest.raises(SettingsError):
        ScanSettings(**overrides)  # type: ignore[arg-type]
