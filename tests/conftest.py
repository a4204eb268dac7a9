"""Shared fixtures for seratocrates tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tlvdata import write_library


@pytest.fixture()
def base_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the user config directory to a temporary directory.

    Patches ``seratocrates.config.get_base_dir`` so that nothing reads the real
    ``~/.seratocrates/``.
    """
    fake_base = tmp_path / ".seratocrates"
    fake_base.mkdir()

    monkeypatch.setattr("seratocrates.config.get_base_dir", lambda: fake_base)

    return fake_base


@pytest.fixture()
def library_root(tmp_path: Path) -> Path:
    """A small on-disk library with nested crates and one dangling reference."""
    return write_library(
        tmp_path / "music",
        tracks=["/a.mp3", "/b.mp3", "/c.mp3"],
        crates={
            "Genres": ["/a.mp3"],
            "Genres%%House": ["/b.mp3", "/missing.mp3"],
            "Genres%%House%%Deep": ["/c.mp3"],
            "Warmup": ["/c.mp3", "/a.mp3"],
        },
    )
