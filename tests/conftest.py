from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from mdpreview import DEFAULT_STYLE_CSS, MarkdownRenderer, PageAssets

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def assets() -> PageAssets:
    return PageAssets(style=DEFAULT_STYLE_CSS, font_faces="", favicon_uri="data:,")


@pytest.fixture
def renderer(assets: PageAssets) -> MarkdownRenderer:
    return MarkdownRenderer(assets)


@pytest.fixture
def features_path() -> Path:
    return FIXTURES_DIR / "features.md"


@pytest.fixture
def markdown_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.md"
    path.write_text("# First heading\n\nOriginal body.\n", encoding="utf-8")
    return path


@pytest.fixture
def temp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect tempfile output so static previews land in the test directory."""
    out_dir = tmp_path / "tmp"
    out_dir.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(out_dir))
    return out_dir
