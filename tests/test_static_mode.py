from __future__ import annotations

import io
import sys
import webbrowser
from pathlib import Path

import pytest

from mdpreview import (
    STDIN_TITLE,
    BrowserOpenError,
    InputError,
    MarkdownRenderer,
    open_in_browser,
    run_static_mode,
)


def test_static_output_matches_direct_render(
    renderer: MarkdownRenderer, features_path: Path, temp_dir: Path
) -> None:
    opened: list[str] = []

    output_path = run_static_mode(features_path, renderer=renderer, opener=opened.append)

    expected = renderer.render_document(features_path.read_text(encoding="utf-8"), "features.md")
    assert output_path.parent == temp_dir
    assert output_path.name.startswith("markdown_preview_")
    assert output_path.suffix == ".html"
    assert output_path.read_text(encoding="utf-8") == expected
    assert opened == [output_path.resolve().as_uri()]


def test_static_reads_stdin(
    renderer: MarkdownRenderer, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO("# From a pipe\n".encode("utf-8"))))

    output_path = run_static_mode(None, renderer=renderer, opener=lambda target: None)

    content = output_path.read_text(encoding="utf-8")
    assert "<h1>From a pipe</h1>" in content
    assert f"<title>{STDIN_TITLE}</title>" in content


def test_static_rejects_undecodable_stdin(
    renderer: MarkdownRenderer, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"\xff\xfe\x00bad")))
    with pytest.raises(InputError, match="standard input"):
        run_static_mode(None, renderer=renderer, opener=lambda target: None)
    assert list(temp_dir.iterdir()) == []


def test_static_missing_file_writes_nothing(renderer: MarkdownRenderer, temp_dir: Path, tmp_path: Path) -> None:
    with pytest.raises(InputError):
        run_static_mode(tmp_path / "missing.md", renderer=renderer, opener=lambda target: None)
    assert list(temp_dir.iterdir()) == []


def test_static_reports_browser_failure(renderer: MarkdownRenderer, features_path: Path, temp_dir: Path) -> None:
    def no_browser(target: str) -> None:
        raise BrowserOpenError(f"No default browser available to open {target}")

    with pytest.raises(BrowserOpenError):
        run_static_mode(features_path, renderer=renderer, opener=no_browser)


def test_open_in_browser_without_browser(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing_browser(using=None):
        raise webbrowser.Error("could not locate runnable browser")

    monkeypatch.setattr(webbrowser, "get", missing_browser)
    with pytest.raises(BrowserOpenError, match="No default browser"):
        open_in_browser("file:///tmp/x.html")


def test_open_in_browser_refused(monkeypatch: pytest.MonkeyPatch) -> None:
    class RefusingBrowser:
        def open(self, url: str) -> bool:
            return False

    monkeypatch.setattr(webbrowser, "get", lambda using=None: RefusingBrowser())
    with pytest.raises(BrowserOpenError, match="refused"):
        open_in_browser("file:///tmp/x.html")


def test_open_in_browser_success(monkeypatch: pytest.MonkeyPatch) -> None:
    opened: list[str] = []

    class RecordingBrowser:
        def open(self, url: str) -> bool:
            opened.append(url)
            return True

    monkeypatch.setattr(webbrowser, "get", lambda using=None: RecordingBrowser())
    open_in_browser("http://localhost:3030/")
    assert opened == ["http://localhost:3030/"]
