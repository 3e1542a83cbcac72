from __future__ import annotations

from pathlib import Path

import pytest

from mdpreview import (
    DEFAULT_STYLE_CSS,
    EVENTS_PATH,
    InputError,
    MarkdownRenderer,
    read_markdown_source,
)


def test_strikethrough_renders_struck_element(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body("Some ~~removed~~ words.")
    assert "<s>removed</s>" in body


def test_table_keeps_row_and_column_count(renderer: MarkdownRenderer) -> None:
    source = "| a | b | c |\n|---|---|---|\n| 1 | 2 | 3 |\n| 4 | 5 | 6 |\n"
    body = renderer.render_body(source)
    assert body.count("<table>") == 1
    assert body.count("<tr>") == 3
    assert body.count("<th>") == 3
    assert body.count("<td>") == 6


def test_footnotes(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body("Claim[^1].\n\n[^1]: Source of the claim.\n")
    assert 'class="footnote-ref"' in body
    assert 'class="footnotes"' in body
    assert "Source of the claim." in body


def test_task_list_items(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body("- [ ] todo\n- [x] done\n")
    assert body.count('type="checkbox"') == 2
    assert body.count('checked="checked"') == 1
    assert "task-list-item" in body


def test_smart_punctuation(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body('"Quoted" -- wait...\n')
    assert "“Quoted”" in body
    assert "–" in body
    assert "…" in body


def test_soft_break_becomes_line_break(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body("first line\nsecond line\n")
    assert "<br" in body


def test_raw_html_passes_through(renderer: MarkdownRenderer) -> None:
    body = renderer.render_body('<div class="raw">kept</div>\n')
    assert '<div class="raw">kept</div>' in body


def test_document_wraps_body_with_style_and_title(renderer: MarkdownRenderer) -> None:
    doc = renderer.render_document("# Hello", "<notes & more>.md")
    assert doc.startswith("<!doctype html>")
    assert "<title>&lt;notes &amp; more&gt;.md</title>" in doc
    assert "<h1>Hello</h1>" in doc
    assert DEFAULT_STYLE_CSS in doc
    assert '<link rel="icon" href="data:,"/>' in doc


def test_reload_script_only_when_live(renderer: MarkdownRenderer) -> None:
    static_doc = renderer.render_document("text", "a.md")
    live_doc = renderer.render_document("text", "a.md", live_reload=True)
    assert "EventSource" not in static_doc
    assert f'new EventSource("{EVENTS_PATH}")' in live_doc
    assert "location.reload()" in live_doc


def test_render_is_repeatable(renderer: MarkdownRenderer, features_path: Path) -> None:
    text = features_path.read_text(encoding="utf-8")
    assert renderer.render_document(text, "features.md") == renderer.render_document(text, "features.md")


def test_read_source_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / "bom.md"
    path.write_bytes(b"\xef\xbb\xbf# Title\n")
    assert read_markdown_source(path) == "# Title\n"


def test_read_source_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin1.md"
    path.write_bytes(b"caf\xe9\n")
    with pytest.raises(InputError, match="not valid UTF-8"):
        read_markdown_source(path)


def test_read_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputError, match="does not exist"):
        read_markdown_source(tmp_path / "absent.md")


def test_read_source_directory(tmp_path: Path) -> None:
    with pytest.raises(InputError):
        read_markdown_source(tmp_path)
