#!/usr/bin/env python3
"""mdpreview: render a markdown file to HTML and preview it in the browser."""

from __future__ import annotations

import argparse
import base64
import html
import os
import queue
import socket
import sys
import tempfile
import threading
import time
import webbrowser
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Iterable
from urllib.parse import urlsplit

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

__version__ = "0.1.0"

APP_NAME = "mdpreview"
DEFAULT_PORT = 3030
DEFAULT_HOST = "127.0.0.1"
STDIN_TITLE = "New file"
STYLE_FILE_NAME = "style.css"
FAVICON_FILE_NAME = "favicon.ico"
STYLE_ENV_VAR = "MDPREVIEW_CSS"
EVENTS_PATH = "/events"
RELOAD_MESSAGE = "reload"
SSE_KEEPALIVE_SECONDS = 15.0
SUBSCRIBER_QUEUE_SIZE = 100
WATCHER_CHECK_INTERVAL_SECONDS = 0.5
TEMP_FILE_PREFIX = "markdown_preview_"

# (css weight, candidate file names under fonts/Oswald)
OSWALD_FONT_FACES = (
    (400, ("Oswald-Regular.ttf",)),
    (700, ("Oswald-Bold.ttf", "Oswald-Medium.ttf")),
    (300, ("Oswald-Light.ttf",)),
)

DEFAULT_FAVICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 208 128">'
    '<rect width="198" height="118" x="5" y="5" ry="10" fill="#f9fafb" stroke="#1f2937" stroke-width="10"/>'
    '<path d="M30 98V30h20l20 25 20-25h20v68H90V59L70 84 50 59v39zm125 0-30-33h20V30h20v35h20z" fill="#1f2937"/>'
    "</svg>"
)

DEFAULT_STYLE_CSS = """
:root {
  color-scheme: light dark;
  --fg: #1f2937;
  --muted: #6b7280;
  --bg: #f9fafb;
  --code-bg: #e5e7eb;
  --border: #d1d5db;
  --link: #0b57d0;
  --quote-border: #9ca3af;
}
@media (prefers-color-scheme: dark) {
  :root {
    --fg: #e5e7eb;
    --muted: #9ca3af;
    --bg: #111827;
    --code-bg: #1f2937;
    --border: #374151;
    --link: #8ab4f8;
    --quote-border: #4b5563;
  }
}
html, body {
  margin: 0;
  padding: 0;
  background: var(--bg);
  color: var(--fg);
  font-family: "Noto Sans", "DejaVu Sans", sans-serif;
  line-height: 1.55;
  font-size: 16px;
}
main {
  max-width: 980px;
  margin: 0 auto;
  padding: 1.1rem 1.4rem 4rem 1.4rem;
}
h1, h2, h3, h4, h5, h6 {
  font-family: "Oswald", "Noto Sans", "DejaVu Sans", sans-serif;
  font-weight: 400;
  line-height: 1.25;
  margin: 1.4em 0 0.6em 0;
}
h1, h2 {
  border-bottom: 1px solid var(--border);
  padding-bottom: 0.25em;
}
a {
  color: var(--link);
}
pre, code {
  font-family: "Noto Sans Mono", "DejaVu Sans Mono", monospace;
}
code {
  background: var(--code-bg);
  border-radius: 4px;
  padding: 0.1rem 0.35rem;
}
pre {
  background: var(--code-bg);
  border: 1px solid var(--border);
  border-radius: 6px;
  padding: 0.8rem;
  overflow: auto;
}
pre > code {
  background: transparent;
  padding: 0;
}
blockquote {
  margin: 0.8rem 0;
  padding: 0 1rem;
  color: var(--muted);
  border-left: 0.25rem solid var(--quote-border);
}
table {
  border-collapse: collapse;
}
th, td {
  border: 1px solid var(--border);
  padding: 0.4rem 0.6rem;
}
img {
  max-width: 100%;
}
hr {
  border: 0;
  border-top: 1px solid var(--border);
}
.task-list-item {
  list-style-type: none;
}
.task-list-item-checkbox {
  margin: 0 0.4em 0.2em -1.4em;
  vertical-align: middle;
}
.footnotes {
  font-size: 0.9em;
  color: var(--muted);
}
""".lstrip("\n")

LIVE_RELOAD_SCRIPT = f"""  <script>
    (function () {{
      var source = new EventSource("{EVENTS_PATH}");
      source.onmessage = function (event) {{
        if (event.data === "{RELOAD_MESSAGE}") {{
          window.location.reload();
        }}
      }};
    }})();
  </script>
"""


class PreviewError(Exception):
    """Fatal error surfaced to the user by `main`."""

    exit_code = 1


class InputError(PreviewError):
    """Markdown source is missing, unreadable, or not valid UTF-8."""

    exit_code = 2


class ServerBindError(PreviewError):
    """HTTP listener could not be bound to the requested address."""


class WatcherError(PreviewError):
    """Filesystem watch could not start or stopped while serving."""


class BrowserOpenError(PreviewError):
    """No default browser could open the preview."""


def config_dir() -> Path:
    """Per-user configuration directory for mdpreview assets."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA", "").strip()
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
        base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME


def executable_dirs() -> list[Path]:
    """Directories beside the running script and this module, in that order."""
    dirs: list[Path] = []
    argv0 = sys.argv[0] if sys.argv else ""
    if argv0:
        try:
            script = Path(argv0).resolve()
            if script.is_file():
                dirs.append(script.parent)
        except OSError:
            pass
    dirs.append(Path(__file__).resolve().parent)
    # Keep order while dropping duplicates.
    return list(dict.fromkeys(dirs))


def _read_css_candidate(path: Path) -> str | None:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return text if text.strip() else None


StyleResolver = Callable[[], "str | None"]


def env_style_resolver(var_name: str = STYLE_ENV_VAR) -> StyleResolver:
    def resolve() -> str | None:
        env_value = os.environ.get(var_name, "").strip()
        if not env_value:
            return None
        return _read_css_candidate(Path(env_value).expanduser())

    return resolve


def executable_style_resolver(app_dirs: Iterable[Path] | None = None) -> StyleResolver:
    def resolve() -> str | None:
        for directory in app_dirs if app_dirs is not None else executable_dirs():
            css = _read_css_candidate(Path(directory) / STYLE_FILE_NAME)
            if css is not None:
                return css
        return None

    return resolve


def config_style_resolver(config_root: Path | None = None) -> StyleResolver:
    def resolve() -> str | None:
        root = config_root if config_root is not None else config_dir()
        return _read_css_candidate(Path(root) / STYLE_FILE_NAME)

    return resolve


def default_style_resolvers() -> list[StyleResolver]:
    return [env_style_resolver(), executable_style_resolver(), config_style_resolver()]


def resolve_style_sheet(resolvers: Iterable[StyleResolver] | None = None) -> str:
    """Return the first non-empty stylesheet from the chain, else the built-in one."""
    chain = default_style_resolvers() if resolvers is None else resolvers
    for resolver in chain:
        css = resolver()
        if css:
            return css
    return DEFAULT_STYLE_CSS


def _first_existing_file(candidates: Iterable[Path]) -> Path | None:
    for candidate in candidates:
        try:
            if candidate.is_file():
                return candidate.resolve()
        except OSError:
            continue
    return None


def _build_font_faces(asset_dirs: list[Path]) -> str:
    """Embed whichever Oswald faces are installed; missing weights fall back to the CSS font stack."""
    rules: list[str] = []
    for weight, file_names in OSWALD_FONT_FACES:
        font_path = _first_existing_file(
            directory / "fonts" / "Oswald" / file_name for directory in asset_dirs for file_name in file_names
        )
        if font_path is None:
            continue
        try:
            encoded = base64.b64encode(font_path.read_bytes()).decode("ascii")
        except OSError:
            continue
        rules.append(
            "@font-face {\n"
            "  font-family: 'Oswald';\n"
            f"  src: url(data:font/truetype;charset=utf-8;base64,{encoded}) format('truetype');\n"
            f"  font-weight: {weight};\n"
            "  font-style: normal;\n"
            "}\n"
        )
    return "".join(rules)


def _build_favicon_uri(asset_dirs: list[Path]) -> str:
    icon_path = _first_existing_file(directory / FAVICON_FILE_NAME for directory in asset_dirs)
    if icon_path is not None:
        try:
            encoded = base64.b64encode(icon_path.read_bytes()).decode("ascii")
            return f"data:image/x-icon;base64,{encoded}"
        except OSError:
            pass
    encoded = base64.b64encode(DEFAULT_FAVICON_SVG.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


@dataclass(frozen=True)
class PageAssets:
    """Stylesheet, font faces and favicon shared by every rendered page."""

    style: str
    font_faces: str
    favicon_uri: str

    @classmethod
    def load(
        cls,
        asset_dirs: Iterable[Path] | None = None,
        style_resolvers: Iterable[StyleResolver] | None = None,
    ) -> PageAssets:
        dirs = list(asset_dirs) if asset_dirs is not None else [*executable_dirs(), config_dir()]
        return cls(
            style=resolve_style_sheet(style_resolvers),
            font_faces=_build_font_faces(dirs),
            favicon_uri=_build_favicon_uri(dirs),
        )


def _decode_markdown(raw: bytes, origin: str) -> str:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InputError(f"{origin} is not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    return text.removeprefix("\ufeff")


def read_markdown_source(path: Path) -> str:
    """Read a markdown file, decoding strictly as UTF-8."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise InputError(f"File does not exist: {path}") from exc
    except IsADirectoryError as exc:
        raise InputError(f"Path is a directory, not a markdown file: {path}") from exc
    except OSError as exc:
        raise InputError(f"Could not read {path}: {exc.strerror or exc}") from exc
    return _decode_markdown(raw, str(path))


def read_markdown_stdin() -> str:
    try:
        raw = sys.stdin.buffer.read()
    except OSError as exc:
        raise InputError(f"Could not read standard input: {exc}") from exc
    return _decode_markdown(raw, "standard input")


class MarkdownRenderer:
    """Converts markdown to a standalone, styled HTML document."""

    def __init__(self, assets: PageAssets | None = None) -> None:
        self.assets = assets if assets is not None else PageAssets.load()
        # Soft line breaks render as <br>; typographer drives the
        # replacements/smartquotes rules that commonmark leaves disabled.
        self._md = (
            MarkdownIt("commonmark", {"html": True, "breaks": True, "typographer": True})
            .enable("table")
            .enable("strikethrough")
            .enable(["replacements", "smartquotes"])
            .use(footnote_plugin)
            .use(tasklists_plugin)
        )

    def render_body(self, markdown_text: str) -> str:
        return self._md.render(markdown_text)

    def render_document(self, markdown_text: str, title: str, *, live_reload: bool = False) -> str:
        body = self.render_body(markdown_text)
        escaped_title = html.escape(title)
        reload_script = LIVE_RELOAD_SCRIPT if live_reload else ""
        return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <link rel="icon" href="{self.assets.favicon_uri}"/>
  <title>{escaped_title}</title>
  <style>
{self.assets.font_faces}{self.assets.style}
  </style>
</head>
<body>
  <main class="markdown-body">
{body}  </main>
{reload_script}</body>
</html>
"""


def open_in_browser(target: str) -> None:
    """Open a URL or file URI with the platform's default browser."""
    try:
        browser = webbrowser.get()
    except webbrowser.Error as exc:
        raise BrowserOpenError(f"No default browser available to open {target}") from exc
    if not browser.open(target):
        raise BrowserOpenError(f"Browser refused to open {target}")


def run_static_mode(
    file_path: Path | None,
    *,
    renderer: MarkdownRenderer | None = None,
    opener: Callable[[str], None] | None = None,
) -> Path:
    """Render once to a temporary HTML file, open it, and return its path.

    The temporary file is left in place so the browser can still load it
    after this process exits.
    """
    if file_path is None:
        title = STDIN_TITLE
        markdown_text = read_markdown_stdin()
    else:
        title = file_path.name
        markdown_text = read_markdown_source(file_path)

    renderer = renderer if renderer is not None else MarkdownRenderer()
    html_doc = renderer.render_document(markdown_text, title)

    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        prefix=TEMP_FILE_PREFIX,
        suffix=".html",
        delete=False,
    ) as handle:
        handle.write(html_doc)
        output_path = Path(handle.name)

    opener = opener if opener is not None else open_in_browser
    opener(output_path.resolve().as_uri())
    return output_path


class ReloadBroadcaster:
    """Fan out reload notifications to every connected browser session."""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._subscribers: set[queue.Queue[str | None]] = set()
        self._closed = False

    def subscribe(self) -> queue.Queue[str | None]:
        subscription: queue.Queue[str | None] = queue.Queue(maxsize=self._queue_size)
        with self._lock:
            if self._closed:
                subscription.put_nowait(None)
            else:
                self._subscribers.add(subscription)
        return subscription

    def unsubscribe(self, subscription: queue.Queue[str | None]) -> None:
        with self._lock:
            self._subscribers.discard(subscription)

    def publish(self, message: str = RELOAD_MESSAGE) -> int:
        """Deliver `message` to all subscribers and return how many received it."""
        delivered = 0
        with self._lock:
            for subscription in self._subscribers:
                try:
                    subscription.put_nowait(message)
                except queue.Full:
                    # A backlog of reloads collapses into the ones already queued.
                    continue
                delivered += 1
        return delivered

    def close(self) -> None:
        """Wake every subscriber with a `None` sentinel and refuse new ones."""
        with self._lock:
            self._closed = True
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscription in subscribers:
            # Make room for the sentinel if the stream fell behind.
            while True:
                try:
                    subscription.put_nowait(None)
                    break
                except queue.Full:
                    try:
                        subscription.get_nowait()
                    except queue.Empty:
                        pass

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


def _path_key(path: str | os.PathLike[str]) -> str:
    return os.path.normcase(os.path.realpath(path))


class _SourceChangeHandler(FileSystemEventHandler):
    """Forward watchdog events that touch the watched file."""

    def __init__(self, target: Path, on_change: Callable[[], None]) -> None:
        super().__init__()
        self._target_key = _path_key(target)
        self._on_change = on_change

    def _matches(self, raw_path: str | bytes) -> bool:
        if not raw_path:
            return False
        return _path_key(os.fsdecode(raw_path)) == self._target_key

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._on_change()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save atomically write a temp file and rename it over the source.
        if not event.is_directory and self._matches(getattr(event, "dest_path", "")):
            self._on_change()


class FileWatcher:
    """Watch one file and call `on_change` for each native change event."""

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        *,
        use_polling: bool = False,
        poll_interval: float = 1.0,
    ) -> None:
        self.path = Path(path).resolve()
        self._on_change = on_change
        self._use_polling = use_polling
        self._poll_interval = poll_interval
        self._observer = None

    def start(self) -> None:
        # The parent directory is watched so atomic saves (rename over the
        # source) keep being observed after the original inode is gone.
        observer = PollingObserver(timeout=self._poll_interval) if self._use_polling else Observer()
        handler = _SourceChangeHandler(self.path, self._on_change)
        try:
            observer.schedule(handler, str(self.path.parent), recursive=False)
            observer.start()
        except OSError as exc:
            raise WatcherError(
                f"Could not watch {self.path}: {exc.strerror or exc} (try --poll if the OS watch limit is exhausted)"
            ) from exc
        self._observer = observer

    def stop(self) -> None:
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        observer.stop()
        observer.join()

    def is_alive(self) -> bool:
        """True while both the dispatcher and every emitter thread are running."""
        observer = self._observer
        if observer is None or not observer.is_alive():
            return False
        # An emitter stops on its own when the watched directory disappears.
        emitters = observer.emitters
        return bool(emitters) and all(emitter.is_alive() for emitter in emitters)

    def __enter__(self) -> FileWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


class _PreviewHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    # A second server must never share the port with a running one.
    allow_reuse_port = False

    def __init__(
        self,
        server_address: tuple[str, int],
        source_path: Path,
        renderer: MarkdownRenderer,
        broadcaster: ReloadBroadcaster,
    ) -> None:
        self.source_path = source_path
        self.renderer = renderer
        self.broadcaster = broadcaster
        if ":" in server_address[0]:
            self.address_family = socket.AF_INET6
        super().__init__(server_address, _PreviewRequestHandler)


class _PreviewRequestHandler(BaseHTTPRequestHandler):
    server: _PreviewHTTPServer
    server_version = f"{APP_NAME}/{__version__}"

    def do_GET(self) -> None:  # noqa: N802
        self._dispatch(send_body=True)

    def do_HEAD(self) -> None:  # noqa: N802
        self._dispatch(send_body=False)

    def log_request(self, code="-", size="-") -> None:
        # The event stream keeps connections open; per-request access lines are noise.
        return

    def _dispatch(self, *, send_body: bool) -> None:
        route = urlsplit(self.path).path
        if route in ("/", "/index.html"):
            self._serve_page(send_body=send_body)
        elif route == EVENTS_PATH and send_body:
            self._serve_events()
        else:
            self.send_error(HTTPStatus.NOT_FOUND)

    def _send_bytes(self, status: HTTPStatus, content_type: str, payload: bytes, *, send_body: bool) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        if send_body:
            self.wfile.write(payload)

    def _serve_page(self, *, send_body: bool) -> None:
        source_path = self.server.source_path
        try:
            markdown_text = read_markdown_source(source_path)
        except InputError as exc:
            print(f"Render failed: {exc}", file=sys.stderr)
            self._send_bytes(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                "text/plain; charset=utf-8",
                f"{exc}\n".encode("utf-8"),
                send_body=send_body,
            )
            return
        html_doc = self.server.renderer.render_document(markdown_text, source_path.name, live_reload=True)
        self._send_bytes(HTTPStatus.OK, "text/html; charset=utf-8", html_doc.encode("utf-8"), send_body=send_body)

    def _serve_events(self) -> None:
        broadcaster = self.server.broadcaster
        subscription = broadcaster.subscribe()
        try:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", "text/event-stream")
            self.send_header("Cache-Control", "no-cache")
            self.end_headers()
            self.wfile.flush()
            while True:
                try:
                    message = subscription.get(timeout=SSE_KEEPALIVE_SECONDS)
                except queue.Empty:
                    self.wfile.write(b": keep-alive\n\n")
                    self.wfile.flush()
                    continue
                if message is None:
                    break
                self.wfile.write(f"data: {message}\n\n".encode("utf-8"))
                self.wfile.flush()
        except OSError:
            # Browser tab closed, navigated away or the socket failed; only this stream ends.
            pass
        finally:
            broadcaster.unsubscribe(subscription)
            self.close_connection = True


def _url_host(host: str) -> str:
    """Host part of a browsable URL; wildcard binds are reached via loopback."""
    if host in ("", "0.0.0.0"):
        return "127.0.0.1"
    if host == "::":
        return "[::1]"
    if ":" in host:
        return f"[{host}]"
    return host


class LiveServer:
    """Serve one markdown file over HTTP and push reloads when it changes.

    Use as a context manager: entering binds the listener and starts the
    watcher, leaving releases both.
    """

    def __init__(
        self,
        source_path: Path,
        renderer: MarkdownRenderer | None = None,
        *,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        use_polling: bool = False,
        poll_interval: float = 1.0,
    ) -> None:
        self.source_path = Path(source_path).resolve()
        self.renderer = renderer if renderer is not None else MarkdownRenderer()
        self.host = host
        self.port = port
        self.broadcaster = ReloadBroadcaster()
        self._watcher = FileWatcher(
            self.source_path,
            self._on_source_changed,
            use_polling=use_polling,
            poll_interval=poll_interval,
        )
        self._httpd: _PreviewHTTPServer | None = None
        self._serve_thread: threading.Thread | None = None

    @property
    def server_port(self) -> int:
        if self._httpd is None:
            return self.port
        return int(self._httpd.server_address[1])

    @property
    def url(self) -> str:
        return f"http://{_url_host(self.host)}:{self.server_port}/"

    def _on_source_changed(self) -> None:
        print("File changed, updating content...", file=sys.stderr)
        self.broadcaster.publish(RELOAD_MESSAGE)

    def start(self) -> None:
        try:
            httpd = _PreviewHTTPServer((self.host, self.port), self.source_path, self.renderer, self.broadcaster)
        except OSError as exc:
            raise ServerBindError(
                f"Could not listen on address {self.host!r}, port {self.port}: {exc.strerror or exc}. "
                "Use --port to choose a different port, or --host for another address."
            ) from exc
        try:
            self._watcher.start()
        except WatcherError:
            httpd.server_close()
            raise
        self._httpd = httpd
        self._serve_thread = threading.Thread(
            target=httpd.serve_forever,
            name=f"{APP_NAME}-http",
            daemon=True,
        )
        self._serve_thread.start()

    def wait(self, check_interval: float = WATCHER_CHECK_INTERVAL_SECONDS) -> None:
        """Block while serving; live reload cannot continue without the watcher."""
        while True:
            if not self._watcher.is_alive():
                raise WatcherError(f"File watcher for {self.source_path} stopped; live reload is unavailable")
            if self._serve_thread is None or not self._serve_thread.is_alive():
                return
            time.sleep(check_interval)

    def close(self) -> None:
        self._watcher.stop()
        self.broadcaster.close()
        httpd = self._httpd
        self._httpd = None
        if httpd is None:
            return
        if self._serve_thread is not None:
            httpd.shutdown()
            self._serve_thread.join()
            self._serve_thread = None
        httpd.server_close()

    def __enter__(self) -> LiveServer:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def run_server_mode(
    file_path: Path | None,
    *,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    open_browser: bool = True,
    use_polling: bool = False,
) -> None:
    if file_path is None:
        raise InputError("No input file specified; server mode needs a file to watch (use --static-mode for stdin).")
    # Fail fast on a missing or undecodable source before binding anything.
    read_markdown_source(file_path)

    with LiveServer(file_path, host=host, port=port, use_polling=use_polling) as server:
        print(f"Server running at {server.url}")
        print("Press Ctrl+C to stop.")
        if open_browser:
            try:
                open_in_browser(server.url)
            except BrowserOpenError as exc:
                print(f"Warning: {exc}; open {server.url} manually.", file=sys.stderr)
        server.wait()


def _port_number(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range 0-65535: {port}")
    return port


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Preview a markdown file in the browser, live-reloading on save.",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        metavar="FILE",
        help="Markdown file to preview (static mode reads standard input when omitted).",
    )
    parser.add_argument(
        "-s",
        "--static-mode",
        action="store_true",
        help="Render once to a temporary HTML file and open it instead of serving.",
    )
    parser.add_argument(
        "--port",
        type=_port_number,
        default=DEFAULT_PORT,
        help=f"HTTP port for server mode (default: {DEFAULT_PORT}).",
    )
    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Address to bind in server mode (default: {DEFAULT_HOST}).",
    )
    parser.add_argument(
        "--no-open",
        dest="open_browser",
        action="store_false",
        help="Do not open a browser when the server starts.",
    )
    parser.add_argument(
        "--poll",
        action="store_true",
        help="Watch the file by polling instead of native OS notifications.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    file_path = Path(args.file).expanduser() if args.file is not None else None

    try:
        if args.static_mode:
            output_path = run_static_mode(file_path)
            print(f"Preview written to {output_path}")
        else:
            run_server_mode(
                file_path,
                host=args.host,
                port=args.port,
                open_browser=args.open_browser,
                use_polling=args.poll,
            )
    except PreviewError as exc:
        print(f"{APP_NAME}: {exc}", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("Stopped.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
