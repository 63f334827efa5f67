"""An HTTPS server that serves static files from a document root."""

from __future__ import annotations

import ipaddress
import selectors
import socket
import ssl
import sys
import threading
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import BinaryIO

from .threadpool import ThreadPool

SERVER_NAME = "tlsfileserve HTTPS Server"

_HEADER_LIMIT = 8192
_SHUTDOWN_TIMEOUT = 10.0
_ACCEPT_POLL_INTERVAL = 0.2

_CONTENT_TYPES = (
    ((".html",), "text/html"),
    ((".css",), "text/css"),
    ((".js",), "application/javascript"),
    ((".png",), "image/png"),
    ((".jpg", ".jpeg"), "image/jpeg"),
)


@dataclass
class Response:
    """An HTTP response that closes the connection once sent."""

    status: HTTPStatus
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    version: str = "HTTP/1.1"

    def to_bytes(self) -> bytes:
        """Serialise the response, adding Content-Length and Connection: close."""
        lines = [f"{self.version} {self.status.value} {self.status.phrase}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        lines.append(f"Content-Length: {len(self.body)}")
        lines.append("Connection: close")
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("latin-1") + self.body


def content_type_for(path: str) -> str:
    """Pick a Content-Type from the extensions that appear in a path."""
    for needles, content_type in _CONTENT_TYPES:
        if any(needle in path for needle in needles):
            return content_type
    return "text/plain"


def _text_response(status: HTTPStatus, message: str, version: str) -> Response:
    return Response(
        status=status,
        body=message.encode(),
        headers={"Content-Type": "text/plain"},
        version=version,
    )


def build_response(method: str, target: str, version: str, doc_root: str) -> Response:
    """Answer one request for a file under ``doc_root``."""
    try:
        if method != "GET":
            return _text_response(HTTPStatus.BAD_REQUEST, "Invalid method\n", version)

        if not target.startswith("/") or ".." in target:
            return _text_response(HTTPStatus.BAD_REQUEST, "Invalid request\n", version)

        request_path = target + "index.html" if target.endswith("/") else target
        full_path = doc_root + request_path

        try:
            file = open(full_path, "rb")
        except OSError:
            return _text_response(HTTPStatus.NOT_FOUND, "File not found\n", version)
        with file:
            content = file.read()

        return Response(
            status=HTTPStatus.OK,
            body=content,
            headers={"Content-Type": content_type_for(full_path)},
            version=version,
        )
    except Exception:
        return Response(
            status=HTTPStatus.NOT_FOUND,
            body=b"404 Not Found\n",
            headers={"Server": SERVER_NAME, "Content-Type": "text/html"},
            version=version,
        )


class _MalformedRequest(ValueError):
    """The peer sent something that is not an acceptable HTTP request."""


@dataclass(frozen=True)
class _Request:
    method: str
    target: str
    version: str


def _read_line(rfile: BinaryIO, budget: int) -> bytes:
    line = rfile.readline(budget + 1)
    if not line:
        raise _MalformedRequest("connection closed mid-request")
    if len(line) > budget or not line.endswith(b"\n"):
        raise _MalformedRequest("header too large")
    return line


def _read_exact(rfile: BinaryIO, size: int) -> bytes:
    data = rfile.read(size)
    if len(data) != size:
        raise _MalformedRequest("truncated body")
    return data


def _read_chunked_body(rfile: BinaryIO) -> None:
    while True:
        size_line = _read_line(rfile, _HEADER_LIMIT).decode("latin-1")
        try:
            size = int(size_line.split(";", 1)[0].strip(), 16)
        except ValueError as exc:
            raise _MalformedRequest("bad chunk size") from exc
        if size == 0:
            while _read_line(rfile, _HEADER_LIMIT).strip():
                pass
            return
        _read_exact(rfile, size + 2)


def _read_request(rfile: BinaryIO) -> _Request:
    used = 0

    def next_line() -> bytes:
        nonlocal used
        line = _read_line(rfile, _HEADER_LIMIT - used)
        used += len(line)
        return line

    parts = next_line().decode("latin-1").split()
    if len(parts) != 3:
        raise _MalformedRequest("bad request line")
    method, target, version = parts
    if version not in ("HTTP/1.0", "HTTP/1.1"):
        raise _MalformedRequest("unsupported HTTP version")

    headers: dict[str, str] = {}
    while (line := next_line()).strip():
        name, sep, value = line.decode("latin-1").partition(":")
        if not sep or not name.strip():
            raise _MalformedRequest("bad header line")
        headers[name.strip().lower()] = value.strip()

    if "chunked" in headers.get("transfer-encoding", "").lower():
        _read_chunked_body(rfile)
    elif "content-length" in headers:
        try:
            length = int(headers["content-length"])
        except ValueError as exc:
            raise _MalformedRequest("bad Content-Length") from exc
        if length < 0:
            raise _MalformedRequest("bad Content-Length")
        _read_exact(rfile, length)

    return _Request(method, target, version)


class HttpConnection:
    """One client connection: TLS handshake, one request, one response."""

    def __init__(self, sock: socket.socket, ssl_context: ssl.SSLContext,
                 doc_root: str, thread_pool: ThreadPool) -> None:
        self._sock = sock
        self._ssl_context = ssl_context
        self._doc_root = doc_root
        self._thread_pool = thread_pool
        self._stream: ssl.SSLSocket | None = None

    def start(self) -> None:
        """Handshake and read the request in the background."""
        threading.Thread(target=self._handshake_and_read, daemon=True).start()

    def _close(self) -> None:
        (self._stream or self._sock).close()

    def _handshake_and_read(self) -> None:
        try:
            self._stream = self._ssl_context.wrap_socket(self._sock, server_side=True)
            with self._stream.makefile("rb") as rfile:
                request = _read_request(rfile)
        except (OSError, _MalformedRequest):
            self._close()
            return
        try:
            self._thread_pool.enqueue(lambda: self._respond(request))
        except RuntimeError:
            self._close()

    def _respond(self, request: _Request) -> None:
        response = build_response(request.method, request.target, request.version,
                                  self._doc_root)
        stream = self._stream
        try:
            stream.sendall(response.to_bytes())
            stream.settimeout(_SHUTDOWN_TIMEOUT)
            stream.unwrap()
        except (ssl.SSLEOFError, ssl.SSLZeroReturnError):
            pass
        except OSError as exc:
            print(f"Shutdown error: {exc}", file=sys.stderr)
        finally:
            stream.close()


class HttpServer:
    """Accept TLS connections and serve files from ``doc_root``."""

    def __init__(self, address: str, port: int, ssl_context: ssl.SSLContext,
                 doc_root: str, thread_pool_size: int) -> None:
        ip = ipaddress.ip_address(address)
        family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
        self._listener = socket.socket(family, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((str(ip), port))
            self._listener.listen(socket.SOMAXCONN)
        except OSError:
            self._listener.close()
            raise
        self._ssl_context = ssl_context
        self._doc_root = doc_root
        self._thread_pool = ThreadPool(thread_pool_size)
        self._stopping = threading.Event()
        self._closed = False
        self._accept_thread: threading.Thread | None = None

    @property
    def server_address(self) -> tuple[str, int]:
        """The address and port the server is listening on."""
        host, port = self._listener.getsockname()[:2]
        return host, port

    def start(self) -> None:
        """Accept connections on a background thread."""
        if self._accept_thread is None:
            self._accept_thread = threading.Thread(target=self.serve_forever, daemon=True)
            self._accept_thread.start()

    def serve_forever(self) -> None:
        """Accept connections until :meth:`shutdown` is called."""
        with selectors.DefaultSelector() as selector:
            selector.register(self._listener, selectors.EVENT_READ)
            while not self._stopping.is_set():
                try:
                    if not selector.select(timeout=_ACCEPT_POLL_INTERVAL):
                        continue
                    conn, _ = self._listener.accept()
                except (OSError, ValueError):
                    if self._stopping.is_set():
                        return
                    continue
                HttpConnection(conn, self._ssl_context, self._doc_root,
                               self._thread_pool).start()

    def shutdown(self) -> None:
        """Stop accepting, close the listener and stop the worker pool."""
        if self._closed:
            return
        self._closed = True
        self._stopping.set()
        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join()
        self._listener.close()
        self._thread_pool.shutdown()

    def __enter__(self) -> HttpServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()