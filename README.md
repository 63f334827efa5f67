# tlsfileserve

A small HTTPS server that serves static files from a document root.

- Answers only `GET`; any other method gets `400` with the body `Invalid method`.
- Rejects targets that do not start with `/` or that contain `..` with `400`
  and the body `Invalid request`.
- A target ending in `/` serves `index.html` from that directory.
- A file that cannot be opened gets `404` with the body `File not found`.
- `Content-Type` is chosen by which of `.html`, `.css`, `.js`, `.png`,
  `.jpg`/`.jpeg` appears in the file path (checked in that order), and is
  `text/plain` for anything else.
- Every response carries `Content-Length` and `Connection: close`, and the
  connection is closed once it has been sent.

Each connection is handshaken and its request read on its own thread; the
response is then built and sent by a fixed pool of worker threads. Request
lines and headers together may take at most 8192 bytes, and only `HTTP/1.0`
and `HTTP/1.1` are accepted. A request body, if any, is read and discarded.
A request that cannot be parsed closes the connection without a response.

## Installation

```
pip install .
```

There are no runtime dependencies beyond the Python standard library
(Python 3.10 or later).

## Running the server

The server loads its certificate chain from `server.crt` and its private key
from `server.key` in the current working directory, and speaks TLS 1.2 only.
For local testing you can create a self-signed pair with any TLS tool and
place the two files there.

```
tlsfileserve <address> <port> <doc_root> <threads>
```

For example:

```
tlsfileserve 127.0.0.1 8443 ./public 4
```

`address` must be an IPv4 or IPv6 address, not a host name. `port` and
`threads` are read as leading integers (text that is not a number counts as
0), and `threads` is raised to at least 1. When the number of arguments is
wrong, a usage line is printed and the command exits with status 1; any other
startup error is reported as `Error: ...`, again with status 1. Ctrl-C stops
the server and exits with status 0.

## Using it from Python

```python
from tlsfileserve.cli import make_ssl_context
from tlsfileserve.server import HttpServer

ctx = make_ssl_context("server.crt", "server.key")
with HttpServer("127.0.0.1", 8443, ctx, "./public", 4) as server:
    print(server.server_address)
    server.serve_forever()
```

`HttpServer` binds and listens as soon as it is created. `serve_forever()`
accepts connections on the calling thread until `shutdown()` is called;
`start()` runs the same loop on a background thread instead. `shutdown()`
(or leaving the `with` block) stops accepting, closes the listening socket
and stops the worker pool. Passing port 0 picks a free port, which
`server_address` then reports.

`build_response(method, target, version, doc_root)` in `tlsfileserve.server`
gives the `Response` that would be sent for a request, without any
networking, and `Response.to_bytes()` renders it as it goes on the wire.
`content_type_for(path)` returns the content type chosen for a path.

`tlsfileserve.threadpool.ThreadPool` is the worker pool on its own. It can be
used as a context manager: tasks go in with `enqueue`, and `shutdown` (or
leaving the `with` block) finishes the tasks still queued before the workers
stop. Enqueuing after shutdown raises `RuntimeError`. An exception raised by
a task is printed and the worker carries on.

## What it does not do

- No plain-HTTP mode, keep-alive, directory listings, range requests or
  methods other than `GET`.
- The certificate and key paths are fixed to `server.crt` and `server.key`
  on the command line; use `make_ssl_context` from Python to load others.

## Tests

```
pip install ".[test]"
pytest
```