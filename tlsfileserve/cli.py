"""Command-line entry point for the HTTPS file server."""

from __future__ import annotations

import ipaddress
import re
import ssl
import sys

from .server import HttpServer

_CERT_FILE = "server.crt"
_KEY_FILE = "server.key"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Parse a leading integer the lenient way, giving 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def make_ssl_context(certfile: str, keyfile: str) -> ssl.SSLContext:
    """Build a TLS 1.2 server context from a PEM certificate chain and key."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.maximum_version = ssl.TLSVersion.TLSv1_2
    context.options |= ssl.OP_SINGLE_DH_USE
    context.load_cert_chain(certfile, keyfile)
    return context


def main(argv: list[str] | None = None) -> int:
    """Run the server: <address> <port> <doc_root> <threads>."""
    prog = sys.argv[0] if sys.argv and sys.argv[0] else "tlsfileserve"
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 4:
        print(f"Usage: {prog} <address> <port> <doc_root> <threads>", file=sys.stderr)
        return 1

    try:
        address = str(ipaddress.ip_address(args[0]))
        port = _atoi(args[1]) & 0xFFFF
        doc_root = args[2]
        threads = max(1, _atoi(args[3]))

        context = make_ssl_context(_CERT_FILE, _KEY_FILE)
        with HttpServer(address, port, context, doc_root, threads) as server:
            print(f"HTTPS server started on port {port} with {threads} threads")
            server.serve_forever()
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())