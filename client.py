#!/usr/bin/python3
# client.py

from __future__ import annotations

import argparse
import socket
import sys
from typing import NoReturn

from cli import EXIT_FAILURE, ArgumentParser


RECV_BUFSIZE = 4096  # how many bytes we ask for per recv() call.
RECV_TIMEOUT_SECONDS = 5.0  # stops client hanging forever if server stalls
MAX_RESPONSE_BYTES = 16 * 1024 * 1024


def parse_args() -> argparse.Namespace:
    parser = ArgumentParser(description="TCP Pattern Search Client")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=44445)
    parser.add_argument(
        "pattern",
        help="Pattern to search for in the server's record source",
    )
    return parser.parse_args()


def is_complete(buf: bytes) -> bool:
    """Return True once buf holds a full response.

    A response is any number of DEBUG lines followed by one result line
    (a serialized result or an ERROR line).
    """
    for line in buf.split(b"\n")[:-1]:
        if not line.startswith(b"DEBUG:"):
            return True
    return False


def recv_response(sock: socket.socket) -> bytes:
    """
    Receive data until a result line has arrived.

    The server keeps the connection open, so EOF never arrives in the normal
    case.
    """
    buf = b""

    while not is_complete(buf):
        data = sock.recv(RECV_BUFSIZE)
        if not data:
            # Server closed (EOF)
            break

        buf += data

        # Safety: prevent unbounded growth if something goes wrong.
        if len(buf) > MAX_RESPONSE_BYTES:
            break

    return buf


def _die(msg: str, code: int = EXIT_FAILURE) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(code)


def main() -> None:
    args = parse_args()
    pattern_line = args.pattern + "\n"

    try:
        with socket.create_connection(
            (args.host, args.port),
            timeout=RECV_TIMEOUT_SECONDS,
        ) as sock:
            sock.settimeout(RECV_TIMEOUT_SECONDS)
            sock.sendall(pattern_line.encode("utf-8"))

            # Read just one response (debug + result), then exit cleanly.
            response = recv_response(sock)

    except ConnectionResetError:
        _die("Connection reset by server. Check server status.")

    except socket.timeout:
        _die(
            "Timeout: no complete response received.\n"
            "Check server reachability."
        )

    except OSError as exc:
        _die(f"Network error: {exc}")

    text = response.decode("utf-8", errors="replace")
    print(text, end="")

    if "\nERROR:" in "\n" + text:
        raise SystemExit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
