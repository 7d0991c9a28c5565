#!/usr/bin/python3
"""
TCP pattern search server.

Serves pattern searches over the record source named in the configuration.
Clients keep a persistent connection and send one pattern per line. For each
pattern the server answers with two lines:

- A DEBUG line with the client IP, the pattern and the elapsed time in ms.
- The serialized result, e.g. {"patron":"TAGC","total":1,"sospechosos":[...]},
  or "ERROR: <message>" if the record source cannot be used.
"""

from __future__ import annotations

import argparse
import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Optional

from cli import ArgumentParser
from config import ConfigError, load_config
from logconfig import setup_logging
from output import encode_line, format_result
from record_filter import FilterError, RecordFilter
from records import ENCODING, ENCODING_ERRORS


logger = logging.getLogger(__name__)

MAX_PAYLOAD_BYTES = 1024


@dataclass(frozen=True)
class ServerConfig:
    """Runtime server configuration.

    Attributes:
        host: Interface address to bind to.
        port: TCP port to listen on.
    """

    host: str
    port: int


class PatternSearchServer:
    """A threaded TCP server answering newline-delimited pattern searches.

    One daemon thread is spawned per client connection. All threads share the
    same RecordFilter.
    """

    def __init__(
        self,
        cfg: ServerConfig,
        record_filter: RecordFilter,
        escape_output: bool = False,
    ) -> None:
        """Initialize the server.

        Args:
            cfg: Network bind configuration (host/port).
            record_filter: Filter used to answer pattern searches.
            escape_output: Serialize results with the JSON encoder.
        """
        self._cfg = cfg
        self._filter = record_filter
        self._escape_output = escape_output
        self._sock: Optional[socket.socket] = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start listening and accepting connections (blocking).

        Accepts connections in a loop until `stop()` is called.
        """
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind((self._cfg.host, self._cfg.port))
        self._sock.listen(128)
        self._sock.settimeout(0.5)  # allows graceful shutdown checks

        logger.info("Listening on %s:%d", self._cfg.host, self._cfg.port)

        while not self._stop_event.is_set():
            try:
                conn, addr = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break

            logger.debug("Accepted connection from %s:%d", *addr)
            t = threading.Thread(
                target=self._handle_client,
                args=(conn, addr),
                daemon=True,
            )
            t.start()

    def stop(self) -> None:
        """Signal the server to stop and close the listening socket."""
        self._stop_event.set()
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass

    def answer(self, pattern: str) -> str:
        """Run one search and return the result line (no newline)."""
        try:
            result = self._filter.filter(pattern)
        except FilterError as exc:
            logger.warning("Search for %r failed: %s", pattern, exc)
            return f"ERROR: {exc}"
        return format_result(result, escape=self._escape_output)

    def _reply(self, conn: socket.socket, *lines: str) -> bool:
        """Send lines to the client; return False if the peer is gone."""
        payload = b"".join(encode_line(line) for line in lines)
        try:
            conn.sendall(payload)
        except OSError:
            return False
        return True

    def _handle_client(
        self, conn: socket.socket, addr: tuple[str, int]
    ) -> None:
        """Serve a persistent client session.

        Reads newline-delimited patterns in a loop and answers each one
        without closing the connection.

        Args:
            conn: Connected client socket.
            addr: The client address tuple (ip, port).
        """
        client_ip, _client_port = addr

        # Short timeout so the thread notices stop(); idle clients stay.
        conn.settimeout(1.0)

        buf = b""

        try:
            while not self._stop_event.is_set():
                try:
                    chunk = conn.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    break

                if not chunk:
                    break

                buf += chunk

                while b"\n" in buf:
                    raw_line, buf = buf.split(b"\n", 1)
                    raw_line = raw_line.rstrip(b"\r").rstrip(b"\x00")

                    if len(raw_line) > MAX_PAYLOAD_BYTES:
                        ok = self._reply(
                            conn,
                            "DEBUG: error=ValueError: pattern too long",
                            "ERROR: pattern too long",
                        )
                        if not ok:
                            return
                        continue

                    pattern = raw_line.decode(ENCODING, ENCODING_ERRORS)

                    start = time.perf_counter()
                    line = self.answer(pattern)
                    elapsed_ms = (time.perf_counter() - start) * 1000.0

                    debug = (
                        f"DEBUG: ip={client_ip} "
                        f"pattern={pattern!r} "
                        f"elapsed_ms={elapsed_ms:.3f}"
                    )
                    if not self._reply(conn, debug, line):
                        return
        finally:
            try:
                conn.close()
            except OSError:
                pass
            logger.debug("Closed connection from %s", client_ip)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed command-line arguments.
    """
    p = ArgumentParser(description="TCP Pattern Search Server")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=44445)
    p.add_argument(
        "--config",
        required=True,
        help="Path to configuration file (must include csvpath=...)",
    )
    return p.parse_args()


def main() -> None:
    """Run the TCP server entry point."""
    args = parse_args()

    try:
        app_cfg = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"Config error: {exc}") from exc

    setup_logging(app_cfg.log_level)

    record_filter = RecordFilter.from_config(app_cfg)

    if not app_cfg.reread_on_query:
        try:
            record_filter.warmup()
        except FilterError as exc:
            raise SystemExit(f"Filter error: {exc}") from exc

    cfg = ServerConfig(host=args.host, port=args.port)
    server = PatternSearchServer(
        cfg,
        record_filter=record_filter,
        escape_output=app_cfg.escape_output,
    )

    try:
        server.start()
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        raise SystemExit(f"Fatal error: {exc}") from exc
    finally:
        server.stop()


if __name__ == "__main__":
    main()
