"""
Moss submission protocol.

One TCP connection per submission:

    moss <id>, directory <0|1>, X <0|1>, maxmatches <n>, show <n>, language <lang>
    <ack>
    file <index> <lang> <size> <name> + raw bytes   (base files at 0, then 1..N)
    query 0 <comment>
    <result url>
    end
"""
import logging
import socket
from typing import Callable
from urllib.parse import urlparse

from .cancellation import CancelSignal, is_cancelled
from .errors import LanguageNotSupportedError, MalformedResponseError, MossConnectionError
from .models import SubmissionConfig
from .sources import CodeSource, SourceSet

logger = logging.getLogger(__name__)

ACK_SIZE = 1024
UNSUPPORTED_ACK = b"yes"
REJECTED_ACK = b"no"
BASE_FILE_INDEX = 0

DEFAULT_TIMEOUT = 60.0


def format_directives(config: SubmissionConfig) -> list[bytes]:
    """Configuration lines in the order the service expects them."""
    lines = [
        f"moss {config.client_id}\n",
        f"directory {int(config.directory_mode)}\n",
        f"X {int(config.experimental)}\n",
        f"maxmatches {config.max_matches}\n",
        f"show {config.show_count}\n",
        f"language {config.language}\n",
    ]
    return [line.encode("ascii") for line in lines]


def format_file_header(index: int, language: str, size: int, display_name: str) -> bytes:
    return f"file {index} {language} {size} {display_name}\n".encode("utf-8")


def is_language_rejected(ack: bytes) -> bool:
    """
    Interpret the acknowledgment read after the language directive.

    The literal bytes ``yes`` (nothing else in the buffer) mean the language
    is not supported. A ``no`` answer is treated the same way.
    """
    return ack == UNSUPPORTED_ACK or ack.rstrip() == REJECTED_ACK


def parse_result_url(text: str) -> str:
    """
    Validate the result line sent back by the service.

    Raises:
        MalformedResponseError: if the text is not an absolute http(s) URL
    """
    try:
        parsed = urlparse(text)
    except ValueError as e:
        raise MalformedResponseError(text) from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise MalformedResponseError(text)
    return text


class SubmissionClient:
    """Uploads source sets to Moss and returns the result URL."""

    def __init__(
        self,
        timeout: float | None = DEFAULT_TIMEOUT,
        connect: Callable[..., socket.socket] = socket.create_connection,
    ):
        """
        Args:
            timeout: Socket timeout in seconds (None blocks forever)
            connect: Connection factory with the signature of socket.create_connection
        """
        self.timeout = timeout
        self._connect = connect

    def submit(
        self,
        config: SubmissionConfig,
        base: SourceSet,
        code: SourceSet,
        cancel: CancelSignal | None = None,
    ) -> str | None:
        """
        Run one submission.

        Args:
            config: Submission settings and endpoint
            base: Reference code, excluded from matching (all uploaded at index 0)
            code: Student files, uploaded at indices 1..N in insertion order
            cancel: Polled before each file upload

        Returns:
            Result URL, or None if cancelled before the query was sent

        Raises:
            MossConnectionError: connect, read or write failure
            LanguageNotSupportedError: the service rejected config.language
            MalformedResponseError: the result line is not a URL
        """
        address = config.endpoint
        logger.info(f"Connecting to Moss at {address}")
        try:
            conn = self._connect((address.host, address.port), self.timeout)
        except OSError as e:
            raise MossConnectionError(f"Unable to connect to {address}: {e}") from e

        try:
            return self._run_session(conn, config, base, code, cancel)
        finally:
            self._close(conn)

    def _run_session(
        self,
        conn: socket.socket,
        config: SubmissionConfig,
        base: SourceSet,
        code: SourceSet,
        cancel: CancelSignal | None,
    ) -> str | None:
        for line in format_directives(config):
            self._send(conn, line)

        try:
            ack = conn.recv(ACK_SIZE)
        except OSError as e:
            raise MossConnectionError(f"Unable to read language acknowledgment: {e}") from e
        if not ack:
            raise MossConnectionError("Connection closed before language acknowledgment")
        if is_language_rejected(ack):
            raise LanguageNotSupportedError(f"Language {config.language!r} is not supported")

        for source in base:
            if is_cancelled(cancel):
                logger.info("Submission cancelled during base file upload")
                return None
            self._upload(conn, source, config.language, BASE_FILE_INDEX)

        for index, source in enumerate(code, start=1):
            if is_cancelled(cancel):
                logger.info(f"Submission cancelled before file {index} of {len(code)}")
                return None
            self._upload(conn, source, config.language, index)

        self._send(conn, f"query 0 {config.comment}\n".encode("utf-8"))
        logger.info("Files uploaded, waiting for Moss result")
        try:
            with conn.makefile("rb") as reader:
                line = reader.readline()
        except OSError as e:
            raise MossConnectionError(f"Unable to read Moss result: {e}") from e

        url = parse_result_url(line.decode("ascii", errors="replace").strip())
        logger.info(f"Moss result available at {url}")
        return url

    def _upload(self, conn: socket.socket, source: CodeSource, language: str, index: int) -> None:
        # Local read errors (missing or unreadable file) propagate unchanged
        data = source.read()
        logger.debug(f"Uploading {source.display_name} as file {index} ({len(data)} bytes)")
        self._send(conn, format_file_header(index, language, len(data), source.display_name))
        self._send(conn, data)

    def _send(self, conn: socket.socket, data: bytes) -> None:
        try:
            conn.sendall(data)
        except OSError as e:
            raise MossConnectionError(f"Moss session failed: {e}") from e

    def _close(self, conn: socket.socket) -> None:
        try:
            conn.sendall(b"end\n")
        except OSError as e:
            logger.debug(f"Could not send end directive: {e}")
        finally:
            conn.close()
