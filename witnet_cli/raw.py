"""Raw interactive mode: a transparent pipe between user input and the node.

Every input line is sent unmodified and exactly one reply line is printed
before the next input line is read. Nothing is validated client-side; a line
that is not JSON comes back as the node's parse-error reply and the session
carries on.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Iterator, Optional, TextIO

from .errors import EXIT_OK, TransportError
from .transport import Connection

logger = logging.getLogger(__name__)

PROMPT = "> "


def input_lines(stream: TextIO, *, prompt: Optional[str] = None, output: Optional[TextIO] = None) -> Iterator[str]:
    """Yield lines from ``stream`` without their terminators.

    ``prompt`` is written to ``output`` before each read, which is only useful
    when a person is typing.
    """

    output = output or sys.stdout
    while True:
        if prompt:
            output.write(prompt)
            output.flush()
        line = stream.readline()
        if not line:
            return
        yield line.rstrip("\r\n")


def byte_preserving(stream: TextIO) -> TextIO:
    """Make ``stream`` decode invalid UTF-8 as lone surrogates instead of failing."""

    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="surrogateescape")
    return stream


def reply_lines(connection: Connection) -> Iterator[str]:
    while True:
        yield connection.receive_line()


class RawMultiplexer:
    """Drives the send-one, print-one loop over a single connection."""

    def __init__(self, connection: Connection, output: Optional[TextIO] = None) -> None:
        self.connection = connection
        self.output = output or sys.stdout
        self.exchanged = 0

    def run(self, lines: Iterable[str]) -> int:
        replies = reply_lines(self.connection)
        try:
            for line in lines:
                self.connection.send(line)
                reply = next(replies)
                print(reply, file=self.output, flush=True)
                self.exchanged += 1
        except TransportError as exc:
            logger.error(
                "Raw session with %s ended after %d exchanges: %s",
                self.connection.address,
                self.exchanged,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            return exc.exit_code
        logger.info("End of input after %d exchanges", self.exchanged)
        return EXIT_OK


def run_raw_session(
    connection: Connection,
    stream: Optional[TextIO] = None,
    output: Optional[TextIO] = None,
) -> int:
    """Run raw mode over ``stream`` (stdin by default), prompting on a terminal."""

    stream = byte_preserving(stream or sys.stdin)
    output = output or sys.stdout
    prompt = PROMPT if stream.isatty() else None
    return RawMultiplexer(connection, output).run(input_lines(stream, prompt=prompt, output=output))
