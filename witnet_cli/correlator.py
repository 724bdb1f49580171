"""Binding of reply lines to the request currently awaiting an answer.

Command mode keeps exactly one request outstanding, so arrival order and id
order coincide. Every line read while a request is pending belongs to it: a
line that is not a JSON-RPC response, a reply with ``id: null`` and a reply
carrying some other id all fail that request with :class:`ProtocolError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .errors import ProtocolError
from .model import Response, RpcErrorObject
from .transport import Connection

logger = logging.getLogger(__name__)


def _preview(line: str, limit: int = 120) -> str:
    if len(line) <= limit:
        return line
    return line[:limit] + "…"


def _parse_error_object(raw: Any, *, request_id: int, line: str) -> RpcErrorObject:
    if not isinstance(raw, dict):
        raise ProtocolError(
            f"reply to request {request_id} has a malformed error member: {_preview(line)}",
            request_id=request_id,
            line=line,
        )
    code = raw.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        raise ProtocolError(
            f"reply to request {request_id} has a non-integer error code: {_preview(line)}",
            request_id=request_id,
            line=line,
        )
    return RpcErrorObject(code=code, message=str(raw.get("message", "")), data=raw.get("data"))


def parse_response(line: str, request_id: int) -> Response:
    """Parse ``line`` as the reply to ``request_id``."""

    try:
        payload = json.loads(line)
    except ValueError as exc:
        raise ProtocolError(
            f"reply to request {request_id} is not valid JSON: {_preview(line)}",
            request_id=request_id,
            line=line,
        ) from exc

    if not isinstance(payload, dict) or ("result" not in payload and "error" not in payload):
        raise ProtocolError(
            f"reply to request {request_id} is not a JSON-RPC response: {_preview(line)}",
            request_id=request_id,
            line=line,
        )

    reply_id = payload.get("id")
    if reply_id is None:
        error = payload.get("error")
        if isinstance(error, dict):
            detail = f"{error.get('code')}: {error.get('message')}"
            code = error.get("code") if isinstance(error.get("code"), int) else None
        else:
            detail = _preview(line)
            code = None
        raise ProtocolError(
            f"node could not correlate request {request_id} (id: null, {detail})",
            request_id=request_id,
            line=line,
            code=code,
        )
    # bool is an int subclass and 1.0 == 1, so compare types as well.
    if type(reply_id) is not int or reply_id != request_id:
        raise ProtocolError(
            f"expected reply to request {request_id} but got id {reply_id!r}",
            request_id=request_id,
            line=line,
        )

    if "error" in payload and payload["error"] is not None:
        return Response(
            id=reply_id,
            error=_parse_error_object(payload["error"], request_id=request_id, line=line),
        )
    if "result" not in payload:
        raise ProtocolError(
            f"reply to request {request_id} has neither a result nor an error: {_preview(line)}",
            request_id=request_id,
            line=line,
        )
    return Response(id=reply_id, result=payload["result"], has_result=True)


class ResponseCorrelator:
    """Reads reply lines from a connection on behalf of one pending request."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self.pending_id: int | None = None

    def register(self, request_id: int) -> None:
        if self.pending_id is not None:
            raise RuntimeError(
                f"request {self.pending_id} is still awaiting its reply; "
                "only one request may be outstanding"
            )
        self.pending_id = request_id

    def await_response(self, pending_id: int) -> Response:
        """Block until the reply for ``pending_id`` arrives.

        :class:`~witnet_cli.errors.TransportClosed` propagates when the
        connection ends first.
        """

        if self.pending_id is None:
            self.register(pending_id)
        elif self.pending_id != pending_id:
            raise RuntimeError(f"request {pending_id} is not the outstanding request")

        try:
            while True:
                line = self.connection.receive_line()
                if not line.strip():
                    continue
                return parse_response(line, pending_id)
        finally:
            self.pending_id = None
