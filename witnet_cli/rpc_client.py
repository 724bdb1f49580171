"""JSON-RPC client for a Witnet node.

One client owns one connection, one :class:`~witnet_cli.request.RequestBuilder`
and one :class:`~witnet_cli.correlator.ResponseCorrelator` for the lifetime of
a CLI invocation. Requests are strictly sequential: each call sends a request
and blocks until its reply has been read.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import NodeConfig
from .correlator import ResponseCorrelator
from .epochs import needs_height, resolve, validate_limit
from .errors import ProtocolError, RemoteError
from .model import OutputPointer, chain_beacon_checkpoint
from .request import (
    GET_BLOCK,
    GET_BLOCK_CHAIN,
    GET_OUTPUT,
    INVENTORY,
    SYNC_STATUS,
    RequestBuilder,
)
from .transport import Connection, connect

logger = logging.getLogger(__name__)


class WitnetRPCClient:
    """Typed JSON-RPC client over a single line-oriented connection."""

    def __init__(self, connection: Connection, builder: Optional[RequestBuilder] = None) -> None:
        self.connection = connection
        self.builder = builder or RequestBuilder()
        self.correlator = ResponseCorrelator(connection)

    @classmethod
    def from_config(cls, config: NodeConfig) -> "WitnetRPCClient":
        """Connect to the node described by ``config``."""

        return cls(connect(config.address, timeout=config.connect_timeout))

    def call(self, command: str, args: Sequence[Any] = ()) -> Any:
        """Send ``command`` and return the result of its reply.

        Raises :class:`RemoteError` with the node's code and message when the
        reply carries a JSON-RPC error object.
        """

        request = self.builder.build(command, args)
        logger.debug("RPC call %s id=%d params=%s", request.method, request.id, request.params)
        self.correlator.register(request.id)
        try:
            self.connection.send(request.to_line())
        except Exception:
            self.correlator.pending_id = None
            raise
        response = self.correlator.await_response(request.id)
        if response.error is not None:
            raise RemoteError(response.error.code, response.error.message, response.error.data)
        return response.result

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "WitnetRPCClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Convenience wrappers -------------------------------------------------

    def sync_status(self) -> Dict[str, Any]:
        return self.call(SYNC_STATUS)

    def get_chain_height(self) -> int:
        """Return the epoch of the chain tip as reported by ``syncStatus``."""

        status = self.sync_status()
        height = chain_beacon_checkpoint(status)
        if height is None:
            raise ProtocolError(f"{SYNC_STATUS} reply has no chain_beacon.checkpoint: {status!r}")
        return height

    def get_block_chain(self, epoch: Optional[int] = None, limit: Optional[int] = None) -> List[Any]:
        """List ``(epoch, digest)`` pairs, resolving a negative epoch against the chain tip."""

        validate_limit(limit)
        height = None
        if needs_height(epoch):
            height = self.get_chain_height()
            logger.debug("Resolving epoch %d against chain height %d", epoch, height)
        epoch_range = resolve(epoch, limit, height)
        return self.call(GET_BLOCK_CHAIN, [epoch_range])

    def get_block(self, block_hash: str) -> Dict[str, Any]:
        return self.call(GET_BLOCK, [block_hash])

    def get_output(self, pointer: OutputPointer | str) -> Dict[str, Any]:
        return self.call(GET_OUTPUT, [pointer])

    def inventory(self, item: Dict[str, Any]) -> Any:
        return self.call(INVENTORY, [item])
