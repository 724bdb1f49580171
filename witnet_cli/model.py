"""Data model for JSON-RPC traffic exchanged with a Witnet node.

Requests and responses mirror the JSON-RPC 2.0 objects carried one per line on
the wire. :class:`OutputPointer` is the client-side representation of the
``<transaction id>:<output index>`` strings accepted by ``getOutput``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import InvalidArguments

JSONRPC_VERSION = "2.0"
HASH_HEX_LENGTH = 64

_HASH_RE = re.compile(r"[0-9a-fA-F]{64}")
_INDEX_RE = re.compile(r"[0-9]+")


@dataclass
class Request:
    """A JSON-RPC request as sent by the client."""

    id: int
    method: str
    params: List[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }

    def to_line(self) -> str:
        """Serialize to a single newline-free JSON line."""

        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass
class RpcErrorObject:
    code: int
    message: str
    data: Any = None


@dataclass
class Response:
    """A JSON-RPC response correlated to a request.

    Exactly one of ``result`` and ``error`` is meaningful; ``has_result``
    distinguishes a ``null`` result from an absent one.
    """

    id: Optional[int]
    result: Any = None
    error: Optional[RpcErrorObject] = None
    has_result: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def chain_beacon_checkpoint(result: Any) -> Optional[int]:
    """Extract ``chain_beacon.checkpoint`` (the chain tip epoch) from a ``syncStatus`` result."""

    if not isinstance(result, dict):
        return None
    beacon = result.get("chain_beacon")
    if not isinstance(beacon, dict):
        return None
    checkpoint = beacon.get("checkpoint")
    if isinstance(checkpoint, bool) or not isinstance(checkpoint, int):
        return None
    return checkpoint


def parse_hash(raw: str, *, what: str = "hash") -> str:
    """Validate a 32-byte hash in hex and return it lowercased."""

    candidate = raw.strip()
    if not _HASH_RE.fullmatch(candidate):
        raise InvalidArguments(
            f"{what} must be exactly {HASH_HEX_LENGTH} hex characters (32 bytes), got {raw!r}"
        )
    return candidate.lower()


@dataclass(frozen=True)
class OutputPointer:
    """Reference to a transaction output: ``transaction_id`` plus ``output_index``."""

    transaction_id: bytes
    output_index: int

    def __post_init__(self) -> None:
        if len(self.transaction_id) != 32:
            raise InvalidArguments("transaction id must be exactly 32 bytes")
        if self.output_index < 0:
            raise InvalidArguments("output index must be non-negative")

    @classmethod
    def parse(cls, raw: str) -> "OutputPointer":
        """Parse ``<64 hex chars>:<index>``."""

        tx_hex, sep, index_text = raw.strip().partition(":")
        if not sep:
            raise InvalidArguments(
                f"output pointer must look like <transaction id>:<index>, got {raw!r}"
            )
        if not _HASH_RE.fullmatch(tx_hex):
            raise InvalidArguments(
                f"transaction id must be exactly {HASH_HEX_LENGTH} hex characters, got {tx_hex!r}"
            )
        transaction_id = bytes.fromhex(tx_hex)
        if not _INDEX_RE.fullmatch(index_text):
            raise InvalidArguments(
                f"output index must be a non-negative integer, got {index_text!r}"
            )
        return cls(transaction_id=transaction_id, output_index=int(index_text))

    def __str__(self) -> str:
        return f"{self.transaction_id.hex()}:{self.output_index}"


def parse_output_pointer(raw: str) -> OutputPointer:
    return OutputPointer.parse(raw)
