"""Human-readable rendering of JSON-RPC results, keyed by command name.

Each known command maps its raw result to one of a small set of result shapes.
Commands without a registered shape, and results that do not look the way a
shape expects, fall back to JSON pass-through so new node responses never
break the client.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .model import chain_beacon_checkpoint
from .request import GET_BLOCK, GET_BLOCK_CHAIN, GET_OUTPUT, INVENTORY, SYNC_STATUS


def to_json(result: Any) -> str:
    return json.dumps(result, indent=2)


@dataclass
class PassThrough:
    value: Any

    def render(self) -> str:
        return to_json(self.value)


@dataclass
class BlockChain:
    entries: List[Tuple[int, str]]

    def render(self) -> str:
        return "\n".join(
            f"Block for epoch #{epoch} had digest {digest}" for epoch, digest in self.entries
        )


@dataclass
class SyncStatus:
    checkpoint: int
    hash_prev_block: Optional[str]
    current_epoch: Optional[int]
    node_state: Optional[str]

    def render(self) -> str:
        lines = [f"Chain beacon: epoch #{self.checkpoint} with hash {self.hash_prev_block or 'unknown'}"]
        if self.current_epoch is not None:
            lines.append(f"Current epoch: #{self.current_epoch}")
        if self.node_state is not None:
            lines.append(f"Node state: {self.node_state}")
        return "\n".join(lines)


@dataclass
class InventoryAck:
    accepted: bool

    def render(self) -> str:
        if self.accepted:
            return "Inventory item accepted by the node"
        return "Inventory item rejected by the node"


def _block_chain(result: Any) -> BlockChain | PassThrough:
    if not isinstance(result, list):
        return PassThrough(result)
    entries: List[Tuple[int, str]] = []
    for entry in result:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            return PassThrough(result)
        epoch, digest = entry
        if isinstance(epoch, bool) or not isinstance(epoch, int) or not isinstance(digest, str):
            return PassThrough(result)
        entries.append((epoch, digest))
    return BlockChain(entries)


def _sync_status(result: Any) -> SyncStatus | PassThrough:
    checkpoint = chain_beacon_checkpoint(result)
    if checkpoint is None:
        return PassThrough(result)
    beacon = result["chain_beacon"]
    hash_prev_block = beacon.get("hashPrevBlock", beacon.get("hash_prev_block"))
    node_state = result.get("node_state")
    return SyncStatus(
        checkpoint=checkpoint,
        hash_prev_block=hash_prev_block if isinstance(hash_prev_block, str) else None,
        current_epoch=result.get("current_epoch"),
        node_state=str(node_state) if node_state is not None else None,
    )


def _inventory(result: Any) -> InventoryAck | PassThrough:
    if isinstance(result, bool):
        return InventoryAck(result)
    return PassThrough(result)


SHAPES: Dict[str, Callable[[Any], Any]] = {
    GET_BLOCK_CHAIN: _block_chain,
    GET_BLOCK: PassThrough,
    GET_OUTPUT: PassThrough,
    SYNC_STATUS: _sync_status,
    INVENTORY: _inventory,
}


def interpret(command: str, result: Any):
    """Return the result shape registered for ``command``."""

    shape = SHAPES.get(command, PassThrough)
    return shape(result)


def render(command: str, result: Any, *, as_json: bool = False) -> str:
    if as_json:
        return to_json(result)
    return interpret(command, result).render()
