"""Construction of JSON-RPC requests for the commands the CLI knows about."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Sequence

from .epochs import EpochRange, validate_limit
from .errors import InvalidArguments
from .model import OutputPointer, Request, parse_hash

logger = logging.getLogger(__name__)

GET_BLOCK_CHAIN = "getBlockChain"
GET_BLOCK = "getBlock"
GET_OUTPUT = "getOutput"
SYNC_STATUS = "syncStatus"
INVENTORY = "inventory"

INVENTORY_KINDS = ("block", "transaction")


def _expect_count(command: str, args: Sequence[Any], count: int) -> None:
    if len(args) != count:
        noun = "argument" if count == 1 else "arguments"
        raise InvalidArguments(f"{command} takes exactly {count} {noun}, got {len(args)}")


def _block_chain_params(args: Sequence[Any]) -> List[Any]:
    if len(args) == 1 and isinstance(args[0], EpochRange):
        validate_limit(args[0].count)
        return args[0].to_params()
    if len(args) > 2:
        raise InvalidArguments(f"{GET_BLOCK_CHAIN} takes at most 2 arguments, got {len(args)}")
    params: List[Any] = []
    for name, value in zip(("epoch", "limit"), args):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArguments(
                f"{GET_BLOCK_CHAIN} {name} must be a resolved non-negative integer, got {value!r}"
            )
        if name == "limit":
            validate_limit(value)
        params.append(value)
    return params


def _block_params(args: Sequence[Any]) -> List[Any]:
    _expect_count(GET_BLOCK, args, 1)
    if not isinstance(args[0], str):
        raise InvalidArguments(f"{GET_BLOCK} expects a block hash string")
    return [parse_hash(args[0], what="block hash")]


def _output_params(args: Sequence[Any]) -> List[Any]:
    _expect_count(GET_OUTPUT, args, 1)
    pointer = args[0]
    if isinstance(pointer, str):
        pointer = OutputPointer.parse(pointer)
    if not isinstance(pointer, OutputPointer):
        raise InvalidArguments(f"{GET_OUTPUT} expects an output pointer")
    return [str(pointer)]


def _sync_status_params(args: Sequence[Any]) -> List[Any]:
    _expect_count(SYNC_STATUS, args, 0)
    return []


def _inventory_params(args: Sequence[Any]) -> List[Any]:
    _expect_count(INVENTORY, args, 1)
    item = args[0]
    if not isinstance(item, dict) or len(item) != 1:
        raise InvalidArguments(
            f"{INVENTORY} expects a JSON object with a single 'block' or 'transaction' key"
        )
    kind = next(iter(item))
    if kind not in INVENTORY_KINDS:
        raise InvalidArguments(
            f"unknown inventory item type {kind!r}; expected one of {', '.join(INVENTORY_KINDS)}"
        )
    return [item]


PARAM_BUILDERS: Dict[str, Callable[[Sequence[Any]], List[Any]]] = {
    GET_BLOCK_CHAIN: _block_chain_params,
    GET_BLOCK: _block_params,
    GET_OUTPUT: _output_params,
    SYNC_STATUS: _sync_status_params,
    INVENTORY: _inventory_params,
}


def validate_arguments(command: str, args: Sequence[Any]) -> List[Any]:
    """Return the wire params for ``command`` or raise :class:`InvalidArguments`."""

    try:
        builder = PARAM_BUILDERS[command]
    except KeyError:
        raise InvalidArguments(f"unknown command: {command}") from None
    return builder(args)


class RequestBuilder:
    """Builds requests with ids unique to one CLI invocation.

    Ids start at 1 and increase by one per built request, so an id is never
    reused while its reply is outstanding.
    """

    def __init__(self, first_id: int = 1) -> None:
        self._next_id = first_id

    @property
    def next_id(self) -> int:
        return self._next_id

    def build(self, command: str, args: Sequence[Any] = ()) -> Request:
        params = validate_arguments(command, args)
        request = Request(id=self._next_id, method=command, params=params)
        self._next_id += 1
        logger.debug("Built request %d %s params=%s", request.id, command, params)
        return request
