"""Command-line interface for querying a Witnet node over JSON-RPC.

Each subcommand validates its arguments locally, opens a single connection to
the node, issues one request (two for ``getBlockChain`` with a negative
epoch) and prints the rendered result on stdout. Diagnostics go to the log on
stderr, and the process exit code tells the failure category apart.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Sequence

from .config import load_node_config
from .epochs import validate_limit
from .errors import (
    EXIT_INTERRUPTED,
    EXIT_OK,
    CLIError,
    ConnectError,
    InvalidArguments,
    ProtocolError,
    RemoteError,
    exit_code_for,
    format_rpc_hint,
)
from .model import OutputPointer, parse_hash
from .raw import run_raw_session
from .render import render
from .request import (
    GET_BLOCK,
    GET_BLOCK_CHAIN,
    GET_OUTPUT,
    INVENTORY,
    SYNC_STATUS,
    validate_arguments,
)
from .rpc_client import WitnetRPCClient
from .transport import connect

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("witnet_cli").setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="witnet-cli", description="Witnet node JSON-RPC client")
    parser.add_argument(
        "--address",
        default=None,
        help="Node JSON-RPC address as host:port or an http(s):// URL (env WITNET_NODE_ADDRESS)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config file (default: ~/.witnet-cli.yaml)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of the human-readable format",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "raw", help="Send lines from stdin to the node unmodified and print each reply"
    )

    chain_parser = subparsers.add_parser(GET_BLOCK_CHAIN, help="List (epoch, block hash) pairs")
    chain_parser.add_argument(
        "epoch",
        nargs="?",
        type=int,
        default=None,
        help="First epoch to list; a negative value -N lists the last N epochs",
    )
    chain_parser.add_argument(
        "limit",
        nargs="?",
        type=int,
        default=None,
        help="Maximum number of blocks to list (default: node-defined, or N for -N)",
    )

    block_parser = subparsers.add_parser(GET_BLOCK, help="Fetch a block by its hash")
    block_parser.add_argument("hash", help="Block hash (64 hex characters)")

    output_parser = subparsers.add_parser(GET_OUTPUT, help="Fetch a transaction output")
    output_parser.add_argument("pointer", help="Output pointer as <transaction id>:<index>")

    subparsers.add_parser(SYNC_STATUS, help="Show the node's chain beacon and sync state")

    inventory_parser = subparsers.add_parser(
        INVENTORY, help="Submit a block or transaction to the node"
    )
    inventory_parser.add_argument(
        "item",
        help='Inventory item as JSON ({"block": ...} or {"transaction": ...}) or @path to a JSON file',
    )
    return parser


def _open_client(args: argparse.Namespace) -> WitnetRPCClient:
    config = load_node_config(config_path=args.config, overrides={"address": args.address})
    return WitnetRPCClient.from_config(config)


def _emit(command: str, result: Any, args: argparse.Namespace) -> int:
    text = render(command, result, as_json=args.json)
    if text:
        print(text)
    return EXIT_OK


def _load_inventory_item(raw: str) -> Any:
    if raw.startswith("@"):
        path = Path(raw[1:]).expanduser()
        try:
            raw = path.read_text()
        except OSError as exc:
            raise InvalidArguments(f"cannot read inventory item from {path}: {exc}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidArguments(f"inventory item is not valid JSON: {exc}") from exc


def cmd_raw(args: argparse.Namespace) -> int:
    config = load_node_config(config_path=args.config, overrides={"address": args.address})
    with connect(config.address, timeout=config.connect_timeout) as connection:
        return run_raw_session(connection)


def cmd_get_block_chain(args: argparse.Namespace) -> int:
    validate_limit(args.limit)
    with _open_client(args) as client:
        result = client.get_block_chain(args.epoch, args.limit)
    return _emit(GET_BLOCK_CHAIN, result, args)


def cmd_get_block(args: argparse.Namespace) -> int:
    block_hash = parse_hash(args.hash, what="block hash")
    with _open_client(args) as client:
        result = client.get_block(block_hash)
    return _emit(GET_BLOCK, result, args)


def cmd_get_output(args: argparse.Namespace) -> int:
    pointer = OutputPointer.parse(args.pointer)
    with _open_client(args) as client:
        result = client.get_output(pointer)
    return _emit(GET_OUTPUT, result, args)


def cmd_sync_status(args: argparse.Namespace) -> int:
    with _open_client(args) as client:
        result = client.sync_status()
    return _emit(SYNC_STATUS, result, args)


def cmd_inventory(args: argparse.Namespace) -> int:
    item = _load_inventory_item(args.item)
    validate_arguments(INVENTORY, [item])
    with _open_client(args) as client:
        result = client.inventory(item)
    return _emit(INVENTORY, result, args)


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "raw": cmd_raw,
    GET_BLOCK_CHAIN: cmd_get_block_chain,
    GET_BLOCK: cmd_get_block,
    GET_OUTPUT: cmd_get_output,
    SYNC_STATUS: cmd_sync_status,
    INVENTORY: cmd_inventory,
}


def report_failure(exc: CLIError) -> int:
    """Log ``exc`` and return the exit code for its failure category."""

    exc_info = logger.isEnabledFor(logging.DEBUG)
    if isinstance(exc, ConnectError):
        logger.error("Connection to %s failed: %s", exc.address, exc.strerror, exc_info=exc_info)
    elif isinstance(exc, RemoteError):
        logger.error("Node returned error %d: %s", exc.code, exc.message, exc_info=exc_info)
    elif isinstance(exc, ProtocolError):
        logger.error("Protocol error: %s", exc, exc_info=exc_info)
    else:
        logger.error("%s", exc, exc_info=exc_info)

    if isinstance(exc, (RemoteError, ProtocolError)):
        hint = format_rpc_hint(exc)
        if hint:
            logger.error("Hint: %s", hint)
    return exit_code_for(exc)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return COMMANDS[args.command](args)
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except CLIError as exc:
        return report_failure(exc)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
