import pytest

from witnet_cli.epochs import EpochRange
from witnet_cli.errors import InvalidArguments
from witnet_cli.model import OutputPointer
from witnet_cli.request import RequestBuilder, validate_arguments

BLOCK_HASH = "e7" * 32


def test_ids_start_at_one_and_increase():
    builder = RequestBuilder()
    ids = [builder.build("syncStatus").id for _ in range(3)]
    assert ids == [1, 2, 3]


def test_builders_do_not_share_counters():
    first = RequestBuilder()
    second = RequestBuilder()
    first.build("syncStatus")
    assert second.build("syncStatus").id == 1


def test_failed_validation_does_not_consume_an_id():
    builder = RequestBuilder()
    with pytest.raises(InvalidArguments):
        builder.build("getBlock", [])
    assert builder.build("getBlock", [BLOCK_HASH]).id == 1


@pytest.mark.parametrize(
    "command, args, params",
    [
        ("getBlockChain", [], []),
        ("getBlockChain", [EpochRange(46925, 1)], [46925, 1]),
        ("getBlockChain", [EpochRange(10, None)], [10]),
        ("getBlockChain", [3, 4], [3, 4]),
        ("getBlock", [BLOCK_HASH.upper()], [BLOCK_HASH]),
        ("getOutput", [f"{'ab' * 32}:2"], [f"{'ab' * 32}:2"]),
        ("getOutput", [OutputPointer(b"\x01" * 32, 5)], [f"{'01' * 32}:5"]),
        ("syncStatus", [], []),
        ("inventory", [{"block": {}}], [{"block": {}}]),
    ],
)
def test_params_per_command(command, args, params):
    request = RequestBuilder().build(command, args)
    assert request.method == command
    assert request.params == params


@pytest.mark.parametrize(
    "command, args",
    [
        ("getBlock", []),
        ("getBlock", [BLOCK_HASH, BLOCK_HASH]),
        ("getBlock", ["nothex"]),
        ("getOutput", []),
        ("getOutput", [f"{'ab' * 31}:0"]),
        ("getBlockChain", [-1]),
        ("getBlockChain", [1, 2, 3]),
        ("getBlockChain", [5, 0]),
        ("getBlockChain", [EpochRange(start=5, count=0)]),
        ("syncStatus", ["extra"]),
        ("inventory", [{"header": 0}]),
        ("inventory", [{"block": {}, "transaction": {}}]),
        ("inventory", [[1, 2]]),
        ("getTransaction", []),
    ],
)
def test_invalid_shapes_fail_locally(command, args):
    with pytest.raises(InvalidArguments):
        validate_arguments(command, args)
