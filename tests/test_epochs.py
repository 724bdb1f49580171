import pytest

from witnet_cli.epochs import EpochRange, needs_height, resolve
from witnet_cli.errors import InvalidArguments, LocalValidationError


@pytest.mark.parametrize("epoch", [0, 1, 46924, 10**9])
def test_non_negative_epoch_passes_limit_through_unset(epoch):
    assert resolve(epoch, None, 46925) == EpochRange(start=epoch, count=None)
    assert resolve(epoch, None, 46925).to_params() == [epoch]


@pytest.mark.parametrize(
    "k, height, expected_start",
    [
        (1, 46925, 46925),
        (3, 46925, 46923),
        (5, 2, 0),
        (46926, 46925, 0),
        (1, 0, 0),
    ],
)
def test_negative_epoch_means_last_k_epochs(k, height, expected_start):
    assert resolve(-k, None, height) == EpochRange(start=expected_start, count=k)


@pytest.mark.parametrize("epoch", [-10, -1, 0, 7])
def test_explicit_limit_overrides_implied_count(epoch):
    resolved = resolve(epoch, 4, 100)
    assert resolved.count == 4


def test_negative_epoch_with_limit_keeps_start():
    assert resolve(-10, 2, 100) == EpochRange(start=91, count=2)
    assert resolve(-10, 2, 100).to_params() == [91, 2]


def test_resolution_is_pure():
    first = resolve(-3, None, 50)
    second = resolve(-3, None, 50)
    assert first == second
    assert resolve(-3, None, 50) is not first


@pytest.mark.parametrize("limit", [0, -1, -100])
def test_non_positive_limit_is_rejected(limit):
    with pytest.raises(InvalidArguments) as excinfo:
        resolve(5, limit, 100)
    assert isinstance(excinfo.value, LocalValidationError)


def test_negative_epoch_requires_height():
    with pytest.raises(InvalidArguments):
        resolve(-1, None, None)


def test_unset_epoch_is_left_to_the_node():
    assert resolve(None, None).to_params() == []
    assert resolve(None, 10).to_params() == [0, 10]


def test_needs_height_only_for_negative_epochs():
    assert needs_height(-1)
    assert not needs_height(0)
    assert not needs_height(None)
