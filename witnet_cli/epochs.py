"""Resolution of the ``getBlockChain`` epoch/limit arguments.

A non-negative epoch is the first epoch to list. A negative epoch ``-k`` means
"the last ``k`` epochs up to the chain tip", which needs the current chain
height; when no limit is given the magnitude doubles as the count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from .errors import InvalidArguments


@dataclass(frozen=True)
class EpochRange:
    """Resolved range: ``start`` and ``count`` are ``None`` when left to the node."""

    start: Optional[int] = None
    count: Optional[int] = None

    def to_params(self) -> List[Any]:
        if self.start is None:
            return []
        if self.count is None:
            return [self.start]
        return [self.start, self.count]


def validate_limit(limit: Optional[int]) -> None:
    if limit is not None and limit <= 0:
        raise InvalidArguments(f"limit must be a positive integer, got {limit}")


def needs_height(epoch: Optional[int]) -> bool:
    """Whether resolving ``epoch`` requires the current chain height."""

    return epoch is not None and epoch < 0


def resolve(
    epoch: Optional[int],
    limit: Optional[int],
    current_height: Optional[int] = None,
) -> EpochRange:
    """Turn user supplied ``epoch``/``limit`` into a concrete range."""

    validate_limit(limit)

    if epoch is None:
        return EpochRange(start=0 if limit is not None else None, count=limit)

    if epoch >= 0:
        return EpochRange(start=epoch, count=limit)

    if current_height is None:
        raise InvalidArguments("a negative epoch needs the current chain height")
    if current_height < 0:
        raise InvalidArguments(f"chain height must be non-negative, got {current_height}")

    start = max(0, current_height + epoch + 1)
    count = limit if limit is not None else -epoch
    return EpochRange(start=start, count=count)
