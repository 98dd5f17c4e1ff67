"""Generic group-and-fold used by every chart aggregation."""

from typing import Callable, Hashable, Iterable, Optional, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
A = TypeVar("A")


def group_reduce(
    items: Iterable[T],
    key: Callable[[T], Optional[K]],
    reduce: Callable[[A, T], A],
    initial: Callable[[], A],
    predicate: Optional[Callable[[T], bool]] = None,
    keys: Optional[Iterable[K]] = None,
) -> dict[K, A]:
    """
    Fold items into one accumulator per key.

    predicate: skip items for which it is False.
    key: returning None skips the item (e.g. an unresolved join).
    keys: pre-seed these keys (in order) and ignore items whose key is not among them;
          used for fixed month windows where empty months must still appear.
    Result keeps first-seen (or seeded) key order.
    """
    seeded = keys is not None
    groups: dict[K, A] = {k: initial() for k in keys} if seeded else {}
    for item in items:
        if predicate is not None and not predicate(item):
            continue
        k = key(item)
        if k is None:
            continue
        if k not in groups:
            if seeded:
                continue
            groups[k] = initial()
        groups[k] = reduce(groups[k], item)
    return groups


def count_by(items: Iterable[T], key: Callable[[T], Optional[K]], **kwargs) -> dict[K, int]:
    return group_reduce(items, key, lambda acc, _: acc + 1, int, **kwargs)


def sum_by(
    items: Iterable[T],
    key: Callable[[T], Optional[K]],
    value: Callable[[T], float],
    **kwargs,
) -> dict[K, float]:
    return group_reduce(items, key, lambda acc, item: acc + value(item), float, **kwargs)


def collect_by(
    items: Iterable[T],
    key: Callable[[T], Optional[K]],
    value: Callable[[T], Optional[float]],
    **kwargs,
) -> dict[K, list[float]]:
    """Group values into lists; None values are skipped."""

    def _append(acc: list[float], item: T) -> list[float]:
        v = value(item)
        if v is not None:
            acc.append(v)
        return acc

    return group_reduce(items, key, _append, list, **kwargs)
