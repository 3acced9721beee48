#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Multi-raster local reducers.

Each reducer summarizes a non-empty collection of equally-shaped rasters cell
by cell. None of them can be written as a binary operation folded over the
collection without changing the result; consider the average, where

    ((a + b) / 2 + c) / 2  !=  (a + b + c) / 3

so they work on the whole collection at once. `collect` gathers, per cell,
the values of every input in input order, and each reducer then reduces
those lists.
"""
from typing import Any, Callable, Dict, Iterable, List
import numpy as np

from mapalgebra.core.errors import PreconditionViolation
from mapalgebra.core.logging_config import get_module_logger
from mapalgebra.core.raster import Raster, combine, transform

# Initialize logger
logger = get_module_logger(__name__)


def _check_collection(rasters: Iterable[Raster], name: str) -> List[Raster]:
    rasters = list(rasters)
    if not rasters:
        logger.error(f"{name} called with no rasters")
        raise PreconditionViolation(f"{name} needs at least one raster")
    shape = rasters[0].shape
    for i, raster in enumerate(rasters[1:], start=1):
        if raster.shape != shape:
            logger.error(f"{name}: raster {i} has shape {raster.shape}, expected {shape}")
            raise PreconditionViolation(
                f"{name} needs rasters of identical shape, got {shape} and {raster.shape} (raster {i})"
            )
    logger.debug(f"{name} over {len(rasters)} rasters of shape {shape}")
    return rasters


def _append(values: List[Any], value: Any) -> List[Any]:
    return values + [value]


def collect(rasters: Iterable[Raster]) -> Raster:
    """
    Gather the values of every raster at each cell.

    Parameters
    ----------
    rasters : iterable of Raster
        Non-empty collection of rasters with identical shapes.

    Returns
    -------
    Raster
        A delayed raster whose cells are lists, holding the input values at
        that cell in input order.

    Raises
    ------
    PreconditionViolation
        If the collection is empty or the shapes differ.
    """
    return _gather(_check_collection(rasters, "collect"))


def _gather(rasters: List[Raster]) -> Raster:
    acc = transform(lambda value: [value], rasters[0], dtype=object)
    for raster in rasters[1:]:
        acc = combine(_append, acc, raster, dtype=object)
    return acc


def _reduce(rasters: Iterable[Raster], name: str, func: Callable[[List[Any]], Any],
            dtype: Any = None) -> Raster:
    return transform(func, _gather(_check_collection(rasters, name)), dtype=dtype)


def mean(rasters: Iterable[Raster]) -> Raster:
    """
    Averages the values per-index of all rasters in a collection.

    The rasters are summed first and the sum divided once by their count,
    so rounding matches a plain two-pass average.
    """
    rasters = _check_collection(rasters, "mean")
    total = rasters[0]
    for raster in rasters[1:]:
        total = combine(np.add, total, raster, vectorized=True)
    count = len(rasters)
    return transform(lambda block: np.true_divide(block, count), total, vectorized=True)


def _variance(values: List[Any]) -> Any:
    count = len(values)
    centre = sum(values) / count
    return sum((v - centre) ** 2 for v in values) / count


def variance(rasters: Iterable[Raster]) -> Raster:
    """
    Population variance of the values per-index of all rasters.

    Requires a numeric cell type; a single raster gives zero everywhere.
    """
    return _reduce(rasters, "variance", _variance)


def _nub_count(values: List[Any]) -> int:
    # Equality only, so unhashable and unorderable values are fine
    seen: List[Any] = []
    for value in values:
        if not any(value == other for other in seen):
            seen.append(value)
    return len(seen)


def variety(rasters: Iterable[Raster]) -> Raster:
    """The count of unique values at each shared index."""
    return _reduce(rasters, "variety", _nub_count, dtype=np.int64)


def _counts(values: List[Any]) -> Dict[Any, int]:
    # dicts keep insertion order, which decides ties below
    counts: Dict[Any, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def _most_frequent(values: List[Any]) -> Any:
    items = iter(_counts(values).items())
    best, best_count = next(items)
    for value, count in items:
        if count > best_count:
            best, best_count = value, count
    return best


def _least_frequent(values: List[Any]) -> Any:
    items = iter(_counts(values).items())
    best, best_count = next(items)
    for value, count in items:
        if count < best_count:
            best, best_count = value, count
    return best


def majority(rasters: Iterable[Raster]) -> Raster:
    """
    The most frequently appearing value at each shared index.

    Ties go to the value that appeared first in the collection.
    """
    return _reduce(rasters, "majority", _most_frequent)


def minority(rasters: Iterable[Raster]) -> Raster:
    """
    The least frequently appearing value at each shared index.

    Ties go to the value that appeared first in the collection.
    """
    return _reduce(rasters, "minority", _least_frequent)
