#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Local operations.

Operations evaluated independently at each cell, on one raster or between
two. Between rasters of different shapes the result covers their
intersection. All operations are elementwise:

    1 1  +  2 2  ==  3 3
    1 1     2 2      3 3

If an operation you need isn't here, build it with `combine` (or
`transform` for a single raster).
"""
from bisect import bisect_right
from typing import Any, Callable, Mapping
import numpy as np

from mapalgebra.core.logging_config import get_module_logger
from mapalgebra.core.raster import Raster, combine, transform, apply_cellwise, infer_dtype

# Initialize logger
logger = get_module_logger(__name__)

# numpy kinds with a total order that numpy's ufuncs handle natively
_ORDERED_KINDS = "biuf"


def classify(default: Any, breaks: Mapping[Any, Any], raster: Raster) -> Raster:
    """
    Reclassify each cell by the breakpoint at or below its value.

    Called *LocalClassification* in GIS and Cartographic Modeling. For a
    cell value ``v`` the greatest key ``k <= v`` of ``breaks`` is found
    and ``breaks[k]`` emitted; if every key is greater than ``v`` the cell
    gets ``default``.

    Parameters
    ----------
    default : Any
        Value given to cells lower than the lowest break.
    breaks : Mapping
        Breakpoint -> class value. Keys must be mutually comparable and
        comparable with the cell values.
    raster : Raster
        Source raster.

    Returns
    -------
    Raster
        A delayed raster of class values.

    Examples
    --------
    >>> classify("none", {1: "a", 10: "b"}, r)   # 0 -> "none", 5 -> "a", 10 -> "b"
    """
    keys = sorted(breaks)
    classes = [breaks[k] for k in keys]

    # Every output is default or one of the classes, so the dtype is known up front
    dtype = infer_dtype([default] + classes)

    def lookup(value):
        i = bisect_right(keys, value) - 1
        return default if i < 0 else classes[i]

    logger.debug(f"Classifying raster of shape {raster.shape} into {len(keys)} breaks")
    return transform(lookup, raster, dtype=dtype)


def _ordered(ufunc: Callable, builtin: Callable) -> Callable:
    def op(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        if a.dtype.kind in _ORDERED_KINDS and b.dtype.kind in _ORDERED_KINDS:
            return ufunc(a, b)
        return apply_cellwise(builtin, [a, b], object, a.shape)
    return op


def lmin(first: Raster, second: Raster) -> Raster:
    """Finds the minimum value at each index between two rasters."""
    return combine(_ordered(np.minimum, min), first, second, vectorized=True)


def lmax(first: Raster, second: Raster) -> Raster:
    """Finds the maximum value at each index between two rasters."""
    return combine(_ordered(np.maximum, max), first, second, vectorized=True)


def add(first: Raster, second: Raster) -> Raster:
    return combine(np.add, first, second, vectorized=True)


def subtract(first: Raster, second: Raster) -> Raster:
    return combine(np.subtract, first, second, vectorized=True)


def multiply(first: Raster, second: Raster) -> Raster:
    return combine(np.multiply, first, second, vectorized=True)


def divide(first: Raster, second: Raster) -> Raster:
    """
    Divide two rasters cell by cell.

    Nothing is intercepted: dividing by zero gives whatever numpy gives for
    the dtype (``inf`` or ``nan`` with a RuntimeWarning for numbers).
    """
    return combine(np.true_divide, first, second, vectorized=True)


def signum(raster: Raster) -> Raster:
    """-1, 0 or 1 for each cell, following its sign."""
    return transform(np.sign, raster, vectorized=True)
