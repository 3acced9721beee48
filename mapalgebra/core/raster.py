#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The `Raster` type.

A `Raster` is an immutable rectangular grid of values that usually describes
some area on the Earth. It need not hold numbers: any Python object can be a
cell value. A raster is in one of two states:

- *delayed*: only its shape and a function producing any rectangular block of
  cells are known. Building, transforming and combining delayed rasters costs
  nothing proportional to their size.
- *materialized*: every cell has been evaluated into a read-only numpy array.

`materialize` converts the first state into the second, either sequentially
or by evaluating independent chunks of the grid in parallel with joblib, and
`Raster.lazy` goes back the other way. Folds, equality and reductions force
evaluation.

If two rasters of different shapes are combined, the result covers their
intersection. Whether they actually overlap on the Earth is left to the
caller; only their projection tags are checked.
"""
import functools
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union
import numpy as np

from mapalgebra.core.config import CHUNK_SIZE, DEFAULT_STRATEGY, PERFORMANCE_CONFIG
from mapalgebra.core.errors import PreconditionViolation, ProjectionMismatchError
from mapalgebra.core.logging_config import get_module_logger
from mapalgebra.core.projection import Projection
from mapalgebra.utils.utils import chunk_iterator, parallel_apply, timer

# Initialize logger
logger = get_module_logger(__name__)

Shape = Tuple[int, int]
Block = Callable[[slice, slice], np.ndarray]


class Strategy(Enum):
    """How a raster is evaluated when it is materialized."""

    SEQ = "seq"
    PAR = "par"

    @classmethod
    def parse(cls, value: Union["Strategy", str, None]) -> "Strategy":
        """Resolve a strategy name; None gives the configured default."""
        if value is None:
            value = DEFAULT_STRATEGY
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise PreconditionViolation(
                f"Unknown evaluation strategy {value!r}, expected one of {[s.value for s in cls]}"
            ) from None

    def join(self, other: "Strategy") -> "Strategy":
        # Parallelism wins when two rasters are combined
        if Strategy.PAR in (self, other):
            return Strategy.PAR
        return Strategy.SEQ


def _check_shape(shape: Shape) -> Shape:
    try:
        rows, cols = (int(n) for n in shape)
    except (TypeError, ValueError):
        raise PreconditionViolation(f"Raster shape must be a (rows, cols) pair, got {shape!r}") from None
    if rows < 0 or cols < 0:
        raise PreconditionViolation(f"Raster shape cannot be negative, got {shape!r}")
    return rows, cols


def _extent(rows: slice, cols: slice) -> Shape:
    return rows.stop - rows.start, cols.stop - cols.start


def _join_projection(left: Optional[Projection], right: Optional[Projection]) -> Optional[Projection]:
    if left is None:
        return right
    if right is None or left == right:
        return left
    logger.error(f"Refusing to combine rasters in {left!r} and {right!r}")
    raise ProjectionMismatchError(left, right)


def infer_dtype(values: List[Any]) -> Any:
    """
    Smallest numpy dtype holding every value unchanged.

    Falls back to ``object`` for containers, for values numpy cannot stack,
    and for mixes of numbers and strings, which numpy would turn into strings.
    """
    if any(isinstance(v, (list, tuple, set, frozenset, dict)) for v in values):
        return object
    try:
        arr = np.asarray(values)
    except (ValueError, TypeError):
        return object
    if arr.ndim != 1:
        return object
    if arr.dtype.kind in "US" and not all(isinstance(v, (str, bytes)) for v in values):
        return object
    return arr.dtype


def apply_cellwise(func: Callable, blocks: List[np.ndarray], dtype: Any, shape: Shape) -> np.ndarray:
    """Apply a scalar function to every cell of equally-shaped blocks.

    Without a ``dtype`` it is inferred from all results together, never from
    the first cell alone.
    """
    if shape[0] == 0 or shape[1] == 0:
        return np.empty(shape, dtype=dtype if dtype is not None else object)
    # frompyfunc keeps whatever objects func returns, including lists and sets
    out = np.frompyfunc(func, len(blocks), 1)(*blocks)
    if dtype is None:
        dtype = infer_dtype(out.ravel().tolist())
    return np.asarray(out, dtype=dtype)


def _assemble(blocks: List[np.ndarray], width: int) -> np.ndarray:
    if len(blocks) == 1:
        return blocks[0]
    # Chunks inferred separately may disagree, e.g. strings in one and ints in another
    if len({b.dtype for b in blocks}) > 1 and not all(b.dtype.kind in "biufc" for b in blocks):
        blocks = [b.astype(object) for b in blocks]
    return np.block([blocks[i:i + width] for i in range(0, len(blocks), width)])


class Raster:
    """
    An immutable, lazily-evaluated 2D grid of values.

    Rasters should be built with `constant`, `from_function`, `from_array`,
    `from_vector`, or derived from others with `transform` and `combine`
    (and the arithmetic operators, which are elementwise).

    Parameters
    ----------
    shape : tuple
        (rows, cols) of the grid.
    block : callable, optional
        Function of (row_slice, col_slice) returning that block of cells as
        a 2D array. Required unless ``array`` is given.
    array : np.ndarray, optional
        Already evaluated cells. The raster is then materialized.
    strategy : Strategy or str, optional
        Evaluation strategy honored by `materialize`, by default the
        configured ``DEFAULT_STRATEGY``.
    projection : Projection, optional
        Informational projection tag. Untagged rasters combine with anything.
    """

    __hash__ = None

    def __init__(self,
                 shape: Shape,
                 block: Optional[Block] = None,
                 array: Optional[np.ndarray] = None,
                 strategy: Union[Strategy, str, None] = None,
                 projection: Optional[Projection] = None):
        if block is None and array is None:
            raise PreconditionViolation("A raster needs either a block function or an array")
        self._shape = _check_shape(shape)
        self._block = block
        self._array = array
        self.strategy = Strategy.parse(strategy)
        self.projection = projection

    # Queries, all O(1)

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def rows(self) -> int:
        return self._shape[0]

    @property
    def cols(self) -> int:
        return self._shape[1]

    @property
    def size(self) -> int:
        """Number of cells. Never evaluates the raster."""
        return self._shape[0] * self._shape[1]

    def __len__(self) -> int:
        return self.size

    @property
    def is_materialized(self) -> bool:
        return self._array is not None

    # Evaluation

    def _evaluate(self, rows: slice, cols: slice) -> np.ndarray:
        if self._array is not None:
            return self._array[rows, cols]
        return self._block(rows, cols)

    def strict(self, strategy: Union[Strategy, str, None] = None) -> "Raster":
        """Evaluate every cell. See `materialize`."""
        return materialize(self, strategy)

    def lazy(self) -> "Raster":
        """Return a delayed view of this raster."""
        if self._array is None:
            return self
        array = self._array
        return Raster(self._shape, block=lambda rows, cols: array[rows, cols],
                      strategy=self.strategy, projection=self.projection)

    def to_numpy(self) -> np.ndarray:
        """
        Return the cells as a read-only numpy array, evaluating if needed.

        Returns
        -------
        np.ndarray
            Array of shape ``self.shape``. Copy it before modifying.
        """
        return materialize(self)._array

    def __getitem__(self, index: Tuple[int, int]) -> Any:
        """Value of a single cell. Only that cell is evaluated."""
        row, col = index
        row, col = int(row), int(col)
        if row < 0:
            row += self.rows
        if col < 0:
            col += self.cols
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Cell ({index[0]}, {index[1]}) outside raster of shape {self.shape}")
        if self._array is not None:
            return self._array[row, col]
        return self._block(slice(row, row + 1), slice(col, col + 1))[0, 0]

    def __iter__(self):
        return iter(self.to_numpy().flat)

    # Folds

    def fold(self, op: Callable[[Any, Any], Any], identity: Any) -> Any:
        """
        Reduce all cells with an associative, commutative operator.

        Parameters
        ----------
        op : callable
            Binary operator. Cells are visited in row-major order, but
            callers should not rely on it.
        identity : Any
            Identity element of ``op``; the result for an empty raster.

        Returns
        -------
        Any
            The reduced value.
        """
        return functools.reduce(op, self.to_numpy().flat, identity)

    def sum(self) -> Any:
        """Sum of every cell. Evaluates the raster."""
        array = self.to_numpy()
        if array.size == 0:
            return 0
        return array.sum()

    # Transformations

    def map(self, func: Callable, dtype: Any = None, vectorized: bool = False) -> "Raster":
        return transform(func, self, dtype=dtype, vectorized=vectorized)

    def zip_with(self, func: Callable, other: "Raster", dtype: Any = None,
                 vectorized: bool = False) -> "Raster":
        return combine(func, self, other, dtype=dtype, vectorized=vectorized)

    # Elementwise arithmetic. Division by zero and overflow behave as numpy does.

    def _operand(self, other: Any) -> "Raster":
        if isinstance(other, Raster):
            return other
        return constant(self._shape, other, strategy=self.strategy, projection=self.projection)

    def __add__(self, other):
        return combine(np.add, self, self._operand(other), vectorized=True)

    def __radd__(self, other):
        return combine(np.add, self._operand(other), self, vectorized=True)

    def __sub__(self, other):
        return combine(np.subtract, self, self._operand(other), vectorized=True)

    def __rsub__(self, other):
        return combine(np.subtract, self._operand(other), self, vectorized=True)

    def __mul__(self, other):
        return combine(np.multiply, self, self._operand(other), vectorized=True)

    def __rmul__(self, other):
        return combine(np.multiply, self._operand(other), self, vectorized=True)

    def __truediv__(self, other):
        return combine(np.true_divide, self, self._operand(other), vectorized=True)

    def __rtruediv__(self, other):
        return combine(np.true_divide, self._operand(other), self, vectorized=True)

    def __neg__(self):
        return transform(np.negative, self, vectorized=True)

    def __abs__(self):
        return transform(np.absolute, self, vectorized=True)

    def __eq__(self, other: object) -> bool:
        """Same shape and same value in every cell. Evaluates both rasters."""
        if not isinstance(other, Raster):
            return NotImplemented
        if self._shape != other._shape:
            return False
        return bool(np.array_equal(self.to_numpy(), other.to_numpy()))

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self) -> str:
        state = "materialized" if self.is_materialized else "delayed"
        return (f"Raster(shape={self._shape}, strategy={self.strategy.value}, "
                f"projection={self.projection!r}, {state})")


def constant(shape: Shape, value: Any,
             strategy: Union[Strategy, str, None] = None,
             projection: Optional[Projection] = None,
             dtype: Any = None) -> Raster:
    """
    Create a `Raster` of some size which has the same value everywhere.

    O(1): no memory proportional to the shape is allocated until the
    raster is evaluated.

    Parameters
    ----------
    shape : tuple
        (rows, cols) of the raster.
    value : Any
        The value of every cell.
    strategy : Strategy or str, optional
        Evaluation strategy, by default the configured one.
    projection : Projection, optional
        Projection tag.
    dtype : optional
        numpy dtype of evaluated blocks. Use ``object`` for values such as
        sets or lists that numpy would otherwise unpack.

    Returns
    -------
    Raster
        A delayed raster.
    """
    def block(rows: slice, cols: slice) -> np.ndarray:
        extent = _extent(rows, cols)
        if dtype is object:
            out = np.empty(extent, dtype=object)
            out.fill(value)
            return out
        return np.full(extent, value, dtype=dtype)

    return Raster(shape, block=block, strategy=strategy, projection=projection)


def from_function(shape: Shape, func: Callable[[int, int], Any],
                  strategy: Union[Strategy, str, None] = None,
                  projection: Optional[Projection] = None,
                  dtype: Any = None) -> Raster:
    """
    Create a delayed `Raster` whose cell at (row, col) is ``func(row, col)``.

    Parameters
    ----------
    shape : tuple
        (rows, cols) of the raster.
    func : callable
        Function of the integer row and column indices.
    strategy, projection, dtype : optional
        As for `constant`.

    Returns
    -------
    Raster
        A delayed raster.
    """
    def block(rows: slice, cols: slice) -> np.ndarray:
        row_idx, col_idx = np.meshgrid(np.arange(rows.start, rows.stop),
                                       np.arange(cols.start, cols.stop), indexing="ij")
        return apply_cellwise(func, [row_idx, col_idx], dtype, _extent(rows, cols))

    return Raster(shape, block=block, strategy=strategy, projection=projection)


def from_array(array: Any,
               strategy: Union[Strategy, str, None] = None,
               projection: Optional[Projection] = None) -> Raster:
    """
    Create a materialized `Raster` from a 2D array.

    The array is copied, so later changes to it do not affect the raster.

    Raises
    ------
    PreconditionViolation
        If the array is not two-dimensional.
    """
    arr = np.array(array, copy=True)
    if arr.ndim != 2:
        raise PreconditionViolation(f"Expected a 2D array, got {arr.ndim} dimensions")
    arr.flags.writeable = False
    return Raster(arr.shape, array=arr, strategy=strategy, projection=projection)


def from_vector(shape: Shape, values: Any,
                strategy: Union[Strategy, str, None] = None,
                projection: Optional[Projection] = None,
                dtype: Any = None) -> Raster:
    """
    Create a materialized `Raster` from a flat, row-major sequence of cells.

    Parameters
    ----------
    shape : tuple
        (rows, cols) of the raster.
    values : sequence
        Exactly rows * cols cell values.
    strategy, projection, dtype : optional
        As for `constant`.

    Returns
    -------
    Raster
        A materialized raster.

    Raises
    ------
    PreconditionViolation
        If the number of values does not match the shape.
    """
    rows, cols = _check_shape(shape)
    if dtype is object:
        items = list(values)
        flat = np.empty(len(items), dtype=object)
        for i, item in enumerate(items):
            flat[i] = item
    else:
        flat = np.asarray(values, dtype=dtype)
    if flat.ndim != 1 or flat.size != rows * cols:
        raise PreconditionViolation(
            f"Cannot lay out {flat.size} values as a {rows}x{cols} raster"
        )
    return from_array(flat.reshape(rows, cols), strategy=strategy, projection=projection)


def transform(func: Callable, raster: Raster, dtype: Any = None, vectorized: bool = False) -> Raster:
    """
    Apply a function to every cell of a raster.

    Called *LocalCalculation* in GIS and Cartographic Modeling. Nothing is
    evaluated until the result is materialized; exceptions raised by
    ``func`` surface then, unmodified.

    Parameters
    ----------
    func : callable
        Function of one cell value. With ``vectorized=True`` it receives a
        whole 2D block instead and must return a block of the same shape
        (numpy ufuncs qualify).
    raster : Raster
        Source raster.
    dtype : optional
        dtype of the result; ``object`` keeps arbitrary Python results.
        By default numpy infers it from the values ``func`` returns.
    vectorized : bool, optional
        Whether ``func`` operates on blocks, by default False.

    Returns
    -------
    Raster
        A delayed raster of the same shape and tags.
    """
    def block(rows: slice, cols: slice) -> np.ndarray:
        values = raster._evaluate(rows, cols)
        if vectorized:
            return np.asarray(func(values))
        return apply_cellwise(func, [values], dtype, values.shape)

    return Raster(raster.shape, block=block, strategy=raster.strategy, projection=raster.projection)


def combine(func: Callable, first: Raster, second: Raster,
            dtype: Any = None, vectorized: bool = False) -> Raster:
    """
    Combine two rasters, cell by cell, with a binary function.

    If the shapes of the two rasters differ, the result covers their
    intersection: each axis is the smaller of the two. Rasters that do not
    overlap at all give an empty raster.

    Parameters
    ----------
    func : callable
        Function of the first and second cell values, or of two blocks
        when ``vectorized`` is True.
    first, second : Raster
        Source rasters.
    dtype, vectorized : optional
        As for `transform`.

    Returns
    -------
    Raster
        A delayed raster.

    Raises
    ------
    ProjectionMismatchError
        If both rasters carry projection tags and the tags differ.
    """
    projection = _join_projection(first.projection, second.projection)
    shape = (min(first.rows, second.rows), min(first.cols, second.cols))

    def block(rows: slice, cols: slice) -> np.ndarray:
        a = first._evaluate(rows, cols)
        b = second._evaluate(rows, cols)
        if vectorized:
            return np.asarray(func(a, b))
        return apply_cellwise(func, [a, b], dtype, a.shape)

    return Raster(shape, block=block, strategy=first.strategy.join(second.strategy),
                  projection=projection)


zip_with = combine


@timer
def materialize(raster: Raster, strategy: Union[Strategy, str, None] = None) -> Raster:
    """
    Evaluate every cell of a raster.

    Parameters
    ----------
    raster : Raster
        The raster to force. Already materialized rasters are returned as is.
    strategy : Strategy or str, optional
        ``"seq"`` evaluates the whole grid in one pass. ``"par"`` partitions
        it into chunks of about ``CHUNK_SIZE`` cells a side and evaluates them
        with joblib. Defaults to the raster's own strategy.

    Returns
    -------
    Raster
        A materialized raster with the same shape and tags.
    """
    if raster.is_materialized:
        return raster

    strategy = Strategy.parse(strategy if strategy is not None else raster.strategy)
    rows, cols = raster.shape

    if strategy is Strategy.PAR and not PERFORMANCE_CONFIG.get("use_parallel", True):
        logger.warning("Parallel evaluation disabled in PERFORMANCE_CONFIG, evaluating sequentially")
        strategy = Strategy.SEQ

    if strategy is Strategy.SEQ or rows == 0 or cols == 0:
        logger.debug(f"Materializing {rows}x{cols} raster sequentially")
        array = raster._evaluate(slice(0, rows), slice(0, cols))
    else:
        grid = chunk_iterator(raster.shape, CHUNK_SIZE)
        chunks = [pair for band in grid for pair in band]
        logger.debug(f"Materializing {rows}x{cols} raster in parallel over {len(chunks)} chunks")
        blocks = parallel_apply(lambda pair: raster._evaluate(*pair), chunks)
        array = _assemble(blocks, len(grid[0]))

    array = np.asarray(array)
    if array.shape != raster.shape:
        raise PreconditionViolation(
            f"Raster evaluated to shape {array.shape}, expected {raster.shape}"
        )
    array.flags.writeable = False
    return Raster(raster.shape, array=array, strategy=raster.strategy, projection=raster.projection)
