#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception hierarchy for map algebra.

Only violated input contracts are raised here. Arithmetic anomalies
(division by zero, overflow) are left to numpy and propagate as whatever
values or warnings it natively produces.
"""


class MapAlgebraError(Exception):
    """Base error for map algebra operations."""


class PreconditionViolation(MapAlgebraError, ValueError):
    """An operation was called with inputs that break its contract.

    Raised for empty reducer collections, mismatched extents, buffers whose
    length does not fit the requested shape, and unknown strategy names.
    """


class ProjectionMismatchError(PreconditionViolation):
    """Two rasters or points tagged with different projections were combined.

    Attributes:
        left: Projection of the first operand
        right: Projection of the second operand
    """

    def __init__(self, left, right) -> None:
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot combine data in projection {left!r} with data in projection {right!r}"
        )
