#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the raster type: construction, laziness, combination,
folds and evaluation strategies.
"""

import operator
import unittest
from unittest import mock

import numpy as np

from mapalgebra.core.errors import PreconditionViolation, ProjectionMismatchError
from mapalgebra.core.projection import LATLNG, WEB_MERCATOR, WebMercator
from mapalgebra.core.raster import (
    Raster, Strategy, constant, from_function, from_array, from_vector,
    transform, combine, materialize
)


class TestRasterCreation(unittest.TestCase):
    """Test raster builders."""

    def setUp(self):
        """Set up test fixtures."""
        self.small = constant((256, 256), 5)

    def test_constant_size(self):
        self.assertEqual(len(self.small), 65536)
        self.assertEqual(self.small.size, 65536)
        self.assertEqual(self.small.shape, (256, 256))

    def test_constant_big_is_never_evaluated(self):
        big = constant((65536, 65536), 5, strategy="par")
        self.assertEqual(len(big), 4294967296)
        self.assertFalse(big.is_materialized)
        self.assertIs(big.strategy, Strategy.PAR)
        self.assertEqual(big[65535, 65535], 5)

    def test_default_strategy(self):
        self.assertIs(self.small.strategy, Strategy.SEQ)

    def test_unknown_strategy(self):
        with self.assertRaises(PreconditionViolation):
            constant((2, 2), 0, strategy="quantum")

    def test_negative_shape(self):
        with self.assertRaises(PreconditionViolation):
            constant((-1, 2), 0)

    def test_from_function(self):
        r = from_function((2, 3), lambda row, col: row * 10 + col)
        self.assertEqual(r.to_numpy().tolist(), [[0, 1, 2], [10, 11, 12]])

    def test_from_vector_is_row_major(self):
        r = from_vector((2, 3), range(6))
        self.assertTrue(r.is_materialized)
        self.assertEqual(r.to_numpy().tolist(), [[0, 1, 2], [3, 4, 5]])

    def test_from_vector_size_mismatch(self):
        with self.assertRaises(PreconditionViolation):
            from_vector((2, 2), [1, 2, 3])

    def test_from_vector_objects(self):
        r = from_vector((1, 2), [[1], [2, 3]], dtype=object)
        self.assertEqual(r[0, 1], [2, 3])

    def test_from_array_copies(self):
        arr = np.zeros((2, 2))
        r = from_array(arr)
        arr[0, 0] = 9
        self.assertEqual(r[0, 0], 0)

    def test_from_array_rejects_other_dimensions(self):
        with self.assertRaises(PreconditionViolation):
            from_array(np.zeros(4))

    def test_raster_needs_cells(self):
        with self.assertRaises(PreconditionViolation):
            Raster((2, 2))


class TestLaziness(unittest.TestCase):
    """Test that work is deferred until a raster is forced."""

    def test_faults_surface_on_evaluation(self):
        r = transform(lambda v: 1 // 0, constant((3, 3), 1))
        with self.assertRaises(ZeroDivisionError):
            r.strict()

    def test_single_cell_evaluates_one_cell(self):
        calls = []

        def cell(row, col):
            calls.append((row, col))
            return row * 1000 + col

        r = from_function((1000, 1000), cell, dtype=np.int64)
        self.assertEqual(r[3, 4], 3004)
        self.assertEqual(r[-1, -1], 999999)
        self.assertEqual(calls, [(3, 4), (999, 999)])

    def test_cell_matches_materialized_when_types_differ(self):
        r = transform(lambda v: 0 if v == 0 else v / 2, from_vector((1, 2), [0, 3]))
        self.assertEqual(r[0, 1], 1.5)
        self.assertEqual(r.strict()[0, 1], 1.5)
        self.assertEqual(r.strict()[0, 0], 0)
        for i, j in [(0, 0), (0, 1)]:
            self.assertEqual(r[i, j], r.strict()[i, j])

    def test_index_out_of_range(self):
        with self.assertRaises(IndexError):
            constant((2, 2), 0)[2, 0]

    def test_materialize_is_read_only(self):
        r = from_function((3, 3), lambda row, col: row + col).strict()
        self.assertTrue(r.is_materialized)
        with self.assertRaises(ValueError):
            r.to_numpy()[0, 0] = 7

    def test_materialize_keeps_tags(self):
        r = constant((2, 2), 1.0, strategy="par", projection=LATLNG)
        forced = materialize(r, "seq")
        self.assertIs(forced.strategy, Strategy.PAR)
        self.assertEqual(forced.projection, LATLNG)
        self.assertIs(materialize(forced), forced)

    def test_lazy_round_trip(self):
        r = from_function((4, 5), lambda row, col: row - col)
        delayed = r.strict().lazy()
        self.assertFalse(delayed.is_materialized)
        self.assertEqual(delayed, r)
        self.assertIs(r.lazy(), r)


class TestCombine(unittest.TestCase):
    """Test combining two rasters."""

    def test_intersection_shape(self):
        a = constant((3, 5), 1)
        b = constant((4, 2), 2)
        c = combine(operator.add, a, b)
        self.assertEqual(c.shape, (3, 2))
        self.assertEqual(c.to_numpy().tolist(), [[3, 3]] * 3)

    def test_no_overlap_is_empty(self):
        a = constant((0, 5), 1)
        b = constant((4, 4), 2)
        c = combine(np.add, a, b, vectorized=True)
        self.assertEqual(c.shape, (0, 4))
        self.assertEqual(c.size, 0)
        self.assertEqual(c.to_numpy().shape, (0, 4))

    def test_cellwise_function(self):
        a = from_vector((1, 2), [1, 2])
        b = from_vector((1, 2), [3, 4])
        c = combine(lambda x, y: f"{x}{y}", a, b)
        self.assertEqual(c.to_numpy().tolist(), [["13", "24"]])

    def test_strategies_join(self):
        a = constant((2, 2), 1, strategy="seq")
        b = constant((2, 2), 1, strategy="par")
        self.assertIs((a + b).strategy, Strategy.PAR)
        self.assertIs((a + a).strategy, Strategy.SEQ)

    def test_projection_mismatch(self):
        a = constant((2, 2), 1.0, projection=LATLNG)
        b = constant((2, 2), 1.0, projection=WEB_MERCATOR)
        with self.assertRaises(ProjectionMismatchError):
            combine(np.add, a, b, vectorized=True)

    def test_web_mercator_radius_mismatch(self):
        a = constant((2, 2), 1.0, projection=WebMercator(1.0))
        b = constant((2, 2), 1.0, projection=WEB_MERCATOR)
        with self.assertRaises(ProjectionMismatchError):
            combine(np.add, a, b, vectorized=True)
        same = constant((2, 2), 1.0, projection=WebMercator())
        self.assertEqual((same + b).projection, WEB_MERCATOR)

    def test_untagged_combines_with_tagged(self):
        a = constant((2, 2), 1.0, projection=LATLNG)
        b = constant((2, 2), 1.0)
        self.assertEqual((a + b).projection, LATLNG)
        self.assertEqual((b + a).projection, LATLNG)


class TestTypeclassOps(unittest.TestCase):
    """Test equality and arithmetic operators."""

    def setUp(self):
        """Set up test fixtures."""
        self.one = constant((7, 7), 1)
        self.two = constant((7, 7), 2)
        self.small = constant((256, 256), 5)

    def test_equality(self):
        self.assertTrue(self.small == self.small)
        self.assertEqual(self.one, constant((7, 7), 1))
        self.assertNotEqual(self.one, self.two)
        self.assertNotEqual(self.one, constant((7, 8), 1))
        self.assertFalse(self.one == 1)

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(self.one)

    def test_add(self):
        self.assertEqual((self.one + self.one).strict(), self.two)

    def test_scalar_operands(self):
        self.assertEqual(2 * self.one, self.two)
        self.assertEqual(self.one + 1, self.two)
        self.assertEqual(3 - self.two, self.one)
        self.assertEqual(self.two / 2, self.one)
        self.assertEqual(2 / self.two, self.one)

    def test_sub_mul_div(self):
        self.assertEqual(self.two - self.one, self.one)
        self.assertEqual(self.two * self.two, constant((7, 7), 4))
        self.assertEqual(self.two / self.two, constant((7, 7), 1.0))

    def test_unary(self):
        self.assertEqual(-self.one, constant((7, 7), -1))
        self.assertEqual(abs(-self.two), self.two)

    def test_division_by_zero_is_not_intercepted(self):
        with np.errstate(divide="ignore", invalid="ignore"):
            result = (self.one / constant((7, 7), 0)).to_numpy()
            nan = (constant((2, 2), 0.0) / constant((2, 2), 0.0)).to_numpy()
        self.assertTrue(np.isinf(result).all())
        self.assertTrue(np.isnan(nan).all())


class TestFolds(unittest.TestCase):
    """Test operations that reduce a whole raster."""

    def setUp(self):
        """Set up test fixtures."""
        self.small = constant((256, 256), 5)

    def test_sum(self):
        self.assertEqual(self.small.sum(), 327680)

    def test_sum_of_transform(self):
        self.assertEqual(transform(lambda v: v, self.small).sum(), 327680)
        self.assertEqual((self.small + self.small).sum(), 327680 * 2)

    def test_sum_empty(self):
        self.assertEqual(constant((0, 3), 5).sum(), 0)

    def test_fold(self):
        r = from_vector((2, 2), [1, 2, 3, 4])
        self.assertEqual(r.fold(operator.add, 0), 10)
        self.assertEqual(r.fold(max, 0), 4)
        self.assertEqual(constant((0, 0), 1).fold(operator.mul, 1), 1)

    def test_iteration(self):
        r = from_vector((2, 2), [1, 2, 3, 4])
        self.assertEqual(list(r), [1, 2, 3, 4])


class TestParallel(unittest.TestCase):
    """Test parallel evaluation."""

    def setUp(self):
        """Set up test fixtures."""
        self.raster = from_function((300, 200), lambda row, col: row * 1000 + col, dtype=np.int64)

    def test_parallel_matches_sequential(self):
        with mock.patch("mapalgebra.core.raster.CHUNK_SIZE", 64):
            par = materialize(self.raster, Strategy.PAR)
        seq = materialize(self.raster, "seq")
        self.assertEqual(par.shape, (300, 200))
        self.assertTrue(np.array_equal(par.to_numpy(), seq.to_numpy()))

    def test_parallel_strings(self):
        r = from_function((130, 70), lambda row, col: "even" if (row + col) % 2 == 0 else "odd")
        with mock.patch("mapalgebra.core.raster.CHUNK_SIZE", 32):
            par = r.strict("par")
        self.assertEqual(par, r.strict("seq"))

    def test_parallel_mixed_chunk_types(self):
        r = from_function((64, 64), lambda row, col: "x" if row < 32 else row)
        with mock.patch("mapalgebra.core.raster.CHUNK_SIZE", 32):
            par = r.strict("par")
        seq = r.strict("seq")
        self.assertEqual(par.to_numpy().dtype, object)
        self.assertEqual(par, seq)
        self.assertEqual(par[0, 0], "x")
        self.assertEqual(par[63, 0], 63)

    def test_parallel_disabled_falls_back(self):
        config = {"use_parallel": False, "prefer": "threads", "progress": False}
        with mock.patch.dict("mapalgebra.core.raster.PERFORMANCE_CONFIG", config):
            with self.assertLogs("mapalgebra.core.raster", level="WARNING"):
                forced = self.raster.strict("par")
        self.assertEqual(forced[299, 199], 299199)


if __name__ == '__main__':
    unittest.main()
