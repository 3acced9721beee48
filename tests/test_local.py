#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for local operations.
"""

import unittest

import numpy as np

from mapalgebra.core.raster import constant, from_function, from_vector
from mapalgebra.operations.local import (
    classify, lmin, lmax, add, subtract, multiply, divide, signum
)


class TestClassify(unittest.TestCase):
    """Test LocalClassification."""

    def setUp(self):
        """Set up test fixtures."""
        self.raster = from_vector((1, 4), [0, 0.5, 1, 7])

    def test_single_break(self):
        result = classify("none", {1: "a"}, self.raster)
        self.assertEqual(result.to_numpy().tolist(), [["none", "none", "a", "a"]])

    def test_greatest_break_at_or_below(self):
        r = from_vector((1, 7), [0, 1, 4, 5, 9, 10, 100])
        result = classify("d", {10: "b", 1: "a", 5: "m"}, r)
        self.assertEqual(result.to_numpy().tolist(), [["d", "a", "a", "m", "m", "b", "b"]])

    def test_default_keeps_its_type(self):
        result = classify(0, {1: "a"}, self.raster)
        self.assertEqual(result.to_numpy().tolist(), [[0, 0, "a", "a"]])

    def test_no_breaks(self):
        result = classify(-1, {}, self.raster)
        self.assertEqual(result, constant((1, 4), -1))

    def test_numeric_classes(self):
        r = from_function((3, 3), lambda row, col: row * 3 + col)
        result = classify(0, {3: 1, 6: 2}, r)
        self.assertEqual(result.to_numpy().tolist(), [[0, 0, 0], [1, 1, 1], [2, 2, 2]])
        self.assertEqual(result.to_numpy().dtype.kind, "i")

    def test_shape_preserved(self):
        self.assertEqual(classify(0, {1: 1}, constant((5, 9), 3)).shape, (5, 9))


class TestMinMax(unittest.TestCase):
    """Test lmin and lmax."""

    def setUp(self):
        """Set up test fixtures."""
        self.one = constant((7, 7), 1)
        self.two = constant((7, 7), 2)
        self.a = from_function((6, 6), lambda row, col: (row * col) % 5)
        self.b = from_function((6, 6), lambda row, col: (row + col) % 4)

    def test_lmin(self):
        self.assertEqual(lmin(self.one, self.two).strict(), self.one)

    def test_lmax(self):
        self.assertEqual(lmax(self.one, self.two), self.two)

    def test_idempotent(self):
        self.assertEqual(lmin(self.a, self.a), self.a)
        self.assertEqual(lmax(self.b, self.b), self.b)

    def test_commutative(self):
        self.assertEqual(lmin(self.a, self.b), lmin(self.b, self.a))
        self.assertEqual(lmax(self.a, self.b), lmax(self.b, self.a))

    def test_cellwise_values(self):
        expected = np.minimum(self.a.to_numpy(), self.b.to_numpy())
        self.assertTrue(np.array_equal(lmin(self.a, self.b).to_numpy(), expected))

    def test_strings(self):
        a = from_vector((1, 3), ["b", "a", "c"])
        b = from_vector((1, 3), ["a", "z", "c"])
        self.assertEqual(lmin(a, b).to_numpy().tolist(), [["a", "a", "c"]])
        self.assertEqual(lmax(a, b).to_numpy().tolist(), [["b", "z", "c"]])

    def test_intersection(self):
        self.assertEqual(lmin(constant((2, 5), 1), constant((4, 3), 0)).shape, (2, 3))


class TestArithmetic(unittest.TestCase):
    """Test elementwise arithmetic."""

    def setUp(self):
        """Set up test fixtures."""
        self.one = constant((7, 7), 1)
        self.two = constant((7, 7), 2)

    def test_add(self):
        self.assertEqual(add(self.one, self.one), self.two)

    def test_subtract(self):
        self.assertEqual(subtract(self.two, self.one), self.one)

    def test_multiply(self):
        self.assertEqual(multiply(self.two, self.two), constant((7, 7), 4))

    def test_divide(self):
        self.assertEqual(divide(self.one, self.two), constant((7, 7), 0.5))

    def test_divide_by_zero(self):
        with np.errstate(divide="ignore"):
            result = divide(self.one, constant((7, 7), 0)).to_numpy()
        self.assertTrue(np.isposinf(result).all())

    def test_signum(self):
        r = from_vector((1, 3), [-3, 0, 5])
        self.assertEqual(signum(r).to_numpy().tolist(), [[-1, 0, 1]])


if __name__ == '__main__':
    unittest.main()
