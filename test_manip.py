#!/usr/bin/env python3

import io
import os
import tempfile
import unittest
from unittest import mock
import numpy
from manip import *

class FakeClock:
    def __init__(self, step):
        self.step = step
        self.now = 0.0

    def __call__(self):
        value = self.now
        self.now += self.step
        return value

class MatrixFileTest(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.filename = os.path.join(self.tmp_dir.name, 'matrix')

    def tearDown(self):
        self.tmp_dir.cleanup()

    def test_generate(self):
        generate_matrix(3, 5, self.filename, seed=4)
        self.assertTrue(os.path.exists(self.filename))
        self.assertFalse(os.path.exists(self.filename + '.npy'))
        matrix = load_matrix(self.filename)
        self.assertEqual(matrix.shape, (5, 3))
        self.assertEqual(matrix.dtype, numpy.float32)
        self.assertTrue((matrix >= 0).all() and (matrix < 1).all())

    def test_generate_double(self):
        matrix = generate_matrix(4, 4, self.filename, element_type='double', seed=1)
        self.assertEqual(matrix.dtype, numpy.float64)
        numpy.testing.assert_array_equal(load_matrix(self.filename), matrix)

    def test_generate_invalid(self):
        with self.assertRaises(ValueError):
            generate_matrix(-1, 4, self.filename)
        with self.assertRaises(ValueError):
            generate_matrix(4, 4, self.filename, element_type='int32')

    def test_load_not_a_matrix(self):
        with open(self.filename, 'wb') as f:
            numpy.save(f, numpy.zeros(4))
        with self.assertRaises(ValueError):
            load_matrix(self.filename)

    def test_load_integer_matrix(self):
        with open(self.filename, 'wb') as f:
            numpy.save(f, numpy.zeros((2, 2), dtype=numpy.int64))
        with self.assertRaises(ValueError):
            load_matrix(self.filename)

    def test_load_missing(self):
        with self.assertRaises(OSError):
            load_matrix(os.path.join(self.tmp_dir.name, 'nothing'))

    def test_show(self):
        output = io.StringIO()
        show_matrix(numpy.array([[1, 0.5, 0.12345], [0.25, 2, 10]]), output)
        self.assertEqual(output.getvalue().splitlines(), [
            '1.000 0.500 0.123',
            '0.250 2.000 10.000',
        ])

class MeasureTest(unittest.TestCase):
    def setUp(self):
        rng = numpy.random.default_rng(0)
        self.a = rng.random((8, 16), dtype=numpy.float32)
        self.b = rng.random((16, 4), dtype=numpy.float32)
        self.output = io.StringIO()

    def test_measure(self):
        result = measure('simple', lambda: 42, self.output, FakeClock(1.001))
        self.assertEqual(result, 42)
        self.assertEqual(self.output.getvalue(), 'simple: 1.001\n')

    def test_measure_all(self):
        results = measure_all(self.a, self.b, self.output, FakeClock(0.5))
        self.assertEqual(self.output.getvalue().splitlines(),
                         ['%s: 0.500' % name for name, _ in METHODS])
        self.assertEqual(list(results), [name for name, _ in METHODS])
        for result in results.values():
            self.assertEqual(result.shape, (8, 4))
            numpy.testing.assert_allclose(result, self.a @ self.b, rtol=1e-5)

    def test_mismatch(self):
        methods = [('matmul', lambda a, b: a @ b), ('shifted', lambda a, b: a @ b + 1)]
        with mock.patch('manip.METHODS', methods):
            with self.assertRaises(ResultMismatch):
                measure_all(self.a, self.b, self.output)
        self.assertEqual(len(self.output.getvalue().splitlines()), 2)

    def test_incompatible_shapes(self):
        with self.assertRaises(ValueError):
            measure_all(self.a, self.a, self.output)
        self.assertEqual(self.output.getvalue(), '')

if __name__ == "__main__":
    unittest.main()
