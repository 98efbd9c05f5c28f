import numpy as np
import unittest
from scipy.integrate import quad
from scipy.special import eval_hermite, factorial
from shapester.hermite import HermiteEvaluator, compute_inner_product_matrix_1d
from shapester.packed import compute_index, compute_size, iter_packed

def hermite_function(n, t):
    norm = 1.0 / np.sqrt(2.0**n * factorial(n) * np.sqrt(np.pi))
    return norm * eval_hermite(n, t) * np.exp(-0.5 * t * t)

class TestHermiteEvaluator(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_fill_evaluation_matches_hermite_functions(self):
        order = 8
        evaluator = HermiteEvaluator(order)
        target = np.zeros(compute_size(order))
        x, y = 0.7, -1.3
        evaluator.fill_evaluation(target, x, y)
        for i, a, b in iter_packed(order):
            expected = hermite_function(a, x) * hermite_function(b, y)
            self.assertAlmostEqual(target[i], expected, places=12)

    def test_sum_evaluation_matches_dot(self):
        order = 6
        evaluator = HermiteEvaluator(order)
        target = np.zeros(compute_size(order))
        for _ in range(10):
            coeffs = self.rng.normal(size=compute_size(order))
            x, y = self.rng.normal(scale=2.0, size=2)
            evaluator.fill_evaluation(target, x, y)
            expected = np.dot(target, coeffs)
            result = evaluator.sum_evaluation(coeffs, x, y)
            self.assertTrue(np.isclose(result, expected, rtol=1e-10, atol=1e-14))

    def test_point_overloads(self):
        evaluator = HermiteEvaluator(3)
        coeffs = self.rng.normal(size=compute_size(3))
        self.assertEqual(evaluator.sum_evaluation_at(coeffs, (0.2, 0.5)),
                         evaluator.sum_evaluation(coeffs, 0.2, 0.5))
        expected = evaluator.fill_evaluation(np.zeros(compute_size(3)), 0.2, 0.5)
        result = evaluator.fill_evaluation_at(np.zeros(compute_size(3)), (0.2, 0.5))
        self.assertTrue(np.array_equal(result, expected))

    def test_integration_parity(self):
        order = 6
        evaluator = HermiteEvaluator(order)
        target = np.zeros(compute_size(order))
        for x_moment in range(3):
            for y_moment in range(3):
                evaluator.fill_integration(target, x_moment, y_moment)
                for i, a, b in iter_packed(order):
                    if (a - x_moment) % 2 or (b - y_moment) % 2:
                        self.assertEqual(target[i], 0.0)
                    else:
                        self.assertNotEqual(target[i], 0.0)

    def test_integration_matches_quadrature(self):
        order = 5
        evaluator = HermiteEvaluator(order)
        target = np.zeros(compute_size(order))
        for moment in range(4):
            evaluator.fill_integration(target, moment, 0)
            m0 = quad(lambda t: hermite_function(0, t), -np.inf, np.inf)[0]
            for k in range(order + 1):
                expected = quad(lambda t: t**moment * hermite_function(k, t), -np.inf, np.inf)[0]
                self.assertAlmostEqual(target[compute_index(k, 0)], expected * m0, places=7)

    def test_sum_integration_matches_dot(self):
        order = 4
        evaluator = HermiteEvaluator(order)
        target = np.zeros(compute_size(order))
        coeffs = self.rng.normal(size=compute_size(order))
        evaluator.fill_integration(target, 1, 2)
        self.assertAlmostEqual(evaluator.sum_integration(coeffs, 1, 2), np.dot(target, coeffs), places=12)

    def test_prefix_order(self):
        evaluator = HermiteEvaluator(5)
        full = evaluator.fill_evaluation(np.zeros(compute_size(5)), 0.4, 0.1)
        short = evaluator.fill_evaluation(np.zeros(compute_size(2)), 0.4, 0.1)
        self.assertTrue(np.allclose(short, full[:compute_size(2)], rtol=0, atol=0))

    def test_negative_moment_rejected(self):
        evaluator = HermiteEvaluator(3)
        target = np.full(compute_size(3), 7.0)
        with self.assertRaises(ValueError):
            evaluator.fill_integration(target, -1, 0)
        with self.assertRaises(ValueError):
            evaluator.sum_integration(np.ones(compute_size(3)), 0, -2)
        self.assertTrue(np.all(target == 7.0))

    def test_integer_target_rejected(self):
        evaluator = HermiteEvaluator(2)
        with self.assertRaises(ValueError):
            evaluator.fill_evaluation(np.zeros(compute_size(2), dtype=int), 0.1, 0.2)
        with self.assertRaises(ValueError):
            evaluator.fill_integration(np.zeros(compute_size(2), dtype=int))

    def test_order_exceeded(self):
        evaluator = HermiteEvaluator(3)
        with self.assertRaises(ValueError):
            evaluator.fill_evaluation(np.zeros(compute_size(4)), 0.0, 0.0)
        with self.assertRaises(ValueError):
            evaluator.sum_integration(np.zeros(compute_size(4)))
        with self.assertRaises(ValueError):
            evaluator.fill_evaluation(np.zeros(7), 0.0, 0.0)
        with self.assertRaises(ValueError):
            HermiteEvaluator(-1)

    def test_float32_workspace(self):
        evaluator = HermiteEvaluator(4, dtype=np.float32)
        self.assertEqual(evaluator.dtype, np.float32)
        target = np.zeros(compute_size(4), dtype=np.float32)
        evaluator.fill_evaluation(target, 0.5, 0.5)
        self.assertAlmostEqual(float(target[0]), hermite_function(0, 0.5)**2, places=6)

class TestInnerProduct(unittest.TestCase):
    def test_identity_at_equal_scale(self):
        for scale in (0.5, 1.0, 2.3):
            m = HermiteEvaluator.compute_inner_product_matrix(5, 5, scale, scale)
            self.assertTrue(np.allclose(m, np.eye(compute_size(5)), atol=1e-12))

    def test_transpose_symmetry(self):
        m1 = HermiteEvaluator.compute_inner_product_matrix(4, 2, 1.5, 0.8)
        m2 = HermiteEvaluator.compute_inner_product_matrix(2, 4, 0.8, 1.5)
        self.assertEqual(m1.shape, (compute_size(4), compute_size(2)))
        self.assertTrue(np.allclose(m1, m2.T, atol=1e-14))

    def test_1d_matches_quadrature(self):
        a, b = 1.3, 2.1
        m = compute_inner_product_matrix_1d(4, 5, a, b)
        for i in range(5):
            for j in range(6):
                expected = quad(lambda t: hermite_function(i, t / a) * hermite_function(j, t / b),
                                -np.inf, np.inf)[0] / np.sqrt(a * b)
                self.assertAlmostEqual(m[i, j], expected, places=7)

    def test_2d_weave(self):
        a, b = 1.3, 0.9
        m1 = compute_inner_product_matrix_1d(3, 3, a, b)
        m = HermiteEvaluator.compute_inner_product_matrix(3, 3, a, b)
        self.assertAlmostEqual(m[compute_index(2, 1), compute_index(0, 3)], m1[2, 0] * m1[1, 3])

if __name__ == '__main__':
    unittest.main()
