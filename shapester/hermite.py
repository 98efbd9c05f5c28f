"""
Point-at-a-time evaluation of Gauss-Hermite (shapelet) basis functions.

The 1D family are the orthonormal Hermite functions

    phi_0(t) = pi^(-1/4) exp(-t^2/2)
    phi_1(t) = sqrt(2) t phi_0(t)
    phi_j(t) = sqrt(2/j) t phi_{j-1}(t) - sqrt((j-1)/j) phi_{j-2}(t)

which is H_{k+1} = 2t H_k - 2k H_{k-1} with the normalization folded in.
The 2D basis function with packed index i = (a, b) is phi_a(x) phi_b(y);
HermiteEvaluator fills the two 1D families into small workspaces and weaves
them into packed order.
"""

import numpy as np
from numba import njit

from .packed import compute_order, packed_degrees

# pi^(-1/4), the degree-0 normalization
BASIS_NORMALIZATION = np.pi ** -0.25

# integral of phi_0 over the real line, (4 pi)^(1/4)
GAUSSIAN_INTEGRAL = BASIS_NORMALIZATION * np.sqrt(2.0 * np.pi)


@njit
def _fill_hermite_1d(workspace, t, r1, r2):
    n = workspace.shape[0]
    if n > 0:
        workspace[0] = BASIS_NORMALIZATION * np.exp(-0.5 * t * t)
    if n > 1:
        workspace[1] = r1[1] * t * workspace[0]
    for j in range(2, n):
        workspace[j] = r1[j] * t * workspace[j - 1] - r2[j] * workspace[j - 2]


@njit
def _fill_integration_1d(workspace, moment):
    # M_k^p = int t^p phi_k(t) dt, built up one moment at a time:
    # M_{k+1}^p = (sqrt(k) M_{k-1}^p + sqrt(2) p M_k^{p-1}) / sqrt(k+1)
    n = workspace.shape[0]
    previous = np.zeros(n)
    current = np.zeros(n)
    for p in range(moment + 1):
        current[:] = 0.0
        if p % 2 == 0 and n > 0:
            base = GAUSSIAN_INTEGRAL
            for q in range(p - 1, 0, -2):
                base *= q
            current[0] = base
        for k in range(n - 1):
            v = np.sqrt(2.0) * p * previous[k]
            if k > 0:
                v += np.sqrt(k) * current[k - 1]
            current[k + 1] = v / np.sqrt(k + 1.0)
        previous[:] = current
    for k in range(n):
        workspace[k] = current[k]


@njit
def _weave_fill(target, xw, yw, order):
    i = 0
    for n in range(order + 1):
        for x in range(n + 1):
            target[i] = xw[x] * yw[n - x]
            i += 1


@njit
def _weave_sum(coefficients, xw, yw, order):
    total = 0.0
    i = 0
    for n in range(order + 1):
        for x in range(n + 1):
            total += coefficients[i] * xw[x] * yw[n - x]
            i += 1
    return total


def compute_inner_product_matrix_1d(row_order, col_order, a, b):
    """
    Inner products of 1D Hermite functions with different scales.

    Returns the (row_order+1, col_order+1) matrix

        I[m, n] = int a^(-1/2) phi_m(t/a) b^(-1/2) phi_n(t/b) dt

    computed with the ladder-operator recurrence, so no quadrature is
    involved. Entries with odd m + n are exactly zero.
    """
    result = np.zeros((row_order + 1, col_order + 1))
    v = 1.0 / (a * a + b * b)
    cross = 2.0 * a * b * v
    diff = (b * b - a * a) * v
    result[0, 0] = np.sqrt(cross)
    for n in range(1, col_order):
        result[0, n + 1] = -diff * np.sqrt(n / (n + 1.0)) * result[0, n - 1]
    for m in range(row_order):
        for n in range(col_order + 1):
            value = 0.0
            if n > 0:
                value += cross * np.sqrt(n) * result[m, n - 1]
            if m > 0:
                value += diff * np.sqrt(m) * result[m - 1, n]
            result[m + 1, n] = value / np.sqrt(m + 1.0)
    return result


class HermiteEvaluator:
    """
    Evaluate and integrate packed Hermite shapelet expansions at single points.

    Each instance owns two workspaces of length order+1 plus its recurrence
    coefficient tables, so separate instances never share mutable state.
    Instances are not safe for concurrent use from several threads.

    Vectors passed to the fill and sum methods must be in packed order. Their
    length selects the order that is evaluated; it may be any packed size up
    to the configured order.
    """

    def __init__(self, order, dtype=np.float64):
        if order < 0:
            raise ValueError(f"order must be non-negative, got {order}")
        self._dtype = np.dtype(dtype)
        self._x_workspace = np.zeros(order + 1, dtype=self._dtype)
        self._y_workspace = np.zeros(order + 1, dtype=self._dtype)
        j = np.arange(1, order + 1, dtype=float)
        self._r1 = np.zeros(order + 1)
        self._r2 = np.zeros(order + 1)
        self._r1[1:] = np.sqrt(2.0 / j)
        self._r2[1:] = np.sqrt((j - 1.0) / j)

    @property
    def order(self):
        return self._x_workspace.shape[0] - 1

    @property
    def dtype(self):
        return self._dtype

    def _check_order(self, size):
        order = compute_order(size)
        if order > self.order:
            raise ValueError(
                f"Requested order {order} exceeds the evaluator order {self.order}"
            )
        return order

    def _check_target(self, target):
        if not np.issubdtype(target.dtype, np.floating):
            raise ValueError(f"target must have a floating-point dtype, got {target.dtype}")
        return self._check_order(len(target))

    def _fill_moments(self, x_moment, y_moment):
        if x_moment < 0 or y_moment < 0:
            raise ValueError(f"Moments must be non-negative, got ({x_moment}, {y_moment})")
        _fill_integration_1d(self._x_workspace, int(x_moment))
        _fill_integration_1d(self._y_workspace, int(y_moment))

    def fill_evaluation(self, target, x, y):
        """
        Fill a vector whose dot product with a coefficient vector evaluates an
        unscaled shapelet expansion at (x, y).

        Parameters
        ----------
        target : np.ndarray
            1D floating-point output array, overwritten in place.
        x, y : float
            Point in the basis frame.

        Returns
        -------
        target : np.ndarray
        """
        order = self._check_target(target)
        _fill_hermite_1d(self._x_workspace, float(x), self._r1, self._r2)
        _fill_hermite_1d(self._y_workspace, float(y), self._r1, self._r2)
        _weave_fill(target, self._x_workspace, self._y_workspace, order)
        return target

    def fill_evaluation_at(self, target, point):
        return self.fill_evaluation(target, point[0], point[1])

    def fill_integration(self, target, x_moment=0, y_moment=0):
        """
        Fill a vector whose dot product with a coefficient vector integrates an
        unscaled shapelet expansion, weighted by x^x_moment y^y_moment.

        Entries whose degree and moment differ by an odd number are exactly zero.
        """
        order = self._check_target(target)
        self._fill_moments(x_moment, y_moment)
        _weave_fill(target, self._x_workspace, self._y_workspace, order)
        return target

    def sum_evaluation(self, coefficients, x, y):
        """Evaluate an unscaled shapelet expansion at (x, y)."""
        coefficients = np.asarray(coefficients, dtype=float)
        order = self._check_order(coefficients.shape[0])
        _fill_hermite_1d(self._x_workspace, float(x), self._r1, self._r2)
        _fill_hermite_1d(self._y_workspace, float(y), self._r1, self._r2)
        return _weave_sum(coefficients, self._x_workspace, self._y_workspace, order)

    def sum_evaluation_at(self, coefficients, point):
        return self.sum_evaluation(coefficients, point[0], point[1])

    def sum_integration(self, coefficients, x_moment=0, y_moment=0):
        """Integrate an unscaled shapelet expansion weighted by x^x_moment y^y_moment."""
        coefficients = np.asarray(coefficients, dtype=float)
        order = self._check_order(coefficients.shape[0])
        self._fill_moments(x_moment, y_moment)
        return _weave_sum(coefficients, self._x_workspace, self._y_workspace, order)

    @staticmethod
    def compute_inner_product_matrix(row_order, col_order, a, b):
        """
        Inner products between two packed bases with scales a and b.

        The basis with scale s is s^-1 phi_m(x/s) phi_n(y/s), which has unit
        L2 norm for every s, so the result is the identity when a == b.

        Returns
        -------
        matrix : np.ndarray
            Shape (compute_size(row_order), compute_size(col_order)).
        """
        m = compute_inner_product_matrix_1d(row_order, col_order, a, b)
        rx, ry = packed_degrees(row_order)
        cx, cy = packed_degrees(col_order)
        return m[np.ix_(rx, cx)] * m[np.ix_(ry, cy)]
