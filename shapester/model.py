"""
Vectorized shapelet design matrices over many pixels.

Unlike HermiteEvaluator, ModelBuilder does not make the pixel loop the outer
loop. It keeps one array per polynomial degree covering every pixel, so each
recurrence step is a whole-array operation. This uses more memory for
temporaries but is much faster when one ellipse is evaluated over an entire
image.
"""

import numpy as np

from .ellipses import Axes, Ellipse
from .hermite import BASIS_NORMALIZATION
from .packed import compute_order, compute_size, iter_packed

LOG2_E = np.log2(np.e)

# Taylor coefficients of 2^f = exp(f ln 2), highest degree first for Horner
_EXP2_COEFFS = np.array([np.log(2.0) ** k / np.prod(np.arange(1, k + 1, dtype=float))
                         for k in range(6, -1, -1)])


def fast_exp(x):
    """
    Approximate exponential for non-positive arguments (-inf gives 0).

    Splits x log2(e) into an integer part k and a fraction f in [0, 1),
    evaluates 2^f with a degree-6 polynomial and scales by 2^k. The relative
    error is below 1e-4.
    """
    u = np.asarray(x, dtype=float) * LOG2_E
    k = np.floor(u)
    with np.errstate(invalid='ignore'):
        f = u - k
    p = np.full_like(f, _EXP2_COEFFS[0])
    for c in _EXP2_COEFFS[1:]:
        p = p * f + c
    k = np.clip(k, -1100, 1100).astype(np.int32)
    # -inf gives inf - inf in the fraction; its exponential is exactly 0
    return np.where(np.isneginf(u), 0.0, np.ldexp(p, k))


class ModelBuilder:
    """
    Build the design matrix of a Gauss-Hermite basis over flattened pixels.

    Parameters
    ----------
    order : int
        Initial workspace order. The workspace grows on demand through
        reserve() and never shrinks.
    x, y : 1D array-like
        Pixel coordinates, same length. Referenced, not copied, when they are
        already numpy arrays. Use center-subtracted coordinates with update(Axes)
        or raw coordinates with update(Ellipse).
    use_approximate_exp : bool
        Use fast_exp for the Gaussian envelope instead of np.exp.
    dtype : numpy dtype
        Element type of all workspaces and outputs.

    Columns are in packed order and carry the flux convention: each basis
    function is divided by the product of the ellipse semi-axes, so a row
    equals HermiteEvaluator.fill_evaluation at the transformed point divided
    by a*b.
    """

    def __init__(self, order, x, y, use_approximate_exp=False, dtype=np.float64):
        x = np.asarray(x)
        y = np.asarray(y)
        if x.ndim != 1 or x.shape != y.shape:
            raise ValueError(f"x and y must be 1D arrays of equal length, got shapes {x.shape} and {y.shape}")
        self._dtype = np.dtype(dtype)
        self._use_approximate_exp = bool(use_approximate_exp)
        self._x = x
        self._y = y
        n = x.shape[0]
        self._xt = np.zeros(n, dtype=self._dtype)
        self._yt = np.zeros(n, dtype=self._dtype)
        self._envelope = np.zeros(n, dtype=self._dtype)
        self._order = -1
        self._computed_order = -1
        self.reserve(order)

    @property
    def order(self):
        """Workspace order (capacity)."""
        return self._order

    @property
    def computed_order(self):
        """Order filled by the last update(), or -1 if the workspace is stale."""
        return self._computed_order

    @property
    def n_pixels(self):
        return self._x.shape[0]

    @property
    def dtype(self):
        return self._dtype

    @property
    def use_approximate_exp(self):
        return self._use_approximate_exp

    @property
    def xt(self):
        return self._xt

    @property
    def yt(self):
        return self._yt

    def reserve(self, order):
        """
        Make sure the workspace can hold basis functions up to `order`.

        Growing reallocates the workspaces, so update() must be called again
        before the new orders can be used.
        """
        if order < 0:
            raise ValueError(f"order must be non-negative, got {order}")
        if order <= self._order:
            return
        n = self.n_pixels
        self._x_workspace = np.zeros((order + 1, n), dtype=self._dtype)
        self._y_workspace = np.zeros((order + 1, n), dtype=self._dtype)
        j = np.arange(1, order + 1, dtype=float)
        self._r1 = np.zeros(order + 1)
        self._r2 = np.zeros(order + 1)
        self._r1[1:] = np.sqrt(2.0 / j)
        self._r2[1:] = np.sqrt((j - 1.0) / j)
        self._order = order
        self._computed_order = -1

    def update(self, ellipse):
        """
        Transform the pixel coordinates into the ellipse frame and recompute
        the per-degree workspaces up to the workspace order.

        Parameters
        ----------
        ellipse : Axes or Ellipse
            Shape only (coordinates are already centered) or shape plus center.
        """
        if isinstance(ellipse, Ellipse):
            core = ellipse.core
            dx = self._x - ellipse.x0
            dy = self._y - ellipse.y0
        elif isinstance(ellipse, Axes):
            core = ellipse
            dx, dy = self._x, self._y
        else:
            raise TypeError(f"Expected Axes or Ellipse, got {type(ellipse).__name__}")

        transform = core.get_grid_transform()
        self._xt[:] = transform[0, 0] * dx + transform[0, 1] * dy
        self._yt[:] = transform[1, 0] * dx + transform[1, 1] * dy

        arg = -0.5 * (self._xt.astype(float) ** 2 + self._yt.astype(float) ** 2)
        gauss = fast_exp(arg) if self._use_approximate_exp else np.exp(arg)
        # pi^(-1/4) per axis and the 1/(a b) flux factor, shared by every column
        self._envelope[:] = core.determinant * BASIS_NORMALIZATION ** 2 * gauss

        self._x_workspace[0] = self._envelope
        self._y_workspace[0] = 1.0
        self._fill_hermite_rows(self._x_workspace, self._xt)
        self._fill_hermite_rows(self._y_workspace, self._yt)
        self._computed_order = self._order

    def _fill_hermite_rows(self, workspace, t):
        r1, r2 = self._r1, self._r2
        if self._order >= 1:
            workspace[1] = r1[1] * t * workspace[0]
        for j in range(2, self._order + 1):
            workspace[j] = r1[j] * t * workspace[j - 1] - r2[j] * workspace[j - 2]

    def _check_order(self, order):
        if self._computed_order < 0:
            raise ValueError("Model workspace is not computed; call update() first")
        if order < 0:
            raise ValueError(f"order must be non-negative, got {order}")
        if order > self._computed_order:
            raise ValueError(
                f"Requested order {order} exceeds the computed order {self._computed_order}"
            )

    def add_model_matrix(self, order, output):
        """
        Add the design matrix to `output`.

        Parameters
        ----------
        order : int
            Order of the basis; must not exceed computed_order.
        output : np.ndarray
            Array of shape (n_pixels, compute_size(order)), updated in place.

        Returns
        -------
        output : np.ndarray
        """
        self._check_order(order)
        expected = (self.n_pixels, compute_size(order))
        if output.shape != expected:
            raise ValueError(f"Output shape {output.shape} does not match {expected}")
        for i, a, b in iter_packed(order):
            output[:, i] += self._x_workspace[a] * self._y_workspace[b]
        return output

    def add_model_vector(self, order, coefficients, output):
        """
        Add the model image (design matrix times `coefficients`) to `output`
        without forming the matrix.
        """
        self._check_order(order)
        coefficients = np.asarray(coefficients)
        if coefficients.shape != (compute_size(order),):
            raise ValueError(
                f"Coefficient shape {coefficients.shape} does not match order {order} "
                f"({compute_size(order)} entries)"
            )
        if output.shape != (self.n_pixels,):
            raise ValueError(f"Output shape {output.shape} does not match ({self.n_pixels},)")
        for i, a, b in iter_packed(order):
            if coefficients[i] != 0:
                output += coefficients[i] * self._x_workspace[a] * self._y_workspace[b]
        return output

    def compute_model_matrix(self, order=None):
        """Return a new design matrix; `order` defaults to computed_order."""
        if order is None:
            order = self._computed_order
        self._check_order(order)
        output = np.zeros((self.n_pixels, compute_size(order)), dtype=self._dtype)
        return self.add_model_matrix(order, output)

    def compute_model_vector(self, coefficients, order=None):
        """Return a new model vector; `order` is inferred from the coefficients."""
        if order is None:
            order = compute_order(len(coefficients))
        output = np.zeros(self.n_pixels, dtype=self._dtype)
        return self.add_model_vector(order, coefficients, output)
