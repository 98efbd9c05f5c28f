import numpy as np
from .config import load_config
from .hermite import HermiteEvaluator
from .model import ModelBuilder
from .packed import compute_order

def pixel_coordinates(image_shape, mask=None):
    """
    Flattened pixel coordinates of an image.

    Parameters
    ----------
    image_shape : tuple
        The (height, width) of the image.
    mask : 2D boolean array, optional
        Bad pixel mask (True=bad). Masked pixels are left out.

    Returns
    -------
    x, y : 1D arrays
        Coordinates of the selected pixels in row-major order.
    """
    h, w = image_shape
    yy, xx = np.mgrid[:h, :w]
    if mask is not None:
        valid = ~np.asarray(mask, dtype=bool)
        return xx[valid].astype(float), yy[valid].astype(float)
    return xx.ravel().astype(float), yy.ravel().astype(float)

def build_model_matrix(image_shape, ellipse, order, mask=None, config=None):
    """
    Design matrix of the shapelet basis over the pixels of an image.

    Parameters
    ----------
    image_shape : tuple
        The (height, width) of the image.
    ellipse : Ellipse
        Basis ellipse including its center, in pixel coordinates.
    order : int
        Maximum order of the basis.
    mask : 2D boolean array, optional
        Bad pixel mask (True=bad). Masked pixels get no row.
    config : dict or ShapeletConfig, optional
        Supplies use_approximate_exp and dtype.

    Returns
    -------
    matrix : 2D array
        Shape (n_pixels, (order+1)(order+2)/2), rows in row-major pixel order.
    """
    cfg = load_config(config)
    x, y = pixel_coordinates(image_shape, mask)
    builder = ModelBuilder(order, x, y, use_approximate_exp=cfg.use_approximate_exp, dtype=cfg.dtype)
    builder.update(ellipse)
    return builder.compute_model_matrix(order)

def render_model(image_shape, ellipse, coefficients, mask=None, fill=0.0, config=None):
    """
    Render a shapelet expansion as an image.

    Parameters
    ----------
    image_shape : tuple
        The (height, width) of the output image.
    ellipse : Ellipse
        Basis ellipse including its center.
    coefficients : 1D array
        Packed-order coefficients in flux units.
    mask : 2D boolean array, optional
        Pixels flagged True are not evaluated and take `fill`.
    fill : float
        Value for masked pixels.

    Returns
    -------
    model : 2D array
        The rendered model.
    """
    cfg = load_config(config)
    coefficients = np.asarray(coefficients, dtype=float)
    order = compute_order(len(coefficients))
    x, y = pixel_coordinates(image_shape, mask)
    builder = ModelBuilder(order, x, y, use_approximate_exp=cfg.use_approximate_exp, dtype=cfg.dtype)
    builder.update(ellipse)
    values = builder.compute_model_vector(coefficients, order)

    model = np.full(image_shape, fill, dtype=cfg.dtype)
    if mask is not None:
        model[~np.asarray(mask, dtype=bool)] = values
    else:
        model[:, :] = values.reshape(image_shape)
    return model

def flux(coefficients):
    """Total flux of an expansion whose coefficients are in flux units."""
    coefficients = np.asarray(coefficients, dtype=float)
    evaluator = HermiteEvaluator(compute_order(len(coefficients)))
    return evaluator.sum_integration(coefficients)
