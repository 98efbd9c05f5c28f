"""
Plotting utilities for shapelet basis visualization.

This module provides a quick-look figure of every basis function of a
given order, useful to check the ellipse orientation and flux scaling.
"""

import numpy as np
import matplotlib.pyplot as plt

from .driver import build_model_matrix
from .packed import iter_packed

def plot_basis_functions(image_shape, ellipse, order, filename="shapelet_basis.png"):
    """
    Draw each basis function as an image, one row per order.

    Parameters
    ----------
    image_shape : tuple
        The (height, width) of each panel.
    ellipse : Ellipse
        Basis ellipse including its center.
    order : int
        Maximum order to show.
    filename : str
        Output filename.

    Returns
    -------
    fig : matplotlib.figure.Figure
    """
    matrix = build_model_matrix(image_shape, ellipse, order)

    fig, axes = plt.subplots(order + 1, order + 1, figsize=(2 * (order + 1), 2 * (order + 1)),
                             squeeze=False)
    for ax in axes.ravel():
        ax.axis('off')

    for i, x, y in iter_packed(order):
        image = matrix[:, i].reshape(image_shape)
        # symmetric limits so the sign pattern of the Hermite lobes is readable
        vmax = np.max(np.abs(image))
        if vmax == 0:
            vmax = 1.0
        ax = axes[x + y, x]
        ax.imshow(image, origin='lower', cmap='RdBu_r', vmin=-vmax, vmax=vmax)
        ax.set_title(f"({x}, {y})", fontsize=9)

    fig.suptitle(f"Shapelet basis, order {order}", fontsize=12, weight='bold')
    fig.savefig(filename, dpi=100, bbox_inches='tight')
    plt.close(fig)
    print(f"Saved basis figure to {filename}")
    return fig
