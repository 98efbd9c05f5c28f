import os
import sys
import numpy as np
import matplotlib.pyplot as plt

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shapester.config import ShapeletConfig
from shapester.driver import build_model_matrix, render_model, flux
from shapester.plotting import plot_basis_functions
from shapester.utils import coefficients_to_astropy_table, model_matrix_to_fits

def run_example():
    shape = (101, 101)
    cfg = ShapeletConfig(order=4, a=8.0, b=5.0, theta=0.5)
    ellipse = cfg.ellipse(shape)

    # Synthetic galaxy: a known shapelet expansion plus noise
    rng = np.random.default_rng(1)
    true_coeffs = np.zeros(15)
    true_coeffs[0] = 1000.0
    true_coeffs[3] = 120.0
    true_coeffs[5] = -80.0
    true_coeffs[12] = 30.0
    image = render_model(shape, ellipse, true_coeffs) + rng.normal(scale=0.05, size=shape)

    print(f"Building order {cfg.order} design matrix for image shape {shape}...")
    matrix = build_model_matrix(shape, ellipse, cfg.order, config=cfg)

    # The fit itself belongs to the caller; plain least squares is enough here
    coeffs, *_ = np.linalg.lstsq(matrix, image.ravel(), rcond=None)
    print(coefficients_to_astropy_table(coeffs))
    print(f"True flux {flux(true_coeffs):.2f}, recovered flux {flux(coeffs):.2f}")

    out_dir = os.path.dirname(__file__)
    model = render_model(shape, ellipse, coeffs)
    model_matrix_to_fits(model, os.path.join(out_dir, 'gaussian_galaxy_model.fits'), config=cfg)

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for ax, data, title in zip(axes, [image, model, image - model], ['Image', 'Model', 'Residual']):
        ax.imshow(data, origin='lower', cmap='gray')
        ax.set_title(title)
        ax.axis('off')
    fig.savefig(os.path.join(out_dir, 'gaussian_galaxy_model.png'), dpi=100)
    plt.close(fig)

    plot_basis_functions((41, 41), cfg.ellipse((41, 41)), 3,
                         filename=os.path.join(out_dir, 'gaussian_galaxy_basis.png'))

if __name__ == "__main__":
    run_example()
