
"""
Command Line Interface for SHAPESTER.

This module provides the entry point for building shapelet models from the command line.
It handles argument parsing, configuration loading, image loading, building the
design matrix or model image, and saving the result.
"""

import argparse
import re
import yaml
import numpy as np
from astropy.io import fits
from .config import ShapeletConfig
from .driver import build_model_matrix, render_model
from .utils import model_matrix_to_fits

def load_config(config_file):
    with open(config_file, 'r') as f:
        return yaml.safe_load(f) or {}

def load_image_shape(source, mask_file=None):
    """Return (shape, mask) from a FITS image or an 'HxW' string."""
    match = re.fullmatch(r'(\d+)x(\d+)', source)
    if match:
        shape = (int(match.group(1)), int(match.group(2)))
    else:
        with fits.open(source) as hdul:
            image = hdul[0].data
            if image is None: # Maybe in extension 1?
                image = hdul[1].data
            shape = image.shape

    mask = None
    if mask_file:
        with fits.open(mask_file) as hdul:
            mask = hdul[0].data
            if mask is None:
                mask = hdul[1].data
            mask = mask.astype(bool)
    return shape, mask

def main(argv=None):
    parser = argparse.ArgumentParser(description="Build shapelet design matrices and model images.")
    parser.add_argument("image", help="Input image FITS file (defines the pixel grid), or a shape such as 64x64.")
    parser.add_argument("--mask", help="Input mask FITS file (optional).")
    parser.add_argument("--config", help="Configuration YAML file.")
    parser.add_argument("--output", help="Output FITS file.", default="shapelet_model.fits")
    parser.add_argument("--matrix", action="store_true", help="Write the design matrix instead of a model image.")

    # CLI overrides
    parser.add_argument("--order", type=int, help="Basis order")
    parser.add_argument("--x0", type=float, help="Center X")
    parser.add_argument("--y0", type=float, help="Center Y")
    parser.add_argument("--a", type=float, help="Semi-major axis")
    parser.add_argument("--b", type=float, help="Semi-minor axis")
    parser.add_argument("--theta", type=float, help="Position angle (radians)")
    parser.add_argument("--approximate-exp", action="store_true", help="Use the fast approximate exponential")

    args = parser.parse_args(argv)

    # Load config
    if args.config:
        config = load_config(args.config)
    else:
        config = {}

    # Overrides
    for key in ('order', 'x0', 'y0', 'a', 'b', 'theta'):
        value = getattr(args, key)
        if value is not None:
            config[key] = value
    if args.approximate_exp: config['use_approximate_exp'] = True

    cfg = ShapeletConfig(**config)
    shape, mask = load_image_shape(args.image, args.mask)
    ellipse = cfg.ellipse(shape)

    if args.matrix:
        print(f"Building order {cfg.order} design matrix for image shape {shape}...")
        result = build_model_matrix(shape, ellipse, cfg.order, mask=mask, config=cfg)
    else:
        if cfg.coefficients is None:
            parser.error("rendering a model image needs 'coefficients' in the config (or use --matrix)")
        print(f"Rendering order {cfg.order} shapelet model for image shape {shape}...")
        result = render_model(shape, ellipse, np.asarray(cfg.coefficients), mask=mask, config=cfg)

    model_matrix_to_fits(result, args.output, config=cfg)
    print(f"Saved result to {args.output}")

if __name__ == "__main__":
    main()
