from .packed import PackedIndex, compute_offset, compute_index, compute_size, compute_order, iter_packed
from .hermite import HermiteEvaluator, compute_inner_product_matrix_1d
from .ellipses import Axes, Ellipse
from .model import ModelBuilder, fast_exp
from .config import ShapeletConfig
from .driver import build_model_matrix, render_model, flux
from .utils import coefficients_to_astropy_table, model_matrix_to_fits
