import numpy as np
from astropy.table import Table
from astropy.io import fits

from .packed import compute_order, iter_packed

def coefficients_to_astropy_table(coefficients):
    """
    Convert a packed coefficient vector to an Astropy Table.

    Parameters
    ----------
    coefficients : 1D array
        Coefficients in packed order.

    Returns
    -------
    table : astropy.table.Table
        One row per basis function with columns:
        - index: Packed index
        - order: Total order x + y
        - x, y: Hermite degree along each axis
        - coefficient: Coefficient value
    """
    coefficients = np.asarray(coefficients, dtype=float)
    order = compute_order(len(coefficients))

    rows = [(i, x + y, x, y, coefficients[i]) for i, x, y in iter_packed(order)]
    return Table(rows=rows, names=('index', 'order', 'x', 'y', 'coefficient'),
                 dtype=(int, int, int, int, float))

def coefficients_from_astropy_table(table):
    """Recover the packed coefficient vector from coefficients_to_astropy_table output."""
    order = np.argsort(table['index'])
    coefficients = np.asarray(table['coefficient'], dtype=float)[order]
    # validates that the rows form a complete packed layout
    compute_order(len(coefficients))
    return coefficients

def model_matrix_to_fits(matrix, filename, config=None, overwrite=True):
    """
    Save a design matrix to FITS, including configuration parameters as header keywords.

    Parameters
    ----------
    matrix : 2D array
        Design matrix (pixels x basis functions) or a model image.
    filename : str
        Output filename.
    config : ShapeletConfig or dict, optional
        Parameters to record in the header.
    overwrite : bool
        Whether to overwrite existing file.
    """
    hdu = fits.PrimaryHDU(np.asarray(matrix))

    if config is not None:
        items = config.items() if isinstance(config, dict) else config.model_dump().items()
        for key, value in items:
            # None values can't be written to a FITS header
            if value is None:
                continue

            if isinstance(value, (str, int, float, bool, np.number)):
                hdu.header[key.upper()[:8]] = value
            else:
                # Long vectors such as coefficients belong in a table, not the header
                hdu.header[key.upper()[:8]] = str(value)[:68]

    hdu.writeto(filename, overwrite=overwrite)
