import os
import tempfile
import numpy as np
import unittest
from astropy.io import fits
from shapester.config import ShapeletConfig
from shapester.utils import (coefficients_to_astropy_table, coefficients_from_astropy_table,
                             model_matrix_to_fits)

class TestUtils(unittest.TestCase):
    def test_coefficient_table(self):
        coeffs = np.arange(6, dtype=float)
        tbl = coefficients_to_astropy_table(coeffs)
        self.assertEqual(len(tbl), 6)
        self.assertEqual(list(tbl['x']), [0, 0, 1, 0, 1, 2])
        self.assertEqual(list(tbl['order']), [0, 1, 1, 2, 2, 2])
        tbl.reverse()
        self.assertTrue(np.array_equal(coefficients_from_astropy_table(tbl), coeffs))

    def test_model_matrix_to_fits(self):
        matrix = np.arange(12, dtype=float).reshape(4, 3)
        cfg = ShapeletConfig(order=1, coefficients=[1.0, 2.0, 3.0])
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'matrix.fits')
            model_matrix_to_fits(matrix, filename, config=cfg)
            with fits.open(filename) as hdul:
                self.assertTrue(np.array_equal(hdul[0].data, matrix))
                self.assertEqual(hdul[0].header['ORDER'], 1)
                self.assertEqual(hdul[0].header['DTYPE'], 'float64')
                self.assertNotIn('X0', hdul[0].header)

if __name__ == '__main__':
    unittest.main()
