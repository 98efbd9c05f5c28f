import os
import tempfile
import unittest
import numpy as np
import yaml
from astropy.io import fits
from shapester.cli import main
from shapester.packed import compute_size

class TestCli(unittest.TestCase):
    def test_matrix_from_shape(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = os.path.join(tmpdir, 'matrix.fits')
            main(['16x12', '--matrix', '--order', '2', '--a', '2.0', '--b', '1.5', '--output', output])
            with fits.open(output) as hdul:
                self.assertEqual(hdul[0].data.shape, (192, compute_size(2)))

    def test_render_from_image_and_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            image_file = os.path.join(tmpdir, 'image.fits')
            fits.writeto(image_file, np.zeros((20, 30)))
            config_file = os.path.join(tmpdir, 'config.yaml')
            with open(config_file, 'w') as f:
                yaml.safe_dump({'order': 1, 'coefficients': [1.0, 0.0, 0.0], 'a': 2.0, 'b': 2.0}, f)
            output = os.path.join(tmpdir, 'model.fits')
            main([image_file, '--config', config_file, '--output', output])
            with fits.open(output) as hdul:
                model = hdul[0].data
            self.assertEqual(model.shape, (20, 30))
            self.assertEqual(np.unravel_index(np.argmax(model), model.shape), (10, 15))

    def test_render_needs_coefficients(self):
        with self.assertRaises(SystemExit):
            main(['8x8', '--output', os.devnull])

if __name__ == '__main__':
    unittest.main()
