import unittest

import numpy as np

from src.tensorfold.domain._errors import UninitializedStateError
from src.tensorfold.infrastructure.layers import AvgPooling, MaxPooling
from src.tensorfold.infrastructure.tensor import Image


class TestAvgPooling(unittest.TestCase):
    def test_gradient_spreads_evenly(self):
        layer = AvgPooling(2)
        out = layer.forward(Image.from_fn(4, 4, 1, 1, fn=lambda r, c, ch, n: r + c))
        self.assertEqual(out.shape, (2, 2, 1, 1))
        grad = layer.backward(0, Image.constant(2, 2, 1, 1, value=1.0)).to_numpy()
        np.testing.assert_allclose(grad, np.full((4, 4, 1, 1), 0.25))

    def test_trailing_cells_get_zero_gradient(self):
        layer = AvgPooling(2)
        layer.forward(Image.zeros(5, 5, 2, 3))
        grad = layer.backward(0, Image.constant(2, 2, 2, 3, value=1.0)).to_numpy()
        self.assertEqual(grad.shape, (5, 5, 2, 3))
        self.assertEqual(grad[4].sum() + grad[:, 4].sum(), 0.0)

    def test_backward_before_forward_raises(self):
        with self.assertRaises(UninitializedStateError):
            AvgPooling(2).backward(0, Image.zeros(1, 1, 1, 1))


class TestMaxPooling(unittest.TestCase):
    def test_gradient_goes_to_argmax(self):
        x = np.array(
            [[1.0, 9.0, 2.0, 0.0], [3.0, 4.0, 8.0, 5.0], [0.0, 0.0, 1.0, 1.0], [7.0, 0.0, 1.0, 6.0]]
        ).reshape(4, 4, 1, 1)
        layer = MaxPooling(2)
        out = layer.forward(Image(x))
        np.testing.assert_array_equal(out.to_numpy()[:, :, 0, 0], [[9, 8], [7, 6]])

        g = Image.from_values([1.0, 2.0, 3.0, 4.0], 2, 2, 1, 1)
        grad = layer.backward(0, g).to_numpy()[:, :, 0, 0]
        expected = np.zeros((4, 4))
        expected[0, 1] = 1.0
        expected[1, 2] = 2.0
        expected[3, 0] = 3.0
        expected[3, 3] = 4.0
        np.testing.assert_array_equal(grad, expected)

    def test_pooling_is_per_channel_and_sample(self):
        rng = np.random.default_rng(0)
        x = rng.normal(size=(4, 4, 3, 2))
        layer = MaxPooling(2)
        out = layer.forward(Image(x)).to_numpy()
        for ch in range(3):
            for n in range(2):
                self.assertEqual(out[0, 0, ch, n], x[:2, :2, ch, n].max())
        grad = layer.backward(0, Image.constant(2, 2, 3, 2, value=1.0)).to_numpy()
        self.assertEqual(grad.sum(), 2 * 2 * 3 * 2)

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            MaxPooling(0)


if __name__ == "__main__":
    unittest.main()
