import unittest

import numpy as np

from src.tensorfold.domain._errors import ShapeMismatchError
from src.tensorfold.infrastructure._losses import BCE, CCE, MSE, Loss, get_loss
from src.tensorfold.infrastructure.tensor import Matrix


def _numeric_grad(loss, y, p0, eps=1e-6):
    grad = np.zeros_like(p0)
    for idx in np.ndindex(p0.shape):
        plus = p0.copy()
        plus[idx] += eps
        minus = p0.copy()
        minus[idx] -= eps
        grad[idx] = (loss.loss(y, Matrix(plus)) - loss.loss(y, Matrix(minus))) / (2 * eps)
    return grad


class TestLossRegistry(unittest.TestCase):
    def test_lookup(self):
        self.assertIsInstance(get_loss("mse"), MSE)
        self.assertIsInstance(get_loss("bce"), BCE)
        self.assertIsInstance(get_loss("cce"), CCE)
        self.assertEqual(set(Loss.LOSSES), {"mse", "bce", "cce"})

    def test_unknown(self):
        with self.assertRaises(ValueError):
            get_loss("hinge")


class TestMSE(unittest.TestCase):
    def test_values(self):
        y = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])
        p = Matrix.from_rows([[1.0, 0.0], [3.0, 7.0]])
        self.assertAlmostEqual(MSE().loss(y, p), (4.0 + 9.0) / 4)
        self.assertEqual(MSE().sample_losses(y, p), [0.0, 6.5])

    def test_shape_check(self):
        with self.assertRaises(ShapeMismatchError):
            MSE().loss(Matrix.zeros(2, 2), Matrix.zeros(2, 1))


class TestLossGradients(unittest.TestCase):
    def test_gradients_match_finite_differences(self):
        rng = np.random.default_rng(0)
        y_reg = Matrix(rng.normal(size=(3, 4)))
        y_bin = Matrix((rng.uniform(size=(3, 4)) > 0.5).astype(float))
        onehot = np.zeros((3, 4))
        onehot[rng.integers(0, 3, size=4), np.arange(4)] = 1.0
        y_cat = Matrix(onehot)
        probs = rng.uniform(0.1, 0.9, size=(3, 4))

        cases = [
            (MSE(), y_reg, rng.normal(size=(3, 4))),
            (BCE(), y_bin, probs),
            (CCE(), y_cat, probs),
        ]
        for loss, y, p0 in cases:
            with self.subTest(loss=type(loss).__name__):
                analytic = loss.loss_prime(y, Matrix(p0)).to_numpy()
                np.testing.assert_allclose(analytic, _numeric_grad(loss, y, p0), atol=1e-5)

    def test_sample_losses_average_to_batch_loss(self):
        rng = np.random.default_rng(1)
        y = Matrix((rng.uniform(size=(2, 5)) > 0.5).astype(float))
        p = Matrix(rng.uniform(0.05, 0.95, size=(2, 5)))
        for loss in (MSE(), BCE()):
            with self.subTest(loss=type(loss).__name__):
                self.assertAlmostEqual(float(np.mean(loss.sample_losses(y, p))), loss.loss(y, p))


if __name__ == "__main__":
    unittest.main()
