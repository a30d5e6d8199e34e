import unittest

import numpy as np

from src.tensorfold.infrastructure.layers import Activation, ActivationFunction
from src.tensorfold.infrastructure.tensor import Image, Matrix


def _numeric_input_grad(layer, x0, g, eps=1e-6):
    grad = np.zeros_like(x0)
    for idx in np.ndindex(x0.shape):
        plus = x0.copy()
        plus[idx] += eps
        minus = x0.copy()
        minus[idx] -= eps
        fp = np.sum(layer.forward(Matrix(plus)).to_numpy() * g)
        fm = np.sum(layer.forward(Matrix(minus)).to_numpy() * g)
        grad[idx] = (fp - fm) / (2 * eps)
    return grad


class TestActivationRegistry(unittest.TestCase):
    def test_builtins_registered(self):
        for name in ("linear", "relu", "leaky_relu", "sigmoid", "tanh", "softmax"):
            self.assertIn(name, Activation.available())

    def test_unknown_name_raises(self):
        with self.assertRaises(ValueError):
            Activation("swish-ish")

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):

            @Activation.register_activation("relu")
            class _Again(ActivationFunction):
                pass


class TestActivationValues(unittest.TestCase):
    def setUp(self):
        self.x = Matrix.from_rows([[-2.0, 0.5], [1.0, -0.1]])

    def test_relu(self):
        np.testing.assert_array_equal(
            Activation("relu").forward(self.x).to_numpy(), [[0.0, 0.5], [1.0, 0.0]]
        )

    def test_leaky_relu(self):
        np.testing.assert_allclose(
            Activation("leaky_relu").forward(self.x).to_numpy(), [[-0.02, 0.5], [1.0, -0.001]]
        )

    def test_sigmoid_is_finite_for_large_inputs(self):
        out = Activation("sigmoid").forward(Matrix.from_rows([[-1e4, 0.0, 1e4]])).to_numpy()
        self.assertTrue(np.isfinite(out).all())
        np.testing.assert_allclose(out, [[0.0, 0.5, 1.0]], atol=1e-12)

    def test_softmax_columns_sum_to_one(self):
        out = Activation("softmax").forward(
            Matrix.from_rows([[1.0, 1000.0], [2.0, 1000.0], [3.0, 1000.0]])
        )
        np.testing.assert_allclose(out.sum_features().to_numpy(), [[1.0, 1.0]])
        np.testing.assert_allclose(out.to_numpy()[:, 1], [1 / 3] * 3)

    def test_softmax_requires_matrix(self):
        with self.assertRaises(TypeError):
            Activation("softmax").forward(Image.zeros(2, 2, 1, 1))

    def test_elementwise_activation_on_images(self):
        out = Activation("tanh").forward(Image.zeros(2, 2, 1, 1))
        self.assertEqual(out.shape, (2, 2, 1, 1))


class TestActivationGradients(unittest.TestCase):
    def test_backward_matches_finite_differences(self):
        rng = np.random.default_rng(0)
        x0 = rng.normal(size=(4, 3))
        g = rng.normal(size=(4, 3))
        for name in ("linear", "sigmoid", "tanh", "softmax", "leaky_relu"):
            with self.subTest(activation=name):
                layer = Activation(name)
                numeric = _numeric_input_grad(layer, x0, g)
                layer.forward(Matrix(x0))
                analytic = layer.backward(0, Matrix(g)).to_numpy()
                np.testing.assert_allclose(analytic, numeric, atol=1e-5)


if __name__ == "__main__":
    unittest.main()
