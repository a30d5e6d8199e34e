import unittest

import numpy as np

from src.tensorfold.domain._errors import (
    ParameterCountMismatchError,
    ShapeMismatchError,
    UninitializedStateError,
)
from src.tensorfold.infrastructure._losses import MSE
from src.tensorfold.infrastructure._optimizers import sgd
from src.tensorfold.infrastructure.layers import Dense
from src.tensorfold.infrastructure.tensor import Matrix, seed


def _numeric_grad(f, arr, eps=1e-6):
    grad = np.zeros_like(arr)
    for idx in np.ndindex(arr.shape):
        plus = arr.copy()
        plus[idx] += eps
        minus = arr.copy()
        minus[idx] -= eps
        grad[idx] = (f(plus) - f(minus)) / (2 * eps)
    return grad


class TestDenseShapes(unittest.TestCase):
    def test_forward_and_backward_shapes(self):
        layer = Dense(4, 3, sgd(0.01))
        for n in (1, 2, 7):
            out = layer.forward(Matrix.zeros(4, n))
            self.assertEqual(out.shape, (3, n))
            grad = layer.backward(0, Matrix.zeros(3, n))
            self.assertEqual(grad.shape, (4, n))

    def test_wrong_input_features_raises(self):
        layer = Dense(4, 3, sgd(0.01))
        with self.assertRaises(ShapeMismatchError):
            layer.forward(Matrix.zeros(5, 2))

    def test_backward_before_forward_raises(self):
        layer = Dense(2, 2, sgd(0.01))
        with self.assertRaises(UninitializedStateError):
            layer.backward(0, Matrix.zeros(2, 1))

    def test_invalid_dimensions(self):
        with self.assertRaises(ValueError):
            Dense(0, 3, sgd(0.01))


class TestDenseGradients(unittest.TestCase):
    def _check(self, s):
        rng = np.random.default_rng(s)
        seed(s)
        i, j, n = 4, 3, 5
        layer = Dense(i, j, sgd(1.0))
        w0 = rng.normal(size=(j, i))
        b0 = rng.normal(size=(j, 1))
        x0 = rng.normal(size=(i, n))
        y = Matrix(rng.normal(size=(j, n)))
        loss = MSE()

        def loss_with(w, b, x):
            layer.weights = Matrix(w)
            layer.biases = Matrix(b)
            return loss.loss(y, layer.forward(Matrix(x)))

        num_w = _numeric_grad(lambda w: loss_with(w, b0, x0), w0)
        num_b = _numeric_grad(lambda b: loss_with(w0, b, x0), b0)
        num_x = _numeric_grad(lambda x: loss_with(w0, b0, x), x0)

        layer.weights = Matrix(w0)
        layer.biases = Matrix(b0)
        pred = layer.forward(Matrix(x0))
        dx = layer.backward(0, loss.loss_prime(y, pred))

        # SGD with lr=1 subtracts exactly the analytic gradient
        np.testing.assert_allclose(w0 - layer.weights.to_numpy(), num_w, atol=1e-4)
        np.testing.assert_allclose(b0 - layer.biases.to_numpy(), num_b, atol=1e-4)
        np.testing.assert_allclose(dx.to_numpy(), num_x, atol=1e-4)

    def test_matches_finite_differences(self):
        for s in (0, 1, 2):
            with self.subTest(seed=s):
                self._check(s)


class TestDenseParameters(unittest.TestCase):
    def test_rows_layout(self):
        layer = Dense(2, 3, sgd(0.1))
        layer.weights = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        layer.biases = Matrix.from_column_vector([7.0, 8.0, 9.0])
        rows = layer.get_learnable_parameters()
        self.assertEqual(rows, [[1.0, 3.0, 5.0], [2.0, 4.0, 6.0], [7.0, 8.0, 9.0]])
        self.assertEqual(layer.parameter_layout(), (3, 3, 3))
        self.assertEqual(layer.count_parameters(), 9)

    def test_set_parameters_round_trip(self):
        a = Dense(3, 2, sgd(0.1))
        b = Dense(3, 2, sgd(0.1))
        b.set_learnable_parameters(a.get_learnable_parameters())
        np.testing.assert_array_equal(a.weights.to_numpy(), b.weights.to_numpy())
        np.testing.assert_array_equal(a.biases.to_numpy(), b.biases.to_numpy())

    def test_wrong_row_length_leaves_layer_untouched(self):
        layer = Dense(2, 2, sgd(0.1))
        before = layer.get_learnable_parameters()
        with self.assertRaises(ParameterCountMismatchError):
            layer.set_learnable_parameters([[1.0, 2.0], [3.0], [5.0, 6.0]])
        self.assertEqual(layer.get_learnable_parameters(), before)

    def test_optimizers_are_independent(self):
        proto = sgd(0.1)
        layer = Dense(2, 2, proto)
        self.assertIsNot(layer.weights_optimizer, proto)
        self.assertIsNot(layer.weights_optimizer, layer.biases_optimizer)


if __name__ == "__main__":
    unittest.main()
