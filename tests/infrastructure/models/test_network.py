import unittest

import numpy as np

from src.tensorfold.domain._errors import ParameterCountMismatchError, ShapeMismatchError
from src.tensorfold.infrastructure._losses import MSE, Loss
from src.tensorfold.infrastructure._optimizers import adam, sgd
from src.tensorfold.infrastructure.layers import Activation, Dense, Dropout, Full
from src.tensorfold.infrastructure.models import Network, NetworkParams
from src.tensorfold.infrastructure.tensor import Matrix, seed


class _SpyLoss(Loss):
    """Returns scripted batch losses and a zero gradient."""

    def __init__(self, values):
        self.values = list(values)
        self.batch_sizes = []

    def loss(self, y_true, y_pred):
        self.batch_sizes.append(y_true.samples)
        return self.values[len(self.batch_sizes) - 1]

    def loss_prime(self, y_true, y_pred):
        return Matrix.zeros(*y_pred.shape)

    def sample_losses(self, y_true, y_pred):
        return [0.0] * y_true.samples


def _mlp():
    return Network(
        [
            Full(Dense(3, 5, adam(0.01)), "tanh"),
            Activation("linear"),
            Full(Dense(5, 2, adam(0.01)), "sigmoid"),
        ]
    )


class TestNetworkTraining(unittest.TestCase):
    def test_empty_network_rejected(self):
        with self.assertRaises(ValueError):
            Network([])

    def test_epoch_loss_is_sample_weighted(self):
        net = Network([Dense(1, 1, sgd(0.1))])
        spy = _SpyLoss([1.0, 3.0, 7.0])
        x = Matrix.zeros(1, 7)
        y = Matrix.zeros(1, 7)
        result = net.train(0, x, y, spy, batch_size=3)
        self.assertEqual(spy.batch_sizes, [3, 3, 1])
        self.assertAlmostEqual(result, (3 * 1.0 + 3 * 3.0 + 1 * 7.0) / 7)

    def test_full_batch_when_batch_size_is_none(self):
        net = Network([Dense(1, 1, sgd(0.1))])
        spy = _SpyLoss([2.0])
        self.assertEqual(net.train(0, Matrix.zeros(1, 5), Matrix.zeros(1, 5), spy), 2.0)
        self.assertEqual(spy.batch_sizes, [5])

    def test_sample_count_mismatch_raises(self):
        net = Network([Dense(2, 1, sgd(0.1))])
        with self.assertRaises(ShapeMismatchError):
            net.train(0, Matrix.zeros(2, 4), Matrix.zeros(1, 3), MSE())

    def test_invalid_batch_size_raises(self):
        net = Network([Dense(2, 1, sgd(0.1))])
        with self.assertRaises(ValueError):
            net.train(0, Matrix.zeros(2, 4), Matrix.zeros(1, 4), MSE(), batch_size=0)

    def test_linear_fit_end_to_end(self):
        seed(0)
        net = Network([Dense(2, 1, sgd(0.1))])
        x = Matrix.from_columns([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        y = Matrix.from_columns([[0.0], [1.0], [1.0], [2.0]])
        loss = MSE()
        for epoch in range(100):
            net.train(epoch, x, y, loss, batch_size=2)
        pred = net.predict(Matrix.from_columns([[2.0, 2.0]])).values()[0]
        self.assertAlmostEqual(pred, 4.0, delta=0.1)

    def test_training_reduces_loss(self):
        seed(3)
        net = _mlp()
        rng = np.random.default_rng(3)
        x = Matrix(rng.normal(size=(3, 32)))
        y = Matrix(rng.uniform(0.2, 0.8, size=(2, 32)))
        loss = MSE()
        first = net.train(0, x, y, loss, batch_size=8)
        for epoch in range(1, 60):
            last = net.train(epoch, x, y, loss, batch_size=8)
        self.assertLess(last, first)


class TestNetworkPrediction(unittest.TestCase):
    def test_predict_many_matches_predict(self):
        seed(1)
        net = _mlp()
        x = Matrix(np.random.default_rng(1).normal(size=(3, 10)))
        np.testing.assert_allclose(
            net.predict_many(x, batch_size=3).to_numpy(), net.predict(x).to_numpy()
        )

    def test_predict_evaluate_many_statistics(self):
        seed(2)
        net = _mlp()
        rng = np.random.default_rng(2)
        x = Matrix(rng.normal(size=(3, 9)))
        y = Matrix(rng.uniform(size=(2, 9)))
        preds, mean, std = net.predict_evaluate_many(x, y, MSE(), batch_size=4)
        per_sample = np.mean((preds.to_numpy() - y.to_numpy()) ** 2, axis=0)
        self.assertAlmostEqual(mean, float(per_sample.mean()))
        self.assertAlmostEqual(std, float(per_sample.std()))

        _, batch_loss = net.predict_evaluate(x, y, MSE())
        self.assertAlmostEqual(batch_loss, mean)

    def test_prediction_disables_dropout(self):
        seed(4)
        net = Network([Full(Dense(4, 4, sgd(0.1)), "relu", dropout=0.5), Dropout(0.5)])
        x = Matrix.constant(4, 6, value=1.0)
        net.train(0, x, x, MSE())
        a = net.predict(x).to_numpy()
        b = net.predict(x).to_numpy()
        np.testing.assert_array_equal(a, b)


class TestNetworkParams(unittest.TestCase):
    def test_one_entry_per_learnable_layer(self):
        net = _mlp()
        params = net.get_params()
        self.assertIsInstance(params, NetworkParams)
        self.assertEqual(len(params), 2)
        self.assertEqual(len(params[0]), 4)
        self.assertEqual(len(params[0][0]), 5)
        self.assertEqual(params[1][-1], net.layers[2].layer.biases.values())
        self.assertEqual(params.count(), net.count_parameters())
        self.assertEqual(net.count_parameters(), 3 * 5 + 5 + 5 * 2 + 2)

    def test_round_trip_gives_identical_predictions(self):
        seed(5)
        a = _mlp()
        rng = np.random.default_rng(5)
        x = Matrix(rng.normal(size=(3, 6)))
        for epoch in range(3):
            a.train(epoch, x, Matrix(rng.uniform(size=(2, 6))), MSE())
        b = _mlp()
        b.load_params(NetworkParams.loads(a.get_params().dumps()))
        np.testing.assert_array_equal(a.predict(x).to_numpy(), b.predict(x).to_numpy())

    def test_wrong_layer_count_raises(self):
        net = _mlp()
        params = net.get_params()
        with self.assertRaises(ParameterCountMismatchError):
            net.load_params(params.layers[:1])

    def test_mismatch_in_later_layer_mutates_nothing(self):
        net = _mlp()
        before = net.get_params()
        donor = _mlp().get_params().layers
        donor[1][0] = donor[1][0][:-1]
        with self.assertRaises(ParameterCountMismatchError):
            net.load_params(donor)
        self.assertEqual(net.get_params(), before)

    def test_summary(self):
        text = _mlp().summary()
        self.assertIn("Total params: 32", text)
        self.assertIn("Full[", text)


if __name__ == "__main__":
    unittest.main()
