import unittest

import numpy as np

from src.tensorfold.domain._errors import UninitializedStateError
from src.tensorfold.domain._optimizers import IOptimizer
from src.tensorfold.infrastructure._optimizers import (
    SGD,
    Adam,
    InverseTimeDecay,
    Momentum,
    adam,
    momentum,
    sgd,
)
from src.tensorfold.infrastructure.optimizers._state import LazyBuffer
from src.tensorfold.infrastructure.tensor import Image, Matrix


class TestSGD(unittest.TestCase):
    def test_zero_gradient_is_identity(self):
        p = Matrix.from_rows([[1.0, -2.0], [3.0, 4.5]])
        opt = sgd(0.7)
        for epoch in range(5):
            out = opt.update_parameters(epoch, p, Matrix.zeros(2, 2))
            np.testing.assert_array_equal(out.to_numpy(), p.to_numpy())

    def test_step(self):
        p = Matrix.from_rows([[1.0, 2.0, 3.0]])
        g = Matrix.from_rows([[0.1, -0.2, 0.3]])
        out = SGD(0.5).update_parameters(0, p, g)
        np.testing.assert_allclose(out.to_numpy(), [[0.95, 2.1, 2.85]])

    def test_schedule_is_evaluated_per_epoch(self):
        p = Matrix.constant(1, 1, value=0.0)
        g = Matrix.constant(1, 1, value=1.0)
        opt = SGD(InverseTimeDecay(1.0, 1.0))
        self.assertAlmostEqual(opt.update_parameters(3, p, g).values()[0], -0.25)

    def test_invalid_lr(self):
        with self.assertRaises(ValueError):
            SGD(0.0)
        with self.assertRaises(TypeError):
            SGD(True)

    def test_protocol(self):
        self.assertIsInstance(sgd(), IOptimizer)
        self.assertIsInstance(adam(), IOptimizer)


class TestMomentum(unittest.TestCase):
    def test_constant_gradient_steps_grow_and_stay_bounded(self):
        lr, m = 0.1, 0.9
        opt = momentum(lr, m)
        p = Matrix.constant(1, 1, value=0.0)
        g = Matrix.constant(1, 1, value=1.0)
        bound = lr * 1.0 / (1.0 - m)
        prev_step = 0.0
        for epoch in range(200):
            new_p = opt.update_parameters(epoch, p, g)
            step = p.values()[0] - new_p.values()[0]
            self.assertGreater(step, prev_step)
            self.assertLess(step, bound)
            prev_step, p = step, new_p
        self.assertAlmostEqual(prev_step, bound, places=6)

    def test_invalid_momentum(self):
        for m in (-0.1, 1.0):
            with self.assertRaises(ValueError):
                Momentum(0.1, momentum=m)

    def test_fresh_has_no_state(self):
        opt = Momentum(0.1)
        opt.update_parameters(0, Matrix.zeros(1, 1), Matrix.constant(1, 1, value=1.0))
        self.assertTrue(opt.velocity.initialized)
        copy = opt.fresh()
        self.assertFalse(copy.velocity.initialized)
        self.assertEqual(copy.momentum, opt.momentum)


class TestAdam(unittest.TestCase):
    def test_first_step_moves_by_lr(self):
        # bias correction makes the first step lr * sign(g)
        opt = Adam(0.01)
        p = Matrix.from_rows([[1.0, 1.0]])
        g = Matrix.from_rows([[0.5, -3.0]])
        out = opt.update_parameters(0, p, g)
        np.testing.assert_allclose(out.to_numpy(), [[0.99, 1.01]], atol=1e-6)

    def test_works_on_images(self):
        opt = Adam(0.01)
        k = Image.zeros(2, 2, 1, 3)
        out = opt.update_parameters(0, k, Image.constant(2, 2, 1, 3, value=1.0))
        self.assertIsInstance(out, Image)
        np.testing.assert_allclose(out.to_numpy(), -0.01, atol=1e-6)

    def test_invalid_hyperparameters(self):
        with self.assertRaises(ValueError):
            Adam(0.01, betas=(1.0, 0.999))
        with self.assertRaises(ValueError):
            Adam(0.01, eps=0.0)

    def test_state_is_not_shared_between_fresh_copies(self):
        proto = Adam(0.01)
        a, b = proto.fresh(), proto.fresh()
        a.update_parameters(0, Matrix.zeros(1, 1), Matrix.constant(1, 1, value=1.0))
        self.assertTrue(a.m.initialized)
        self.assertFalse(b.m.initialized)
        self.assertFalse(proto.m.initialized)


class TestLazyBuffer(unittest.TestCase):
    def test_read_before_initialization_raises(self):
        buf = LazyBuffer("test.buffer")
        with self.assertRaises(UninitializedStateError):
            _ = buf.value

    def test_initialize_like_zero_fills_once(self):
        buf = LazyBuffer("test.buffer")
        first = buf.initialize_like(Matrix.constant(2, 3, value=5.0))
        self.assertEqual(first.shape, (2, 3))
        self.assertEqual(first.sum(), 0.0)
        buf.value = Matrix.constant(2, 3, value=1.0)
        self.assertEqual(buf.initialize_like(Matrix.zeros(2, 3)).sum(), 6.0)
        buf.reset()
        self.assertFalse(buf.initialized)


if __name__ == "__main__":
    unittest.main()
