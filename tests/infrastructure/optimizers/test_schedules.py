import unittest

from src.tensorfold.infrastructure.optimizers._schedules import (
    Constant,
    ExponentialDecay,
    InverseTimeDecay,
    PiecewiseConstant,
    as_schedule,
)


class TestSchedules(unittest.TestCase):
    def test_constant(self):
        s = Constant(0.1)
        self.assertEqual([s(e) for e in (0, 5, 100)], [0.1, 0.1, 0.1])

    def test_inverse_time_decay(self):
        s = InverseTimeDecay(1.0, 0.5)
        self.assertEqual(s(0), 1.0)
        self.assertAlmostEqual(s(2), 0.5)
        self.assertAlmostEqual(s(6), 0.25)

    def test_exponential_decay(self):
        s = ExponentialDecay(1.0, 0.5, steps=2)
        self.assertAlmostEqual(s(2), 0.5)
        self.assertAlmostEqual(s(1), 0.5**0.5)
        stair = ExponentialDecay(1.0, 0.5, steps=2, staircase=True)
        self.assertEqual(stair(1), 1.0)
        self.assertEqual(stair(3), 0.5)

    def test_piecewise_constant(self):
        s = PiecewiseConstant(boundaries=(10, 20), rates=(0.1, 0.01, 0.001))
        self.assertEqual((s(0), s(9), s(10), s(19), s(20), s(500)), (0.1, 0.1, 0.01, 0.01, 0.001, 0.001))

    def test_validation(self):
        with self.assertRaises(ValueError):
            Constant(-1.0)
        with self.assertRaises(ValueError):
            InverseTimeDecay(0.1, -1.0)
        with self.assertRaises(ValueError):
            ExponentialDecay(0.1, 1.5)
        with self.assertRaises(ValueError):
            PiecewiseConstant(boundaries=(10,), rates=(0.1,))
        with self.assertRaises(ValueError):
            PiecewiseConstant(boundaries=(20, 10), rates=(0.1, 0.2, 0.3))

    def test_as_schedule(self):
        self.assertEqual(as_schedule(0.5), Constant(0.5))
        s = InverseTimeDecay(0.1, 0.1)
        self.assertIs(as_schedule(s), s)
        with self.assertRaises(TypeError):
            as_schedule("fast")


if __name__ == "__main__":
    unittest.main()
