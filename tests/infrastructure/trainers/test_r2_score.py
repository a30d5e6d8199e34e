import unittest

from src.tensorfold.domain._errors import ShapeMismatchError
from src.tensorfold.infrastructure.tensor import Matrix
from src.tensorfold.infrastructure.trainers import r2_score


class TestR2Score(unittest.TestCase):
    def test_perfect_prediction(self):
        y = Matrix.from_rows([[1.0, 2.0, 3.0]])
        self.assertEqual(r2_score(y, y), 1.0)

    def test_mean_prediction_scores_zero(self):
        y = Matrix.from_rows([[1.0, 2.0, 3.0]])
        p = Matrix.from_rows([[2.0, 2.0, 2.0]])
        self.assertAlmostEqual(r2_score(y, p), 0.0)

    def test_known_value(self):
        y = Matrix.from_rows([[3.0, -0.5, 2.0, 7.0]])
        p = Matrix.from_rows([[2.5, 0.0, 2.0, 8.0]])
        self.assertAlmostEqual(r2_score(y, p), 0.9486081370449679)

    def test_uniform_average_over_outputs(self):
        y = Matrix.from_rows([[1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
        p = Matrix.from_rows([[1.0, 2.0, 3.0], [2.0, 2.0, 2.0]])
        self.assertAlmostEqual(r2_score(y, p), 0.5)

    def test_constant_target(self):
        y = Matrix.from_rows([[5.0, 5.0]])
        self.assertEqual(r2_score(y, y), 1.0)
        self.assertEqual(r2_score(y, Matrix.from_rows([[5.0, 4.0]])), 0.0)

    def test_shape_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            r2_score(Matrix.zeros(1, 2), Matrix.zeros(1, 3))


if __name__ == "__main__":
    unittest.main()
