import unittest

from src.tensorfold.domain._errors import (
    MissingRequiredColumnError,
    NumericalDivergenceError,
    ParameterCountMismatchError,
    ShapeMismatchError,
    UninitializedStateError,
)


class TestErrorTaxonomy(unittest.TestCase):
    def test_shape_mismatch_is_value_error_and_keeps_shapes(self):
        e = ShapeMismatchError("add", (2, 3), (4, 3))
        self.assertIsInstance(e, ValueError)
        self.assertEqual(e.op, "add")
        self.assertEqual(tuple(e.left), (2, 3))
        self.assertEqual(tuple(e.right), (4, 3))
        self.assertIn("add", str(e))

    def test_uninitialized_state_is_runtime_error(self):
        e = UninitializedStateError("Dense.backward", "forward input")
        self.assertIsInstance(e, RuntimeError)
        self.assertIn("Dense.backward", str(e))

    def test_parameter_count_mismatch_reports_counts(self):
        e = ParameterCountMismatchError("learnable layers", 3, 2)
        self.assertIsInstance(e, ValueError)
        self.assertEqual(e.expected, 3)
        self.assertEqual(e.actual, 2)

    def test_missing_required_column_is_key_error_with_readable_message(self):
        e = MissingRequiredColumnError("id")
        self.assertIsInstance(e, KeyError)
        self.assertIn("id", str(e))
        self.assertFalse(str(e).startswith("'"))

    def test_numerical_divergence_is_arithmetic_error(self):
        e = NumericalDivergenceError("train_loss", 4, float("nan"))
        self.assertIsInstance(e, ArithmeticError)
        self.assertEqual(e.metric, "train_loss")
        self.assertEqual(e.epoch, 4)


if __name__ == "__main__":
    unittest.main()
