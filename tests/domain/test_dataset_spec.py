import unittest

from src.tensorfold.domain._dataset import DatasetSpec, Feature, IDataTable
from src.tensorfold.domain._errors import MissingRequiredColumnError
from src.tensorfold.infrastructure.data import DataTable


class TestDatasetSpec(unittest.TestCase):
    def setUp(self):
        self.spec = DatasetSpec.from_names(["a", "b"], ["y"], id_column="id")

    def test_roles(self):
        self.assertEqual(self.spec.input_names(), ["a", "b"])
        self.assertEqual(self.spec.output_names(), ["y"])
        self.assertEqual(self.spec.get_id_column(), "id")
        self.assertEqual(self.spec.predicted_names(), ["pred_y"])

    def test_missing_id_raises(self):
        spec = DatasetSpec.from_names(["a"], ["y"])
        self.assertIsNone(spec.get_id_column())
        with self.assertRaises(MissingRequiredColumnError) as ctx:
            spec.require_id_column()
        self.assertEqual(ctx.exception.role, "id")

    def test_missing_outputs_raises(self):
        spec = DatasetSpec.from_names(["a"], [], id_column="id")
        with self.assertRaises(MissingRequiredColumnError) as ctx:
            spec.require_outputs()
        self.assertEqual(ctx.exception.role, "output")

    def test_duplicate_names_rejected(self):
        with self.assertRaises(ValueError):
            DatasetSpec((Feature("a"), Feature("a", out=True)))

    def test_two_id_columns_rejected(self):
        with self.assertRaises(ValueError):
            DatasetSpec((Feature("i", is_id=True), Feature("j", is_id=True)))

    def test_feature_cannot_be_output_and_id(self):
        with self.assertRaises(ValueError):
            Feature("x", out=True, is_id=True)

    def test_check_table_names_missing_column(self):
        table = DataTable({"id": [1, 2], "a": [0.0, 1.0], "y": [1.0, 2.0]})
        with self.assertRaises(MissingRequiredColumnError) as ctx:
            self.spec.check_table(table)
        self.assertEqual(ctx.exception.column, "b")
        self.assertEqual(ctx.exception.role, "input")

    def test_data_table_satisfies_protocol(self):
        self.assertIsInstance(DataTable({"a": [1.0]}), IDataTable)


if __name__ == "__main__":
    unittest.main()
