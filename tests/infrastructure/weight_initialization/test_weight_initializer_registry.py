import unittest

from src.tensorfold.infrastructure.tensor import Matrix
from src.tensorfold.infrastructure.utils.weight_initializer import WeightInitializer


class TestWeightInitializerRegistry(unittest.TestCase):
    def test_builtins_registered(self):
        names = WeightInitializer.available()
        for n in (
            "zeros",
            "ones",
            "uniform",
            "uniform_signed",
            "glorot_uniform",
            "xavier_uniform",
            "xavier",
            "glorot_normal",
            "kaiming",
            "kaiming_uniform",
        ):
            self.assertIn(n, names)
        self.assertEqual(list(names), sorted(names))

    def test_unknown_name_lists_available(self):
        with self.assertRaises(ValueError) as ctx:
            WeightInitializer("does_not_exist")
        self.assertIn("zeros", str(ctx.exception))

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):

            @WeightInitializer.register_initializer("zeros")
            def _dup(tensor_cls, *dims):
                return tensor_cls.zeros(*dims)

    def test_overwrite_and_dispatch(self):
        name = "__test_twos"
        try:

            @WeightInitializer.register_initializer(name)
            def twos(tensor_cls, *dims):
                return tensor_cls.constant(*dims, value=2.0)

            @WeightInitializer.register_initializer(name, overwrite=True)
            def threes(tensor_cls, *dims):
                return tensor_cls.constant(*dims, value=3.0)

            init = WeightInitializer(name)
            self.assertEqual(repr(init), f"WeightInitializer({name!r})")
            out = init(Matrix, 2, 3)
            self.assertEqual(out.shape, (2, 3))
            self.assertTrue((out.to_numpy() == 3.0).all())
        finally:
            WeightInitializer.INITIALIZERS.pop(name, None)

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            WeightInitializer.register_initializer("")


if __name__ == "__main__":
    unittest.main()
