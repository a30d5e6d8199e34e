import math
import unittest

from src.tensorfold.infrastructure.models import (
    EpochEvaluation,
    ModelEvaluation,
    TrainingEvaluation,
)


class TestEpochEvaluation(unittest.TestCase):
    def test_frozen(self):
        e = EpochEvaluation(0.5)
        with self.assertRaises(Exception):
            e.train_loss = 1.0  # type: ignore[misc]

    def test_missing_metrics_are_none(self):
        e = EpochEvaluation(0.5)
        self.assertIsNone(e.validation_loss_mean)
        self.assertIsNone(e.r2_score)
        self.assertIsNone(e.non_finite_metric())

    def test_non_finite_metric(self):
        e = EpochEvaluation(0.5, validation_loss_mean=math.inf)
        self.assertEqual(e.non_finite_metric(), ("validation_loss_mean", math.inf))


class TestAggregation(unittest.TestCase):
    def _fold(self, *finals):
        t = TrainingEvaluation()
        t.add_epoch(EpochEvaluation(9.0))
        t.add_epoch(EpochEvaluation(*finals))
        return t

    def test_final_epoch(self):
        t = self._fold(1.0, 2.0, 0.5, 0.9)
        self.assertEqual(t.get_final_epoch().validation_loss_mean, 2.0)
        with self.assertRaises(IndexError):
            TrainingEvaluation().get_final_epoch()

    def test_final_average_skips_missing_metrics(self):
        m = ModelEvaluation()
        m.add_fold(self._fold(1.0, 2.0, 0.5, 0.8))
        m.add_fold(self._fold(3.0, 4.0, 1.5, None))
        avg = m.get_final_average()
        self.assertEqual(avg.train_loss, 2.0)
        self.assertEqual(avg.validation_loss_mean, 3.0)
        self.assertEqual(avg.validation_loss_std, 1.0)
        self.assertEqual(avg.r2_score, 0.8)

    def test_json_round_trip(self):
        m = ModelEvaluation()
        m.add_fold(self._fold(1.0, 2.0, 0.5, 0.8))
        back = ModelEvaluation.from_json(m.to_json())
        self.assertEqual(len(back), 1)
        self.assertEqual(back.folds[0].epochs, m.folds[0].epochs)


if __name__ == "__main__":
    unittest.main()
