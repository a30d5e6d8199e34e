import unittest

import numpy as np

from src.tensorfold.infrastructure.tensor import ThreadedImage, ThreadedMatrix
from src.tensorfold.infrastructure.tensor._image import Image as NumpyImage
from src.tensorfold.infrastructure.tensor._matrix import Matrix as NumpyMatrix
from src.tensorfold.infrastructure.tensor._threaded import _sample_chunks


class TestSampleChunks(unittest.TestCase):
    def test_chunks_cover_range_without_overlap(self):
        for n in (0, 1, 7, 64, 1001):
            chunks = _sample_chunks(n)
            covered = [i for s in chunks for i in range(s.start, s.stop)]
            self.assertEqual(covered, list(range(n)))


class TestThreadedMatchesNumpy(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(7)

    def test_matmul(self):
        a = self.rng.normal(size=(16, 12))
        b = self.rng.normal(size=(12, 257))
        out = ThreadedMatrix(a).dot(ThreadedMatrix(b))
        self.assertIsInstance(out, ThreadedMatrix)
        np.testing.assert_allclose(
            out.to_numpy(), NumpyMatrix(a).dot(NumpyMatrix(b)).to_numpy(), atol=1e-12
        )

    def test_correlation_kernels(self):
        x = self.rng.normal(size=(6, 6, 2, 40))
        k = self.rng.normal(size=(3, 3, 2, 3))
        g = self.rng.normal(size=(4, 4, 3, 40))

        tx, tk, tg = ThreadedImage(x), ThreadedImage(k), ThreadedImage(g)
        nx, nk, ng = NumpyImage(x), NumpyImage(k), NumpyImage(g)

        np.testing.assert_allclose(
            tx.cross_correlate(tk).to_numpy(), nx.cross_correlate(nk).to_numpy(), atol=1e-12
        )
        np.testing.assert_allclose(
            tg.convolve_full(tk).to_numpy(), ng.convolve_full(nk).to_numpy(), atol=1e-12
        )
        np.testing.assert_allclose(
            tx.correlate_samples(tg).to_numpy(),
            nx.correlate_samples(ng).to_numpy(),
            atol=1e-10,
        )

    def test_flatten_keeps_backend(self):
        flat = ThreadedImage.zeros(2, 2, 1, 3).flatten()
        self.assertIsInstance(flat, ThreadedMatrix)


if __name__ == "__main__":
    unittest.main()
