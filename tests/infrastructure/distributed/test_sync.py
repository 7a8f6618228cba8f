import unittest

import numpy as np

from src.arbornn.infrastructure._module import Module
from src.arbornn.infrastructure._variable import Variable
from src.arbornn.infrastructure.containers._sequential import Sequential
from src.arbornn.infrastructure.distributed._sync import (
    LocalReducer,
    all_reduce_parameters,
    distribute_module_grads,
)


class Leaf(Module):
    def __init__(self, n_params, value=1.0):
        super().__init__(
            Variable(np.full((2,), value, dtype=np.float32)) for _ in range(n_params)
        )

    def forward(self, inputs):
        return list(inputs)


class TestDistributeModuleGrads(unittest.TestCase):

    def test_reducer_sees_gradients_in_arrival_order(self):
        """The reducer should receive params as their grads arrive."""
        model = Sequential(Leaf(2), Leaf(1))
        reducer = LocalReducer()
        distribute_module_grads(model, reducer)

        params = model.params()
        for p in reversed(params):
            p.accumulate_grad(np.ones(2))
        self.assertEqual(reducer.pending, list(reversed(params)))

        reducer.finalize()
        self.assertEqual(reducer.pending, [])
        self.assertEqual(reducer.finalized_count, 3)

    def test_frozen_params_are_not_reduced(self):
        """Params in eval mode should not reach the reducer."""
        model = Sequential(Leaf(2))
        reducer = LocalReducer()
        distribute_module_grads(model, reducer)
        model.eval()
        for p in model.params():
            p.accumulate_grad(np.ones(2))
        self.assertEqual(reducer.pending, [])

    def test_finalize_scales_each_gradient_once(self):
        """finalize() should scale a repeated param only once."""
        model = Sequential(Leaf(1))
        reducer = LocalReducer(scale=0.5)
        distribute_module_grads(model, reducer)

        (p,) = model.params()
        p.accumulate_grad(np.ones(2))
        p.accumulate_grad(np.ones(2))
        reducer.finalize()
        np.testing.assert_allclose(p.grad, [1.0, 1.0])


class TestAllReduceParameters(unittest.TestCase):

    def test_local_all_reduce_is_identity(self):
        """The local all-reduce should leave params unchanged."""
        model = Sequential(Leaf(2, value=3.0))
        all_reduce_parameters(model, LocalReducer.all_reduce)
        for p in model.params():
            np.testing.assert_allclose(p.data, [3.0, 3.0])

    def test_average_over_world(self):
        """all_reduce_parameters() should divide by world size when averaging."""
        leaf = Leaf(1, value=2.0)
        model = Sequential(leaf)
        # Two replicas holding identical weights sum to twice the value.
        all_reduce_parameters(model, lambda a: a * 2, world_size=2)
        np.testing.assert_allclose(leaf.params()[0].data, [2.0, 2.0])

        all_reduce_parameters(model, lambda a: a * 2, world_size=2, average=False)
        np.testing.assert_allclose(leaf.params()[0].data, [4.0, 4.0])

    def test_rejects_bad_world_size(self):
        """A non-positive world size should raise ValueError."""
        with self.assertRaises(ValueError):
            all_reduce_parameters(Sequential(), LocalReducer.all_reduce, world_size=0)


if __name__ == "__main__":
    unittest.main()
