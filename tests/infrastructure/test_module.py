import unittest

import numpy as np

from src.arbornn.domain._errors import ParamIndexError
from src.arbornn.infrastructure._config import MODULE_DEFAULTS, ModuleDefaults
from src.arbornn.infrastructure._module import Module
from src.arbornn.infrastructure._variable import Variable


class Scale(Module):
    def __init__(self, factor=2.0):
        super().__init__([Variable(np.array([factor], dtype=np.float32))])

    def forward(self, inputs):
        w = self.param(0).data
        return [Variable(x.data * w) for x in inputs]


class TestModuleBase(unittest.TestCase):

    def test_default_mode_is_train(self):
        """Modules should start in train mode by default."""
        self.assertTrue(Module().is_train)

    def test_initial_mode_follows_config(self):
        """The initial mode should come from MODULE_DEFAULTS."""
        MODULE_DEFAULTS.train_mode = False
        self.addCleanup(setattr, MODULE_DEFAULTS, "train_mode", True)
        self.assertFalse(Module().is_train)

    def test_config_validate(self):
        """validate() should reject a non-bool train_mode."""
        ModuleDefaults().validate()
        with self.assertRaises(TypeError):
            ModuleDefaults(train_mode="yes").validate()

    def test_params_returns_copy(self):
        """Mutating the params() result should not change the module."""
        m = Scale()
        params = m.params()
        params.append(Variable(np.zeros(1)))
        self.assertEqual(len(m.params()), 1)

    def test_register_param_returns_position(self):
        """register_param() should return the new flat position."""
        m = Module()
        self.assertEqual(m.register_param(Variable(np.zeros(1))), 0)
        self.assertEqual(m.register_param(Variable(np.zeros(1))), 1)

    def test_set_params_replaces(self):
        """set_params() should replace the param at the position."""
        m = Scale()
        v = Variable(np.array([5.0], dtype=np.float32))
        m.set_params(v, 0)
        self.assertIs(m.param(0), v)

    def test_set_params_out_of_range_does_not_mutate(self):
        """set_params() should raise on bad positions without mutating."""
        m = Scale()
        before = m.params()
        for bad in (1, -1):
            with self.assertRaises(ParamIndexError):
                m.set_params(Variable(np.zeros(1)), bad)
        self.assertEqual(m.params(), before)

    def test_param_out_of_range(self):
        """param() should raise IndexError past the end."""
        with self.assertRaises(IndexError):
            Scale().param(3)

    def test_train_eval_toggle_calc_grad(self):
        """train()/eval() should toggle calc_grad on every param."""
        m = Scale()
        m.eval()
        self.assertFalse(m.is_train)
        self.assertFalse(m.param(0).calc_grad)
        m.train()
        self.assertTrue(m.is_train)
        self.assertTrue(m.param(0).calc_grad)

    def test_call_delegates_to_forward(self):
        """Calling the module should delegate to forward()."""
        out = Scale(3.0)([Variable(np.array([2.0], dtype=np.float32))])
        np.testing.assert_allclose(out[0].data, [6.0])

    def test_forward_is_abstract(self):
        """The base forward() should be abstract."""
        with self.assertRaises(NotImplementedError):
            Module().forward([])

    def test_zero_grad(self):
        """zero_grad() should clear every param gradient."""
        m = Scale()
        m.param(0).accumulate_grad(np.ones(1))
        m.zero_grad()
        self.assertIsNone(m.param(0).grad)

    def test_clone_is_independent(self):
        """clone() should return an independent copy."""
        m = Scale(2.0)
        c = m.clone()
        self.assertIsInstance(c, Scale)
        self.assertIsNot(c.param(0), m.param(0))
        c.param(0).data[0] = 9.0
        self.assertEqual(m.param(0).data[0], 2.0)

    def test_pretty_string_defaults_to_class_name(self):
        """pretty_string() should default to the class name."""
        self.assertEqual(Scale().pretty_string(), "Scale")
        self.assertEqual(str(Scale()), "Scale")


if __name__ == "__main__":
    unittest.main()
