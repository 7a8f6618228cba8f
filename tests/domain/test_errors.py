import unittest

from src.arbornn.domain._errors import (
    EmptyModuleWrapperError,
    ModuleIndexError,
    OutputArityError,
    ParamIndexError,
)


class TestErrorTaxonomy(unittest.TestCase):

    def test_index_errors_are_index_errors(self):
        """Index errors should subclass IndexError and keep context."""
        err = ModuleIndexError(3, 2)
        self.assertIsInstance(err, IndexError)
        self.assertEqual((err.index, err.size), (3, 2))
        self.assertIn("3", str(err))

        err = ParamIndexError(-1, 5)
        self.assertIsInstance(err, IndexError)
        self.assertEqual((err.position, err.size), (-1, 5))

    def test_output_arity_is_value_error(self):
        """OutputArityError should subclass ValueError."""
        err = OutputArityError(2)
        self.assertIsInstance(err, ValueError)
        self.assertEqual(err.count, 2)
        self.assertIn("Module output size is not 1", str(err))

    def test_empty_wrapper_is_attribute_error(self):
        """EmptyModuleWrapperError should subclass AttributeError."""
        err = EmptyModuleWrapperError("forward")
        self.assertIsInstance(err, AttributeError)
        self.assertEqual(err.name, "forward")


if __name__ == "__main__":
    unittest.main()
