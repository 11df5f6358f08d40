"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import observerkit


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        for name in observerkit.__all__:
            self.assertIsNotNone(getattr(observerkit, name), name)
        self.assertTrue(callable(observerkit.load_config))
        self.assertEqual(observerkit.DEFAULT_TOPIC, "default")

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(observerkit, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
