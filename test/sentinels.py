"""
Utility helpers behavioral tests (Unset, coalesce, rename, mirror, ordinal).

Scope
- Validate the Unset sentinel contract (falsey, singleton, final, unions).
- Validate coalesce() fallbacks and rename() in both call forms.
- Validate mirror() read-only, copy-on-read properties.
- Validate ordinal() words, suffixes and argument checks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argspan.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):
                pass

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(3, str | Unset))


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce()."""

    def testUnsetReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesKept(self):
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    """Behavioral tests for rename()."""

    def testDirectForm(self):
        function = rename(lambda: 0, "answer")
        self.assertEqual(function.__name__, "answer")
        self.assertEqual(function.__qualname__, "answer")

    def testDecoratorForm(self):
        @rename("renamed")
        def original():
            pass
        self.assertEqual(original.__name__, "renamed")

    def testBadArguments(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(3, "name")
        with self.assertRaises(TypeError):
            rename(print, 3)
        with self.assertRaises(TypeError):
            rename("name")(3)


class TestMirror(TestCase):
    """Behavioral tests for mirror()."""

    class Holder:
        items = mirror("items")
        label = mirror("label")

        def __init__(self):
            self._items = ["a", {"b": ["c"]}]
            self._label = "holder"

    def testReadsBackingField(self):
        self.assertEqual(self.Holder().label, "holder")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Holder().label = "other"

    def testContainersCopied(self):
        holder = self.Holder()
        items = holder.items
        items.append("d")
        items[1]["b"].append("e")
        self.assertEqual(holder.items, ["a", {"b": ["c"]}])

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(3)


class TestOrdinal(TestCase):
    """Behavioral tests for ordinal()."""

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        expected = {
            11: "11th",
            12: "12th",
            13: "13th",
            21: "21st",
            22: "22nd",
            23: "23rd",
            101: "101st",
            111: "111th",
            112: "112th",
        }
        for number, label in expected.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), label)

    def testRejectsNonPositive(self):
        with self.assertRaises(ValueError):
            ordinal(0)

    def testRejectsNonInteger(self):
        ordinal(1)
        for value in (True, 1.0, "1"):
            with self.subTest(value=value):
                with self.assertRaises(TypeError):
                    ordinal(value)


if __name__ == "__main__":
    unittest.main()
