"""
Declarations module behavioral tests.

Scope
- Validate Declaration construction, normalization and immutability.
- Validate Registry ordering, duplicate rejection, lookup and value reads.

Conventions
- Test method names follow CamelCase per project convention.
- Values are stored through the parser in end-to-end tests; here only the
  registry's own contract is exercised.
"""

from __future__ import annotations

import ast
import pathlib
import unittest
from unittest import TestCase

import argspan

from argspan import (
    Declaration,
    Registry,
    Kind,
    DuplicateDeclarationError,
    LookupMissError,
)


class TestDeclaration(TestCase):
    """Behavioral tests for Declaration."""

    def testDefaults(self):
        d = Declaration(Kind.TEXT, "name")
        self.assertIs(d.kind, Kind.TEXT)
        self.assertEqual(d.name, "name")
        self.assertIsNone(d.flag)
        self.assertEqual(d.help, "")
        self.assertFalse(d.optional)

    def testKindResolvedFromType(self):
        self.assertIs(Declaration(int, "age").kind, Kind.INTEGER)

    def testNameAndFlagTrimmed(self):
        d = Declaration(Kind.TEXT, "  name ", " n ", "  who to greet  ")
        self.assertEqual(d.name, "name")
        self.assertEqual(d.flag, "n")
        self.assertEqual(d.help, "who to greet")

    def testTokensFlagFirst(self):
        self.assertEqual(Declaration(Kind.TEXT, "name", "n").tokens, ("n", "name"))
        self.assertEqual(Declaration(Kind.TEXT, "name").tokens, ("name",))

    def testPresenceAlwaysOptional(self):
        self.assertTrue(Declaration(Kind.PRESENCE, "verbose").optional)

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Declaration(Kind.TEXT, "   ")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Declaration(Kind.TEXT, 3)

    def testNameWithPrefixRejected(self):
        with self.assertRaises(ValueError):
            Declaration(Kind.TEXT, "-name")

    def testNameWithSpaceRejected(self):
        with self.assertRaises(ValueError):
            Declaration(Kind.TEXT, "full name")

    def testNameStartingWithDigitRejected(self):
        with self.assertRaises(ValueError):
            Declaration(Kind.TEXT, "1st")

    def testHyphenatedNameAllowed(self):
        self.assertEqual(Declaration(Kind.TEXT, "output-dir").name, "output-dir")

    def testFlagEqualToNameRejected(self):
        with self.assertRaises(ValueError):
            Declaration(Kind.TEXT, "name", "name")

    def testExplicitNoneFlagRejected(self):
        with self.assertRaises(TypeError):
            Declaration(Kind.TEXT, "name", None)

    def testNonStringHelpRejected(self):
        with self.assertRaises(TypeError):
            Declaration(Kind.TEXT, "name", help=None)

    def testUnknownKindRejected(self):
        with self.assertRaises(ValueError):
            Declaration("complex", "name")

    def testReadOnly(self):
        d = Declaration(Kind.TEXT, "name")
        with self.assertRaises(AttributeError):
            d.name = "other"
        with self.assertRaises(AttributeError):
            d.kind = Kind.INTEGER

    def testRepr(self):
        d = Declaration(Kind.INTEGER, "age")
        self.assertTrue(repr(d).startswith("declaration("))
        self.assertIn("name='age'", repr(d))

    def testEquality(self):
        self.assertEqual(Declaration(Kind.TEXT, "a", "x"), Declaration(Kind.TEXT, "a", "x"))
        self.assertNotEqual(Declaration(Kind.TEXT, "a"), Declaration(Kind.INTEGER, "a"))


class TestRegistry(TestCase):
    """Behavioral tests for Registry."""

    def setUp(self):
        self.registry = Registry()
        self.name = self.registry.register(Declaration(Kind.TEXT, "name", "n"))
        self.age = self.registry.register(Declaration(Kind.INTEGER, "age"))
        self.verbose = self.registry.register(Declaration(Kind.PRESENCE, "verbose", "v"))

    def testInsertionOrderPreserved(self):
        self.assertEqual([d.name for d in self.registry.all()], ["name", "age", "verbose"])
        self.assertEqual([d.name for d in self.registry], ["name", "age", "verbose"])
        self.assertEqual(len(self.registry), 3)

    def testContainsByName(self):
        self.assertIn("age", self.registry)
        self.assertNotIn("n", self.registry)

    def testDuplicateNameRejected(self):
        with self.assertRaises(DuplicateDeclarationError):
            self.registry.register(Declaration(Kind.FLOAT, "age"))

    def testNameCollidingWithFlagRejected(self):
        with self.assertRaises(DuplicateDeclarationError):
            self.registry.register(Declaration(Kind.TEXT, "n"))

    def testFlagCollidingWithNameRejected(self):
        with self.assertRaises(DuplicateDeclarationError):
            self.registry.register(Declaration(Kind.TEXT, "other", "age"))

    def testRejectedDeclarationLeavesRegistryUntouched(self):
        with self.assertRaises(DuplicateDeclarationError):
            self.registry.register(Declaration(Kind.TEXT, "fresh", "v"))
        self.assertNotIn("fresh", self.registry)
        self.assertEqual(len(self.registry), 3)

    def testRegisterRejectsNonDeclaration(self):
        with self.assertRaises(TypeError):
            self.registry.register("age")

    def testLookup(self):
        self.assertIs(self.registry.lookup("name"), self.name)

    def testLookupMiss(self):
        with self.assertRaises(LookupMissError):
            self.registry.lookup("missing")

    def testLookupMissIsKeyError(self):
        with self.assertRaises(KeyError):
            self.registry.lookup("missing")

    def testResolveByNameOrFlag(self):
        self.assertIs(self.registry.resolve("n"), self.name)
        self.assertIs(self.registry.resolve("name"), self.name)
        self.assertIsNone(self.registry.resolve("zzz"))

    def testAbsentValues(self):
        self.assertIsNone(self.registry.get("name"))
        self.assertIs(self.registry.get("verbose"), False)
        self.assertFalse(self.registry.has("name"))
        self.assertEqual(dict(self.registry.values()), {})

    def testGetUnknownNameRaises(self):
        with self.assertRaises(LookupMissError):
            self.registry.get("missing")

    def testValuesSnapshotIsReadOnly(self):
        with self.assertRaises(TypeError):
            self.registry.values()["name"] = "x"


class TestStubs(TestCase):
    """Behavioral tests for the shipped type stubs."""

    def testStubsParseOnOldestSupportedPython(self):
        stubs = sorted(pathlib.Path(argspan.__file__).parent.glob("*.pyi"))
        self.assertTrue(stubs)
        for stub in stubs:
            with self.subTest(stub=stub.name):
                ast.parse(stub.read_text(encoding="utf-8"), stub.name, feature_version=(3, 10))


if __name__ == "__main__":
    unittest.main()
