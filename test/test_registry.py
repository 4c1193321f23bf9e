"""
Registry module behavioral tests (keys, spellings, handles).

Scope
- Validate name sanitation (short/long forms) and description rules.
- Validate spelling uniqueness across every kind.
- Validate resolution, suggestions, insertion order, positional and help claims.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from arglet import (
    Kind,
    KeyRegistry,
    ValueCell,
    FlagCell,
    ConfigurationError,
    UnknownArgumentError,
    FaultCode,
)
from arglet.utils import Unset


class TestRegistration(TestCase):
    """Registering keys and building cells."""

    def setUp(self):
        self.registry = KeyRegistry()

    def testHandlesAreSequential(self):
        first = self.registry.register(("-n", "--number"), Kind.INTEGER)
        second = self.registry.register(("--verbose",), Kind.FLAG)
        self.assertEqual((first, second), (0, 1))
        self.assertEqual(len(self.registry), 2)

    def testCellsMatchKinds(self):
        number = self.registry.register(("--number",), Kind.INTEGER)
        verbose = self.registry.register(("--verbose",), Kind.FLAG)
        self.assertIsInstance(self.registry.cell(number), ValueCell)
        self.assertIsInstance(self.registry.cell(verbose), FlagCell)

    def testShortAndLongShareHandle(self):
        handle = self.registry.register(("-n", "--number"), Kind.INTEGER)
        self.assertEqual(self.registry.resolve("n"), handle)
        self.assertEqual(self.registry.resolve("number"), handle)
        self.assertIn("n", self.registry)
        self.assertIn("number", self.registry)

    def testKeyFields(self):
        handle = self.registry.register(("--number", "-n"), Kind.INTEGER, "  a number ")
        key = self.registry.key(handle)
        self.assertEqual(key.short, "n")
        self.assertEqual(key.long, "number")
        self.assertEqual(key.descr, "a number")
        self.assertIs(key.kind, Kind.INTEGER)
        self.assertEqual(key.label, "--number")
        self.assertEqual(key.spellings, ("n", "number"))

    def testShortOnlyLabel(self):
        key = self.registry.key(self.registry.register(("-v",), Kind.FLAG))
        self.assertIsNone(key.long)
        self.assertEqual(key.label, "-v")

    def testDuplicateSpellingAcrossKindsRejected(self):
        self.registry.register(("-v", "--verbose"), Kind.FLAG)
        with self.assertRaises(ConfigurationError) as context:
            self.registry.register(("-v", "--value"), Kind.INTEGER)
        self.assertEqual(context.exception.code, FaultCode.DUPLICATED_SPELLING)
        with self.assertRaises(ConfigurationError):
            self.registry.register(("--verbose",), Kind.TEXT)

    def testRejectedRegistrationLeavesNoTrace(self):
        self.registry.register(("--verbose",), Kind.FLAG)
        with self.assertRaises(ConfigurationError):
            self.registry.register(("-x", "--verbose"), Kind.FLAG)
        self.assertNotIn("x", self.registry)
        self.assertEqual(len(self.registry), 1)

    def testInvalidNamesRejected(self):
        for names in (("number",), ("--x",), ("-ab",), ("---x",), ("--bad name",), ("--bad-",), ("-_",), (5,)):
            with self.subTest(names=names), self.assertRaises(ConfigurationError):
                self.registry.register(names, Kind.TEXT)

    def testValidNamesAccepted(self):
        for names in (("-1",), ("--param1",), ("--dry-run",), ("--snake_case",), ("--名前",)):
            with self.subTest(names=names):
                self.registry.register(names, Kind.TEXT)

    def testMissingNamesRejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register((), Kind.TEXT)

    def testTwoShortsRejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(("-a", "-b"), Kind.FLAG)

    def testTwoLongsRejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(("--alpha", "--beta"), Kind.FLAG)

    def testEmptyDescriptionRejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(("--name",), Kind.TEXT, "   ")

    def testNonStringDescriptionRejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(("--name",), Kind.TEXT, 5)


class TestResolution(TestCase):
    """Resolving spellings back to handles."""

    def setUp(self):
        self.registry = KeyRegistry()
        self.number = self.registry.register(("-n", "--number"), Kind.INTEGER)
        self.name = self.registry.register(("--name",), Kind.TEXT)

    def testUnknownSpellingRaises(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.registry.resolve("numbr")
        self.assertIsInstance(context.exception, LookupError)
        self.assertIn("number", context.exception.options["hint"])

    def testLookupDoesNotRaise(self):
        self.assertIs(self.registry.lookup("nope"), Unset)
        self.assertEqual(self.registry.lookup("name"), self.name)

    def testSuggestions(self):
        self.assertIn("number", self.registry.suggestions("numbre"))

    def testInsertionOrder(self):
        self.registry.register(("-a", "--alpha"), Kind.FLAG)
        labels = [key.label for key, _ in self.registry]
        self.assertEqual(labels, ["--number", "--name", "--alpha"])

    def testValueCellsSkipFlags(self):
        self.registry.register(("-a", "--alpha"), Kind.FLAG)
        labels = [key.label for key, _ in self.registry.value_cells()]
        self.assertEqual(labels, ["--number", "--name"])


class TestClaims(TestCase):
    """Positional and help claims."""

    def setUp(self):
        self.registry = KeyRegistry()

    def testSinglePositional(self):
        handle = self.registry.register(("--file",), Kind.TEXT)
        self.registry.cell(handle).positional()
        self.assertEqual(self.registry.positional, handle)

    def testSecondPositionalRejected(self):
        first = self.registry.register(("--first",), Kind.TEXT)
        second = self.registry.register(("--second",), Kind.INTEGER)
        self.registry.cell(first).positional()
        with self.assertRaises(ConfigurationError) as context:
            self.registry.cell(second).positional()
        self.assertEqual(context.exception.code, FaultCode.SECOND_POSITIONAL)
        self.assertFalse(self.registry.cell(second).is_positional)

    def testHelpRegistered(self):
        handle = self.registry.register(("-h", "--help"), Kind.FLAG, helper=True)
        self.assertEqual(self.registry.helper, handle)
        self.assertTrue(self.registry.key(handle).helper)

    def testHelpMustBeFlag(self):
        with self.assertRaises(TypeError):
            self.registry.register(("--help",), Kind.TEXT, helper=True)

    def testSecondHelpRejected(self):
        self.registry.register(("--help",), Kind.FLAG, helper=True)
        with self.assertRaises(ConfigurationError) as context:
            self.registry.register(("--usage",), Kind.FLAG, helper=True)
        self.assertEqual(context.exception.code, FaultCode.DUPLICATED_HELP)


class TestKeyDescription(TestCase):
    """One help line per key."""

    def setUp(self):
        self.registry = KeyRegistry()

    def testFullLine(self):
        key = self.registry.key(self.registry.register(("-n", "--number"), Kind.INTEGER, "a number"))
        self.assertEqual(key.describe(), "-n\t--number\ta number")

    def testEmptyFieldsOmitted(self):
        long = self.registry.key(self.registry.register(("--name",), Kind.TEXT))
        short = self.registry.key(self.registry.register(("-v",), Kind.FLAG, "talk more"))
        self.assertEqual(long.describe(), "--name")
        self.assertEqual(short.describe(), "-v\ttalk more")


if __name__ == "__main__":
    unittest.main()
