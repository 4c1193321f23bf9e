"""
Cells module behavioral tests (value cells, flag cells, storage, kinds).

Scope
- Validate scalar vs. sequence modes: last-write-wins, supply order, arity floors.
- Validate default fallback, satisfaction, and reads (including out-of-range reads).
- Validate store-by-reference bindings and mode mismatches.
- Validate per-kind coercion.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from arglet import (
    Kind,
    Reference,
    ValueCell,
    FlagCell,
    ConfigurationError,
    ValueUnavailableError,
)
from arglet.utils import Unset


class TestKind(TestCase):
    """Coercion and acceptance rules per kind."""

    def testIntegerCoercionAcceptsSignedDecimal(self):
        self.assertEqual(Kind.INTEGER.coerce("42"), 42)
        self.assertEqual(Kind.INTEGER.coerce("-7"), -7)
        self.assertEqual(Kind.INTEGER.coerce("+7"), 7)

    def testIntegerCoercionRejectsGarbage(self):
        for token in ("five", "5abc", " 5", "1_000", "", "0x10", "1.5"):
            with self.subTest(token=token), self.assertRaises(ValueError):
                Kind.INTEGER.coerce(token)

    def testTextCoercionIsIdentity(self):
        self.assertEqual(Kind.TEXT.coerce("-x=y"), "-x=y")

    def testFlagDoesNotCoerce(self):
        with self.assertRaises(TypeError):
            Kind.FLAG.coerce("true")

    def testIntegerRejectsBooleans(self):
        self.assertTrue(Kind.INTEGER.accepts(3))
        self.assertFalse(Kind.INTEGER.accepts(True))
        self.assertFalse(Kind.TEXT.accepts(3))


class TestScalarCell(TestCase):
    """Single-value cells."""

    def setUp(self):
        self.cell = ValueCell(Kind.INTEGER, "--number")

    def testRejectsFlagKind(self):
        with self.assertRaises(TypeError):
            ValueCell(Kind.FLAG)

    def testLastWriteWins(self):
        self.cell.append(1)
        self.cell.append(2)
        self.assertEqual(self.cell.read(), 2)
        self.assertEqual(self.cell.supplied, 2)
        self.assertTrue(self.cell.is_satisfied())

    def testUnsuppliedWithoutDefaultIsUnsatisfied(self):
        self.assertFalse(self.cell.is_satisfied())
        with self.assertRaises(ValueUnavailableError):
            self.cell.read()

    def testDefaultFallback(self):
        self.cell.default(7)
        self.assertTrue(self.cell.is_satisfied())
        self.assertEqual(self.cell.read(), 7)
        self.assertEqual(self.cell.fallback, 7)

    def testSuppliedValueBeatsDefault(self):
        self.cell.default(7)
        self.cell.append(3)
        self.assertEqual(self.cell.read(), 3)

    def testSequenceDefaultRejected(self):
        with self.assertRaises(ConfigurationError):
            self.cell.default([1, 2])

    def testDefaultOfWrongTypeRejected(self):
        with self.assertRaises(ConfigurationError):
            self.cell.default("seven")
        with self.assertRaises(ConfigurationError):
            self.cell.default(True)

    def testIngestCoercesTokens(self):
        self.cell.ingest("-12")
        self.assertEqual(self.cell.read(), -12)

    def testFailedIngestRecordsNothing(self):
        with self.assertRaises(ValueError):
            self.cell.ingest("12abc")
        self.assertEqual(self.cell.supplied, 0)

    def testStoreValueWritesThroughReference(self):
        count = Reference(0)
        self.cell.store_value(count)
        self.assertTrue(self.cell.is_bound)
        self.cell.append(5)
        self.assertEqual(count.value, 5)
        self.assertEqual(self.cell.read(), 5)

    def testConfigurationDoesNotTouchReference(self):
        count = Reference(-1)
        self.cell.store_value(count).default(9)
        self.assertEqual(count.value, -1)
        self.assertEqual(self.cell.read(), 9)

    def testStoreValueRequiresReference(self):
        with self.assertRaises(ConfigurationError):
            self.cell.store_value([])

    def testStoreValuesRejectedOnScalar(self):
        with self.assertRaises(ConfigurationError):
            self.cell.store_values([])

    def testResetKeepsExternalStorage(self):
        count = Reference(0)
        self.cell.store_value(count)
        self.cell.append(3)
        self.cell.reset()
        self.assertEqual(self.cell.supplied, 0)
        self.assertEqual(count.value, 3)
        self.assertFalse(self.cell.is_satisfied())

    def testResetClearsOwnedStorage(self):
        self.cell.append(3)
        self.cell.reset()
        with self.assertRaises(ValueUnavailableError):
            self.cell.read()

    def testReadAllWrapsScalar(self):
        self.cell.append(4)
        self.assertEqual(self.cell.read_all(), [4])

    def testPositionalCallsClaimOnce(self):
        claims = []
        cell = ValueCell(Kind.TEXT, "--file", claim=lambda: claims.append(True))
        cell.positional().positional()
        self.assertTrue(cell.is_positional)
        self.assertEqual(claims, [True])

    def testRepresentation(self):
        self.assertTrue(repr(self.cell).startswith("value-cell("))
        self.assertIn("label='--number'", repr(self.cell))


class TestSequenceCell(TestCase):
    """Multi-value cells."""

    def setUp(self):
        self.cell = ValueCell(Kind.INTEGER, "--item").multi_value(2)

    def testSupplyOrderPreserved(self):
        for value in (3, 1, 3):
            self.cell.append(value)
        self.assertEqual([self.cell.read(index) for index in range(3)], [3, 1, 3])
        self.assertEqual(self.cell.read_all(), [3, 1, 3])

    def testArityFloor(self):
        self.cell.append(1)
        self.assertFalse(self.cell.is_satisfied())
        self.cell.append(2)
        self.assertTrue(self.cell.is_satisfied())

    def testOutOfRangeRead(self):
        self.cell.append(1)
        self.cell.append(2)
        with self.assertRaises(ValueUnavailableError):
            self.cell.read(2)
        with self.assertRaises(ValueUnavailableError):
            self.cell.read(-1)

    def testBelowFloorReadsDefault(self):
        self.cell.default([10, 20])
        self.cell.append(1)
        self.assertFalse(self.cell.is_satisfied())
        self.assertEqual(self.cell.read(1), 20)

    def testUnsuppliedWithDefaultIsSatisfied(self):
        self.cell.default((10, 20))
        self.assertTrue(self.cell.is_satisfied())
        self.assertEqual(self.cell.read_all(), [10, 20])

    def testZeroFloorFallsBackToDefault(self):
        cell = ValueCell(Kind.TEXT, "--tag").multi_value().default(["a"])
        self.assertTrue(cell.is_satisfied())
        self.assertEqual(cell.read(), "a")

    def testZeroFloorWithoutDefault(self):
        cell = ValueCell(Kind.TEXT, "--tag").multi_value()
        self.assertTrue(cell.is_satisfied())
        self.assertEqual(cell.read_all(), [])
        with self.assertRaises(ValueUnavailableError):
            cell.read()

    def testScalarDefaultRejected(self):
        with self.assertRaises(ConfigurationError):
            self.cell.default(1)

    def testStoreValuesAppendsInPlace(self):
        values = [0]
        self.cell.store_values(values)
        self.cell.append(1)
        self.cell.append(2)
        self.assertEqual(values, [0, 1, 2])

    def testStoreValuesReadsOwnSupply(self):
        values = ["caller"]
        cell = ValueCell(Kind.TEXT, "--tag").multi_value(1).store_values(values)
        cell.append("a")
        self.assertEqual(cell.read_all(), ["a"])
        cell.reset()
        cell.append("b")
        self.assertEqual(cell.read(), "b")
        self.assertEqual(cell.read_all(), ["b"])
        self.assertEqual(values, ["caller", "a", "b"])

    def testStoreValueRejectedOnSequence(self):
        with self.assertRaises(ConfigurationError):
            self.cell.store_value(Reference(0))

    def testMultiValueAfterScalarDefaultRejected(self):
        cell = ValueCell(Kind.INTEGER, "--count").default(1)
        with self.assertRaises(ConfigurationError):
            cell.multi_value()

    def testMultiValueAfterScalarBindingRejected(self):
        cell = ValueCell(Kind.INTEGER, "--count").store_value(Reference(0))
        with self.assertRaises(ConfigurationError):
            cell.multi_value()

    def testMultiValueAfterSupplyRejected(self):
        cell = ValueCell(Kind.INTEGER, "--count")
        cell.append(1)
        with self.assertRaises(ConfigurationError):
            cell.multi_value()

    def testNegativeFloorRejected(self):
        with self.assertRaises(ConfigurationError):
            ValueCell(Kind.INTEGER, "--count").multi_value(-1)

    def testMultiValueTwiceUpdatesFloor(self):
        self.cell.multi_value(1)
        self.assertEqual(self.cell.minimum, 1)
        self.assertTrue(self.cell.is_multi_value)


class TestFlagCell(TestCase):
    """Boolean cells."""

    def testDefaultsToFalse(self):
        cell = FlagCell("--verbose")
        self.assertFalse(cell.get())
        self.assertTrue(cell.is_satisfied())

    def testSetIsIdempotent(self):
        cell = FlagCell("--verbose")
        cell.set(True)
        cell.set(True)
        self.assertTrue(cell.get())

    def testDefaultTrue(self):
        self.assertTrue(FlagCell("--color").default(True).get())

    def testDefaultMustBeBoolean(self):
        with self.assertRaises(ConfigurationError):
            FlagCell("--color").default("yes")

    def testStoreValueWritesThroughReference(self):
        verbose = Reference(False)
        cell = FlagCell("--verbose").store_value(verbose)
        cell.set(True)
        self.assertIs(verbose.value, True)

    def testUnsuppliedBoundFlagLeavesReference(self):
        verbose = Reference()
        cell = FlagCell("--verbose").default(True).store_value(verbose)
        self.assertTrue(cell.get())
        self.assertIsNone(verbose.value)
        cell.set()
        self.assertIs(verbose.value, True)

    def testStoreValueRequiresReference(self):
        with self.assertRaises(ConfigurationError):
            FlagCell("--verbose").store_value([])

    def testResetFallsBackToDefault(self):
        cell = FlagCell("--verbose")
        cell.set(True)
        cell.reset()
        self.assertFalse(cell.get())
        self.assertFalse(cell.supplied)

    def testFallbackIntrospection(self):
        self.assertIs(FlagCell("--verbose").fallback, False)
        self.assertIs(ValueCell(Kind.TEXT).fallback, Unset)


if __name__ == "__main__":
    unittest.main()
