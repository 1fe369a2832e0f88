# python
"""
Arguments module behavioral tests (value types, keys, specs).

Scope
- Validate ValueType resolution and lexical conversion for every target type.
- Validate Option/Flag/Argument construction, name patterns and choices rules.
- Validate tagged keys and read-only introspection.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import decimal
import math
import unittest
from unittest import TestCase

from quickshell import ValueType, ParamKind, ParamKey, Option, Flag, Argument


class TestValueType(TestCase):
    """Behavioral tests for ValueType resolution and conversion."""

    def testResolveFromAliases(self):
        self.assertIs(ValueType.of(str), ValueType.TEXT)
        self.assertIs(ValueType.of(int), ValueType.BIGINT)
        self.assertIs(ValueType.of(float), ValueType.DOUBLE)
        self.assertIs(ValueType.of(decimal.Decimal), ValueType.DECIMAL)
        self.assertIs(ValueType.of(bool), ValueType.BOOLEAN)

    def testResolveFromLabel(self):
        self.assertIs(ValueType.of("Int"), ValueType.INT)
        self.assertIs(ValueType.of(ValueType.SHORT), ValueType.SHORT)

    def testUnknownLabelRejected(self):
        with self.assertRaises(ValueError):
            ValueType.of("complex")

    def testUnsupportedAliasRejected(self):
        with self.assertRaises(TypeError):
            ValueType.of(list)

    def testTextPassesThrough(self):
        self.assertEqual(ValueType.TEXT.convert(" a b "), " a b ")

    def testIntegers(self):
        self.assertEqual(ValueType.INT.convert("100"), 100)
        self.assertEqual(ValueType.INT.convert("-7"), -7)
        self.assertEqual(ValueType.BIGINT.convert("+123456789012345678901234567890"), 123456789012345678901234567890)

    def testIntegersAreLexical(self):
        for value in ("1.1", " 1", "1_000", "", "abc", "0x10"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    ValueType.INT.convert(value)

    def testIntegerWidths(self):
        self.assertEqual(ValueType.BYTE.convert("-128"), -128)
        with self.assertRaises(ValueError):
            ValueType.BYTE.convert("128")
        with self.assertRaises(ValueError):
            ValueType.SHORT.convert("32768")
        with self.assertRaises(ValueError):
            ValueType.INT.convert("2147483648")
        self.assertEqual(ValueType.LONG.convert("9223372036854775807"), 2 ** 63 - 1)

    def testDoubles(self):
        self.assertEqual(ValueType.DOUBLE.convert("5.5"), 5.5)
        self.assertEqual(ValueType.DOUBLE.convert(" 2.5d "), 2.5)
        self.assertEqual(ValueType.DOUBLE.convert(".5"), 0.5)
        self.assertEqual(ValueType.DOUBLE.convert("1e3"), 1000.0)
        self.assertTrue(math.isnan(ValueType.DOUBLE.convert("NaN")))
        self.assertEqual(ValueType.DOUBLE.convert("-Infinity"), -math.inf)
        with self.assertRaises(ValueError):
            ValueType.DOUBLE.convert("inf")
        with self.assertRaises(ValueError):
            ValueType.DOUBLE.convert("1,5")

    def testSuffixOnlyFollowsDigits(self):
        self.assertEqual(ValueType.FLOAT.convert("2.5f"), 2.5)
        self.assertEqual(ValueType.DOUBLE.convert("-3D"), -3.0)
        for kind in (ValueType.FLOAT, ValueType.DOUBLE):
            for value in ("Infinityf", "-InfinityD", "NaNd", "NaNF"):
                with self.subTest(kind=kind, value=value):
                    with self.assertRaises(ValueError):
                        kind.convert(value)

    def testFloatsRoundToSinglePrecision(self):
        value = ValueType.FLOAT.convert("0.1")
        self.assertNotEqual(value, 0.1)
        self.assertAlmostEqual(value, 0.1, places=6)
        self.assertEqual(ValueType.FLOAT.convert("1e39"), math.inf)

    def testDecimals(self):
        self.assertEqual(ValueType.DECIMAL.convert("5.5"), decimal.Decimal("5.5"))
        self.assertEqual(str(ValueType.DECIMAL.convert("5.5")), "5.5")
        for value in ("NaN", "abc", " 1", "1.5f"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    ValueType.DECIMAL.convert(value)

    def testBooleans(self):
        self.assertIs(ValueType.BOOLEAN.convert("true"), True)
        self.assertIs(ValueType.BOOLEAN.convert("FALSE"), False)
        with self.assertRaises(ValueError):
            ValueType.BOOLEAN.convert("yes")

    def testConvertRejectsNonString(self):
        with self.assertRaises(TypeError):
            ValueType.INT.convert(1)  # type: ignore[arg-type]


class TestOption(TestCase):
    """Behavioral tests for Option specifications."""

    def testDefaults(self):
        o = Option("mode")
        self.assertEqual(o.name, "mode")
        self.assertIsNone(o.descr)
        self.assertIs(o.type, ValueType.TEXT)
        self.assertFalse(o.mandatory)
        self.assertEqual(o.choices, ())
        self.assertIsNone(o.default)

    def testFirstChoiceIsDefault(self):
        o = Option("mode", "run mode", choices=["fast", "safe"])
        self.assertEqual(o.choices, ("fast", "safe"))
        self.assertEqual(o.default, "fast")

    def testNameMustBeLetters(self):
        for name in ("opt1", "o-p", "", "  "):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Option(name)

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            Option(1)  # type: ignore[arg-type]

    def testNameIsTrimmed(self):
        self.assertEqual(Option("  mode ").name, "mode")

    def testEmptyDescrRejected(self):
        with self.assertRaises(ValueError):
            Option("mode", "   ")

    def testUnorderedChoicesRejected(self):
        with self.assertRaises(TypeError):
            Option("mode", choices={"a", "b"})

    def testStringChoicesRejected(self):
        with self.assertRaises(TypeError):
            Option("mode", choices="ab")

    def testDuplicateChoicesRejected(self):
        with self.assertRaises(ValueError):
            Option("mode", choices=("a", "a"))

    def testChoicesMustMatchType(self):
        with self.assertRaises(ValueError):
            Option("count", type=int, choices=("1", "x"))
        self.assertEqual(Option("count", type=int, choices=("1", "2")).choices, ("1", "2"))

    def testNonStringChoiceRejected(self):
        with self.assertRaises(TypeError):
            Option("count", type=int, choices=(1, 2))

    def testKey(self):
        self.assertEqual(Option("mode").key, ParamKey(ParamKind.OPTION, "mode"))

    def testPropertiesAreReadOnly(self):
        o = Option("mode")
        with self.assertRaises(AttributeError):
            o.name = "other"  # type: ignore[misc]


class TestFlag(TestCase):
    """Behavioral tests for Flag specifications."""

    def testSingleLetter(self):
        f = Flag("t", "toggle")
        self.assertEqual(f.name, "t")
        self.assertEqual(f.descr, "toggle")
        self.assertIs(f.type, ValueType.BOOLEAN)
        self.assertFalse(f.mandatory)

    def testNonLetterRejected(self):
        for name in ("1", "_", "ab", "-"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Flag(name)

    def testKeyDoesNotCollideWithOption(self):
        self.assertNotEqual(Flag("t").key, Option("t").key)
        self.assertNotEqual(Flag("t").key, Argument("t").key)

    def testRepr(self):
        self.assertEqual(repr(Flag("v")), "flag(name='v', descr=None)")


class TestArgument(TestCase):
    """Behavioral tests for Argument specifications."""

    def testTrailingDigitsAllowed(self):
        a = Argument("arg1", "first", type="int", mandatory=True)
        self.assertEqual(a.name, "arg1")
        self.assertIs(a.type, ValueType.INT)
        self.assertTrue(a.mandatory)

    def testLeadingDigitRejected(self):
        with self.assertRaises(ValueError):
            Argument("1arg")

    def testUnknownTypeRejected(self):
        with self.assertRaises(TypeError):
            Argument("a", type=list)

    def testKey(self):
        self.assertEqual(Argument("src").key, ParamKey.positional("src"))


if __name__ == "__main__":
    unittest.main()
