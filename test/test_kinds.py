"""
Kind resolution and conversion tests.

Scope
- Kind.resolve(): members, names (case-insensitive, aliases) and builtin types.
- Kind.convert(): accepted literals and rejections for each of the eight kinds.
"""

from __future__ import annotations

import math
import struct
import unittest
from unittest import TestCase

from bindery import Kind


class TestResolve(TestCase):

    def testMemberIsReturned(self):
        self.assertIs(Kind.resolve(Kind.CHAR), Kind.CHAR)

    def testNames(self):
        self.assertIs(Kind.resolve("int"), Kind.INT)
        self.assertIs(Kind.resolve("DOUBLE"), Kind.DOUBLE)
        self.assertIs(Kind.resolve("unsigned  int"), Kind.UINT)
        self.assertIs(Kind.resolve("uint"), Kind.UINT)
        self.assertIs(Kind.resolve("str"), Kind.STRING)

    def testBuiltins(self):
        self.assertIs(Kind.resolve(bool), Kind.BOOL)
        self.assertIs(Kind.resolve(int), Kind.LONG)
        self.assertIs(Kind.resolve(float), Kind.DOUBLE)
        self.assertIs(Kind.resolve(str), Kind.STRING)

    def testUnknownNameRejected(self):
        with self.assertRaises(ValueError):
            Kind.resolve("complex")

    def testUnsupportedTypeRejected(self):
        with self.assertRaises(TypeError):
            Kind.resolve(list)
        with self.assertRaises(TypeError):
            Kind.resolve(3)

    def testLabels(self):
        self.assertEqual(Kind.UINT.label, "unsigned int")
        self.assertEqual(Kind.STRING.label, "string")


class TestConvert(TestCase):

    def testBool(self):
        self.assertIs(Kind.BOOL.convert("true"), True)
        self.assertIs(Kind.BOOL.convert("False"), False)
        for text in ("yes", "1", ""):
            with self.subTest(text=text), self.assertRaises(ValueError):
                Kind.BOOL.convert(text)

    def testInt(self):
        self.assertEqual(Kind.INT.convert("42"), 42)
        self.assertEqual(Kind.INT.convert("-7"), -7)
        self.assertEqual(Kind.INT.convert("+3"), 3)
        self.assertEqual(Kind.INT.convert("2147483647"), 2 ** 31 - 1)

    def testIntRejections(self):
        for text in ("2147483648", "12abc", "1.5", "0x10", "", "five"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                Kind.INT.convert(text)

    def testUnsigned(self):
        self.assertEqual(Kind.UINT.convert("4294967295"), 2 ** 32 - 1)
        for text in ("-1", "4294967296"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                Kind.UINT.convert(text)

    def testLong(self):
        self.assertEqual(Kind.LONG.convert("9223372036854775807"), 2 ** 63 - 1)
        with self.assertRaises(ValueError):
            Kind.LONG.convert("9223372036854775808")

    def testFloat(self):
        self.assertEqual(Kind.FLOAT.convert("1.5"), 1.5)
        self.assertEqual(Kind.FLOAT.convert("2e3"), 2000.0)
        self.assertTrue(math.isinf(Kind.FLOAT.convert("inf")))
        with self.assertRaises(ValueError):
            Kind.FLOAT.convert("1e39")
        with self.assertRaises(ValueError):
            Kind.FLOAT.convert("one")

    def testFloatLargestFinite(self):
        largest, = struct.unpack("<f", b"\xff\xff\x7f\x7f")
        self.assertEqual(Kind.FLOAT.convert("3.4028235e38"), largest)
        self.assertEqual(Kind.FLOAT.convert("-3.4028235e38"), -largest)

    def testFloatRoundsToSinglePrecision(self):
        self.assertNotEqual(Kind.FLOAT.convert("0.1"), 0.1)
        self.assertEqual(Kind.FLOAT.convert("0.1"), struct.unpack("f", struct.pack("f", 0.1))[0])
        self.assertEqual(Kind.DOUBLE.convert("0.1"), 0.1)

    def testDouble(self):
        self.assertEqual(Kind.DOUBLE.convert("1e39"), 1e39)
        self.assertEqual(Kind.DOUBLE.convert("-0.25"), -0.25)
        with self.assertRaises(ValueError):
            Kind.DOUBLE.convert("")

    def testChar(self):
        self.assertEqual(Kind.CHAR.convert("x"), "x")
        self.assertEqual(Kind.CHAR.convert("xyz"), "x")
        with self.assertRaises(ValueError):
            Kind.CHAR.convert("")

    def testString(self):
        self.assertEqual(Kind.STRING.convert("Jane Q"), "Jane Q")
        self.assertEqual(Kind.STRING.convert(""), "")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            Kind.INT.convert(3)


if __name__ == "__main__":
    unittest.main()
