"""
Cell tests (the single-value write target).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from bindery import Cell


class TestCell(TestCase):

    def testDefaultsToNone(self):
        self.assertIsNone(Cell().value)

    def testInitialValue(self):
        self.assertEqual(Cell(3).get(), 3)

    def testSetAndProperty(self):
        cell = Cell()
        cell.set("x")
        self.assertEqual(cell.value, "x")
        cell.value = "y"
        self.assertEqual(cell.get(), "y")

    def testEquality(self):
        self.assertEqual(Cell(1), Cell(1))
        self.assertNotEqual(Cell(1), Cell(2))
        self.assertNotEqual(Cell(1), 1)

    def testUnhashable(self):
        with self.assertRaises(TypeError):
            hash(Cell())

    def testRepr(self):
        self.assertEqual(repr(Cell("a")), "cell('a')")

    def testNoExtraAttributes(self):
        with self.assertRaises(AttributeError):
            Cell().other = 1


if __name__ == "__main__":
    unittest.main()
