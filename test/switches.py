# python
"""
Switch table behavioral tests.

Scope
- Validate declaration forms (type markers, inferred defaults, dict declarations).
- Validate short alias generation and precedence (declared > generated > dropped on flag clash).
- Validate usage strings, defaults, lookups and merging.

Conventions
- Test method names follow CamelCase per project convention.
- Declaration errors are TypeError/ValueError, never switch faults.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from switchyard import Switch, SwitchTable, SwitchType, Unset


class TestDeclarations(TestCase):
    """Declaration forms accepted by SwitchTable."""

    def testTypeMarkers(self):
        t = SwitchTable({
            "a": bool,
            "b": str,
            "c": int,
            "d": float,
            "e": list,
            "f": SwitchType.REQUIRED,
        })
        self.assertEqual(
            [s.type for s in t.values()],
            [
                SwitchType.BOOLEAN,
                SwitchType.STRING,
                SwitchType.NUMERIC,
                SwitchType.NUMERIC,
                SwitchType.ARRAY,
                SwitchType.REQUIRED,
            ],
        )
        self.assertTrue(all(s.default is Unset for s in t.values()))

    def testTypeInferredFromDefault(self):
        t = SwitchTable({"a": True, "b": "x", "c": 1.5, "d": ("p", "q")})
        self.assertEqual(t["a"].type, SwitchType.BOOLEAN)
        self.assertEqual(t["b"].type, SwitchType.STRING)
        self.assertEqual(t["c"].type, SwitchType.NUMERIC)
        self.assertEqual(t["d"].type, SwitchType.ARRAY)
        self.assertEqual(t["d"].default, ("p", "q"))

    def testDictDeclaration(self):
        t = SwitchTable({"level": {"type": "numeric", "default": 3, "descr": "Level", "shorts": ["L"]}})
        s = t["level"]
        self.assertEqual(s.type, SwitchType.NUMERIC)
        self.assertEqual(s.default, 3)
        self.assertEqual(s.descr, "Level")
        self.assertEqual(s.shorts, ("-L",))

    def testDictDeclarationWithoutTypeOrDefaultIsBoolean(self):
        t = SwitchTable({"quiet": {"descr": "Say less"}})
        self.assertEqual(t["quiet"].type, SwitchType.BOOLEAN)

    def testUnknownTypeRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({"level": {"type": "bogus"}})

    def testUnknownDeclarationKeyRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({"level": {"type": int, "values": [1, 2]}})

    def testNoneDeclarationRejected(self):
        with self.assertRaises(TypeError):
            SwitchTable({"level": None})

    def testDefaultMustMatchType(self):
        with self.assertRaises(TypeError):
            SwitchTable({"level": {"type": int, "default": "high"}})
        with self.assertRaises(TypeError):
            SwitchTable({"verbose": {"type": bool, "default": "yes"}})

    def testRequiredCannotHaveDefault(self):
        with self.assertRaises(ValueError):
            SwitchTable({"path": {"type": SwitchType.REQUIRED, "default": "x"}})

    def testDuplicateCanonicalNameRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({"max-width": 1, "max_width": 2})

    def testInvalidShortRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({("level", "-12"): 1})

    def testInvalidNameRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({"--": bool})
        with self.assertRaises(TypeError):
            SwitchTable({3: bool})

    def testSwitchRepr(self):
        s = Switch("level", SwitchType.NUMERIC, 1)
        self.assertTrue(repr(s).startswith("switch(name='level', flag='--level'"))


class TestNames(TestCase):
    """Canonical names, flag forms and lookups."""

    def testCanonicalAndFlagForms(self):
        t = SwitchTable({"--max-width": 80})
        self.assertEqual(list(t), ["max_width"])
        self.assertEqual(t["max_width"].flag, "--max-width")
        self.assertIs(t["max-width"], t["--max-width"])

    def testSingleLetterFlag(self):
        t = SwitchTable({"x": bool})
        self.assertEqual(t["x"].flag, "-x")

    def testLookupAndResolve(self):
        t = SwitchTable({("level", "-l"): 1, "max_width": 80})
        self.assertEqual(t.resolve("-l"), "--level")
        self.assertEqual(t.resolve("--max_width"), "--max-width")
        self.assertIs(t.lookup("-l"), t["level"])
        self.assertIs(t.lookup("--max_width"), t["max_width"])
        self.assertIsNone(t.lookup("--bogus"))


class TestShorts(TestCase):
    """Short alias generation and precedence."""

    def testGeneratedShort(self):
        t = SwitchTable({"verbose": bool})
        self.assertEqual(dict(t.shorts), {"-v": "verbose"})

    def testNoShortForSingleLetterNames(self):
        t = SwitchTable({"x": bool})
        self.assertEqual(dict(t.shorts), {})

    def testDeclaredShortWinsOverGenerated(self):
        t = SwitchTable({"verbose": bool, ("version", "-v"): bool})
        self.assertEqual(dict(t.shorts), {"-v": "version"})

    def testEarlierDeclarationWins(self):
        t = SwitchTable({"verbose": bool, "vertical": bool})
        self.assertEqual(dict(t.shorts), {"-v": "verbose"})
        self.assertEqual(t.aliases("vertical"), ())

    def testShortCollidingWithFlagDropped(self):
        t = SwitchTable({"x": bool, "xray": bool})
        self.assertEqual(dict(t.shorts), {})
        self.assertIs(t.lookup("-x"), t["x"])

    def testDuplicateDeclaredShortRejected(self):
        with self.assertRaises(ValueError):
            SwitchTable({("verbose", "-v"): bool, ("version", "-v"): bool})


class TestTable(TestCase):
    """Usage, defaults, merging and rendering."""

    def testUsage(self):
        t = SwitchTable({
            "verbose": False,
            "level": SwitchType.NUMERIC,
            "name": str,
            "path": SwitchType.REQUIRED,
            "fields": ["a", "b"],
            "tags": list,
            "ratio": 0.5,
        })
        self.assertEqual(
            t.usage,
            "[--verbose] [--level=N] [--name=NAME] --path=PATH [--fields=a,b] [--tags=TAGS] [--ratio=0.5]",
        )
        self.assertEqual(str(t), t.usage)

    def testEmptyUsage(self):
        self.assertEqual(SwitchTable().usage, "")
        self.assertEqual(SwitchTable({}).usage, "")

    def testDefaultsAreFreshLists(self):
        t = SwitchTable({"fields": ["a", "b"], "verbose": bool, "level": 2})
        defaults = t.defaults
        self.assertEqual(defaults, {"fields": ["a", "b"], "level": 2})
        defaults["fields"].append("c")
        self.assertEqual(t.defaults["fields"], ["a", "b"])

    def testTableIsReadOnly(self):
        t = SwitchTable({"level": 1})
        with self.assertRaises(TypeError):
            t["level"] = None  # type: ignore[index]
        with self.assertRaises(TypeError):
            t.shorts["-x"] = "level"  # type: ignore[index]

    def testRichTable(self):
        t = SwitchTable({("level", "-l"): {"default": 1, "descr": "How deep"}})
        console = Console(file=io.StringIO(), width=120, color_system=None)
        console.print(t)
        output = console.file.getvalue()
        self.assertIn("-l, --level", output)
        self.assertIn("numeric", output)
        self.assertIn("How deep", output)


if __name__ == "__main__":
    unittest.main()
