# python
"""
Utils and faults behavioral tests.

Scope
- Validate the Unset sentinel, coalesce, rename, mirror and pluralize helpers.
- Validate fault identity (codes, titles, messages) and rich rendering options.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from quickshell.faults import (
    FaultCode,
    CommandException,
    CommandExit,
    MissingOptionsError,
    ExtraArgumentsError,
    DiscardedOutputWarning,
)
from quickshell.utils import Introspective, Unset, UnsetType, coalesce, rename, mirror, pluralize


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testParticipatesInUnions(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testMetaclassDefaultsToSentinel(self):
        self.assertIs(Introspective.__displayable__, Unset)

        class Plain(metaclass=Introspective):
            __introspectable__ = ("name",)

            def __init__(self):
                self._name = "x"

        self.assertEqual(Plain().name, "x")
        self.assertEqual(repr(Plain()), "plain(name='x')")

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)


class TestHelpers(TestCase):
    """Behavioral tests for rename, mirror and pluralize."""

    def testRenameDirect(self):
        def f():
            pass

        rename(f, "g")
        self.assertEqual(f.__name__, "g")
        self.assertEqual(f.__qualname__, "g")

    def testRenameDecorator(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")

    def testRenameArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ["a"]
                self._table = {"k": "v"}

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        with self.assertRaises(TypeError):
            holder.table["k"] = "w"  # type: ignore[index]
        with self.assertRaises(AttributeError):
            holder.items = ()  # type: ignore[misc]

    def testPluralize(self):
        self.assertEqual(pluralize("flag"), "flags")
        self.assertEqual(pluralize("option flag"), "option flags")
        self.assertEqual(pluralize("Argument"), "Arguments")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("box"), "boxes")
        self.assertEqual(pluralize("KEY"), "KEYS")


class TestFaults(TestCase):
    """Behavioral tests for fault identity and rendering."""

    def testMessageAndOptions(self):
        fault = MissingOptionsError("All mandatory options must be provided : [a]", hint="add it")
        self.assertEqual(str(fault), "All mandatory options must be provided : [a]")
        self.assertEqual(fault.options["hint"], "add it")
        self.assertIs(fault.code, FaultCode.MISSING_OPTIONS)
        self.assertIsInstance(fault, CommandException)

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            MissingOptionsError(1)  # type: ignore[arg-type]

    def testReplaceKeepsMessage(self):
        fault = ExtraArgumentsError("extra", hint="h").__replace__(prog="p")
        self.assertEqual(str(fault), "extra")
        self.assertEqual(dict(fault.options), {"hint": "h", "prog": "p"})

    def testCodesAreGroupedByStage(self):
        self.assertEqual(FaultCode.UNBALANCED_QUOTING // 1000, 21)
        self.assertEqual(FaultCode.UNKNOWN_COMMAND // 1000, 22)
        self.assertEqual(FaultCode.EXTRA_ARGUMENTS // 1000, 23)
        self.assertEqual(FaultCode.TYPE_COERCION // 1000, 24)
        self.assertEqual(DiscardedOutputWarning.code // 1000, 25)

    def testExitGroupsFaults(self):
        group = CommandExit([MissingOptionsError("one"), ExtraArgumentsError("two")], prog="demo")
        self.assertIsInstance(group, ExceptionGroup)
        self.assertEqual(group.errors, ("one", "two"))
        self.assertEqual(group.derive([ExtraArgumentsError("three")]).options["prog"], "demo")

    def testPlainRendering(self):
        console = Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)
        console.print(CommandExit(
            [ExtraArgumentsError("Extra arguments entered. Found : 2, Expecting : 1", hint="quote values")],
            prog="demo",
            colorful=False,
        ))
        output = console.file.getvalue()
        self.assertIn("[ demo — Bad Command ]", output)
        self.assertIn("[ demo — 23106 | extra arguments ]", output)
        self.assertIn("Extra arguments entered. Found : 2, Expecting : 1", output)
        self.assertIn(" → quote values", output)

    def testFancyRendering(self):
        console = Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)
        console.print(MissingOptionsError("missing", fancy=True, colorful=False, prog="demo"))
        self.assertIn("╭", console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
