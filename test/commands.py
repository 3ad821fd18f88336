# python
"""
Command layer behavioral tests.

Scope
- Validate Argument and Command construction, validation and derived properties (arity, usage).
- Validate the registry (names, aliases, duplicates) and the command() decorator.

Conventions
- Test method names follow CamelCase per project convention.
- Every test that registers uses its own Registry; the process-wide one stays untouched.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Argument,
    Command,
    Dispatcher,
    Entry,
    Registry,
    SwitchTable,
    Unset,
    command,
    deferred,
)


class TestArgument(TestCase):
    """Positional slot specifications."""

    def testUsageForms(self):
        self.assertEqual(Argument("dish").usage, "dish")
        self.assertEqual(Argument("size", 2).usage, "[size=2]")
        self.assertEqual(Argument("name", "me").usage, "[name='me']")
        self.assertEqual(Argument("*rest").usage, "[*rest]")
        self.assertEqual(Argument("rest", splat=True).usage, "[*rest]")

    def testDeferredUsage(self):
        def cwd(target):
            return "."
        self.assertEqual(Argument("path", deferred(cwd)).usage, "[path=cwd()]")

    def testDefaultsToUnset(self):
        self.assertIs(Argument("dish").default, Unset)
        self.assertFalse(Argument("dish").splat)

    def testInvalidNames(self):
        with self.assertRaises(ValueError):
            Argument("1st")
        with self.assertRaises(TypeError):
            Argument(1)

    def testSplatWithDefaultRejected(self):
        with self.assertRaises(ValueError):
            Argument("*rest", ())

    def testDeferredRequiresCallable(self):
        with self.assertRaises(TypeError):
            deferred("not callable")

    def testRepr(self):
        self.assertEqual(repr(Argument("dish")), "argument(name='dish', default=Unset, splat=False)")


class TestCommand(TestCase):
    """Command descriptors."""

    def testArityCountsOptionsSlot(self):
        self.assertEqual(Command("cook", ["dish"], {"spicy": bool}).arity, 2)
        self.assertEqual(Command("cook", ["dish"], {}).arity, 2)
        self.assertEqual(Command("cook", ["dish"]).arity, 1)
        self.assertEqual(Command("ping").arity, 0)

    def testUsage(self):
        c = Command("cook", ["dish", ("size", 2), "*rest"], {"spicy": bool})
        self.assertEqual(c.usage, "dish [size=2] [*rest] [--spicy]")
        self.assertTrue(c.splat)
        self.assertEqual(Command("ping").usage, "")

    def testOptionsBuiltIntoTable(self):
        c = Command("cook", [], {"spicy": bool})
        self.assertIsInstance(c.options, SwitchTable)
        self.assertIsNone(Command("ping").options)

    def testArgumentsAreReadOnly(self):
        c = Command("cook", ["dish"])
        self.assertIsInstance(c.arguments, tuple)
        self.assertEqual([a.name for a in c.arguments], ["dish"])

    def testSplatMustBeLast(self):
        with self.assertRaises(ValueError):
            Command("cook", ["*rest", "dish"])

    def testDuplicateArgumentsRejected(self):
        with self.assertRaises(ValueError):
            Command("cook", ["dish", "dish"])

    def testDefaultOptionMustBeDeclared(self):
        with self.assertRaises(ValueError):
            Command("find", [], {"query": str}, default_option="name")
        with self.assertRaises(ValueError):
            Command("find", [], default_option="query")
        self.assertEqual(Command("find", [], {"max-depth": 1}, default_option="max-depth").default_option, "max_depth")

    def testInvalidConstruction(self):
        with self.assertRaises(ValueError):
            Command("")
        with self.assertRaises(TypeError):
            Command("cook", "dish")
        with self.assertRaises(TypeError):
            Command("cook", [], ["spicy"])
        with self.assertRaises(TypeError):
            Command("cook", [object()])

    def testNames(self):
        self.assertEqual(Command("cook", alias="c").names, ("cook", "c"))
        self.assertEqual(Command("cook").names, ("cook",))


class TestRegistry(TestCase):
    """Registration and lookups."""

    def setUp(self):
        self.registry = Registry()

    def testRegisterByNameAndAlias(self):
        def cook(dish):
            return dish
        entry = self.registry.register(Command("cook", ["dish"], alias="c"), cook)
        self.assertIsInstance(entry, Entry)
        self.assertIs(self.registry["cook"], entry)
        self.assertIs(self.registry["c"], entry)
        self.assertIs(entry.callback, cook)
        self.assertEqual(entry.invoker("soup"), "soup")
        self.assertEqual(list(self.registry), ["cook"])
        self.assertEqual(len(self.registry), 1)
        self.assertIn("c", self.registry)
        self.assertIsNone(self.registry.get("bake"))

    def testDuplicateNamesRejected(self):
        self.registry.register(Command("cook", alias="c"), lambda: None)
        with self.assertRaises(ValueError):
            self.registry.register(Command("cook"), lambda: None)
        with self.assertRaises(ValueError):
            self.registry.register(Command("bake", alias="c"), lambda: None)
        self.assertNotIn("bake", self.registry)

    def testRegisterValidatesArguments(self):
        with self.assertRaises(TypeError):
            self.registry.register("cook", lambda: None)
        with self.assertRaises(TypeError):
            self.registry.register(Command("cook"), "not callable")


class TestDecorator(TestCase):
    """command() decorator and direct form."""

    def setUp(self):
        self.registry = Registry()

    def testDecorator(self):
        @command(arguments=["dish"], options={"spicy": bool, ("level", "-l"): 1}, registry=self.registry)
        def cook(dish, options=None):
            return dish, dict(options or {})

        self.assertEqual(cook("dish.txt --spicy -l 3"), ("dish.txt", {"level": 3, "spicy": True}))
        self.assertEqual(cook("dish.txt", {"spicy": True}), ("dish.txt", {"level": 1, "spicy": True}))
        self.assertIs(self.registry["cook"].invoker, cook)
        self.assertEqual(self.registry["cook"].callback.__name__, "cook")

    def testDirectFormWithName(self):
        invoker = command(lambda dish: dish.upper(), ["dish"], name="shout", registry=self.registry)
        self.assertEqual(invoker("hey"), "HEY")
        self.assertIn("shout", self.registry)

    def testCustomDispatcher(self):
        dispatcher = Dispatcher(nested=True)

        @command(registry=self.registry, dispatcher=dispatcher)
        def ping():
            return "pong"

        self.assertEqual(ping(), "pong")

    def testDecoratorRejectsNonCallables(self):
        with self.assertRaises(TypeError):
            command(registry=self.registry)("not callable")


if __name__ == "__main__":
    unittest.main()
