"""
Flags module behavioral tests (value types, constraints, Flag specs, scope).

Scope
- Validate value types: conversion, rejection messages, defaults and accumulation.
- Validate constraints: RequiredIf, ConflictsWith and Requires over a provided set.
- Validate Flag construction: names, shorthand, defaults, metadata errors.
- Validate visible(): ancestor-first ordering and descendant shadowing.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API exported by the flagship package.
"""

from __future__ import annotations

import os
import unittest
from unittest import TestCase

from flagship import (
    Bool,
    Choice,
    Command,
    ConflictsWith,
    Directory,
    File,
    Flag,
    Float,
    Int,
    Range,
    RequiredIf,
    Requires,
    String,
    StringArray,
    StringSlice,
    ValidationError,
    visible,
)


class TestValueTypes(TestCase):
    """Behavioral tests for the built-in value types."""

    def testBoolAcceptsCommonSpellings(self):
        for text in ("true", "T", "1", "yes", "Y"):
            self.assertIs(Bool(text), True)
        for text in ("false", "f", "0", "NO", "n"):
            self.assertIs(Bool(text), False)

    def testBoolRejectsOtherText(self):
        with self.assertRaises(ValueError):
            Bool("maybe")

    def testIntConvertsAndRejects(self):
        self.assertEqual(Int("42"), 42)
        self.assertEqual(Int("-10"), -10)
        with self.assertRaises(ValueError) as context:
            Int("4.2")
        self.assertIn("invalid integer value", str(context.exception))

    def testFloatConverts(self):
        self.assertEqual(Float("3.5"), 3.5)
        with self.assertRaises(ValueError):
            Float("pi")

    def testStringIsIdentity(self):
        self.assertEqual(String("a b"), "a b")

    def testStringSliceSplitsOnCommas(self):
        self.assertEqual(StringSlice("a, b,c"), ("a", "b", "c"))
        self.assertTrue(StringSlice.accumulates)

    def testStringArrayKeepsWholeValue(self):
        self.assertEqual(StringArray("a,b"), ("a,b",))
        self.assertTrue(StringArray.accumulates)

    def testChoiceRestrictsValues(self):
        output = Choice("json", "yaml")
        self.assertEqual(output("json"), "json")
        self.assertEqual(output.name, "{json,yaml}")
        self.assertEqual(output.choices, ("json", "yaml"))
        with self.assertRaises(ValueError) as context:
            output("xml")
        self.assertIn("expected one of: json, yaml", str(context.exception))

    def testChoiceRejectsDuplicatesAndEmpty(self):
        with self.assertRaises(TypeError):
            Choice()
        with self.assertRaises(ValueError):
            Choice("a", "a")

    def testRangeIsInclusive(self):
        replicas = Range(1, 3)
        self.assertEqual(replicas("1"), 1)
        self.assertEqual(replicas("3"), 3)
        with self.assertRaises(ValueError) as context:
            replicas("4")
        self.assertIn("out of range", str(context.exception))

    def testRangeRejectsInvertedBounds(self):
        with self.assertRaises(ValueError):
            Range(5, 1)

    def testFileAndDirectoryCheckExistence(self):
        here = os.path.abspath(__file__)
        self.assertEqual(File(here), here)
        self.assertEqual(Directory(os.path.dirname(here)), os.path.dirname(here))
        with self.assertRaises(ValueError):
            File(os.path.dirname(here))
        with self.assertRaises(ValueError):
            Directory(here)
        with self.assertRaises(ValueError):
            File(os.path.join(os.path.dirname(here), "does-not-exist.txt"))


class TestFlag(TestCase):
    """Behavioral tests for Flag specifications."""

    def testNamesAreSplitIntoNameAndShorthand(self):
        namespace = Flag("--namespace", "-n")
        self.assertEqual(namespace.name, "namespace")
        self.assertEqual(namespace.shorthand, "n")
        self.assertEqual(namespace.long, "--namespace")
        self.assertEqual(namespace.short, "-n")

    def testShorthandIsOptional(self):
        dry = Flag("--dry-run", type=Bool)
        self.assertIsNone(dry.shorthand)
        self.assertIsNone(dry.short)

    def testLongNameIsRequired(self):
        with self.assertRaises(TypeError):
            Flag()
        with self.assertRaises(TypeError):
            Flag("-n")

    def testMalformedNamesAreRejected(self):
        with self.assertRaises(ValueError):
            Flag("namespace")
        with self.assertRaises(ValueError):
            Flag("--a", "--b")
        with self.assertRaises(ValueError):
            Flag("--a", "-x", "-y")
        with self.assertRaises(ValueError):
            Flag("--", "-x")

    def testDefaultsFollowTheType(self):
        self.assertIsNone(Flag("--name").default)
        self.assertIs(Flag("--verbose", type=Bool).default, False)
        self.assertEqual(Flag("--tag", type=StringSlice).default, ())

    def testAccumulatingDefaultBecomesTuple(self):
        self.assertEqual(Flag("--tag", type=StringSlice, default=["a", "b"]).default, ("a", "b"))

    def testDefaultMustBeAcceptedByType(self):
        with self.assertRaises(ValueError):
            Flag("--count", type=Int, default="three")
        with self.assertRaises(ValueError):
            Flag("--output", type=Choice("json", "yaml"), default="xml")

    def testEmptyDescriptionIsRejected(self):
        with self.assertRaises(ValueError):
            Flag("--name", descr="   ")

    def testCompletionMustBeCallable(self):
        with self.assertRaises(TypeError):
            Flag("--name", completion="pods")

    def testCompleterCanBeBoundOnce(self):
        namespace = Flag("--namespace")

        @namespace.completer
        def namespaces(ctx, prefix):
            return ["default"]

        self.assertIs(namespace.completion, namespaces)
        with self.assertRaises(TypeError):
            namespace.completer(namespaces)

    def testValuedFollowsType(self):
        self.assertTrue(Flag("--name").valued)
        self.assertFalse(Flag("--verbose", type=Bool).valued)

    def testConvertUsesType(self):
        self.assertEqual(Flag("--count", type=Int).convert("7"), 7)

    def testReprNamesTheSpec(self):
        self.assertTrue(repr(Flag("--name", "-n")).startswith("flag("))


class TestConstraints(TestCase):
    """Behavioral tests for cross-flag constraints."""

    def testConflictsWithRaisesOnlyWhenBothPresent(self):
        json = Flag("--json", type=Bool, constraints=[ConflictsWith("--yaml")])
        json.constraints[0].check(json, {"json"})
        json.constraints[0].check(json, {"yaml"})
        with self.assertRaises(ValidationError) as context:
            json.constraints[0].check(json, {"json", "yaml"})
        self.assertEqual(context.exception.flag, "json")

    def testRequiresNeedsEveryFlag(self):
        tls = Flag("--tls", type=Bool, constraints=[Requires("cert", "key")])
        tls.constraints[0].check(tls, {"tls", "cert", "key"})
        with self.assertRaises(ValidationError) as context:
            tls.constraints[0].check(tls, {"tls", "cert"})
        self.assertIn("'--key'", str(context.exception))

    def testRequiredIfTriggersOnOtherFlag(self):
        password = Flag("--password", constraints=[RequiredIf("user")])
        password.constraints[0].check(password, set())
        with self.assertRaises(ValidationError):
            password.constraints[0].check(password, {"user"})

    def testDescribeListsFlags(self):
        self.assertEqual(ConflictsWith("a", "--b").describe(), "conflicts with --a, --b")

    def testConstraintNeedsFlags(self):
        with self.assertRaises(TypeError):
            ConflictsWith()


class TestVisible(TestCase):
    """Behavioral tests for flag scoping along a command chain."""

    def testAncestorFlagsComeFirst(self):
        root = Command("app", flags=[Flag("--verbose", type=Bool)])
        child = Command("run", flags=[Flag("--fast", type=Bool)], parent=root)
        self.assertEqual([flag.name for flag in visible((root, child))], ["verbose", "fast"])

    def testDescendantShadowsAncestor(self):
        root = Command("app", flags=[Flag("--output", default="text"), Flag("--verbose", type=Bool)])
        override = Flag("--output", default="json")
        child = Command("show", flags=[override], parent=root)
        scope = visible((root, child))
        self.assertEqual([flag.name for flag in scope], ["output", "verbose"])
        self.assertIs(scope[0], override)

    def testSiblingFlagsAreNotVisible(self):
        root = Command("app")
        Command("one", flags=[Flag("--alpha")], parent=root)
        two = Command("two", parent=root)
        self.assertEqual(visible((root, two)), ())


if __name__ == "__main__":
    unittest.main()
