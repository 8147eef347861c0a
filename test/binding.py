"""
Binding behavioral tests (token forms, accumulation, terminator, faults).

Scope
- Validate long/short/inline/clustered spellings and presence-only booleans.
- Validate "--" termination and negative numbers as values.
- Validate strict-mode faults (unknown flag with suggestions, bad values, missing values).
- Validate lenient-mode behavior used by completion (dangling flags, no raising).

Conventions
- Test method names follow CamelCase per project convention.
- Flags are built fresh per test through the module-level factory.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagship import Bool, Choice, Flag, FlagParsingError, Int, StringSlice
from flagship.binding import bind, flaglike


def scope():
    return (
        Flag("--namespace", "-n", default="default"),
        Flag("--verbose", "-v", type=Bool),
        Flag("--quiet", "-q", type=Bool),
        Flag("--count", "-c", type=Int, default=1),
        Flag("--tag", "-t", type=StringSlice),
        Flag("--output", "-o", type=Choice("json", "yaml")),
    )


class TestBindForms(TestCase):
    """Behavioral tests for the accepted token spellings."""

    def testDefaultsAreReportedForAbsentFlags(self):
        binding = bind([], scope())
        self.assertEqual(binding.values["namespace"], "default")
        self.assertIs(binding.values["verbose"], False)
        self.assertEqual(binding.values["tag"], ())
        self.assertEqual(binding.provided, set())

    def testLongFlagWithSeparateValue(self):
        binding = bind(["--namespace", "prod", "pods"], scope())
        self.assertEqual(binding.values["namespace"], "prod")
        self.assertEqual(binding.args, ["pods"])
        self.assertEqual(binding.provided, {"namespace"})

    def testLongFlagWithInlineValue(self):
        self.assertEqual(bind(["--namespace=prod"], scope()).values["namespace"], "prod")

    def testShorthandSpellings(self):
        for tokens in (["-n", "prod"], ["-nprod"], ["-n=prod"]):
            self.assertEqual(bind(tokens, scope()).values["namespace"], "prod", tokens)

    def testClusteredBooleans(self):
        binding = bind(["-vq"], scope())
        self.assertIs(binding.values["verbose"], True)
        self.assertIs(binding.values["quiet"], True)

    def testClusterEndingWithValuedFlag(self):
        binding = bind(["-vc", "3"], scope())
        self.assertIs(binding.values["verbose"], True)
        self.assertEqual(binding.values["count"], 3)

    def testBooleanAcceptsExplicitValue(self):
        binding = bind(["--verbose=false"], scope())
        self.assertIs(binding.values["verbose"], False)
        self.assertIn("verbose", binding.provided)

    def testBooleanNeverConsumesNextToken(self):
        binding = bind(["--verbose", "pods"], scope())
        self.assertIs(binding.values["verbose"], True)
        self.assertEqual(binding.args, ["pods"])

    def testTerminatorMakesEverythingPositional(self):
        binding = bind(["pods", "--", "--verbose", "-n"], scope())
        self.assertEqual(binding.args, ["pods", "--verbose", "-n"])
        self.assertIs(binding.values["verbose"], False)
        self.assertTrue(binding.terminated)

    def testNegativeNumbersAreValues(self):
        binding = bind(["--count", "-5", "-1"], scope())
        self.assertEqual(binding.values["count"], -5)
        self.assertEqual(binding.args, ["-1"])

    def testSingleDashIsPositional(self):
        self.assertEqual(bind(["-"], scope()).args, ["-"])

    def testAccumulatingFlagCollectsInOrder(self):
        binding = bind(["--tag", "a,b", "-t", "c"], scope())
        self.assertEqual(binding.values["tag"], ("a", "b", "c"))

    def testRepeatedScalarKeepsLastValue(self):
        self.assertEqual(bind(["-n", "a", "-n", "b"], scope()).values["namespace"], "b")

    def testHelpIsRecognizedUnlessDeclared(self):
        self.assertTrue(bind(["--help"], scope()).help)
        self.assertTrue(bind(["pods", "-h"], scope()).help)
        self.assertFalse(bind(["--", "--help"], scope()).help)
        declared = (Flag("--host", "-h"),)
        self.assertEqual(bind(["-h", "example.org"], declared).values["host"], "example.org")


class TestBindFaults(TestCase):
    """Behavioral tests for strict-mode faults."""

    def testUnknownFlagSuggestsNearName(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["--namspace", "prod"], scope())
        fault = context.exception
        self.assertEqual(str(fault), "unknown flag '--namspace'")
        self.assertEqual(fault.suggestions, ("--namespace",))
        self.assertEqual(fault.flag, "namspace")

    def testUnknownFlagWithoutSuggestions(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["--namspace"], scope(), suggestions=False)
        self.assertEqual(context.exception.suggestions, ())

    def testUnknownShorthand(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["-x"], scope())
        self.assertEqual(str(context.exception), "unknown flag '-x'")

    def testConversionFailureNamesTypeAndText(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["--count", "abc"], scope())
        fault = context.exception
        self.assertEqual(fault.flag, "count")
        self.assertEqual(fault.expected, "int")
        self.assertEqual(fault.received, "abc")

    def testInvalidChoiceSuggestsClosestValue(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["--output", "jsn"], scope())
        self.assertEqual(context.exception.suggestions, ("json",))

    def testMissingValue(self):
        with self.assertRaises(FlagParsingError) as context:
            bind(["--namespace"], scope())
        self.assertIn("needs a value", str(context.exception))

    def testValueCannotBeAnotherFlag(self):
        with self.assertRaises(FlagParsingError):
            bind(["--namespace", "--verbose"], scope())

    def testEmptyInlineBooleanIsRejected(self):
        with self.assertRaises(FlagParsingError):
            bind(["--verbose="], scope())

    def testHelpIsUnknownWhenDisabled(self):
        with self.assertRaises(FlagParsingError):
            bind(["--help"], scope(), helpable=False)


class TestLenientBinding(TestCase):
    """Behavioral tests for lenient mode (used while completing)."""

    def testTrailingValuedFlagIsDangling(self):
        flags = scope()
        binding = bind(["pods", "--namespace"], flags, strict=False)
        self.assertIs(binding.dangling, flags[0])
        self.assertEqual(binding.args, ["pods"])

    def testMalformedInputIsSkipped(self):
        binding = bind(["--bogus", "--count", "x", "pods"], scope(), strict=False)
        self.assertEqual(binding.values["count"], 1)
        self.assertNotIn("count", binding.provided)
        self.assertEqual(binding.args, ["pods"])

    def testFlaglikeTreatsNegativeNumbersAsValues(self):
        self.assertTrue(flaglike("--name"))
        self.assertTrue(flaglike("-n"))
        self.assertFalse(flaglike("-"))
        self.assertFalse(flaglike("-3"))
        self.assertTrue(flaglike("-3", {"3"}))
        self.assertFalse(flaglike("pods"))


if __name__ == "__main__":
    unittest.main()
