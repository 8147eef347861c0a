"""
Completion engine behavioral tests (routing, filtering, ActiveHelp, failures).

Scope
- Validate CompletionResult building, coercion, merging and prefix selection.
- Validate routing: subcommand names, argument callbacks, flag names, flag values,
  inline "--name=value" values and registered flag completers.
- Validate ActiveHelp predicates and the help-only fallback for failing callbacks.

Conventions
- Test method names follow CamelCase per project convention.
- The engine is exercised directly through complete(root, tokens); the last
  token is always the prefix being typed.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagship import (
    ActiveHelp,
    Choice,
    Command,
    CompletionError,
    CompletionItem,
    CompletionResult,
    Context,
    Flag,
    MinimumArgs,
    complete,
)


def resources(ctx, prefix):
    result = CompletionResult()
    result.add("pods", "running workloads")
    result.add("services", "network endpoints")
    result.add("nodes")
    result.help("pick a resource type", when=lambda ctx: not ctx.args)
    return result


def kubectl():
    root = Command(
        "kubectl",
        flags=[
            Flag("--namespace", "-n", default="default", descr="target namespace",
                 completion=lambda ctx, prefix: ["default", "kube-system", "prod"]),
            Flag("--context", descr="kubeconfig context"),
            Flag("--token", hidden=True),
        ],
    )
    get = Command(
        "get",
        descr="display resources",
        aliases=["g"],
        flags=[Flag("--output", "-o", type=Choice("json", "yaml", "wide"), descr="output format")],
        args=MinimumArgs(1),
        run=print,
        completion=resources,
        parent=root,
    )

    @get.flag_completer("context")
    def contexts(ctx, prefix):
        return [("dev", "development cluster"), ("live", "production cluster")]

    Command("describe", descr="show details", run=print, parent=root)
    return root


class TestCompletionResult(TestCase):
    """Behavioral tests for the result container."""

    def testAddAndExtendKeepOrder(self):
        result = CompletionResult()
        result.add("a", "first").extend(["b", ("c", "third")])
        self.assertEqual(result.values, ("a", "b", "c"))
        self.assertEqual(result.descriptions, ("first", None, "third"))
        self.assertEqual(list(result)[0], CompletionItem("a", "first"))
        self.assertEqual(len(result), 3)

    def testCoerceAcceptsIterablesAndNone(self):
        self.assertEqual(CompletionResult.coerce(None).values, ())
        self.assertEqual(CompletionResult.coerce(["x", ("y", "why")]).values, ("x", "y"))
        result = CompletionResult(["z"])
        self.assertIs(CompletionResult.coerce(result), result)
        with self.assertRaises(TypeError):
            CompletionResult.coerce("pods")

    def testValuesMustBeStrings(self):
        with self.assertRaises(TypeError):
            CompletionResult().add(3)

    def testSelectFiltersByPrefix(self):
        ctx = Context(())
        selected = CompletionResult(["pods", "services", "pvc"]).select("p", ctx)
        self.assertEqual(selected.values, ("pods", "pvc"))
        self.assertTrue(selected.filtered)

    def testPrefilteredResultIsKept(self):
        ctx = Context(())
        result = CompletionResult(["alpha", "beta"], filtered=True)
        self.assertEqual(result.select("z", ctx).values, ("alpha", "beta"))

    def testSelectDropsInapplicableHelp(self):
        ctx = Context((), args=("pods",))
        result = CompletionResult().help("always").help("only first", when=lambda ctx: not ctx.args)
        self.assertEqual([entry.message for entry in result.select("", ctx).active_help], ["always"])

    def testFailingPredicateDropsHelp(self):
        hint = ActiveHelp("fragile", when=lambda ctx: 1 / 0)
        self.assertFalse(hint.applies(Context(())))

    def testMergeCombinesMarkers(self):
        merged = CompletionResult(["a"]).merge(CompletionResult(["b"], ["hint"], incomplete=True))
        self.assertEqual(merged.values, ("a", "b"))
        self.assertTrue(merged.incomplete)
        self.assertEqual(merged.active_help, (ActiveHelp("hint"),))

    def testEmptyResultIsFalsey(self):
        self.assertFalse(CompletionResult())
        self.assertTrue(CompletionResult().help("only help"))


class TestComplete(TestCase):
    """Behavioral tests for complete(root, tokens)."""

    def setUp(self):
        self.root = kubectl()

    def testRootListsSubcommandsAndAliases(self):
        result = complete(self.root, [""])
        self.assertEqual(result.values, ("get", "g", "describe"))
        self.assertEqual(result.descriptions[0], "display resources")

    def testSubcommandPrefix(self):
        self.assertEqual(complete(self.root, ["de"]).values, ("describe",))

    def testArgumentCallbackResults(self):
        result = complete(self.root, ["get", ""])
        self.assertEqual(result.values, ("pods", "services", "nodes"))
        self.assertEqual(result.descriptions, ("running workloads", "network endpoints", None))
        self.assertEqual([entry.message for entry in result.active_help], ["pick a resource type"])

    def testArgumentPrefixFilters(self):
        self.assertEqual(complete(self.root, ["get", "s"]).values, ("services",))

    def testAliasPathCompletes(self):
        self.assertEqual(complete(self.root, ["g", "p"]).values, ("pods",))

    def testActiveHelpPredicateSeesArgs(self):
        result = complete(self.root, ["get", "pods", ""])
        self.assertEqual(result.values, ("pods", "services", "nodes"))
        self.assertEqual(result.active_help, ())

    def testFlagNamesIncludeInheritedAndHelp(self):
        values = complete(self.root, ["get", "-"]).values
        self.assertIn("--namespace", values)
        self.assertIn("--context", values)
        self.assertIn("--output", values)
        self.assertIn("--help", values)
        self.assertNotIn("--token", values)

    def testFlagNamePrefix(self):
        result = complete(self.root, ["get", "--o"])
        self.assertEqual(result.values, ("--output",))
        self.assertEqual(result.descriptions, ("output format",))

    def testChoiceValues(self):
        self.assertEqual(complete(self.root, ["get", "--output", ""]).values, ("json", "yaml", "wide"))
        self.assertEqual(complete(self.root, ["get", "-o", "y"]).values, ("yaml",))

    def testInlineFlagValue(self):
        self.assertEqual(complete(self.root, ["get", "--output=w"]).values, ("--output=wide",))

    def testFlagCompletionCallback(self):
        self.assertEqual(complete(self.root, ["get", "-n", "k"]).values, ("kube-system",))

    def testInheritedFlagCompletionAtRoot(self):
        self.assertEqual(complete(self.root, ["--namespace", "p"]).values, ("prod",))

    def testRegisteredFlagCompleter(self):
        result = complete(self.root, ["get", "--context", ""])
        self.assertEqual(result.values, ("dev", "live"))
        self.assertEqual(result.descriptions, ("development cluster", "production cluster"))

    def testFlagWithoutCandidates(self):
        self.assertEqual(complete(self.root, ["describe", "--context", ""]).values, ())

    def testTerminatorDisablesFlagCompletion(self):
        self.assertEqual(complete(self.root, ["get", "--", "-"]).values, ())

    def testBoundFlagsReachTheCallback(self):
        seen = []
        root = Command("app", flags=[Flag("--region", default="eu")])

        @root.completer
        def zones(ctx, prefix):
            seen.append((ctx["region"], ctx.args, prefix))
            return []

        complete(root, ["--region", "us", "first", "se"])
        self.assertEqual(seen, [("us", ("first",), "se")])

    def testFailingCallbackBecomesHelp(self):
        root = Command("app", completion=lambda ctx, prefix: 1 / 0)
        result = complete(root, [""])
        self.assertEqual(result.values, ())
        message, = [entry.message for entry in result.active_help]
        self.assertIn("failed", message)

    def testCompletionErrorMessageIsKept(self):
        def broken(ctx, prefix):
            raise CompletionError("cluster unreachable")

        result = complete(Command("app", completion=broken), [""])
        self.assertEqual([entry.message for entry in result.active_help], ["cluster unreachable"])

    def testEmptyTokens(self):
        self.assertEqual(complete(self.root, []).values, ("get", "g", "describe"))


if __name__ == "__main__":
    unittest.main()
