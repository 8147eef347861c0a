from rich.pretty import pprint

from flagship import *

cache = CompletionCache(5.0)

PODS = {
    "default": ("web-7f9c", "web-a1b2", "worker-0"),
    "kube-system": ("coredns-5d78", "etcd-0"),
}

kubectl = Command(
    "kubectl",
    descr="minimal kubernetes-style client",
    flags=[
        Flag("--namespace", "-n", default="default", descr="namespace scope for this request",
             completion=lambda ctx, prefix: sorted(PODS)),
        Flag("--verbose", "-v", type=Bool, descr="log every request"),
    ],
    colorful=True,
)


@kubectl.command(
    args=MinimumArgs(1),
    aliases=["g"],
    flags=[Flag("--output", "-o", type=Choice("json", "yaml", "wide"), default="wide", descr="output format")],
    examples=["kubectl get pods", "kubectl get pods web-7f9c -o json"],
)
def get(ctx):
    """display one or many resources"""
    pprint({"namespace": ctx["namespace"], "output": ctx["output"], "resources": ctx.args})


@get.completer
@cached(cache)
@with_timeout(timeout=1.0)
def resources(ctx, prefix):
    if not ctx.args:
        return CompletionResult([("pods", "running workloads"), ("services", "network endpoints")]).help(
            "pick a resource type first",
        )
    return PODS.get(ctx["namespace"], ())


@kubectl.hook("persistent_pre_run")
def announce(ctx):
    if ctx["verbose"]:
        pprint(ctx)


kubectl.completion_command()


if __name__ == '__main__':
    raise SystemExit(invoke(kubectl))
