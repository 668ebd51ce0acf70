"""Command-line options and the set and list types they are parsed into."""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass, field
from typing import Iterable, Sequence

NAMESPACE_ALL = ""

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_OCTAL = re.compile(r"^[+-]?0[0-7]+$")


def _split_csv(value: str) -> Iterable[str]:
    """Yield the non-empty, whitespace-trimmed items of a comma-separated string."""
    for item in value.split(","):
        item = item.strip()
        if item:
            yield item


class MetricSet(set):
    """A unique set of metric names or patterns."""

    def add_csv(self, value: str) -> None:
        """Add every item of a comma-separated string."""
        self.update(_split_csv(value))

    def __str__(self) -> str:
        return ",".join(sorted(self))


class CollectorSet(set):
    """A unique set of collector names."""

    def add_csv(self, value: str) -> None:
        """Add every item of a comma-separated string."""
        self.update(_split_csv(value))

    def as_list(self) -> list[str]:
        """Return the collectors as a plain list."""
        return sorted(self)

    def __str__(self) -> str:
        return ",".join(sorted(self))


class NamespaceList(list):
    """An ordered list of namespaces to query."""

    def add_csv(self, value: str) -> None:
        """Append every item of a comma-separated string."""
        self.extend(_split_csv(value))

    def is_all_namespaces(self) -> bool:
        """True if the list selects all namespaces."""
        return len(self) == 1 and self[0] == NAMESPACE_ALL

    def __str__(self) -> str:
        return ",".join(self)


DEFAULT_NAMESPACES = NamespaceList([NAMESPACE_ALL])

DEFAULT_COLLECTORS = CollectorSet(
    {
        "certificatesigningrequests",
        "configmaps",
        "cronjobs",
        "daemonsets",
        "deployments",
        "endpoints",
        "horizontalpodautoscalers",
        "ingresses",
        "jobs",
        "limitranges",
        "mutatingwebhookconfigurations",
        "namespaces",
        "networkpolicies",
        "nodes",
        "persistentvolumes",
        "persistentvolumeclaims",
        "poddisruptionbudgets",
        "pods",
        "replicasets",
        "replicationcontrollers",
        "resourcequotas",
        "secrets",
        "services",
        "statefulsets",
        "storageclasses",
        "validatingwebhookconfigurations",
        "volumeattachments",
    }
)

_AUTOSHARDING_NOTICE = (
    "When set, it is expected that --pod and --pod-namespace are both set. "
    "Most likely this should be passed via the downward API. This is used for "
    "auto-detecting sharding. If set, this has preference over statically "
    "configured sharding. This is experimental, it may be removed without notice."
)


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _parse_int(text: str) -> int:
    try:
        if _OCTAL.match(text):
            return int(text, 8)
        return int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value {text!r}") from None


def _parse_int32(text: str) -> int:
    value = _parse_int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise argparse.ArgumentTypeError(f"value {text!r} out of range for int32")
    return value


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ValueError(message)


def _quoted(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass
class Options:
    """The configurable parameters of the exporter."""

    apiserver: str = ""
    kubeconfig: str = ""
    help: bool = False
    port: int = 80
    host: str = "0.0.0.0"
    telemetry_port: int = 81
    telemetry_host: str = "0.0.0.0"
    collectors: CollectorSet = field(default_factory=CollectorSet)
    namespaces: NamespaceList = field(default_factory=NamespaceList)
    shard: int = 0
    total_shards: int = 1
    pod: str = ""
    namespace: str = ""
    metric_blacklist: MetricSet = field(default_factory=MetricSet)
    metric_whitelist: MetricSet = field(default_factory=MetricSet)
    version: bool = False
    disable_pod_non_generic_resource_metrics: bool = False
    disable_node_non_generic_resource_metrics: bool = False
    enable_gzip_encoding: bool = False

    def _parser(self) -> _Parser:
        parser = _Parser(
            prog=sys.argv[0] if sys.argv else "kube-state-metrics",
            add_help=False,
            argument_default=argparse.SUPPRESS,
        )

        def flag_bool(*names: str, dest: str, text: str) -> None:
            parser.add_argument(
                *names, dest=dest, nargs="?", const=True, type=_parse_bool, help=text
            )

        parser.add_argument(
            "--apiserver", dest="apiserver", help="The URL of the apiserver to use as a master"
        )
        parser.add_argument(
            "--kubeconfig", dest="kubeconfig", help="Absolute path to the kubeconfig file"
        )
        flag_bool("-h", "--help", dest="help", text="Print Help text")
        parser.add_argument(
            "--port", dest="port", type=_parse_int, help="Port to expose metrics on. (default 80)"
        )
        parser.add_argument(
            "--host", dest="host", help='Host to expose metrics on. (default "0.0.0.0")'
        )
        parser.add_argument(
            "--telemetry-port",
            dest="telemetry_port",
            type=_parse_int,
            help="Port to expose kube-state-metrics self metrics on. (default 81)",
        )
        parser.add_argument(
            "--telemetry-host",
            dest="telemetry_host",
            help='Host to expose kube-state-metrics self metrics on. (default "0.0.0.0")',
        )
        parser.add_argument(
            "--collectors",
            dest="collectors",
            action="append",
            help="Comma-separated list of collectors to be enabled. Defaults to "
            + _quoted(str(DEFAULT_COLLECTORS)),
        )
        parser.add_argument(
            "--namespace",
            dest="namespaces",
            action="append",
            help="Comma-separated list of namespaces to be enabled. Defaults to "
            + _quoted(str(DEFAULT_NAMESPACES)),
        )
        parser.add_argument(
            "--metric-whitelist",
            dest="metric_whitelist",
            action="append",
            help="Comma-separated list of metrics to be exposed. This list comprises of "
            "exact metric names and/or regex patterns. The whitelist and blacklist are "
            "mutually exclusive.",
        )
        parser.add_argument(
            "--metric-blacklist",
            dest="metric_blacklist",
            action="append",
            help="Comma-separated list of metrics not to be enabled. This list comprises "
            "of exact metric names and/or regex patterns. The whitelist and blacklist are "
            "mutually exclusive.",
        )
        parser.add_argument(
            "--shard",
            dest="shard",
            type=_parse_int32,
            help="The instances shard nominal (zero indexed) within the total number of "
            "shards. (default 0)",
        )
        parser.add_argument(
            "--total-shards",
            dest="total_shards",
            type=_parse_int,
            help="The total number of shards. Sharding is disabled when total shards is "
            "set to 1. (default 1)",
        )
        parser.add_argument(
            "--pod",
            dest="pod",
            help="Name of the pod that contains the kube-state-metrics container. "
            + _AUTOSHARDING_NOTICE,
        )
        parser.add_argument(
            "--pod-namespace",
            dest="namespace",
            help="Name of the namespace of the pod specified by --pod. " + _AUTOSHARDING_NOTICE,
        )
        flag_bool("--version", dest="version", text="kube-state-metrics build version information")
        flag_bool(
            "--disable-pod-non-generic-resource-metrics",
            dest="disable_pod_non_generic_resource_metrics",
            text="Disable pod non generic resource request and limit metrics",
        )
        flag_bool(
            "--disable-node-non-generic-resource-metrics",
            dest="disable_node_non_generic_resource_metrics",
            text="Disable node non generic resource request and limit metrics",
        )
        flag_bool(
            "--enable-gzip-encoding",
            dest="enable_gzip_encoding",
            text="Gzip responses when requested by clients via 'Accept-Encoding: gzip' header.",
        )
        return parser

    def parse(self, argv: Sequence[str] | None = None) -> None:
        """Parse command-line arguments into this instance; raise ValueError on bad input."""
        args = list(sys.argv[1:] if argv is None else argv)
        parsed, extra = self._parser().parse_known_args(args)
        unknown = [a for a in extra if a.startswith("-") and a != "-"]
        if unknown:
            raise ValueError(f"unknown flag: {unknown[0]}")

        containers = {
            "collectors": self.collectors,
            "namespaces": self.namespaces,
            "metric_whitelist": self.metric_whitelist,
            "metric_blacklist": self.metric_blacklist,
        }
        for name, value in vars(parsed).items():
            if name in containers:
                for chunk in value:
                    containers[name].add_csv(chunk)
            else:
                setattr(self, name, value)

    def usage(self) -> None:
        """Print usage and flag defaults to standard error."""
        parser = self._parser()
        sys.stderr.write(f"Usage of {parser.prog}:\n")
        sys.stderr.write(parser.format_help())