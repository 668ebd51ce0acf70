"""Metric families and their rendering in the Prometheus text exposition format."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Protocol


class ResourceUnit(str, Enum):
    """Unit of measure for resource metrics."""

    BYTE = "byte"
    CORE = "core"
    INTEGER = "integer"


class MetricType(str, Enum):
    """Prometheus metric type."""

    GAUGE = "gauge"
    COUNTER = "counter"


_ESCAPES = str.maketrans({"\\": "\\\\", "\n": "\\n", '"': '\\"'})


def escape_label_value(value: str) -> str:
    """Escape backslashes, newlines and double quotes in a label value."""
    return value.translate(_ESCAPES)


def format_float(value: float) -> str:
    """Format a float the way the exposition format expects (shortest 'g' form)."""
    if value == 1:
        return "1"
    if value == 0:
        return "0"
    if value == -1:
        return "-1"
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    sign, digit_tuple, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    point = len(digits) + exponent
    exp = point - 1
    prefix = "-" if sign else ""

    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp):02d}"

    if point <= 0:
        body = "0." + "0" * (-point) + digits
    elif point >= len(digits):
        body = digits + "0" * (point - len(digits))
    else:
        body = digits[:point] + "." + digits[point:]
    return prefix + body


@dataclass
class Metric:
    """A single time series; its name is supplied by the owning family."""

    label_keys: list[str] = field(default_factory=list)
    label_values: list[str] = field(default_factory=list)
    value: float = 0.0

    def render(self) -> str:
        """Render labels and value, terminated by a newline."""
        if len(self.label_keys) != len(self.label_values):
            raise ValueError(
                f"expected labelKeys {self.label_keys!r} to be of same length "
                f"as labelValues {self.label_values!r}"
            )
        labels = ""
        if self.label_keys:
            labels = (
                "{"
                + ",".join(
                    f'{key}="{escape_label_value(val)}"'
                    for key, val in zip(self.label_keys, self.label_values)
                )
                + "}"
            )
        return f"{labels} {format_float(self.value)}\n"


@dataclass
class Family:
    """A set of metrics sharing one name."""

    name: str = ""
    metrics: list[Metric] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Return the family's metrics in text exposition format."""
        return "".join(self.name + m.render() for m in self.metrics).encode()


@dataclass
class FamilyGenerator:
    """Everything needed to generate a metric family from an object."""

    name: str
    help: str
    metric_type: MetricType
    generate_func: Callable[[Any], Family]

    def generate(self, obj: Any) -> Family:
        """Generate the family for ``obj`` and give it this generator's name."""
        family = self.generate_func(obj)
        family.name = self.name
        return family

    def header(self) -> str:
        """Return the HELP and TYPE lines (without trailing newline)."""
        return (
            f"# HELP {self.name} {self.help}\n"
            f"# TYPE {self.name} {MetricType(self.metric_type).value}"
        )


class _Lister(Protocol):
    def is_included(self, item: str) -> bool: ...


def extract_metric_family_headers(families: Iterable[FamilyGenerator]) -> list[str]:
    """Return the header of each family generator."""
    return [f.header() for f in families]


def compose_metric_gen_funcs(
    family_gens: Iterable[FamilyGenerator],
) -> Callable[[Any], list[Family]]:
    """Combine family generators into one function returning all families."""
    gens = list(family_gens)

    def generate(obj: Any) -> list[Family]:
        return [gen.generate(obj) for gen in gens]

    return generate


def filter_metric_families(
    lister: _Lister, families: Iterable[FamilyGenerator]
) -> list[FamilyGenerator]:
    """Keep only the family generators whose names the lister includes."""
    return [f for f in families if lister.is_included(f.name)]