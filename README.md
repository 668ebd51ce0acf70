# kstatemetrics

Building blocks for turning the state of Kubernetes objects into metrics in
the Prometheus text exposition format. The package has no runtime
dependencies beyond the standard library.

## Modules

- `kstatemetrics.metric` – `Metric`, `Family` and `FamilyGenerator` describe
  time series and render them as exposition text. `ResourceUnit` and
  `MetricType` name units and metric types. Helpers: `format_float`,
  `escape_label_value`, `extract_metric_family_headers`,
  `compose_metric_gen_funcs` and `filter_metric_families`.
- `kstatemetrics.metrics_store` – `MetricsStore` keeps the rendered metrics
  of each object under the object's UID (read by `object_uid` from
  `metadata.uid` or from a `uid` of its own, on mappings or attributes). It
  writes them out family by family under their `# HELP` / `# TYPE` headers.
- `kstatemetrics.options` – `Options` parses the command-line configuration:
  collectors, namespaces, metric white- and blacklists, sharding, pod and pod
  namespace, listen hosts and ports, and gzip encoding. Values are parsed into
  `CollectorSet`, `NamespaceList` and `MetricSet`. The defaults are
  `DEFAULT_COLLECTORS` and `DEFAULT_NAMESPACES`. Bad input raises `ValueError`.
- `kstatemetrics.whiteblacklist` – `WhiteBlackList` decides by regular
  expression which metric names are included. It raises
  `WhiteBlackListError` when both lists are given or a pattern does not
  compile.
- `kstatemetrics.sharding` – `Sharding`, `ShardedListWatch` and
  `new_sharded_list_watch` split objects across instances by UID. The hashes
  behind them are `fnv64a` and `jump_hash`.
- `kstatemetrics.watch` – `InstrumentedListerWatcher` counts successful and
  failed list and watch calls per resource in the `CounterVec`s of
  `ListWatchMetrics`.
- `kstatemetrics.metricshandler` – `MetricsHandler` is a WSGI application
  that serves the contents of its stores. It also has the helpers
  `detect_nominal_from_pod` and `sharding_settings_from_statefulset`, which
  work out a shard index from a StatefulSet pod.
- `kstatemetrics.version` – `Version` and `get_version()`.

## Formatting values

```python
from kstatemetrics.metric import escape_label_value, format_float

format_float(1.0)            # "1"
format_float(35.7)           # "35.7"
format_float(1.5e9)          # "1.5e+09"
format_float(float("inf"))   # "+Inf"

escape_label_value('say "hi"')  # 'say \\"hi\\"'
```

## Building a store

```python
import io

from kstatemetrics.metric import (
    Family, FamilyGenerator, Metric, MetricType,
    compose_metric_gen_funcs, extract_metric_family_headers,
)
from kstatemetrics.metrics_store import MetricsStore

generators = [
    FamilyGenerator(
        "kube_service_info",
        "Information about service.",
        MetricType.GAUGE,
        lambda obj: Family(metrics=[Metric(["uid"], [obj["metadata"]["uid"]], 1)]),
    )
]
store = MetricsStore(
    extract_metric_family_headers(generators),
    compose_metric_gen_funcs(generators),
)
store.add({"metadata": {"uid": "a"}})

buf = io.BytesIO()
store.write_all(buf)
# # HELP kube_service_info Information about service.
# # TYPE kube_service_info gauge
# kube_service_info{uid="a"} 1
```

`update` replaces an object's metrics and `delete` drops them. `replace`
clears the store and adds a new list of objects. The store does not keep the
objects themselves, so `list`, `list_keys`, `get` and `get_by_key` find
nothing.

## Filtering metric families

```python
from kstatemetrics.metric import filter_metric_families
from kstatemetrics.whiteblacklist import WhiteBlackList

wbl = WhiteBlackList(black=["kube_node_.*_cores"])
wbl.parse()                       # patterns take effect once parsed
wbl.is_included("kube_node_status_capacity_cpu_cores")  # False
kept = filter_metric_families(wbl, generators)
```

With neither list given, the list blacklists nothing. `include` and
`exclude` change the list; call `parse` again afterwards.

## Options

```python
from kstatemetrics.options import Options

opts = Options()
opts.parse(["--collectors=configmaps,pods", "--namespace=default,kube-system"])
opts.collectors.as_list()   # ["configmaps", "pods"]
list(opts.namespaces)       # ["default", "kube-system"]
```

`Options.usage()` prints the flags and their help to standard error.

## Sharding

Each object is assigned to exactly one shard. Its UID is hashed with 64-bit
FNV-1a and the result is fed to a jump consistent hash:

```python
from kstatemetrics.sharding import Sharding, fnv64a, jump_hash

bucket = jump_hash(fnv64a(b"some-object-uid"), 2)   # 0 or 1
Sharding(shard=0, total_shards=2).keep({"metadata": {"uid": "some-object-uid"}})
```

`new_sharded_list_watch(shard, total_shards, lw)` returns `lw` unchanged for
shard 0 of 1. Otherwise it wraps `lw` so that `list` and `watch` pass on
only this shard's objects.

When running as a StatefulSet, the shard index comes from the pod's ordinal:

```python
from kstatemetrics.metricshandler import detect_nominal_from_pod

detect_nominal_from_pod("kube-state-metrics", "kube-state-metrics-2")  # 2
```

## Serving metrics

`MetricsHandler` is a WSGI callable. Give it the stores to serve with
`set_stores(stores, shard, total_shards)`, then mount it with any WSGI
server, for example the one in `wsgiref`. `render(accept_encoding)` returns
the headers and body directly.

Responses carry `Content-Type: text/plain; version=0.0.4`. They are
gzip-encoded when the handler was created with `enable_gzip_encoding=True`
and the request's `Accept-Encoding` lists `gzip`.

## What the package does not do

The package does not talk to a Kubernetes API server. It has no collectors
that turn pods, nodes, deployments and other resources into metric families;
you supply the generators and feed objects to the stores yourself. There is
no command-line program. Nothing starts an HTTP server, serves the exporter's
own telemetry, or watches a StatefulSet to reconfigure sharding on its own.
Counters in `kstatemetrics.watch` are kept in memory and are not exposed by
any endpoint.

## Running the tests

Install the `test` extra and run `pytest` from the project root.