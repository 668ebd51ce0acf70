import gzip

import pytest

from kstatemetrics.metric import Family, Metric
from kstatemetrics.metrics_store import MetricsStore
from kstatemetrics.metricshandler import (
    MetricsHandler,
    detect_nominal_from_pod,
    sharding_settings_from_statefulset,
)


def _generate(obj):
    uid = obj["metadata"]["uid"]
    return [Family("kube_pod_info", [Metric(["uid"], [uid], 1)])]


def _store(uids):
    store = MetricsStore(
        ["# HELP kube_pod_info Information about pod.\n# TYPE kube_pod_info gauge"],
        _generate,
    )
    for uid in uids:
        store.add({"metadata": {"uid": uid}})
    return store


def test_detect_nominal_from_pod():
    assert detect_nominal_from_pod("kube-state-metrics", "kube-state-metrics-3") == 3
    assert detect_nominal_from_pod("ksm", "ksm-0") == 0


@pytest.mark.parametrize("pod", ["ksm-abc", "ksm-", "other-x1", "ksm- 2"])
def test_detect_nominal_from_pod_invalid(pod):
    with pytest.raises(ValueError, match="failed to detect shard index"):
        detect_nominal_from_pod("ksm", pod)


def test_sharding_settings_with_replicas():
    ss = {"metadata": {"name": "ksm"}, "spec": {"replicas": 4}}
    assert sharding_settings_from_statefulset(ss, "ksm-2") == (2, 4)


def test_sharding_settings_default_replicas():
    ss = {"metadata": {"name": "ksm"}, "spec": {}}
    assert sharding_settings_from_statefulset(ss, "ksm-1") == (1, 1)


def test_sharding_settings_error():
    ss = {"metadata": {"name": "ksm"}, "spec": {"replicas": 2}}
    with pytest.raises(ValueError, match="detecting Pod nominal"):
        sharding_settings_from_statefulset(ss, "ksm-x")


def test_sharding_unchanged():
    handler = MetricsHandler()
    handler.set_stores([], 1, 3)
    assert handler.sharding_unchanged(1, 3)
    assert not handler.sharding_unchanged(0, 3)
    assert not handler.sharding_unchanged(1, 2)


def test_render_empty():
    headers, body = MetricsHandler().render()
    assert body == b""
    assert ("Content-Type", "text/plain; version=0.0.4") in headers


def test_render_contains_all_objects():
    handler = MetricsHandler()
    handler.set_stores([_store(["a", "b"])], 0, 1)
    _, body = handler.render()
    text = body.decode()
    assert text.startswith("# HELP kube_pod_info Information about pod.\n")
    assert 'kube_pod_info{uid="a"} 1\n' in text
    assert 'kube_pod_info{uid="b"} 1\n' in text


def test_render_multiple_stores_in_order():
    handler = MetricsHandler()
    handler.set_stores([_store(["a"]), _store(["b"])], 0, 1)
    _, body = handler.render()
    text = body.decode()
    assert text.index('uid="a"') < text.index('uid="b"')


def test_gzip_round_trip():
    plain = MetricsHandler()
    zipped = MetricsHandler(enable_gzip_encoding=True)
    store = _store(["a"])
    plain.set_stores([store], 0, 1)
    zipped.set_stores([store], 0, 1)
    _, expected = plain.render()
    headers, body = zipped.render("deflate, gzip;q=1.0")
    assert ("Content-Encoding", "gzip") in headers
    assert gzip.decompress(body) == expected


@pytest.mark.parametrize("accept", ["", "deflate", "gzipx", "br, identity"])
def test_no_gzip_unless_requested(accept):
    handler = MetricsHandler(enable_gzip_encoding=True)
    handler.set_stores([_store(["a"])], 0, 1)
    headers, body = handler.render(accept)
    assert all(name != "Content-Encoding" for name, _ in headers)
    assert b'uid="a"' in body


def test_gzip_disabled_ignores_header():
    handler = MetricsHandler()
    handler.set_stores([_store(["a"])], 0, 1)
    headers, body = handler.render("gzip")
    assert all(name != "Content-Encoding" for name, _ in headers)
    assert b'uid="a"' in body


def test_wsgi_call():
    handler = MetricsHandler(enable_gzip_encoding=True)
    handler.set_stores([_store(["a"])], 0, 1)
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    chunks = handler({"HTTP_ACCEPT_ENCODING": "gzip"}, start_response)
    body = b"".join(chunks)
    assert captured["status"] == "200 OK"
    assert captured["headers"]["Content-Encoding"] == "gzip"
    assert captured["headers"]["Content-Length"] == str(len(body))
    assert b'kube_pod_info{uid="a"} 1' in gzip.decompress(body)