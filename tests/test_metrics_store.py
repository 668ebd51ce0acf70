import io
from types import SimpleNamespace

import pytest

from kstatemetrics.metrics_store import MetricsStore, object_uid


class _Fam:
    def __init__(self, value):
        self.value = value

    def to_bytes(self):
        return self.value


def _service(uid, namespace="default", name="service"):
    return {"metadata": {"name": name, "namespace": namespace, "uid": uid}}


def _gen(obj):
    uid = object_uid(obj)
    return [_Fam(f'kube_service_info{{uid="{uid}"}} 1\n'.encode())]


def _dump(store):
    buf = io.BytesIO()
    store.write_all(buf)
    return buf.getvalue().decode()


def test_objects_same_name_different_namespaces():
    store = MetricsStore(["Information about service."], _gen)
    for sid in ["a", "b"]:
        store.add(_service(sid, namespace=sid))
    out = _dump(store)
    for sid in ["a", "b"]:
        assert f'uid="{sid}"' in out


def test_write_all_zips_headers_with_families():
    def gen(obj):
        uid = object_uid(obj)
        return [_Fam(f"one_{uid}\n".encode()), _Fam(f"two_{uid}\n".encode())]

    store = MetricsStore(["h1", "h2"], gen)
    store.add(_service("x"))
    store.add(_service("y"))
    assert _dump(store) == "h1\none_x\none_y\nh2\ntwo_x\ntwo_y\n"


def test_delete_removes_metrics():
    store = MetricsStore(["h"], _gen)
    store.add(_service("a"))
    store.add(_service("b"))
    store.delete(_service("a"))
    out = _dump(store)
    assert 'uid="a"' not in out
    assert 'uid="b"' in out


def test_update_overwrites_entry():
    calls = []

    def gen(obj):
        calls.append(obj)
        return [_Fam(f"v{len(calls)}\n".encode())]

    store = MetricsStore(["h"], gen)
    store.add(_service("a"))
    store.update(_service("a"))
    assert _dump(store) == "h\nv2\n"


def test_replace_clears_previous():
    store = MetricsStore(["h"], _gen)
    store.add(_service("old"))
    store.replace([_service("n1"), _service("n2")])
    out = _dump(store)
    assert 'uid="old"' not in out
    assert out.count("kube_service_info") == 2


def test_empty_store_writes_headers_only():
    store = MetricsStore(["# HELP a A", "# HELP b B"], _gen)
    assert _dump(store) == "# HELP a A\n# HELP b B\n"


def test_object_uid_sources():
    assert object_uid({"metadata": {"uid": "m1"}}) == "m1"
    assert object_uid(SimpleNamespace(metadata=SimpleNamespace(uid="m2"))) == "m2"
    assert object_uid(SimpleNamespace(uid="m3")) == "m3"


def test_add_without_uid_raises():
    store = MetricsStore(["h"], _gen)
    with pytest.raises(TypeError):
        store.add({"metadata": {"name": "nameless"}})
    assert _dump(store) == "h\n"


def test_lookup_methods_report_nothing():
    store = MetricsStore(["h"], _gen)
    store.add(_service("a"))
    assert store.list() == []
    assert store.list_keys() == []
    assert store.get(_service("a")) == (None, False)
    assert store.get_by_key("default/service") == (None, False)