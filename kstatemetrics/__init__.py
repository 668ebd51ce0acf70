"""Metrics, stores, options, filtering, sharding and a WSGI handler for exposing Kubernetes object state as Prometheus text."""

__version__ = "0.1.0"