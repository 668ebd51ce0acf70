[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kstatemetrics"
version = "0.1.0"
description = "Building blocks for exposing Kubernetes object state as Prometheus text-format metrics"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "prometheus", "metrics", "monitoring", "sharding", "exposition"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kstatemetrics"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
