[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "shrinkqueue"
version = "0.1.0"
description = "Thread-safe blocking queues, one of which compacts its storage after load peaks, with memory-snapshot demos and benchmarks"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["queue", "thread-safe", "blocking queue", "producer-consumer", "memory", "shrink"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
shrinkqueue-demo = "shrinkqueue.cli:main"
shrinkqueue-bench = "shrinkqueue.bench:main"

[tool.setuptools.packages.find]
include = ["shrinkqueue*"]

[tool.pytest.ini_options]
addopts = "-ra"
