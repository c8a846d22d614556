"""Thread-safe blocking queues, one that compacts its storage after peaks, with memory snapshot demos and benchmarks."""

__version__ = "0.1.0"