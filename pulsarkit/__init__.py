"""Pulsar and transient data tools: filterbank I/O, in-memory integrations and numeric kernels."""

__version__ = "0.1.0"
__all__ = ["filterbank", "integration", "kernels", "utils"]