"""
Utility modules for swift-artifact.

This package provides shared utilities used across the uploader:
- logging: Structured logging with entry/exit decorators
- config: Upload settings from the environment
- config_loader: YAML configuration files
- metrics: Prometheus metrics for a run
"""

from swift_artifact.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
