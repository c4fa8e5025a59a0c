"""
swift-artifact

A CI plugin that uploads build artifacts to an OpenStack Swift container.

This package provides modular components for each stage of an upload:
- uploader: glob resolution, content type detection, object naming and
  the Swift upload itself
- utils: logging, configuration and metrics

Run ``swift-artifact --help`` for the command-line interface.
"""

__version__ = "0.1.0"
