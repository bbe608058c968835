"""Orchestrator module for running filters over inputs."""

from referrercop.orchestrator.pipeline import (
    FilterPipeline,
    ensure_seekable,
    open_input,
)


__all__ = [
    "FilterPipeline",
    "ensure_seekable",
    "open_input",
]
