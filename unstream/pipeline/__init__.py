"""Top-level search pipeline: expansion, two-level fan-out and merge."""

from unstream.pipeline.orchestrator import SearchOrchestrator

__all__ = ["SearchOrchestrator"]
