"""
Testing utilities for provider-kernel apps.
──────────────────────────────────────────────────────────────
Provides pytest fixtures to run discovery against isolated containers.
──────────────────────────────────────────────────────────────
"""
from .fixtures import isolated_container, recording_activator

__all__ = ["isolated_container", "recording_activator"]
