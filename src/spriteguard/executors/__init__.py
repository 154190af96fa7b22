"""External synthesis executor interface and bundled adapters.

The image model itself is a collaborator: callers inject a
``SynthesisExecutor`` (or a bare async function) into the pipeline.
"""

from __future__ import annotations

from spriteguard.executors._base import SynthesisExecutor
from spriteguard.executors.adapters import CallableExecutor, SynthesisFn, as_executor
from spriteguard.executors.replay import ImageFileExecutor

__all__ = [
    "CallableExecutor",
    "ImageFileExecutor",
    "SynthesisExecutor",
    "SynthesisFn",
    "as_executor",
]
