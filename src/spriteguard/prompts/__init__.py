"""Directive constants and builders for the synthesis executor.

All prompts are Python string constants or builder functions; no
template engines are used.
"""

from __future__ import annotations

from spriteguard.prompts.directives import (
    NEGATIVE_PROMPT,
    PROHIBITED_CHANGES,
    SURGEON_PROMPT,
    build_directive,
    build_negative_prompt,
    build_prompt,
)

__all__ = [
    "NEGATIVE_PROMPT",
    "PROHIBITED_CHANGES",
    "SURGEON_PROMPT",
    "build_directive",
    "build_negative_prompt",
    "build_prompt",
]
