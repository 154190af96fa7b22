"""Directive templates handed to the external synthesis executor.

The positive directive frames the model as a sprite surgeon that may
only repaint inside the silhouette mask; the negative directive lists
the transformations it must never perform.  Both are plain string
templates with no randomness.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Positive directive
# ---------------------------------------------------------------------------

SURGEON_PROMPT: str = """\
You are a pixel art sprite surgeon.
Paint ONLY inside the mask.
Keep original palette and lighting direction.
Only repaint clothing and accessories.
Outfit specification: {outfit}
Character Class: {class_type}
Atmospheric Theme: {theme}
Style: Sharp 2D RPG pixel art, clean outlines."""

# ---------------------------------------------------------------------------
# Negative directive
# ---------------------------------------------------------------------------

PROHIBITED_CHANGES: tuple[str, ...] = (
    "no anatomy change",
    "no body reshape",
    "no face change",
    "no eye change",
    "no hair change",
    "no pose change",
    "no silhouette change",
    "blur, low quality, artifacts, distorted pixels",
)

NEGATIVE_PROMPT: str = ",\n".join(PROHIBITED_CHANGES)


def build_prompt(outfit: str, class_type: str, theme: str) -> str:
    """Build the positive forge directive.

    Args:
        outfit: Outfit the executor should paint on the character.
        class_type: RPG class of the character (e.g. "Paladin").
        theme: Atmospheric theme (e.g. "frozen citadel").

    Returns:
        The formatted directive.
    """
    return SURGEON_PROMPT.format(
        outfit=outfit.strip(),
        class_type=class_type.strip(),
        theme=theme.strip(),
    )


def build_negative_prompt() -> str:
    """Return the fixed list of prohibited transformations."""
    return NEGATIVE_PROMPT


def build_directive(outfit: str, class_type: str, theme: str) -> str:
    """Join the positive and negative directives into the executor payload."""
    return build_prompt(outfit, class_type, theme) + "\n" + build_negative_prompt()
