"""SpriteGuard command-line entry point."""

from __future__ import annotations

from spriteguard.cli import main

if __name__ == "__main__":
    main(prog_name="spriteguard")
