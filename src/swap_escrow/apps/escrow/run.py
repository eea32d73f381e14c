"""CLI entry point for the swap escrow app.

All command logic lives in the cli subpackage.
"""

from swap_escrow.apps.escrow.cli import app

__all__ = ["app", "main"]


def main() -> None:
    """Run the swap escrow CLI application."""
    app()


if __name__ == "__main__":
    main()
