"""Command-line client for a peer-to-peer token swap escrow program."""

__version__ = "0.1.0"
