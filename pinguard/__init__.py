"""pinguard: supply-chain checks for GitHub Actions dependencies."""

__version__ = "0.1.0"
