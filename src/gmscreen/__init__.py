"""gmscreen: a game master's companion for Pathbuilder 2e characters."""

__version__ = "0.1.0"
