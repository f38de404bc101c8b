"""Wheeler - personal portfolio tracker for the options wheel strategy."""

__version__ = "0.1.0"
