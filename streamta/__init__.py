"""streamta - streaming technical-analysis signals and confluence scoring."""

__version__ = "0.1.0"
