"""Three-way merge engine for keeping two source trees in sync."""

__version__ = "0.4.0"
