"""runbox - launch a container on a pluggable backend and attach to its output."""

__version__ = "0.1.0"
