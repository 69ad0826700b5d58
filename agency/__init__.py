"""Agent agency: file-backed coordination between chat relay, spawn and usage processes."""

__version__ = "0.1.0"
