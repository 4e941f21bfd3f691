"""simtarget: resolve iOS test-session capabilities into a simulator target."""

__version__ = "0.1.0"
