"""browserscope - fluent, scope-aware browser test assertions."""

__version__ = "0.1.0"
