"""Command line interface for browserscope."""
