"""Tests for the __main__ module entry point."""

import subprocess
import sys


def test_module_entry_point_help():
    """Test that running as module with --help works."""
    result = subprocess.run(
        [sys.executable, "-m", "browserscope", "--help"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "compare-url" in result.stdout


def test_module_imports():
    """Test that __main__ module can be imported."""
    import browserscope.__main__

    assert hasattr(browserscope.__main__, "app")
