"""Allow running as python -m browserscope."""

from browserscope.cli.main import app

if __name__ == "__main__":
    app()
