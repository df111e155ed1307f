"""Allow `python -m roadmap_tracker`."""

from roadmap_tracker.cli import app

if __name__ == "__main__":
    app()
