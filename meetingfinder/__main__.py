"""
Allows running the CLI via ``python -m meetingfinder``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
