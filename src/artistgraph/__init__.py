"""Artist Graph - explore an artist's collaborations and export them as a playlist."""

__version__ = "0.1.0"
