"""Read a class roster from Google Sheets and append a dated activity row."""

__version__ = "0.1.0"
