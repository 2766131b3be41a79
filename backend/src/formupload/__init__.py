"""formupload - parse multipart form uploads inside web route handlers."""

__version__ = "0.1.0"
