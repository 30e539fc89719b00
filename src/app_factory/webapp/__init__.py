"""FastAPI web interface for the App Factory."""
