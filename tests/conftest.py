"""Root conftest — shared test configuration."""

import os

# Keep tests independent of a developer's .env / environment
os.environ.setdefault("FLEXMAP_LOG_LEVEL", "DEBUG")
os.environ.setdefault("FLEXMAP_LOG_FORMAT", "text")
os.environ.setdefault("FLEXMAP_EXPOSE_ERROR_DETAILS", "true")
