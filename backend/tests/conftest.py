"""Root conftest — shared test configuration."""

import os

# Keep tests fast and deterministic regardless of the developer's .env
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
