import os
import tempfile

# Settings are read at import time; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "rudra-tests.log"))
os.environ.setdefault("REFRESH_TOKEN_HASH_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
