import os

# Settings are read once at import, so the test environment must be in place first
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("STORAGE_TYPE", "localStorage")
os.environ.setdefault("ENVIRONMENT", "test")
