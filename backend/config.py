import os

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# JWT Configuration
# In production, set SECRET_KEY environment variable to a secure random value
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    if ENVIRONMENT == "production":
        raise RuntimeError("SECRET_KEY is required in production")
    SECRET_KEY = "dev-secret-key-change-in-production-abc123xyz789"  # Default for development only
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# Logging: debug/text while developing, info/json in production
LOG_LEVEL = os.getenv("LOG_LEVEL", "info" if ENVIRONMENT == "production" else "debug")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if ENVIRONMENT == "production" else "text")

# Object storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")  # "local" or "r2"
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", "http://localhost:8000/files").rstrip("/")
LOCAL_STORAGE_PATH = os.getenv("LOCAL_STORAGE_PATH", "./storage")
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID", "")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID", "")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY", "")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "")
UPLOAD_URL_EXPIRE_MINUTES = int(os.getenv("UPLOAD_URL_EXPIRE_MINUTES", "15"))

# Artifacts are buffered here while hashed and parsed (system temp dir when unset)
ARTIFACT_SCRATCH_DIR = os.getenv("ARTIFACT_SCRATCH_DIR") or None

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# slowapi rate limiting (disabled in the test suite)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
