"""Configuration module for the SafetyHub records service.

This module provides centralized configuration management, including directory
paths, API server settings, storage backend selection, authentication and
upload limits. All configuration values can be overridden via environment
variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory (SQLite database file, uploaded documents)
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

# Uploaded safety documents
UPLOAD_DIR_NAME = "uploads"
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(DATA_DIR / UPLOAD_DIR_NAME)))

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Storage Configuration ---

# Which entity store backs the API: "hybrid" (MongoDB when reachable, memory
# otherwise), "memory", "sql" or "mongo".
STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "hybrid").lower()
SUPPORTED_STORAGE_BACKENDS = ("hybrid", "memory", "sql", "mongo")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/safetyhub.db"
)

MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "safety-first")
# Server selection timeout for the initial connect and every operation
MONGODB_TIMEOUT_MS: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

# Seed the demo admin user, courses and assessments on startup
SEED_DEMO_DATA: bool = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))
)

# Role given to self-registered accounts
DEFAULT_USER_ROLE: str = "employee"

# --- Upload Configuration ---

MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
ALLOWED_UPLOAD_EXTENSIONS: List[str] = [
    ext.strip().lower().lstrip(".")
    for ext in os.getenv(
        "ALLOWED_UPLOAD_EXTENSIONS", "pdf,doc,docx,txt,jpg,jpeg,png"
    ).split(",")
    if ext.strip()
]

# --- Metrics Configuration ---

# IANA zone used to find the start of the current month. Empty means the
# server's local zone.
METRICS_TIMEZONE: Optional[str] = os.getenv("METRICS_TIMEZONE") or None

# Number of points a single incident this month takes off the safety score
INCIDENT_PENALTY: int = 5
# Training completion percentage at which the score adjustment is zero
TRAINING_TARGET: int = 80
TRAINING_WEIGHT: float = 0.2

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
