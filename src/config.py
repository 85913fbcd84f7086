"""Configuration module for the Vidya Vichar classroom backend.

This module provides centralized configuration management, including directory
paths, API server settings, authentication parameters, and the fixed academic
enumerations. All configuration values can be overridden via environment
variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/vidya_vichar.db"
)

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

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))
)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- Academic Enumerations ---

BATCH_OPTIONS: List[str] = ["M.Tech", "B.Tech", "PhD", "MS"]
BRANCH_OPTIONS: List[str] = ["CSE", "ECE"]

# --- Lecture Configuration ---

# Students see a lecture as upcoming this many minutes before it starts
UPCOMING_LECTURE_WINDOW_MINUTES: int = int(
    os.getenv("UPCOMING_LECTURE_WINDOW_MINUTES", "15")
)

# --- Doubt / Resource Configuration ---

ANSWER_TYPES: List[str] = ["text", "file"]
RESOURCE_TYPES: List[str] = ["text", "pdf", "video", "link", "image", "document"]
ACCESS_LEVELS: List[str] = ["public", "enrolled_only"]
DEFAULT_ACCESS_LEVEL: str = "enrolled_only"

# Resources without a topic are grouped under this label
DEFAULT_RESOURCE_TOPIC: str = "General"

# --- Roles ---

ROLE_STUDENT: str = "student"
ROLE_TEACHER: str = "teacher"
ROLES: List[str] = [ROLE_STUDENT, ROLE_TEACHER]
