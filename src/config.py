"""Configuration module for the Sports Shop API.

This module provides centralized configuration management, including directory
paths, database and API server settings, and login session parameters.
All configuration values can be overridden via environment variables.
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
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# Browser client assets, served from "/" when the directory exists
STATIC_DIR = Path(os.getenv("STATIC_DIR", str(ROOT_DIR / "public")))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/shop.db")

# Upper bound (seconds) on waiting for a pooled connection or a locked row
DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))
DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "3000"))

# CORS allowed origins (comma-separated list)
# Default includes the local static-server addresses used by the shop front end.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://127.0.0.1:5500,http://localhost:5500,"
    "http://localhost:3000,http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Login Session Configuration ---

SESSION_SECRET_KEY: str = os.getenv(
    "SESSION_SECRET_KEY", "sports-secret-change-in-production"
)
SESSION_TOKEN_ALGORITHM = "HS256"

# Sessions unused for this long are discarded (1 hour)
SESSION_IDLE_TIMEOUT_SECONDS: int = int(
    os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", str(60 * 60))
)

SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "session_token")
SESSION_COOKIE_SECURE: bool = (
    os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
)

# --- Role Configuration ---

ROLE_CUSTOMER = "customer"
ROLE_DEALER = "dealer"
SUPPORTED_ROLES: List[str] = [ROLE_CUSTOMER, ROLE_DEALER]

# Roles allowed to buy items (comma-separated). Dealers are excluded by default.
_PURCHASE_ALLOWED_ROLES_STR: str = os.getenv("PURCHASE_ALLOWED_ROLES", ROLE_CUSTOMER)
PURCHASE_ALLOWED_ROLES: List[str] = [
    role.strip()
    for role in _PURCHASE_ALLOWED_ROLES_STR.split(",")
    if role.strip()
]
