"""
Runtime configuration read from environment variables.

Values are resolved once at import time. DATABASE_URL is read by
database.py next to the engine it configures.
"""

import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Credential hashing (PBKDF2-HMAC-SHA512, 64-byte digest)
PBKDF2_ITERATIONS = int(os.getenv("PBKDF2_ITERATIONS", "100000"))
SALT_BYTES = 16

# Classroom ids: "CLS-" + slug of at most 25 characters
CLASSROOM_ID_PREFIX = "CLS"
CLASSROOM_SLUG_MAX_LENGTH = 25

# Student access codes are 4-digit numerals, unique per classroom
ACCESS_CODE_MIN = 1000
ACCESS_CODE_MAX = 9999
ACCESS_CODE_MAX_ATTEMPTS = int(os.getenv("ACCESS_CODE_MAX_ATTEMPTS", "1000"))

# Minimum field lengths (after trimming, except the password)
MIN_PASSWORD_LENGTH = 4
MIN_CLASSROOM_NAME_LENGTH = 2
MIN_SECRET_QUESTION_LENGTH = 10
MIN_SECRET_ANSWER_LENGTH = 4
MIN_STUDENT_NAME_LENGTH = 2

# Client side
API_URL = os.getenv("API_URL", "http://localhost:8000")
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "3.0"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
