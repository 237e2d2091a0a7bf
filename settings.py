import os

from dotenv import load_dotenv

load_dotenv()

# -----------------------------
# Store
# -----------------------------
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "cinemadb")

# -----------------------------
# Security
# -----------------------------
TOKEN_SECRET = os.getenv("TOKEN_SECRET", "dev-secret-key-change-me")
ALGORITHM = "HS256"
TOKEN_EXPIRE_MINUTES = int(os.getenv("TOKEN_EXPIRE_MINUTES", 60))  # 1 hour
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

# -----------------------------
# Server
# -----------------------------
PORT = int(os.getenv("PORT", 4000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
