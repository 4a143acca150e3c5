"""
utils.py — Credential Hashing & Shared Helpers
EcoSphere Seeder
"""

from typing import Dict
from passlib.context import CryptContext
from ecosphere.config import settings

# ── Password hashing ──────────────────────────────────────────────────────────
_pwd_ctx = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(plain: str) -> str:
    return _pwd_ctx.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return _pwd_ctx.verify(plain, hashed)


# ── Summaries ─────────────────────────────────────────────────────────────────
def format_counts(counts: Dict[str, int]) -> str:
    """Render {"users": 4, ...} as "users=4, ngos=4" for log lines."""
    return ", ".join(f"{k}={v}" for k, v in counts.items())
