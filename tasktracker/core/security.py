import hashlib
import hmac
import secrets

from passlib.context import CryptContext

# Password hashing context. scrypt is memory-hard; N=2**14, r=8 per hash.
pwd_context = CryptContext(schemes=["scrypt"], deprecated="auto", scrypt__rounds=14)

SESSION_TOKEN_BYTES = 48


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash; malformed hashes never match."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


# Session token functions
def generate_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    # Unsalted, so stored digests can be looked up directly
    return hashlib.sha256((token or "").encode("utf-8")).hexdigest()


def tokens_match(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
