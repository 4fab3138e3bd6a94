"""Password hashing for user accounts (werkzeug's salted PBKDF2/scrypt hashes)."""
from werkzeug.security import check_password_hash, generate_password_hash


def generate_hash(password: str) -> str:
    return generate_password_hash(password)


def check_hash(password: str, hashed: str) -> bool:
    """False for a wrong password and for a stored value that is not a werkzeug hash."""
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, password)
    except (ValueError, TypeError):
        return False
