from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def verify_and_update(plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Verify a password; the second item is a fresh hash when the stored one is outdated."""
    return pwd_context.verify_and_update(plain_password, hashed_password)
