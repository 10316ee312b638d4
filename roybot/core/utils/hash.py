from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def get_password_hash(password: str) -> str:
    """
    Hash a user's password for storage in users.password_hash.
    """
    return pwd_context.hash(password)
