# app/core/security.py
"""
Hasheo de credenciales (Argon2id via passlib) y generación de tokens de un solo uso.
"""
import secrets

from passlib.context import CryptContext

# Límite máximo para evitar hashear payloads gigantes
MAX_CREDENTIAL_LENGTH = 1024

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_credential(credential: str) -> str:
    if len(credential) > MAX_CREDENTIAL_LENGTH:
        raise ValueError(f"La credencial no puede exceder {MAX_CREDENTIAL_LENGTH} caracteres")
    return pwd_context.hash(credential)


def verify_credential(plain: str, hashed: str) -> bool:
    if len(plain) > MAX_CREDENTIAL_LENGTH:
        return False
    return pwd_context.verify(plain, hashed)


def generate_one_time_token(nbytes: int = 18) -> str:
    """Token aleatorio, seguro para URLs, que se muestra una sola vez."""
    return secrets.token_urlsafe(nbytes)
