"""
Hash de senhas (bcrypt) e tokens de acesso (JWT)
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import bcrypt
import jwt

from radar.core.config import settings

logger = logging.getLogger(__name__)

# bcrypt considera no máximo 72 bytes da senha
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Hash em formato inválido (ex.: senha gravada em texto puro)
        logger.warning("[AUTH] Hash de senha em formato inválido")
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Gera token JWT com validade padrão de 8 horas"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decodifica o token; retorna None se inválido ou expirado"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("[AUTH] Token expirado")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"[AUTH] Token inválido: {e}")
        return None
