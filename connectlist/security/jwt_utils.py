# connectlist/security/jwt_utils.py
import os
from typing import Any, Dict

import jwt
from fastapi import HTTPException, Request, status

JWT_SECRET = os.getenv("JWT_SECRET", "connectlist-dev-secret-change-me-in-prod")
JWT_ALG = os.getenv("JWT_ALG", "HS256")
# los tokens del proveedor de auth traen aud="authenticated"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decodifica y valida el JWT. El payload es el "auth user":
      sub            -> id del usuario
      email          -> opcional
      user_metadata  -> nombre/avatar del proveedor (avatar_url, picture...)
    Lanza 401 si es inválido o no trae sub.
    """
    options = {} if JWT_AUDIENCE else {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALG],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.PyJWTError:
        raise _unauthorized("Invalid token")

    if not payload.get("sub"):
        raise _unauthorized("Token without subject")

    if not isinstance(payload.get("user_metadata"), dict):
        payload["user_metadata"] = {}
    return payload


def get_current_user(authorization_header: str) -> Dict[str, Any]:
    """
    Toma el header: Authorization: Bearer <token>
    Lo valida y devuelve el payload. 401 si falta o es inválido.
    """
    if not authorization_header:
        raise _unauthorized("Missing Authorization header")

    if not authorization_header.startswith("Bearer "):
        raise _unauthorized("Invalid Authorization header format")

    token = authorization_header.removeprefix("Bearer ").strip()
    return decode_token(token)


def current_user(request: Request) -> Dict[str, Any]:
    """Dependencia FastAPI."""
    return get_current_user(request.headers.get("Authorization", ""))
