# app/services/supa_auth.py
from typing import Any, Dict
from jose import JWTError, jwt
from app.config import settings
import logging

logger = logging.getLogger(__name__)


async def verify_bearer(authorization: str | None) -> Dict[str, Any]:
    """
    - take the token from `Authorization: Bearer <access_token>`
    - verify it with the Supabase JWT secret (HS256)
    - return the claims the app needs (sub, email, user_metadata)
    """
    if not authorization:
        raise ValueError("missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise ValueError("invalid Authorization header")

    token = parts[1].strip()
    if not token:
        raise ValueError("invalid Authorization header")

    decode_kwargs: Dict[str, Any] = {
        "key": settings.supabase_jwt_secret,
        "algorithms": ["HS256"],
    }
    options = {"verify_aud": bool(settings.supabase_jwt_audience)}
    if settings.supabase_jwt_audience:
        decode_kwargs["audience"] = settings.supabase_jwt_audience
    if settings.supabase_issuer:
        decode_kwargs["issuer"] = settings.supabase_issuer

    try:
        claims = jwt.decode(token, options=options, **decode_kwargs)
    except JWTError as e:
        # get_current_user turns this into a 401
        raise ValueError("invalid token") from e

    user_id = claims.get("sub")
    if not user_id:
        raise ValueError("invalid token: missing sub")

    metadata = claims.get("user_metadata")
    return {
        "user_id": user_id,
        "email": claims.get("email"),
        "user_metadata": metadata if isinstance(metadata, dict) else {},
    }


def default_display_name(claims: Dict[str, Any]) -> str:
    """full_name from the identity provider, else the e-mail local part, else 'User'."""
    full_name = claims.get("user_metadata", {}).get("full_name")
    if isinstance(full_name, str) and full_name.strip():
        return full_name.strip()
    email = claims.get("email")
    if email:
        return email.split("@")[0]
    return "User"
