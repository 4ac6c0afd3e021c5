from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger("storebot.auth")

JWT_ALGORITHM = "HS256"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "pass"
ADMIN_ROLE = "admin"

security = HTTPBearer(auto_error=False)


def check_admin_credentials(username: Optional[str], password: Optional[str]) -> bool:
    """Compare against the single hardcoded admin account."""
    if not isinstance(username, str) or not isinstance(password, str):
        return False
    user_ok = hmac.compare_digest(username.encode("utf-8"), ADMIN_USERNAME.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), ADMIN_PASSWORD.encode("utf-8"))
    return user_ok and password_ok


def create_access_token(username: str, secret: str, expires_minutes: int) -> str:
    """Purpose: Issue a signed admin token.
    Inputs/Outputs: Inputs are the username, signing secret and lifetime; output is a
        compact HS256 JWT.
    Side Effects / State: None.
    Dependencies: PyJWT.
    Failure Modes: None for valid string inputs.
    If Removed: /login cannot authenticate admins and /admin/data is unreachable.
    Testing Notes: decode_access_token(create_access_token(...)) returns the username.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "username": username,
        "role": ADMIN_ROLE,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises jwt.InvalidTokenError on any problem."""
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])


def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Purpose: FastAPI dependency guarding admin routes with a bearer token.
    Inputs/Outputs: Reads the Authorization header; returns the decoded claims.
    Side Effects / State: None.
    Dependencies: HTTPBearer, decode_access_token, and the app context's JWT secret.
    Failure Modes: 401 when the token is missing, 403 when it is invalid or expired.
    If Removed: /admin/data is either open to everyone or always fails.
    Testing Notes: Missing header -> 401, garbage token -> 403, login token -> 200.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token requerido")
    secret = request.app.state.context.settings.jwt_secret
    try:
        return decode_access_token(credentials.credentials, secret)
    except jwt.InvalidTokenError as exc:
        logger.warning("rejected admin token: %s", exc)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token inválido") from None
