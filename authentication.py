from datetime import datetime, timedelta

import jwt
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings
from exceptions import AuthenticationException, AuthorizationException

ADMIN_ROLES = {"ADMIN", "SUPER_ADMIN"}


class AuthHandler:
    security = HTTPBearer()
    secret = settings.SECRET_KEY

    def encode_token(self, user):
        """Generate a short-lived admin access token"""
        payload = {
            "exp": datetime.now() + timedelta(minutes=settings.API_TIMEOUT_MIN),
            "iat": datetime.now(),
            "sub": user["_id"],
            "roles": user["roles"],
            "email": user.get("email"),
            "username": user.get("username"),
            "type": "access",
        }
        return jwt.encode(payload, self.secret, algorithm="HS256")

    def decode_token(self, token):
        """Decode and validate access token"""
        try:
            payload = jwt.decode(token, self.secret, algorithms=["HS256"])
            if payload.get("type") != "access":
                raise jwt.InvalidTokenError("Not an access token")
            return TokenPayload(
                sub=payload["sub"],
                roles=payload["roles"],
                email=payload.get("email"),
                username=payload.get("username"),
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationException(
                message="Token has expired", details={"reason": "expired_signature"}
            ) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationException(
                message="Invalid token", details={"reason": "invalid_token"}
            ) from e

    def auth_wrapper(self, auth: HTTPAuthorizationCredentials = Security(security)):
        return self.decode_token(auth.credentials)

    def admin_wrapper(self, auth: HTTPAuthorizationCredentials = Security(security)):
        token_payload = self.decode_token(auth.credentials)
        if not token_payload.is_admin():
            raise AuthorizationException(
                "Admin role required",
                details={"user_roles": token_payload.roles, "required_roles": sorted(ADMIN_ROLES)},
            )
        return token_payload


class TokenPayload:

    def __init__(
        self,
        sub: str,
        roles: list,
        email: str | None = None,
        username: str | None = None,
    ):
        self.sub = sub
        self.roles = roles
        self.email = email
        self.username = username

    def is_admin(self) -> bool:
        return any(role in ADMIN_ROLES for role in self.roles)
