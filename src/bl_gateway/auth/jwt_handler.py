"""JWT access tokens for wallet sessions.

HS256 with one shared secret. No refresh tokens and no revocation: a wallet
simply signs a new nonce when its token expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from src.bl_common.errors import InvalidCredentialsError


class JwtHandler:
    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 30) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expire = timedelta(minutes=expire_minutes)

    @property
    def expires_in_seconds(self) -> int:
        return int(self._expire.total_seconds())

    def create_access_token(self, address: str) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": address.lower(),
            "type": "access",
            "iat": now,
            "exp": now + self._expire,
        }
        return str(jwt.encode(payload, self._secret, algorithm=self._algorithm))

    def decode_token(self, token: str) -> dict[str, str]:
        """Return the payload of a valid access token, else raise InvalidCredentialsError."""
        try:
            payload: dict[str, str] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],  # Explicit list prevents algorithm confusion
            )
        except JWTError:
            raise InvalidCredentialsError() from None
        if payload.get("type") != "access" or not payload.get("sub"):
            raise InvalidCredentialsError()
        return payload
