import hmac
import logging

import jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class AdminAuthorizer:
    """Decides whether a credential grants admin rights.

    A credential is accepted if it equals the configured admin password, or
    if it is a valid HS256 token whose payload marks the bearer as admin
    (``isAdmin: true`` or ``role: "admin"``). With neither secret configured
    nothing is accepted.
    """

    def __init__(self, admin_password: str = "", jwt_secret: str = ""):
        self.admin_password = admin_password
        self.jwt_secret = jwt_secret

    def _token_is_admin(self, token: str) -> bool:
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError as e:
            logger.info(f"Rejected admin token: {e}")
            return False
        return payload.get("isAdmin") is True or payload.get("role") == "admin"

    def __call__(self, credential: str | None) -> bool:
        if not credential:
            return False
        if self.admin_password and hmac.compare_digest(credential.encode(), self.admin_password.encode()):
            return True
        if self.jwt_secret and credential.count(".") == 2:
            return self._token_is_admin(credential)
        return False


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None
