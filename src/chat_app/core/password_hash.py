from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.exceptions import InvalidKey
import asyncio
import base64
import logging
import os


class PasswordHash:
    """
    One-way password hashing with scrypt.

    Hashes are stored as ``scrypt$n$r$p$salt$key`` with base64 salt and key,
    so the cost parameters travel with every hash.
    """
    SCHEME = "scrypt"

    def __init__(
            self,
            n: int = 2 ** 14,
            r: int = 8,
            p: int = 1,
            salt_length: int = 16,
            key_length: int = 32,
            logger: logging.Logger | None = None
    ):
        self.n = n
        self.r = r
        self.p = p
        self.salt_length = salt_length
        self.key_length = key_length
        self.logger = logger or logging.getLogger(__name__)

    async def hash(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._hash, password)

    async def compare(self, password: str, hashed_password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._compare, password, hashed_password)

    def _hash(self, password: str) -> str:
        salt = os.urandom(self.salt_length)
        kdf = Scrypt(salt=salt, length=self.key_length, n=self.n, r=self.r, p=self.p)
        key = kdf.derive(password.encode())

        return "$".join((
            self.SCHEME,
            str(self.n),
            str(self.r),
            str(self.p),
            base64.b64encode(salt).decode(),
            base64.b64encode(key).decode()
        ))

    def _compare(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against a stored hash.
        Args:
            password: Plaintext password from the login form
            hashed_password: Stored ``scrypt$...`` hash
        Returns:
            bool: True if the password matches, False otherwise (malformed hashes included)
        """
        try:
            scheme, n, r, p, salt, key = hashed_password.split("$")
            if scheme != self.SCHEME:
                return False

            key_bytes = base64.b64decode(key)
            kdf = Scrypt(
                salt=base64.b64decode(salt),
                length=len(key_bytes),
                n=int(n),
                r=int(r),
                p=int(p)
            )
            kdf.verify(password.encode(), key_bytes)
            return True
        except InvalidKey:
            return False
        except (ValueError, TypeError) as e:
            self.logger.warning("Malformed password hash: %s", str(e))
            return False
