from dataclasses import dataclass, field

from passlib.context import CryptContext

from microlearn.application.identity import PasswordHasher


@dataclass(slots=True)
class PasslibPasswordHasher(PasswordHasher):
    context: CryptContext = field(
        default_factory=lambda: CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
        ),
    )

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self.context.verify(password, password_hash)
        except ValueError:
            # unrecognised or malformed hash
            return False
