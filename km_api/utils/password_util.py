from passlib.context import CryptContext
from km_api.config.config import settings

# bcrypt는 입력의 앞 72바이트만 사용한다
MAX_PASSWORD_BYTES = 72


def exceeds_bcrypt_limit(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher:
    """bcrypt 해시/검증. cost(rounds)는 생성 시점에 고정된다."""

    def __init__(self, rounds: int = settings.BCRYPT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain_password: str) -> str:
        if exceeds_bcrypt_limit(plain_password):
            raise ValueError(f"password is longer than {MAX_PASSWORD_BYTES} bytes")
        return self._context.hash(plain_password)

    def verify(self, hashed_password: str, plain_password: str) -> bool:
        if not hashed_password:
            return False
        # 잘린 앞부분만으로 일치하는 일이 없도록 초과 입력은 불일치
        if exceeds_bcrypt_limit(plain_password):
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except ValueError:
            # 형식이 깨진 해시는 불일치로 취급
            return False
