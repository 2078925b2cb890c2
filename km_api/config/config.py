from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB 관련 설정
    DATABASE_URL: str = "sqlite:///./km_api.db"
    DB_ECHO: bool = False

    # 비밀번호 해시 비용 (bcrypt rounds)
    BCRYPT_ROUNDS: int = 12

    # 페이지네이션
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    # 로깅
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
