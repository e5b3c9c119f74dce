from typing import List
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./inventory.db"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]
    ALLOW_EDIT_COMPLETED_SLIPS: bool = True
    PORT: int = 8000


    class Config:
        env_file = ".env"

settings = Settings()
