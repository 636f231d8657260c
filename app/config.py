import os


class Settings:
    """應用程式配置設定"""

    # 資料庫設定
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/workhours.db")

    # JWT 設定
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-super-secret-key-change-this-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # 應用設定
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Taipei")

    # 工時設定
    DEFAULT_DAILY_HOUR_LIMIT: float = float(os.getenv("DEFAULT_DAILY_HOUR_LIMIT", "8"))
    FREE_ACTIVE_JOB_LIMIT: int = int(os.getenv("FREE_ACTIVE_JOB_LIMIT", "1"))

    # 團隊設定
    INVITE_CODE_LENGTH: int = int(os.getenv("INVITE_CODE_LENGTH", "6"))
    INVITE_CODE_MAX_ATTEMPTS: int = int(os.getenv("INVITE_CODE_MAX_ATTEMPTS", "10"))

    # 部署設定
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # 日誌設定
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # 照片設定 (base64 字串長度上限)
    MAX_PHOTO_SIZE: int = int(os.getenv("MAX_PHOTO_SIZE", "10485760"))  # 10MB

    # 報表設定
    EXPORT_DATE_FORMAT: str = os.getenv("EXPORT_DATE_FORMAT", "%Y-%m-%d")
    EXPORT_DATETIME_FORMAT: str = os.getenv("EXPORT_DATETIME_FORMAT", "%Y-%m-%d %H:%M:%S")

    # CORS 設定 (逗號分隔)
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "*").split(",")

    # API 設定
    API_VERSION: str = os.getenv("API_VERSION", "v1")
    API_PREFIX: str = f"/api/{API_VERSION}"

    @property
    def database_url(self) -> str:
        """獲取資料庫 URL，處理 Render.com 格式"""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_settings(self) -> list:
        """驗證必要設定"""
        missing = []

        if not self.DATABASE_URL:
            missing.append("DATABASE_URL")

        if not self.SECRET_KEY or self.SECRET_KEY == "your-super-secret-key-change-this-in-production":
            missing.append("SECRET_KEY")

        return missing

    def get_logging_config(self) -> dict:
        """獲取日誌配置"""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "app": {"level": self.LOG_LEVEL},
                # SQL 語句只在除錯時輸出
                "sqlalchemy.engine": {"level": "INFO" if self.DEBUG else "WARNING"},
            },
            "root": {
                "level": self.LOG_LEVEL,
                "handlers": ["default"],
            },
        }


# 全域設定實例
settings = Settings()


def validate_settings() -> list:
    """驗證應用程式設定，回傳缺少的項目"""
    return settings.validate_required_settings()

