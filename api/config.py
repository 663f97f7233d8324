import os
from dataclasses import dataclass, field


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    app_name: str = "Music Library"
    db_path: str = "/data/music.db"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    audio_folder: str = "songs"
    image_folder: str = "covers"
    admin_password: str = ""
    jwt_secret: str = ""
    max_upload_mb: int = 50
    allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:8081"])

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment."""
        return cls(
            app_name=os.environ.get("APP_NAME", "Music Library"),
            db_path=os.environ.get("DB_PATH", "/data/music.db"),
            cloudinary_cloud_name=os.environ.get("CLOUDINARY_CLOUD_NAME", ""),
            cloudinary_api_key=os.environ.get("CLOUDINARY_API_KEY", ""),
            cloudinary_api_secret=os.environ.get("CLOUDINARY_API_SECRET", ""),
            audio_folder=os.environ.get("AUDIO_FOLDER", "songs"),
            image_folder=os.environ.get("IMAGE_FOLDER", "covers"),
            admin_password=os.environ.get("ADMIN_PASSWORD", ""),
            jwt_secret=os.environ.get("JWT_SECRET", ""),
            max_upload_mb=int(os.environ.get("MAX_UPLOAD_MB", "50")),
            allowed_origins=_origins(os.environ.get("ALLOWED_ORIGINS", "http://localhost:8081")),
        )
