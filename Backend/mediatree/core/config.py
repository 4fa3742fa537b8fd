from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """
    Application Configuration Settings.
    Values are loaded from environment variables or a .env file.
    """

    # Root directory every browse, search and streaming request is sandboxed to.
    MEDIA_ROOT_PATH: Path = Path("./videos")

    # Where the playlists.json / favorites.json stores live.
    DATA_DIR: Path = Path("./data")

    # Pre-generated thumbnails, mirrored by relative video path (e.g. Anime/ep1.jpg).
    THUMBNAIL_DIR: Path = Path("./thumbnails")

    # Used to configure CORS for the browser client.
    FRONTEND_ORIGIN: str = "http://localhost:4000"

    APP_NAME: str = "Media Tree"
    APP_DESCRIPTION: str = "Browse and play a directory of videos"

    HOST: str = "0.0.0.0"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"

    # Extensions (lowercase, without the dot) classified as video.
    VIDEO_EXTENSIONS: list[str] = [
        "mp4", "avi", "mov", "mkv", "webm", "m4v", "flv", "wmv", "3gp", "ogv",
    ]

    VIDEO_MIME_TYPES: dict[str, str] = {
        "mp4": "video/mp4",
        "avi": "video/x-msvideo",
        "mov": "video/quicktime",
        "mkv": "video/x-matroska",
        "webm": "video/webm",
        "m4v": "video/x-m4v",
        "flv": "video/x-flv",
        "wmv": "video/x-ms-wmv",
        "3gp": "video/3gpp",
        "ogv": "video/ogg",
    }

    # OS / NAS metadata artifacts hidden from search results.
    METADATA_NAMES: list[str] = [
        ".DS_Store", "Thumbs.db", "desktop.ini", ".Spotlight-V100",
        ".Trashes", ".fseventsd", "@eaDir", "$RECYCLE.BIN",
    ]
    METADATA_PREFIXES: list[str] = ["._"]

    SEARCH_TERM_MAX_LENGTH: int = 200

    # Shared access password. Empty means the API is open.
    ACCESS_PASSWORD: str = ""
    SECRET_KEY: str = "change-this-secret-key"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    class Config:
        """
        Pydantic configuration class.
        """
        env_file = ".env"


# Create a globally accessible settings instance
settings = Settings()
