from pathlib import Path

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """
    Settings of the playback client, read from MEDIATREE_* environment variables.
    """

    # Where the media tree server is reachable.
    BASE_URL: str = "http://localhost:4000"

    # Local state: resume positions and recently played.
    STATE_DIR: Path = Path.home() / ".mediatree"

    # Seconds before a backend request counts as failed.
    REQUEST_TIMEOUT: float = 10.0

    class Config:
        env_prefix = "MEDIATREE_"
