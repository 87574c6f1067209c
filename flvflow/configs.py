from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"  # The logging level to use.
    strict_previous_tag_size: bool = Field(
        False, description="Reject streams whose PreviousTagSize fields disagree with the decoded tag sizes."
    )
    read_chunk_size: int = Field(64 * 1024, description="Chunk size in bytes for reading local media files.")
    http_timeout: int = Field(60, description="Timeout for HTTP media requests in seconds")

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"  # The user agent to use for HTTP requests.
    )

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
