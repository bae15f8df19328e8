from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    html_dir: Path = Path("assets/html")
    api_base_url: str = "http://localhost:3000/"
    api_timeout: float = 60 * 2
    postgres_url: str | None = None
    session_secret: str = "local-session-secret"
    log_level: str = "INFO"
    # initializing, generating, validating, complete
    stage_delays: tuple[float, ...] = (0.8, 2.0, 1.0, 0.5)
    workflow_idle_timeout: float = 60 * 30
    max_workflows: int = 1000
