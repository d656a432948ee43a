from functools import lru_cache
from typing import Dict
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    work_root: str = "compiler-benchmark"
    log_dir: str = "logs"
    log_level: str = "INFO"
    upstream_base_url: str = "https://github.com/elm-lang"
    benchmark_projects: Dict[str, str] = Field(
        default_factory=lambda: {"elm-todomvc": "https://github.com/evancz/elm-todomvc"}
    )
    report_project: str = "elm-todomvc"
    dev_remote: str = "dev"
    dev_branch: str = "master"
    git_bin: str = "git"
    cabal_bin: str = "cabal"

    class Config:
        env_prefix = "COMPILER_BENCHMARK_"
        env_file = ".env"
        env_file_encoding = "utf-8"

@lru_cache
def get_settings() -> Settings:
    return Settings()  # env vars automatically picked up
