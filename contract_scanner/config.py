"""
Configuration for the Contract Scanner.
Values come from the environment (optionally a .env file) and are read once.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"


@dataclass(frozen=True)
class Settings:
    """Immutable process-wide settings for the AI client and local storage."""

    # AI provider
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    model: str = "qwen-plus"
    timeout: float = 120.0
    temperature: float = 0.7
    max_tokens: int = 4000
    json_extractor: str = "brace"

    # Local storage
    data_dir: str = "data"

    # Usage gate
    max_free_usage: int = 1

    # OCR
    ocr_lang: str = "chi_sim+eng"

    # Flask
    secret_key: str = "dev-secret-key"

    @property
    def contracts_path(self) -> str:
        return os.path.join(self.data_dir, "contracts.json")

    @property
    def usage_path(self) -> str:
        return os.path.join(self.data_dir, "usage.json")


def load_settings(env: Optional[dict] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ).

    Returns:
        Populated Settings instance.
    """
    env = os.environ if env is None else env

    return Settings(
        base_url=env.get('AI_BASE_URL', DEFAULT_BASE_URL),
        api_key=env.get('AI_API_KEY', ''),
        model=env.get('AI_MODEL', 'qwen-plus'),
        timeout=float(env.get('AI_TIMEOUT', 120)),
        temperature=float(env.get('AI_TEMPERATURE', 0.7)),
        max_tokens=int(env.get('AI_MAX_TOKENS', 4000)),
        json_extractor=env.get('AI_JSON_EXTRACTOR', 'brace'),
        data_dir=env.get('DATA_DIR', 'data'),
        max_free_usage=int(env.get('MAX_FREE_USAGE', 1)),
        ocr_lang=env.get('OCR_LANG', 'chi_sim+eng'),
        secret_key=env.get('SECRET_KEY', 'dev-secret-key'),
    )
