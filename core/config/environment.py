"""
Environment Configuration Module

Loads environment variables for the QA agent.
File-based configuration lives in qa-agent.config.yaml (see core.config).
"""
import os
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env in the working directory if it exists
env_path = Path.cwd() / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


class EnvironmentConfig:
    """Environment configuration loaded from environment variables."""

    # Azure DevOps
    AZURE_ORG: Optional[str] = None
    AZURE_PROJECT: Optional[str] = None
    AZURE_PAT: Optional[str] = None
    AZURE_ASSIGNED_TO: Optional[str] = None

    # Playwright
    PLAYWRIGHT_HEADLESS: bool = True
    PLAYWRIGHT_SLOW_MO: Optional[int] = None
    PLAYWRIGHT_TIMEOUT: int = 30000
    PLAYWRIGHT_BROWSER: str = "chromium"

    # Applications (JSON list) and default app
    APPLICATIONS: Optional[str] = None
    DEFAULT_APP: Optional[str] = None

    # Test generation
    STEP_NAMING: str = "Given/When/Then"
    SELECTOR_STRATEGY: str = "role"
    INCLUDE_WAITS: bool = True
    INCLUDE_SCREENSHOTS: bool = False

    # Logging
    LOG_LEVEL: str = "WARNING"

    @classmethod
    def reload(cls) -> None:
        """Re-read every setting from the current environment."""
        cls.AZURE_ORG = os.getenv("AZURE_ORG")
        cls.AZURE_PROJECT = os.getenv("AZURE_PROJECT")
        cls.AZURE_PAT = os.getenv("AZURE_PAT")
        cls.AZURE_ASSIGNED_TO = os.getenv("AZURE_ASSIGNED_TO")

        cls.PLAYWRIGHT_HEADLESS = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() != "false"
        cls.PLAYWRIGHT_SLOW_MO = _optional_int("PLAYWRIGHT_SLOW_MO")
        cls.PLAYWRIGHT_TIMEOUT = int(os.getenv("PLAYWRIGHT_TIMEOUT", "30000"))
        cls.PLAYWRIGHT_BROWSER = os.getenv("PLAYWRIGHT_BROWSER", "chromium")

        cls.APPLICATIONS = os.getenv("APPLICATIONS")
        cls.DEFAULT_APP = os.getenv("DEFAULT_APP")

        cls.STEP_NAMING = os.getenv("STEP_NAMING", "Given/When/Then")
        cls.SELECTOR_STRATEGY = os.getenv("SELECTOR_STRATEGY", "role")
        cls.INCLUDE_WAITS = os.getenv("INCLUDE_WAITS", "true").lower() != "false"
        cls.INCLUDE_SCREENSHOTS = os.getenv("INCLUDE_SCREENSHOTS", "false").lower() == "true"

        cls.LOG_LEVEL = os.getenv("QA_AGENT_LOG_LEVEL", "WARNING")


EnvironmentConfig.reload()
