"""
Configuration management - externalized and extensible.

The agent reads qa-agent.config.yaml (or .json) from the project root and
falls back to environment variables when no file exists.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .environment import EnvironmentConfig

BROWSER_TYPES = ('chromium', 'firefox', 'webkit')
CONFIG_FILE_NAMES = ('qa-agent.config.yaml', 'qa-agent.config.yml', 'qa-agent.config.json')


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key wins; accepts snake_case and camelCase spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class AzureConfig:
    """Azure DevOps configuration."""
    organization: str = ""
    project: str = ""
    pat: Optional[str] = None
    assigned_to: str = ""

    @property
    def base_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}/{self.project}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AzureConfig':
        return cls(
            organization=_pick(data, 'organization', default=EnvironmentConfig.AZURE_ORG or ''),
            project=_pick(data, 'project', default=EnvironmentConfig.AZURE_PROJECT or ''),
            # PAT normally comes from the environment
            pat=_pick(data, 'pat', 'patToken', default=EnvironmentConfig.AZURE_PAT),
            assigned_to=_pick(data, 'assigned_to', 'assignedTo', default=EnvironmentConfig.AZURE_ASSIGNED_TO or ''),
        )


@dataclass
class PlaywrightConfig:
    """Browser settings for the live runner."""
    headless: bool = True
    browser_type: str = "chromium"
    slow_mo: Optional[int] = None
    timeout: int = 30000

    def __post_init__(self):
        if self.browser_type not in BROWSER_TYPES:
            raise ValueError(
                f"Unsupported browser type '{self.browser_type}'. Use one of: {', '.join(BROWSER_TYPES)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaywrightConfig':
        slow_mo = _pick(data, 'slow_mo', 'slowMo')
        return cls(
            headless=bool(_pick(data, 'headless', default=True)),
            browser_type=_pick(data, 'browser_type', 'browserType', default='chromium'),
            slow_mo=int(slow_mo) if slow_mo is not None else None,
            timeout=int(_pick(data, 'timeout', default=30000)),
        )


@dataclass
class ApplicationConfig:
    """Configuration for one application under test."""
    name: str
    base_url: str
    environment: str = "dev"  # dev, staging, prod
    description: str = ""
    login_method: str = "forms"  # forms, sso, api, custom

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        login_flow = data.get('loginFlow') or {}
        return cls(
            name=data.get('name', ''),
            base_url=_pick(data, 'base_url', 'baseUrl', default=''),
            environment=data.get('environment', 'dev'),
            description=data.get('description', ''),
            login_method=_pick(data, 'login_method', default=login_flow.get('type', 'forms')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'base_url': self.base_url,
            'environment': self.environment,
            'description': self.description,
            'login_method': self.login_method,
        }


@dataclass
class PathsConfig:
    """Output locations."""
    scenarios: str = "./scenarios"
    tests: str = "./e2e"
    screenshots: str = "./screenshots"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PathsConfig':
        return cls(
            scenarios=data.get('scenarios', './scenarios'),
            tests=data.get('tests', './e2e'),
            screenshots=data.get('screenshots', './screenshots'),
        )


@dataclass
class TestGenerationConfig:
    """Script generation options."""
    step_naming_convention: str = "Given/When/Then"
    selector_strategy: str = "role"
    include_waits: bool = True
    include_screenshots: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestGenerationConfig':
        return cls(
            step_naming_convention=_pick(data, 'step_naming_convention', 'stepNamingConvention',
                                         default='Given/When/Then'),
            selector_strategy=_pick(data, 'selector_strategy', 'selectorStrategy', default='role'),
            include_waits=bool(_pick(data, 'include_waits', 'includeWaits', default=True)),
            include_screenshots=bool(_pick(data, 'include_screenshots', 'includeScreenshots', default=False)),
        )


@dataclass
class AgentConfig:
    """Application-wide configuration."""
    azure: AzureConfig = field(default_factory=AzureConfig)
    playwright: PlaywrightConfig = field(default_factory=PlaywrightConfig)
    applications: List[ApplicationConfig] = field(default_factory=list)
    default_app: Optional[str] = None
    paths: PathsConfig = field(default_factory=PathsConfig)
    test_generation: TestGenerationConfig = field(default_factory=TestGenerationConfig)
    source_path: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[str] = None, project_root: Optional[str] = None) -> 'AgentConfig':
        """Load configuration from a file, or from the environment if none exists.

        Args:
            path: Explicit config file path
            project_root: Directory searched for qa-agent.config.{yaml,yml,json}

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values
        """
        config_path = Path(path) if path else cls.find_config_file(project_root)
        if config_path is None:
            return cls.from_env()

        # Values missing from the file (the PAT in particular) come from the environment
        EnvironmentConfig.reload()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                # YAML is a superset of JSON, so one parser covers both formats
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load configuration from {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")

        config = cls.from_dict(data)
        config.source_path = str(config_path)
        return config

    @staticmethod
    def find_config_file(project_root: Optional[str] = None) -> Optional[Path]:
        root = Path(project_root) if project_root else Path.cwd()
        for name in CONFIG_FILE_NAMES:
            candidate = root / name
            if candidate.exists():
                return candidate
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AgentConfig':
        return cls(
            azure=AzureConfig.from_dict(data.get('azure') or {}),
            playwright=PlaywrightConfig.from_dict(data.get('playwright') or {}),
            applications=[ApplicationConfig.from_dict(a) for a in data.get('applications') or []],
            default_app=_pick(data, 'default_app', 'defaultApp'),
            paths=PathsConfig.from_dict(data.get('paths') or {}),
            test_generation=TestGenerationConfig.from_dict(
                _pick(data, 'test_generation', 'testGeneration', default={})
            ),
        )

    @classmethod
    def from_env(cls) -> 'AgentConfig':
        """Create config from environment variables."""
        EnvironmentConfig.reload()
        return cls(
            azure=AzureConfig.from_dict({}),
            playwright=PlaywrightConfig(
                headless=EnvironmentConfig.PLAYWRIGHT_HEADLESS,
                browser_type=EnvironmentConfig.PLAYWRIGHT_BROWSER,
                slow_mo=EnvironmentConfig.PLAYWRIGHT_SLOW_MO,
                timeout=EnvironmentConfig.PLAYWRIGHT_TIMEOUT,
            ),
            applications=cls._apps_from_env(),
            default_app=EnvironmentConfig.DEFAULT_APP,
            test_generation=TestGenerationConfig(
                step_naming_convention=EnvironmentConfig.STEP_NAMING,
                selector_strategy=EnvironmentConfig.SELECTOR_STRATEGY,
                include_waits=EnvironmentConfig.INCLUDE_WAITS,
                include_screenshots=EnvironmentConfig.INCLUDE_SCREENSHOTS,
            ),
        )

    @staticmethod
    def _apps_from_env() -> List[ApplicationConfig]:
        """Parse the APPLICATIONS variable (a JSON list of app objects)."""
        if not EnvironmentConfig.APPLICATIONS:
            return []
        try:
            apps = json.loads(EnvironmentConfig.APPLICATIONS)
        except json.JSONDecodeError:
            print("  Warning: Could not parse APPLICATIONS env var as JSON")
            return []
        return [ApplicationConfig.from_dict(a) for a in apps if isinstance(a, dict)]

    def validate(self) -> None:
        """Validate settings needed to talk to Azure DevOps.

        Raises:
            ValueError: Listing every missing setting
        """
        missing = []
        if not self.azure.organization:
            missing.append("Azure organization")
        if not self.azure.project:
            missing.append("Azure project")
        if not self.azure.pat:
            missing.append("Azure PAT token (AZURE_PAT)")
        if not self.azure.assigned_to:
            missing.append("assigned-to user")
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

    def validate_for_execution(self) -> None:
        """Validate settings needed to generate or run tests locally."""
        if not self.applications:
            raise ValueError("At least one application (name + base_url) must be configured")
        for app in self.applications:
            if not app.base_url:
                raise ValueError(f"Application '{app.name}' has no base_url")

    def get_app(self, name: Optional[str] = None) -> ApplicationConfig:
        """Named application, else the default application, else the first one.

        Raises:
            ValueError: If no application is configured
        """
        if not self.applications:
            raise ValueError("No applications configured")
        for wanted in (name, self.default_app):
            if wanted:
                for app in self.applications:
                    if app.name == wanted:
                        return app
        return self.applications[0]

    def add_app(self, app: ApplicationConfig) -> None:
        """Add or replace an application profile by name."""
        for idx, existing in enumerate(self.applications):
            if existing.name == app.name:
                self.applications[idx] = app
                return
        self.applications.append(app)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view. The PAT is never written out."""
        return {
            'azure': {
                'organization': self.azure.organization,
                'project': self.azure.project,
                'assigned_to': self.azure.assigned_to,
            },
            'playwright': {
                'headless': self.playwright.headless,
                'browser_type': self.playwright.browser_type,
                'slow_mo': self.playwright.slow_mo,
                'timeout': self.playwright.timeout,
            },
            'applications': [app.to_dict() for app in self.applications],
            'default_app': self.default_app,
            'paths': {
                'scenarios': self.paths.scenarios,
                'tests': self.paths.tests,
                'screenshots': self.paths.screenshots,
            },
            'test_generation': {
                'step_naming_convention': self.test_generation.step_naming_convention,
                'selector_strategy': self.test_generation.selector_strategy,
                'include_waits': self.test_generation.include_waits,
                'include_screenshots': self.test_generation.include_screenshots,
            },
        }

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def save(self, path: Optional[str] = None) -> str:
        """Save configuration to YAML file."""
        if path is None:
            path = self.source_path or CONFIG_FILE_NAMES[0]

        Path(path).parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_yaml())

        self.source_path = str(path)
        return str(path)


__all__ = [
    'AzureConfig',
    'PlaywrightConfig',
    'ApplicationConfig',
    'PathsConfig',
    'TestGenerationConfig',
    'AgentConfig',
    'EnvironmentConfig',
    'BROWSER_TYPES',
]
