"""
Memory records.

Plain records persisted in the memory file: user preferences, per-application
profiles, processed tasks and remembered corrections.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

MEMORY_VERSION = "1.0.0"


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class UserCorrection:
    """A remembered (original -> edited) substitution.

    Advisory only: corrections are kept for suggestion and analysis and are
    never applied to generated steps automatically.
    """
    pattern: str
    correction: str
    frequency: int = 1
    examples: List[str] = field(default_factory=list)
    last_used: str = field(default_factory=_now)

    def add_example(self, example: str) -> None:
        if example not in self.examples:
            self.examples.append(example)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pattern': self.pattern,
            'correction': self.correction,
            'frequency': self.frequency,
            'examples': list(self.examples),
            'lastUsed': self.last_used,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserCorrection':
        correction = cls(
            pattern=data.get('pattern', ''),
            correction=data.get('correction', ''),
            frequency=int(data.get('frequency', 1)),
            last_used=data.get('lastUsed', _now()),
        )
        for example in data.get('examples') or []:
            correction.add_example(example)
        return correction


@dataclass
class AppMemoryProfile:
    """What the agent remembers about one application under test."""
    name: str
    base_url: str = ""
    login_method: str = "forms"  # forms, sso, api, custom
    environment: str = "dev"  # dev, staging, prod
    common_steps: List[str] = field(default_factory=list)
    frequently_edited_steps: List[str] = field(default_factory=list)
    custom_login_flow: Optional[str] = None
    last_used: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'baseUrl': self.base_url,
            'loginMethod': self.login_method,
            'environment': self.environment,
            'commonSteps': list(self.common_steps),
            'frequentlyEditedSteps': list(self.frequently_edited_steps),
            'lastUsed': self.last_used,
        }
        if self.custom_login_flow:
            data['customLoginFlow'] = self.custom_login_flow
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppMemoryProfile':
        return cls(
            name=data.get('name', ''),
            base_url=data.get('baseUrl', ''),
            login_method=data.get('loginMethod', 'forms'),
            environment=data.get('environment', 'dev'),
            common_steps=list(data.get('commonSteps') or []),
            frequently_edited_steps=list(data.get('frequentlyEditedSteps') or []),
            custom_login_flow=data.get('customLoginFlow'),
            last_used=data.get('lastUsed', _now()),
        )


@dataclass
class ProcessedTask:
    """Bookkeeping for a work item the agent already handled."""
    task_id: int
    task_title: str
    test_cases_generated: int = 0
    user_approved: bool = False
    processed_at: str = field(default_factory=_now)
    last_modified: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'taskId': self.task_id,
            'taskTitle': self.task_title,
            'processedAt': self.processed_at,
            'testCasesGenerated': self.test_cases_generated,
            'userApproved': self.user_approved,
            'lastModified': self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProcessedTask':
        return cls(
            task_id=int(data.get('taskId', 0)),
            task_title=data.get('taskTitle', ''),
            processed_at=data.get('processedAt', _now()),
            test_cases_generated=int(data.get('testCasesGenerated', 0)),
            user_approved=bool(data.get('userApproved', False)),
            last_modified=data.get('lastModified', _now()),
        )


@dataclass
class UserPreferences:
    """Generation and execution preferences remembered between runs."""
    preferred_browser: str = "chromium"
    preferred_test_naming_convention: str = "Given/When/Then"
    preferred_selector_style: str = "role"
    preferred_assertion_style: str = "expect"
    include_waits: bool = True
    include_screenshots: bool = False
    slow_mo_value: Optional[int] = None

    # Maps attribute names to the keys used in the memory file
    KEYS = {
        'preferred_browser': 'preferredBrowser',
        'preferred_test_naming_convention': 'preferredTestNamingConvention',
        'preferred_selector_style': 'preferredSelectorStyle',
        'preferred_assertion_style': 'preferredAssertionStyle',
        'include_waits': 'includeWaits',
        'include_screenshots': 'includeScreenshots',
        'slow_mo_value': 'slowMoValue',
    }

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for attr, key in self.KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserPreferences':
        prefs = cls()
        for attr, key in cls.KEYS.items():
            if key in data:
                setattr(prefs, attr, data[key])
        return prefs


@dataclass
class MemorySnapshot:
    """Everything stored in the memory file."""
    version: str = MEMORY_VERSION
    created_at: str = field(default_factory=_now)
    last_updated: str = field(default_factory=_now)
    last_synced_task_id: Optional[int] = None
    processed_tasks: List[ProcessedTask] = field(default_factory=list)
    user_preferences: UserPreferences = field(default_factory=UserPreferences)
    application_profiles: Dict[str, AppMemoryProfile] = field(default_factory=dict)
    user_corrections: List[UserCorrection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'version': self.version,
            'createdAt': self.created_at,
            'lastUpdated': self.last_updated,
            'processedTasks': [t.to_dict() for t in self.processed_tasks],
            'userPreferences': self.user_preferences.to_dict(),
            'applicationProfiles': {
                name: profile.to_dict() for name, profile in self.application_profiles.items()
            },
            'userCorrections': [c.to_dict() for c in self.user_corrections],
        }
        if self.last_synced_task_id is not None:
            data['lastSyncedTaskId'] = self.last_synced_task_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MemorySnapshot':
        if not isinstance(data, dict):
            raise ValueError("Memory file must contain a JSON object")
        profiles = data.get('applicationProfiles') or {}
        return cls(
            version=data.get('version', MEMORY_VERSION),
            created_at=data.get('createdAt', _now()),
            last_updated=data.get('lastUpdated', _now()),
            last_synced_task_id=data.get('lastSyncedTaskId'),
            processed_tasks=[ProcessedTask.from_dict(t) for t in data.get('processedTasks') or []],
            user_preferences=UserPreferences.from_dict(data.get('userPreferences') or {}),
            application_profiles={
                name: AppMemoryProfile.from_dict({'name': name, **profile})
                for name, profile in profiles.items()
            },
            user_corrections=[UserCorrection.from_dict(c) for c in data.get('userCorrections') or []],
        )
