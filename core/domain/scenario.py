"""
Scenario domain entity - summarizes the complete automation flow for a work item.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .execution import ExecutionResult
from .test_case import TestCase, UserEdit


@dataclass
class AppProfile:
    """Application details recorded alongside a scenario."""
    name: str
    base_url: str
    login_method: str = "forms"
    environment: str = "dev"
    username: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'baseUrl': self.base_url,
            'loginMethod': self.login_method,
            'environment': self.environment,
        }
        if self.username:
            data['username'] = self.username
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppProfile':
        return cls(
            name=data.get('name', ''),
            base_url=data.get('baseUrl', ''),
            login_method=data.get('loginMethod', 'forms'),
            environment=data.get('environment', 'dev'),
            username=data.get('username'),
        )


@dataclass
class Scenario:
    """Scenario file contents: test cases, edits and execution results."""
    scenario_id: str
    task_id: int
    task_title: str
    task_description: str = ""
    test_cases: List[TestCase] = field(default_factory=list)
    automation_approach: str = "Playwright TypeScript"
    user_edits: List[UserEdit] = field(default_factory=list)
    execution_results: Optional[ExecutionResult] = None
    tested_urls: List[str] = field(default_factory=list)
    application_profile: Optional[AppProfile] = None
    notes: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'scenarioId': self.scenario_id,
            'taskId': self.task_id,
            'taskTitle': self.task_title,
            'taskDescription': self.task_description,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'testCases': [tc.to_dict() for tc in self.test_cases],
            'automationApproach': self.automation_approach,
            'userEdits': [edit.to_dict() for edit in self.user_edits],
            'testedUrls': list(self.tested_urls),
        }
        if self.execution_results is not None:
            data['executionResults'] = self.execution_results.to_dict()
        if self.application_profile is not None:
            data['applicationProfile'] = self.application_profile.to_dict()
        if self.notes:
            data['notes'] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        results = data.get('executionResults')
        profile = data.get('applicationProfile')
        return cls(
            scenario_id=data.get('scenarioId', ''),
            task_id=int(data.get('taskId', 0)),
            task_title=data.get('taskTitle', ''),
            task_description=data.get('taskDescription', ''),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
            test_cases=[TestCase.from_dict(tc) for tc in data.get('testCases') or []],
            automation_approach=data.get('automationApproach', ''),
            user_edits=[UserEdit.from_dict(e) for e in data.get('userEdits') or []],
            execution_results=ExecutionResult.from_dict(results) if results else None,
            tested_urls=list(data.get('testedUrls') or []),
            application_profile=AppProfile.from_dict(profile) if profile else None,
            notes=data.get('notes'),
        )
