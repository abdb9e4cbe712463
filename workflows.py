#!/usr/bin/env python3
"""
QA Agent Workflows

Command line front-end for the acceptance-criteria to Playwright pipeline:
1. sync      Fetch assigned work items from Azure DevOps and process them
2. generate  Generate a test case and Playwright script from criteria text
3. run       Execute a saved scenario in a live browser
4. memory    Inspect or reset the agent memory
5. config    Show, create or validate the configuration file

Usage:
    python3 workflows.py sync --max 5
    python3 workflows.py generate --criteria-file ac.txt --title "Login" --app my-app
    python3 workflows.py run --task-id 1234 --headed
    python3 workflows.py memory stats
    python3 workflows.py config init --org myorg --ado-project MyProject
"""
import argparse
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from core.config import AgentConfig, ApplicationConfig, CONFIG_FILE_NAMES
from core.domain import (
    AppMemoryProfile,
    AppProfile,
    ExecutionResult,
    ExecutionStatus,
    ProcessedTask,
    Scenario,
    TestCase,
    TestStatus,
    WorkItem
)
from core.interfaces import IMemoryStore, IReviewer, ITaskRepository, ReviewAction
from core.services import CriteriaParser, TestCaseGenerator, TestCaseValidator, get_logger
from infrastructure import (
    ADOTaskRepository,
    ConsoleReviewer,
    JsonMemoryStore,
    LiveTestRunner,
    PlaywrightGenerator,
    ScenarioWriter
)


class WorkflowStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class WorkflowResult:
    """Result of workflow execution."""
    status: WorkflowStatus
    message: str
    data: Dict[str, Any] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class IWorkflow(ABC):
    """Interface for all workflows."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Workflow name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Workflow description."""
        pass

    @abstractmethod
    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        """Execute the workflow with the agent configuration."""
        pass

    @abstractmethod
    def validate_inputs(self, **kwargs) -> Optional[str]:
        """Validate inputs. Returns error message or None if valid."""
        pass


def scenario_id_for(task_id: int) -> str:
    return f"SC-{task_id}"


def resolve_app(config: AgentConfig, app_name: Optional[str] = None,
                base_url: Optional[str] = None) -> Optional[ApplicationConfig]:
    """Pick the application under test.

    An explicit base URL registers an ad-hoc application; otherwise the named,
    default or first configured application is used. None when nothing is configured.
    """
    if base_url:
        app = ApplicationConfig(name=app_name or 'default', base_url=base_url)
        config.add_app(app)
        return app
    if not config.applications:
        return None
    return config.get_app(app_name)


def format_run_summary(test_case: TestCase, result: ExecutionResult) -> str:
    """Plain-text run summary, used for console output and ADO comments."""
    lines = [
        f"QA Agent run for {test_case.id}: {result.status.value}",
        f"Steps: {result.passed_steps}/{result.total_steps} passed, "
        f"{result.failed_steps} failed, {result.skipped_steps} skipped",
        f"Duration: {result.execution_time_ms / 1000:.1f}s",
    ]
    for error in result.errors:
        lines.append(f"Step {error.step_number}: {error.message}")
    return "\n".join(lines)


class TaskProcessor:
    """
    Runs one work item through the pipeline.

    detect issues -> generate -> clarify -> review -> validate -> save script
    -> optional live run -> scenario file -> memory bookkeeping
    """

    def __init__(
        self,
        config: AgentConfig,
        memory_store: IMemoryStore,
        reviewer: Optional[IReviewer] = None,
        runner: Optional[LiveTestRunner] = None,
        interactive: bool = True
    ):
        self.config = config
        self.memory_store = memory_store
        self.reviewer = reviewer or ConsoleReviewer()
        self.runner = runner
        self.interactive = interactive
        self.generator = TestCaseGenerator(memory_store=memory_store)
        self.validator = TestCaseValidator()
        self.script_generator = PlaywrightGenerator(config)
        self.scenario_writer = ScenarioWriter(config.paths.scenarios)
        self.logger = get_logger()

    @property
    def parser(self) -> CriteriaParser:
        return self.generator.parser

    def process(
        self,
        task: WorkItem,
        app: ApplicationConfig,
        output_dir: Optional[str] = None,
        run: bool = False
    ) -> Dict[str, Any]:
        """Process a work item. Returns a summary dict; 'skipped' is True when the reviewer skipped it."""
        print(f"\n[{task.id}] {task.title}")

        issues = self.parser.detect_issues(task.acceptance_criteria)
        if issues:
            print(f"  Criteria issues: {', '.join(issues)}")

        test_cases = self.generator.generate_from_task(task, app.name)
        print(f"  Generated {len(test_cases)} test case(s), {sum(len(tc.steps) for tc in test_cases)} step(s)")

        approved = False
        if self.interactive:
            test_cases = self._clarify(task, app, test_cases, issues)
            test_cases, approved, skipped = self._review(task, app, test_cases)
            if skipped:
                print("  Skipped")
                self.memory_store.record_processed_task(ProcessedTask(
                    task_id=task.id,
                    task_title=task.title,
                    test_cases_generated=0,
                    user_approved=False
                ))
                return {'task_id': task.id, 'skipped': True}

        if approved:
            for test_case in test_cases:
                test_case.advance_status(TestStatus.APPROVED)

        validation = self.validator.validate_all(test_cases)
        for error in validation.errors:
            print(f"  Error: {error}")
        for warning in validation.warnings:
            print(f"  Warning: {warning}")

        scripts = [self.script_generator.generate_script(tc, app, output_dir) for tc in test_cases]
        for script in scripts:
            print(f"  Script: {script}")

        execution_result = None
        if run:
            execution_result = self._run(self.generator.merge(test_cases), app)

        scenario = Scenario(
            scenario_id=scenario_id_for(task.id),
            task_id=task.id,
            task_title=task.title,
            task_description=task.description,
            test_cases=test_cases,
            user_edits=[edit for tc in test_cases for edit in tc.user_edits],
            execution_results=execution_result,
            tested_urls=[app.base_url] if execution_result else [],
            application_profile=AppProfile(
                name=app.name,
                base_url=app.base_url,
                login_method=app.login_method,
                environment=app.environment
            ),
            notes="; ".join(issues) if issues else None
        )
        scenario_path = self.scenario_writer.write(scenario)
        print(f"  Scenario: {scenario_path}")

        self.memory_store.record_processed_task(ProcessedTask(
            task_id=task.id,
            task_title=task.title,
            test_cases_generated=len(test_cases),
            user_approved=approved
        ))
        self._remember_app(app)
        self.logger.info(
            "task_processed",
            task_id=task.id,
            test_cases=len(test_cases),
            approved=approved,
            valid=validation.is_valid
        )

        return {
            'task_id': task.id,
            'skipped': False,
            'approved': approved,
            'test_cases': test_cases,
            'scripts': scripts,
            'scenario': scenario_path,
            'execution_result': execution_result,
            'is_valid': validation.is_valid,
        }

    def _clarify(self, task: WorkItem, app: ApplicationConfig,
                 test_cases: List[TestCase], issues: List[str]) -> List[TestCase]:
        if task.has_acceptance_criteria and not issues:
            return test_cases
        if not self.reviewer.confirm("  Criteria look incomplete. Answer a few questions?"):
            return test_cases

        answers = self.reviewer.ask_clarifying_questions(
            self.parser.clarifying_questions(task.description)
        )
        if not any(answer.strip() for answer in answers.values()):
            return test_cases
        return self.generator.generate_from_answers(task, answers, app.name)

    def _review(self, task: WorkItem, app: ApplicationConfig, test_cases: List[TestCase]):
        """Review loop. Returns (test_cases, approved, skipped)."""
        regenerated = False
        while True:
            decision = self.reviewer.review_test_cases(test_cases)

            if decision.action == ReviewAction.REGENERATE:
                if regenerated:
                    print("  Regenerating gives the same steps; edit them instead")
                    continue
                test_cases = self.generator.generate_from_task(task, app.name)
                regenerated = True
                continue

            if decision.action == ReviewAction.ADD_STEPS:
                extra = self.reviewer.ask_additional_steps()
                for test_case in test_cases:
                    self.generator.add_steps(test_case, extra)
                continue

            if decision.action == ReviewAction.EDIT:
                for test_case in test_cases:
                    self.generator.apply_user_edits(test_case, decision.edits)
                return test_cases, True, False

            if not decision.approved:
                return test_cases, False, True
            return test_cases, True, False

    def _run(self, test_case: TestCase, app: ApplicationConfig) -> ExecutionResult:
        runner = self.runner or LiveTestRunner(self.config)
        print(f"  Running {test_case.id} against {app.base_url}...")
        result = runner.run_test_case_sync(test_case, app)
        print("  " + format_run_summary(test_case, result).replace("\n", "\n  "))
        return result

    def _remember_app(self, app: ApplicationConfig) -> None:
        profile = self.memory_store.get_app_profile(app.name)
        if profile is None:
            profile = AppMemoryProfile(
                name=app.name,
                base_url=app.base_url,
                login_method=app.login_method,
                environment=app.environment
            )
        else:
            profile.base_url = app.base_url or profile.base_url
            profile.last_used = datetime.now().isoformat()
        self.memory_store.set_app_profile(app.name, profile)


class SyncWorkflow(IWorkflow):
    """
    Fetch work items assigned to the configured user from Azure DevOps and
    take each one through generation, review and (optionally) a live run.
    """

    def __init__(self, repository: Optional[ITaskRepository] = None,
                 reviewer: Optional[IReviewer] = None, runner: Optional[LiveTestRunner] = None):
        self._repository = repository
        self._reviewer = reviewer
        self._runner = runner

    @property
    def name(self) -> str:
        return "sync"

    @property
    def description(self) -> str:
        return "Fetch assigned Azure DevOps tasks and generate tests"

    def validate_inputs(self, **kwargs) -> Optional[str]:
        max_results = kwargs.get('max_results')
        if max_results is not None and max_results <= 0:
            return "max must be a positive integer"
        return None

    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        max_results = kwargs.get('max_results') or 10
        states = kwargs.get('states') or None
        include_processed = kwargs.get('include_processed', False)

        try:
            config.validate()
        except ValueError as e:
            return WorkflowResult(status=WorkflowStatus.FAILED, message=str(e))

        app = resolve_app(config, kwargs.get('app'), kwargs.get('base_url'))
        if app is None:
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message="No application configured. Run 'config init' or pass --base-url."
            )

        print("\nWorkflow: Sync Azure DevOps Tasks")
        print(f"Organization: {config.azure.organization} / {config.azure.project}")
        print(f"Assigned to: {config.azure.assigned_to}")
        print(f"Application: {app.name} ({app.base_url})")

        repository = self._repository or ADOTaskRepository(config.azure)

        print("\n[1/2] Fetching tasks...")
        if not repository.test_connection():
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message="Could not connect to Azure DevOps. Check organization, project and AZURE_PAT."
            )
        try:
            tasks = repository.fetch_assigned(config.azure.assigned_to, states, max_results)
        except Exception as e:
            return WorkflowResult(status=WorkflowStatus.FAILED, message=f"Failed to fetch tasks: {e}")
        print(f"  Found {len(tasks)} task(s)")

        processed, skipped, failed = [], [], []
        print("\n[2/2] Processing tasks...")
        with JsonMemoryStore(kwargs.get('project_root')) as store:
            processor = TaskProcessor(
                config, store,
                reviewer=self._reviewer,
                runner=self._runner,
                interactive=not kwargs.get('no_review', False)
            )
            for task in tasks:
                if not include_processed and store.get_processed_task(task.id) is not None:
                    print(f"\n[{task.id}] already processed, skipping")
                    skipped.append(task.id)
                    continue
                try:
                    outcome = processor.process(
                        task, app,
                        output_dir=kwargs.get('output_dir'),
                        run=kwargs.get('run', False)
                    )
                except (OSError, ValueError) as e:
                    print(f"  Failed: {e}")
                    failed.append(task.id)
                    continue
                (skipped if outcome['skipped'] else processed).append(task.id)

        status = WorkflowStatus.SUCCESS
        if failed:
            status = WorkflowStatus.PARTIAL if processed else WorkflowStatus.FAILED
        return WorkflowResult(
            status=status,
            message=f"Processed {len(processed)} task(s), skipped {len(skipped)}, failed {len(failed)}",
            data={'processed': processed, 'skipped': skipped, 'failed': failed}
        )


class GenerateWorkflow(IWorkflow):
    """
    Generate a test case and Playwright script from acceptance criteria.

    Criteria come from --criteria, --criteria-file, or the ADO work item
    given by --task-id when neither is passed.
    """

    def __init__(self, repository: Optional[ITaskRepository] = None,
                 reviewer: Optional[IReviewer] = None, runner: Optional[LiveTestRunner] = None):
        self._repository = repository
        self._reviewer = reviewer
        self._runner = runner

    @property
    def name(self) -> str:
        return "generate"

    @property
    def description(self) -> str:
        return "Generate a Playwright test from acceptance criteria"

    def validate_inputs(self, **kwargs) -> Optional[str]:
        task_id = kwargs.get('task_id')
        if task_id is not None and task_id <= 0:
            return "task_id must be a positive integer"
        if kwargs.get('criteria') and kwargs.get('criteria_file'):
            return "Use either --criteria or --criteria-file, not both"
        if not (kwargs.get('criteria') or kwargs.get('criteria_file')) and task_id is None:
            return "Provide --criteria, --criteria-file or --task-id"
        return None

    def _load_task(self, config: AgentConfig, **kwargs) -> WorkItem:
        criteria = kwargs.get('criteria')
        criteria_file = kwargs.get('criteria_file')
        task_id = kwargs.get('task_id') or 1

        if criteria_file:
            with open(criteria_file, 'r', encoding='utf-8') as f:
                criteria = f.read()

        if criteria:
            return WorkItem(
                id=task_id,
                title=kwargs.get('title') or f"Task {task_id}",
                acceptance_criteria=criteria
            )

        config.validate()
        repository = self._repository or ADOTaskRepository(config.azure)
        task = repository.get_task(task_id)
        if task is None:
            raise ValueError(f"Work item {task_id} could not be fetched from Azure DevOps")
        return task

    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        app = resolve_app(config, kwargs.get('app'), kwargs.get('base_url'))
        if app is None:
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message="No application configured. Run 'config init' or pass --base-url."
            )

        try:
            task = self._load_task(config, **kwargs)
        except (OSError, ValueError) as e:
            return WorkflowResult(status=WorkflowStatus.FAILED, message=str(e))

        print("\nWorkflow: Generate Test")
        print(f"Application: {app.name} ({app.base_url})")

        with JsonMemoryStore(kwargs.get('project_root')) as store:
            processor = TaskProcessor(
                config, store,
                reviewer=self._reviewer,
                runner=self._runner,
                interactive=not kwargs.get('no_review', False)
            )
            outcome = processor.process(
                task, app,
                output_dir=kwargs.get('output_dir'),
                run=kwargs.get('run', False)
            )

        if outcome['skipped']:
            return WorkflowResult(status=WorkflowStatus.PARTIAL, message="Test generation skipped", data=outcome)

        result = outcome.get('execution_result')
        if result is not None and result.failed_steps:
            return WorkflowResult(
                status=WorkflowStatus.PARTIAL,
                message=f"Generated {len(outcome['scripts'])} script(s); live run {result.status.value}",
                data=outcome
            )
        return WorkflowResult(
            status=WorkflowStatus.SUCCESS,
            message=f"Generated {len(outcome['scripts'])} script(s)",
            data=outcome
        )


class RunWorkflow(IWorkflow):
    """Execute a saved scenario in a live browser and store the result on it."""

    def __init__(self, runner: Optional[LiveTestRunner] = None, repository: Optional[ITaskRepository] = None):
        self._runner = runner
        self._repository = repository

    @property
    def name(self) -> str:
        return "run"

    @property
    def description(self) -> str:
        return "Run a saved scenario against the application"

    def validate_inputs(self, **kwargs) -> Optional[str]:
        if not kwargs.get('scenario') and not kwargs.get('task_id'):
            return "Provide --scenario or --task-id"
        slow_mo = kwargs.get('slow_mo')
        if slow_mo is not None and slow_mo < 0:
            return "slow_mo must not be negative"
        return None

    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        scenario_id = kwargs.get('scenario') or scenario_id_for(kwargs['task_id'])

        if kwargs.get('headed'):
            config.playwright.headless = False
        if kwargs.get('slow_mo') is not None:
            config.playwright.slow_mo = kwargs['slow_mo']

        writer = ScenarioWriter(config.paths.scenarios)
        scenario = writer.read(scenario_id)
        if scenario is None:
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message=f"Scenario not found: {scenario_id}. Run 'generate' or 'sync' first."
            )
        if not scenario.test_cases:
            return WorkflowResult(status=WorkflowStatus.FAILED, message=f"Scenario {scenario_id} has no test cases")

        app_name = kwargs.get('app') or (scenario.application_profile.name if scenario.application_profile else None)
        app = resolve_app(config, app_name, kwargs.get('base_url'))
        if app is None and scenario.application_profile is not None:
            profile = scenario.application_profile
            app = ApplicationConfig(name=profile.name, base_url=profile.base_url, environment=profile.environment)
        if app is None or not app.base_url:
            return WorkflowResult(status=WorkflowStatus.FAILED, message="No application base URL to run against")

        print("\nWorkflow: Run Scenario")
        print(f"Scenario: {scenario.scenario_id} ({scenario.task_title})")
        print(f"Application: {app.name} ({app.base_url})")
        print(f"Browser: {config.playwright.browser_type} ({'headless' if config.playwright.headless else 'headed'})")

        runner = self._runner or LiveTestRunner(config)
        test_case = TestCaseGenerator().merge(scenario.test_cases)
        result = runner.run_test_case_sync(test_case, app)
        summary = format_run_summary(test_case, result)
        print("\n" + summary)

        scenario.execution_results = result
        scenario.tested_urls = sorted(set(scenario.tested_urls) | {app.base_url})
        scenario.updated_at = datetime.now().isoformat()
        writer.write(scenario)

        if kwargs.get('post_results'):
            try:
                config.validate()
                repository = self._repository or ADOTaskRepository(config.azure)
                repository.add_comment(scenario.task_id, summary)
                print(f"  Posted results to work item {scenario.task_id}")
            except Exception as e:
                return WorkflowResult(
                    status=WorkflowStatus.PARTIAL,
                    message=f"Run {result.status.value}, but posting results failed: {e}",
                    data={'result': result}
                )

        status = WorkflowStatus.SUCCESS if result.status == ExecutionStatus.PASSED else WorkflowStatus.FAILED
        return WorkflowResult(
            status=status,
            message=f"Run {result.status.value}: {result.passed_steps}/{result.total_steps} steps passed",
            data={'result': result, 'scenario': scenario.scenario_id}
        )


class MemoryWorkflow(IWorkflow):
    """Inspect, reset or seed the agent memory."""

    ACTIONS = ('stats', 'view', 'reset', 'corrections', 'common-steps')

    def __init__(self, reviewer: Optional[IReviewer] = None):
        self._reviewer = reviewer

    @property
    def name(self) -> str:
        return "memory"

    @property
    def description(self) -> str:
        return "Inspect or manage the agent memory"

    def validate_inputs(self, **kwargs) -> Optional[str]:
        action = kwargs.get('action') or 'stats'
        if action not in self.ACTIONS:
            return f"Unknown memory action: {action}. Available: {', '.join(self.ACTIONS)}"
        if action == 'common-steps' and not kwargs.get('app'):
            return "common-steps requires --app"
        return None

    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        action = kwargs.get('action') or 'stats'
        store = JsonMemoryStore(kwargs.get('project_root'))
        store.open()

        if action == 'stats':
            stats = store.get_stats()
            print("\nMemory")
            for key, value in stats.items():
                print(f"  {key}: {value}")
            return WorkflowResult(status=WorkflowStatus.SUCCESS, message="Memory statistics", data=stats)

        if action == 'view':
            snapshot = store.snapshot()
            print("\nProcessed tasks:")
            for task in snapshot.processed_tasks:
                print(f"  {task.task_id}: {task.task_title} "
                      f"({task.test_cases_generated} test case(s), approved={task.user_approved})")
            print("Application profiles:")
            for name, profile in snapshot.application_profiles.items():
                print(f"  {name}: {profile.base_url} ({len(profile.common_steps)} common step(s))")
            print("Preferences:")
            for key, value in snapshot.user_preferences.to_dict().items():
                print(f"  {key}: {value}")
            return WorkflowResult(status=WorkflowStatus.SUCCESS, message="Memory contents", data=snapshot.to_dict())

        if action == 'corrections':
            corrections = store.get_user_corrections()
            print(f"\nCorrections ({len(corrections)}):")
            for correction in corrections:
                print(f"  [{correction.frequency}x] {correction.pattern} -> {correction.correction}")
            return WorkflowResult(
                status=WorkflowStatus.SUCCESS,
                message=f"{len(corrections)} correction(s)",
                data={'corrections': [c.to_dict() for c in corrections]}
            )

        if action == 'common-steps':
            return self._common_steps(store, kwargs['app'], kwargs.get('steps'))

        if not kwargs.get('yes'):
            reviewer = self._reviewer or ConsoleReviewer()
            if not reviewer.confirm("Reset all agent memory?"):
                return WorkflowResult(status=WorkflowStatus.PARTIAL, message="Reset cancelled")
        store.reset()
        return WorkflowResult(status=WorkflowStatus.SUCCESS, message=f"Memory reset ({store.path})")

    @staticmethod
    def _common_steps(store: JsonMemoryStore, app_name: str, steps: Optional[str]) -> WorkflowResult:
        profile = store.get_app_profile(app_name) or AppMemoryProfile(name=app_name)
        if steps is not None:
            profile.common_steps = [s.strip() for s in steps.split(';') if s.strip()]
            store.set_app_profile(app_name, profile)
            store.flush()
            print(f"\nSaved {len(profile.common_steps)} common step(s) for {app_name}")
        else:
            print(f"\nCommon steps for {app_name}:")
            for idx, step in enumerate(profile.common_steps, start=1):
                print(f"  {idx}. {step}")
        return WorkflowResult(
            status=WorkflowStatus.SUCCESS,
            message=f"{len(profile.common_steps)} common step(s) for {app_name}",
            data={'common_steps': list(profile.common_steps)}
        )


class ConfigWorkflow(IWorkflow):
    """Show, create or validate qa-agent.config.yaml."""

    ACTIONS = ('show', 'init', 'validate')

    @property
    def name(self) -> str:
        return "config"

    @property
    def description(self) -> str:
        return "Show, create or validate the configuration"

    def validate_inputs(self, **kwargs) -> Optional[str]:
        action = kwargs.get('action') or 'show'
        if action not in self.ACTIONS:
            return f"Unknown config action: {action}. Available: {', '.join(self.ACTIONS)}"
        if action == 'init' and kwargs.get('app_name') and not kwargs.get('base_url'):
            return "--app-name requires --base-url"
        return None

    def execute(self, config: AgentConfig, **kwargs) -> WorkflowResult:
        action = kwargs.get('action') or 'show'

        if action == 'show':
            print(f"\n# Source: {config.source_path or 'environment'}")
            print(config.to_yaml())
            return WorkflowResult(status=WorkflowStatus.SUCCESS, message="Configuration shown")

        if action == 'validate':
            problems = []
            for check in (config.validate, config.validate_for_execution):
                try:
                    check()
                except ValueError as e:
                    problems.append(str(e))
            for problem in problems:
                print(f"  - {problem}")
            if problems:
                return WorkflowResult(
                    status=WorkflowStatus.FAILED,
                    message=f"Configuration has {len(problems)} problem(s)",
                    data={'problems': problems}
                )
            return WorkflowResult(status=WorkflowStatus.SUCCESS, message="Configuration is valid")

        path = kwargs.get('output') or CONFIG_FILE_NAMES[0]
        if Path(path).exists() and not kwargs.get('force'):
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message=f"{path} already exists. Use --force to overwrite."
            )

        if kwargs.get('org'):
            config.azure.organization = kwargs['org']
        if kwargs.get('ado_project'):
            config.azure.project = kwargs['ado_project']
        if kwargs.get('assigned_to'):
            config.azure.assigned_to = kwargs['assigned_to']
        if kwargs.get('app_name'):
            config.add_app(ApplicationConfig(name=kwargs['app_name'], base_url=kwargs['base_url']))
            config.default_app = config.default_app or kwargs['app_name']

        saved = config.save(path)
        print(f"\nWrote {saved}")
        print("  The Azure PAT is read from AZURE_PAT and is never written to the file.")
        return WorkflowResult(status=WorkflowStatus.SUCCESS, message=f"Configuration saved to {saved}",
                              data={'path': saved})


class WorkflowEngine:
    """Orchestrates workflow execution with the agent configuration."""

    def __init__(self, workflows: Optional[List[IWorkflow]] = None):
        self._workflows: Dict[str, IWorkflow] = {}
        self._register_workflows(workflows)

    def _register_workflows(self, workflows: Optional[List[IWorkflow]] = None):
        """Register all available workflows."""
        if workflows is None:
            workflows = [
                SyncWorkflow(),
                GenerateWorkflow(),
                RunWorkflow(),
                MemoryWorkflow(),
                ConfigWorkflow(),
            ]
        for workflow in workflows:
            self._workflows[workflow.name] = workflow

    def get_workflow(self, name: str) -> Optional[IWorkflow]:
        """Get workflow by name."""
        return self._workflows.get(name)

    def list_workflows(self) -> List[str]:
        """List all available workflow names."""
        return list(self._workflows.keys())

    def execute(self, workflow_name: str, config_path: str = None, **kwargs) -> WorkflowResult:
        """Execute a workflow by name with the loaded configuration."""
        workflow = self.get_workflow(workflow_name)

        if not workflow:
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message=f"Unknown workflow: {workflow_name}. Available: {self.list_workflows()}"
            )

        try:
            config = AgentConfig.load(config_path, project_root=kwargs.get('project_root'))
        except ValueError as e:
            return WorkflowResult(status=WorkflowStatus.FAILED, message=str(e))

        # Validate inputs
        error = workflow.validate_inputs(**kwargs)
        if error:
            return WorkflowResult(
                status=WorkflowStatus.FAILED,
                message=f"Validation error: {error}"
            )

        return workflow.execute(config, **kwargs)


def main():
    parser = argparse.ArgumentParser(
        description="QA Agent - acceptance criteria to Playwright tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflows:
  sync       Fetch assigned Azure DevOps tasks and generate tests
  generate   Generate a Playwright test from acceptance criteria
  run        Run a saved scenario against the application
  memory     Inspect or manage the agent memory (stats, view, reset, corrections, common-steps)
  config     Show, create or validate the configuration (show, init, validate)

Examples:
  python3 workflows.py sync --max 5 --run
  python3 workflows.py generate --criteria-file ac.txt --title "Login" --app portal
  python3 workflows.py generate --task-id 1234 --no-review
  python3 workflows.py run --task-id 1234 --headed --slow-mo 250 --post-results
  python3 workflows.py memory common-steps --app portal --steps "Open login page; Sign in"
  python3 workflows.py memory reset --yes
  python3 workflows.py config init --org myorg --ado-project Portal --app-name portal --base-url https://portal.example.com
        """
    )

    # Global arguments
    parser.add_argument('--config', '-c', dest='config_path', help='Configuration file to use')
    parser.add_argument('--project-root', default=None, help='Directory holding config and memory files')

    subparsers = parser.add_subparsers(dest='workflow', help='Workflow to execute')

    # Sync workflow
    sync_parser = subparsers.add_parser('sync', help='Fetch and process assigned ADO tasks')
    sync_parser.add_argument('--max', dest='max_results', type=int, default=10, help='Maximum tasks to fetch')
    sync_parser.add_argument('--state', dest='states', action='append', help='Work item state (repeatable)')
    sync_parser.add_argument('--app', default=None, help='Application name')
    sync_parser.add_argument('--base-url', default=None, help='Ad-hoc application base URL')
    sync_parser.add_argument('--output-dir', default=None, help='Directory for generated scripts')
    sync_parser.add_argument('--include-processed', action='store_true', help='Process tasks handled before')
    sync_parser.add_argument('--no-review', action='store_true', help='Skip interactive review')
    sync_parser.add_argument('--run', action='store_true', help='Run each test in a live browser')

    # Generate workflow
    gen_parser = subparsers.add_parser('generate', help='Generate a test from criteria')
    gen_parser.add_argument('--criteria', default=None, help='Acceptance criteria text')
    gen_parser.add_argument('--criteria-file', default=None, help='File holding acceptance criteria')
    gen_parser.add_argument('--title', default=None, help='Test title')
    gen_parser.add_argument('--task-id', type=int, default=None, help='Work item ID (fetched from ADO without criteria)')
    gen_parser.add_argument('--app', default=None, help='Application name')
    gen_parser.add_argument('--base-url', default=None, help='Ad-hoc application base URL')
    gen_parser.add_argument('--output-dir', default=None, help='Directory for generated scripts')
    gen_parser.add_argument('--no-review', action='store_true', help='Skip interactive review')
    gen_parser.add_argument('--run', action='store_true', help='Run the test in a live browser')

    # Run workflow
    run_parser = subparsers.add_parser('run', help='Run a saved scenario')
    run_parser.add_argument('--scenario', default=None, help='Scenario ID')
    run_parser.add_argument('--task-id', type=int, default=None, help='Work item ID of the scenario')
    run_parser.add_argument('--app', default=None, help='Application name')
    run_parser.add_argument('--base-url', default=None, help='Override the application base URL')
    run_parser.add_argument('--headed', action='store_true', help='Show the browser window')
    run_parser.add_argument('--slow-mo', type=int, default=None, help='Delay between steps in ms')
    run_parser.add_argument('--post-results', action='store_true', help='Comment the summary on the work item')

    # Memory workflow
    memory_parser = subparsers.add_parser('memory', help='Manage agent memory')
    memory_parser.add_argument('action', nargs='?', default='stats', choices=MemoryWorkflow.ACTIONS)
    memory_parser.add_argument('--app', default=None, help='Application name (common-steps)')
    memory_parser.add_argument('--steps', default=None, help='Semicolon-separated common steps to save')
    memory_parser.add_argument('--yes', '-y', action='store_true', help='Do not ask before resetting')

    # Config workflow
    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_parser.add_argument('action', nargs='?', default='show', choices=ConfigWorkflow.ACTIONS)
    config_parser.add_argument('--org', default=None, help='Azure DevOps organization')
    config_parser.add_argument('--ado-project', default=None, help='Azure DevOps project')
    config_parser.add_argument('--assigned-to', default=None, help='User whose tasks are synced')
    config_parser.add_argument('--app-name', default=None, help='Application name')
    config_parser.add_argument('--base-url', default=None, help='Application base URL')
    config_parser.add_argument('--output', default=None, help='Config file to write')
    config_parser.add_argument('--force', action='store_true', help='Overwrite an existing file')

    args = parser.parse_args()

    if not args.workflow:
        parser.print_help()
        sys.exit(1)

    # Convert args to kwargs
    kwargs = vars(args).copy()
    workflow_name = kwargs.pop('workflow')
    config_path = kwargs.pop('config_path', None)

    engine = WorkflowEngine()
    try:
        result = engine.execute(workflow_name, config_path=config_path, **kwargs)
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)

    # Exit code
    if result.status == WorkflowStatus.FAILED:
        print(f"\nERROR: {result.message}")
        sys.exit(1)
    elif result.status == WorkflowStatus.PARTIAL:
        print(f"\nWARNING: {result.message}")
        sys.exit(0)
    else:
        print(f"\nSUCCESS: {result.message}")
        sys.exit(0)


if __name__ == '__main__':
    main()
