"""
Azure DevOps repository implementations.

Implements the work item repository interface for ADO data access.
"""
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from core.config import AzureConfig
from core.domain.task import WorkItem
from core.interfaces.repository import ITaskRepository
from core.services.metrics.logger import StructuredLogger, get_logger
from .http_client import ADOHttpClient


DEFAULT_STATES = ['New', 'Active']
ACCEPTANCE_CRITERIA_FIELDS = (
    'Custom.AcceptanceCriteria',
    'Microsoft.VSTS.Common.AcceptanceCriteria',
)
BATCH_LIMIT = 200


class HtmlParser:
    """Utility class for parsing HTML content from ADO."""

    @staticmethod
    def normalize_to_text(html_content: str) -> str:
        """Convert HTML to plain text, preserving structure.

        List items become '• ' bullets and block elements become lines,
        which is the shape the criteria parser splits on.

        Args:
            html_content: HTML string

        Returns:
            Plain text with preserved bullet points and line breaks
        """
        if not html_content:
            return ""

        soup = BeautifulSoup(html_content, 'html.parser')

        for br in soup.find_all('br'):
            br.replace_with('\n')

        # Innermost items first, so nested lists keep their own bullets
        for li in reversed(soup.find_all('li')):
            text = ' '.join(li.get_text(separator=' ').split())
            if not text.startswith('•') and not text.startswith('-'):
                text = f'• {text}'
            li.string = text

        text = soup.get_text(separator='\n')

        lines = [line.strip() for line in text.split('\n') if line.strip()]
        return '\n'.join(lines)


class ADOTaskRepository(ITaskRepository):
    """Azure DevOps implementation of the work item repository."""

    def __init__(
        self,
        config: AzureConfig,
        client: Optional[ADOHttpClient] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """Initialize repository with ADO configuration.

        Args:
            config: Azure DevOps configuration
            client: HTTP client (built from config by default)
            logger: Structured logger
        """
        self._config = config
        self._client = client or ADOHttpClient(
            organization=config.organization,
            project=config.project,
            pat=config.pat
        )
        self._parser = HtmlParser()
        self._logger = logger or get_logger()

    def test_connection(self) -> bool:
        """Run a one-row WIQL query to check credentials and project access."""
        try:
            self._client.execute_wiql(
                "SELECT [System.Id] FROM workitems "
                "WHERE [System.TeamProject] = @project "
                "ORDER BY [System.ChangedDate] DESC",
                top=1
            )
            return True
        except requests.RequestException as e:
            self._logger.error("ado_connection_failed", error=str(e))
            return False

    def fetch_assigned(
        self,
        assigned_to: str,
        states: Optional[List[str]] = None,
        max_results: int = 10
    ) -> List[WorkItem]:
        """Retrieve work items assigned to a user, most recently changed first.

        Raises:
            requests.HTTPError: If the query or the batch fetch fails
        """
        states = states or DEFAULT_STATES
        state_list = ", ".join(f"'{self._quote(s)}'" for s in states)
        query = (
            "SELECT [System.Id] FROM workitems "
            f"WHERE [System.AssignedTo] = '{self._quote(assigned_to)}' "
            f"AND [System.State] IN ({state_list}) "
            "AND [System.TeamProject] = @project "
            "ORDER BY [System.ChangedDate] DESC"
        )

        result = self._client.execute_wiql(query, top=max_results)
        ids = [ref['id'] for ref in result.get('workItems', [])][:max_results]
        if not ids:
            return []

        items: Dict[int, WorkItem] = {}
        for start in range(0, len(ids), BATCH_LIMIT):
            batch = self._client.get_work_items(ids[start:start + BATCH_LIMIT])
            for data in batch.get('value', []):
                item = self._to_work_item(data)
                if item is not None:
                    items[item.id] = item

        # Keep the query's ordering
        return [items[i] for i in ids if i in items]

    def get_task(self, task_id: int) -> Optional[WorkItem]:
        """Retrieve a single work item by ID; None if it cannot be fetched."""
        try:
            data = self._client.get(
                f"_apis/wit/workitems/{task_id}",
                params={"$expand": "all"}
            )
        except requests.RequestException as e:
            self._logger.error("ado_get_task_failed", task_id=task_id, error=str(e))
            return None
        return self._to_work_item(data)

    def add_comment(self, task_id: int, text: str) -> None:
        """Post a comment on a work item (e.g. a run summary)."""
        self._client.add_comment(task_id, text)

    @staticmethod
    def _quote(value: str) -> str:
        return (value or "").replace("'", "''")

    def _to_work_item(self, data: Dict[str, Any]) -> Optional[WorkItem]:
        fields = data.get('fields', {})
        work_item_id = data.get('id')
        if not work_item_id:
            return None

        ac_html = ""
        for name in ACCEPTANCE_CRITERIA_FIELDS:
            if fields.get(name):
                ac_html = fields[name]
                break

        assigned = fields.get('System.AssignedTo')
        if isinstance(assigned, dict):
            assigned = assigned.get('uniqueName') or assigned.get('displayName')

        url = data.get('_links', {}).get('html', {}).get('href') or data.get('url', '')

        return WorkItem(
            id=int(work_item_id),
            title=fields.get('System.Title') or 'Untitled',
            description=self._parser.normalize_to_text(fields.get('System.Description', '')),
            acceptance_criteria=self._parser.normalize_to_text(ac_html),
            state=fields.get('System.State', 'New'),
            url=url,
            assigned_to=assigned,
            iteration_path=fields.get('System.IterationPath'),
            area_path=fields.get('System.AreaPath'),
        )
