"""
ADO HTTP Client - Low-level HTTP interactions with Azure DevOps.

This class handles only HTTP concerns, keeping infrastructure separate from domain logic.
"""
import base64
from typing import Any, Dict, Optional

import requests


class ADOAuthenticationError(requests.HTTPError):
    """Raised when Azure DevOps rejects the Personal Access Token."""


class ADOHttpClient:
    """Low-level HTTP client for Azure DevOps API."""

    API_VERSION = "7.1"
    COMMENTS_API_VERSION = "7.1-preview.4"

    def __init__(
        self,
        organization: str,
        project: str,
        pat: str,
        timeout: int = 30
    ):
        """Initialize ADO HTTP client.

        Args:
            organization: ADO organization name
            project: ADO project name
            pat: Personal Access Token
            timeout: Request timeout in seconds
        """
        if not pat:
            raise ValueError("Personal Access Token (PAT) is required. Set AZURE_PAT in your environment")
        if not organization:
            raise ValueError("Organization name is required")
        if not project:
            raise ValueError("Project name is required")

        self._pat = pat
        self._timeout = timeout
        self._base_url = f"https://dev.azure.com/{organization}/{project}"
        credentials = base64.b64encode(f":{pat}".encode()).decode()
        self._headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Basic {credentials}'
        }

    @property
    def base_url(self) -> str:
        """Base URL for API calls."""
        return self._base_url

    @property
    def headers(self) -> Dict[str, str]:
        """Headers for API calls."""
        return self._headers.copy()

    def _params(self, params: Optional[Dict], api_version: Optional[str] = None) -> Dict[str, Any]:
        params = dict(params or {})
        params.setdefault('api-version', api_version or self.API_VERSION)
        return params

    @staticmethod
    def _check(response: requests.Response) -> Dict[str, Any]:
        """Raise for HTTP errors, naming PAT problems explicitly."""
        # ADO answers a bad PAT with 401, or 203 plus a sign-in page
        if response.status_code in (401, 203):
            raise ADOAuthenticationError(
                f"Azure DevOps rejected the credentials (HTTP {response.status_code}). "
                "Check that AZURE_PAT is valid and has Work Items (Read) scope.",
                response=response
            )
        response.raise_for_status()
        return response.json()

    def get(self, endpoint: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make GET request to ADO API.

        Args:
            endpoint: API endpoint (relative to base URL)
            params: Optional query parameters

        Returns:
            JSON response as dictionary

        Raises:
            requests.HTTPError: If request fails
        """
        response = requests.get(
            f"{self._base_url}/{endpoint}",
            headers=self._headers,
            params=self._params(params),
            timeout=self._timeout
        )
        return self._check(response)

    def post(
        self,
        endpoint: str,
        data: Dict[str, Any],
        params: Optional[Dict] = None,
        api_version: Optional[str] = None
    ) -> Dict[str, Any]:
        """Make POST request to ADO API.

        Args:
            endpoint: API endpoint
            data: Request body
            params: Optional query parameters
            api_version: Overrides the default API version

        Returns:
            JSON response as dictionary
        """
        response = requests.post(
            f"{self._base_url}/{endpoint}",
            headers=self._headers,
            json=data,
            params=self._params(params, api_version),
            timeout=self._timeout
        )
        return self._check(response)

    def execute_wiql(self, query: str, top: Optional[int] = None) -> Dict[str, Any]:
        """Execute a WIQL query.

        Args:
            query: WIQL query string
            top: Maximum number of work item references returned

        Returns:
            Query results
        """
        params = {'$top': top} if top else None
        return self.post("_apis/wit/wiql", {"query": query}, params=params)

    def get_work_items(self, ids: list, expand: str = "all") -> Dict[str, Any]:
        """Fetch several work items in one call."""
        return self.get(
            "_apis/wit/workitems",
            params={"ids": ",".join(str(i) for i in ids), "$expand": expand}
        )

    def add_comment(self, work_item_id: int, text: str) -> Dict[str, Any]:
        """Add a discussion comment to a work item."""
        return self.post(
            f"_apis/wit/workItems/{work_item_id}/comments",
            {"text": text},
            api_version=self.COMMENTS_API_VERSION
        )
