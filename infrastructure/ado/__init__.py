"""
Azure DevOps infrastructure implementations.

Provides the work item repository for ADO data access.
"""
from .http_client import ADOHttpClient, ADOAuthenticationError
from .ado_repository import ADOTaskRepository, HtmlParser

__all__ = [
    'ADOHttpClient',
    'ADOAuthenticationError',
    'ADOTaskRepository',
    'HtmlParser'
]
