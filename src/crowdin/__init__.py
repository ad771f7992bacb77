"""
Crowdin API client module.

This module provides integration with Crowdin's API v2 using OAuth 2.0
implicit-grant authentication. It includes:

- CrowdinClient: Authenticated client composing sign-in, projects and transfers
- CrowdinTransport: Asynchronous HTTP transport (httpx)
- Project tree resolution: files, directories and branches into full paths
- Data models: UserInfo, ProjectListing, ProjectInfo, ProjectFile, Language

Authentication is handled by the OAuth module.
"""

from .client import CrowdinClient
from .exceptions import CrowdinAPIError, CrowdinAuthenticationError, CrowdinResponseError
from .models import Language, ProjectFile, ProjectInfo, ProjectListing, UserInfo
from .transport import CrowdinTransport

__all__ = [
    "CrowdinClient",
    "CrowdinTransport",
    "CrowdinAPIError",
    "CrowdinAuthenticationError",
    "CrowdinResponseError",
    "Language",
    "ProjectFile",
    "ProjectInfo",
    "ProjectListing",
    "UserInfo",
]
