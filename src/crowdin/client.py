"""
Crowdin API client with OAuth authentication.

This module provides the service object applications compose to work
with Crowdin. It ties together:

- OAuth sign-in through the browser and a custom URI scheme callback
- Token persistence and silent sign-in on construction
- Project listing and project tree resolution
- Translation download and upload

The client owns its HTTP connections: create it where the application is
composed and close it with ``aclose()`` (or ``async with``) on shutdown.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import urlsplit

from src.oauth.config import CrowdinOAuthConfig
from src.oauth.coordinator import OAuthCoordinator
from src.oauth.exceptions import TokenStorageError
from src.oauth.token_manager import TokenManager
from src.oauth.token_storage import TokenStorage

from . import endpoints
from .formats import export_as_xliff
from .models import Language, ProjectInfo, ProjectListing, UserInfo
from .parsers import (
    apply_branch_prefixes,
    apply_directory_paths,
    parse_branches,
    parse_build_url,
    parse_directories,
    parse_project_files,
    parse_project_header,
    parse_project_listings,
    parse_storage_id,
    parse_user_info,
)
from .transport import CrowdinTransport

logger = logging.getLogger(__name__)


def _language_tag(lang: Union[Language, str]) -> str:
    return lang.language_tag if isinstance(lang, Language) else str(lang)


class CrowdinClient:
    """
    Authenticated client for Crowdin API v2.

    Example:
        async with CrowdinClient(CrowdinOAuthConfig.from_env()) as client:
            if not client.is_signed_in():
                pending = client.authenticate()
                ...  # route the callback URI to client.handle_oauth_callback()
                await pending

            projects = await client.get_user_projects()
            project = await client.get_project_info(projects[0].id)
    """

    def __init__(
        self,
        config: Optional[CrowdinOAuthConfig] = None,
        storage: Optional[TokenStorage] = None,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ):
        """
        Initialize Crowdin client and sign in from a stored token if present.

        Args:
            config: OAuth configuration (loads from environment if not provided)
            storage: Token storage (keyring storage from config if not provided)
            max_retries: Maximum retries for GET requests on transient errors
            retry_delay: Base delay between retries in seconds (exponential backoff)
        """
        self.config = config or CrowdinOAuthConfig.from_env()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.transport = CrowdinTransport(
            base_url=f"https://{self.config.service_host}/api/v2",
            timeout=self.config.timeout,
            on_unauthorized=self._handle_unauthorized,
            max_retries=max_retries,
            retry_delay=retry_delay,
        )
        self.token_manager = TokenManager(self.config, self.transport, storage)
        self.oauth = OAuthCoordinator(self.config, self.token_manager)

        logger.info("CrowdinClient initialized")

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.transport.aclose()

    async def __aenter__(self) -> "CrowdinClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate(self) -> "asyncio.Future[None]":
        """
        Open the Crowdin sign-in page in the browser.

        Returns:
            Future resolved once handle_oauth_callback() accepts the redirect
        """
        return self.oauth.authenticate()

    def is_oauth_callback(self, uri: str) -> bool:
        """Check whether a URI delivered to the application is a sign-in callback."""
        return self.oauth.is_oauth_callback(uri)

    def handle_oauth_callback(self, uri: str) -> None:
        """Pass a sign-in callback URI to the pending authentication request."""
        self.oauth.handle_oauth_callback(uri)

    def is_signed_in(self) -> bool:
        """True if a token is stored."""
        return self.token_manager.is_signed_in()

    def sign_out(self) -> None:
        """Forget the token (locally; it is not revoked on Crowdin)."""
        self.token_manager.sign_out()

    def _handle_unauthorized(self) -> None:
        """Sign out after the API rejected the token."""
        logger.warning("Crowdin rejected the token, signing out")
        try:
            self.token_manager.sign_out()
        except TokenStorageError as e:
            logger.error(f"Could not remove rejected token: {e}")

    # ------------------------------------------------------------------
    # Users and projects
    # ------------------------------------------------------------------

    async def get_user_info(self) -> UserInfo:
        """
        Get the signed-in user.

        Returns:
            UserInfo with login and display name

        Raises:
            CrowdinAuthenticationError: If not signed in or the token was rejected
            CrowdinAPIError: For other API errors
        """
        response = await self.transport.get(endpoints.USER)
        user = parse_user_info(response)
        logger.info(f"Signed in as {user.login}")
        return user

    async def get_user_projects(self) -> List[ProjectListing]:
        """
        Get projects whose files the signed-in user may list.

        Only the first page of projects is fetched.

        Returns:
            Accessible projects

        Raises:
            CrowdinAuthenticationError: If the token was rejected
            CrowdinAPIError: For other API errors
        """
        # TODO: follow pagination.offset for accounts with more than PAGE_LIMIT projects
        response = await self.transport.get(
            endpoints.PROJECTS, params={"limit": endpoints.PAGE_LIMIT}
        )
        projects = parse_project_listings(response)
        logger.info(f"Found {len(projects)} accessible projects")
        return projects

    async def get_project_info(self, project_id: int) -> ProjectInfo:
        """
        Get a project with its languages and fully-qualified file paths.

        Runs four requests in sequence: project, files, directories,
        branches. Directory paths are applied before branch names so the
        branch ends up as the outermost path segment.

        Args:
            project_id: Crowdin project ID

        Returns:
            ProjectInfo with resolved file paths

        Raises:
            CrowdinAuthenticationError: If the token was rejected
            CrowdinResponseError: If a response lacks a required field
            CrowdinAPIError: For other API errors
        """
        page = {"limit": endpoints.PAGE_LIMIT}

        response = await self.transport.get(endpoints.PROJECT.format(projectId=project_id))
        project = parse_project_header(response)

        response = await self.transport.get(
            endpoints.PROJECT_FILES.format(projectId=project_id), params=page
        )
        project.files = parse_project_files(response)

        response = await self.transport.get(
            endpoints.PROJECT_DIRECTORIES.format(projectId=project_id), params=page
        )
        apply_directory_paths(project.files, parse_directories(response))

        response = await self.transport.get(
            endpoints.PROJECT_BRANCHES.format(projectId=project_id), params=page
        )
        apply_branch_prefixes(project.files, parse_branches(response))

        logger.info(
            f"Project {project.name} ({project.id}): "
            f"{len(project.files)} files, {len(project.languages)} languages"
        )
        return project

    # ------------------------------------------------------------------
    # File transfer
    # ------------------------------------------------------------------

    async def download_file(
        self,
        project_id: int,
        lang: Union[Language, str],
        file_id: int,
        extension: str,
        output_path: Union[str, Path],
    ) -> None:
        """
        Download a file's translation.

        Crowdin first builds the translated file and returns a short-lived
        URL, usually on a different host than the API. That URL is fetched
        without the API token through a transport bound to its own host.

        Args:
            project_id: Crowdin project ID
            lang: Target language
            file_id: Crowdin file ID
            extension: Extension of the local file; "po" and "xliff" are
                exported as is, anything else as XLIFF
            output_path: Where to write the translation

        Raises:
            CrowdinAuthenticationError: If the token was rejected
            CrowdinAPIError: For other API or network errors
        """
        logger.info(f"Building translation of file {file_id} in project {project_id}")
        response = await self.transport.post(
            endpoints.TRANSLATION_BUILD_FILE.format(projectId=project_id, fileId=file_id),
            json_data={
                "targetLanguageId": _language_tag(lang),
                "exportAsXliff": export_as_xliff(extension),
            },
        )
        url = parse_build_url(response)

        parts = urlsplit(url)
        async with CrowdinTransport(
            base_url=f"{parts.scheme}://{parts.netloc}",
            timeout=self.config.timeout,
            on_unauthorized=self._handle_unauthorized,
        ) as downloader:
            size = await downloader.download(url, output_path)

        logger.info(f"Downloaded file {file_id} ({size} bytes) to {output_path}")

    async def upload_file(
        self,
        project_id: int,
        lang: Union[Language, str],
        file_id: int,
        extension: str,
        content: Union[bytes, str],
    ) -> None:
        """
        Upload a file's translation.

        The content is first placed in Crowdin's temporary storage, then
        imported into the project file. If the import fails the staged
        content is left in storage.

        Args:
            project_id: Crowdin project ID
            lang: Language of the translation
            file_id: Crowdin file ID
            extension: File extension, used to name the staged file
            content: File content (str is encoded as UTF-8)

        Raises:
            CrowdinAuthenticationError: If the token was rejected
            CrowdinAPIError: For other API or network errors
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        response = await self.transport.post_octet_stream(
            endpoints.STORAGES,
            content,
            headers={endpoints.STORAGE_FILENAME_HEADER: f"crowdin.{extension}"},
        )
        storage_id = parse_storage_id(response)
        logger.debug(f"File staged in storage {storage_id}")

        await self.transport.post(
            endpoints.TRANSLATION_UPLOAD.format(
                projectId=project_id, languageId=_language_tag(lang)
            ),
            json_data={
                "storageId": storage_id,
                "fileId": file_id,
                "importDuplicates": True,
            },
        )
        logger.info(f"Uploaded translation of file {file_id} in project {project_id}")
