"""
Crowdin API response parsers.

This module converts raw Crowdin API v2 responses into internal data
models, and reconstructs file paths from the three flat collections
(files, directories, branches) the API exposes for a project.

Crowdin wraps every resource as ``{"data": {...}}`` and every collection
as ``{"data": [{"data": {...}}, ...], "pagination": {...}}``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .exceptions import CrowdinResponseError
from .models import Language, ProjectFile, ProjectInfo, ProjectListing, UserInfo

logger = logging.getLogger(__name__)


@dataclass
class DirectoryEntry:
    """A directory node; ``parent_id`` is None for top-level directories."""

    id: int
    name: str
    parent_id: Optional[int] = None


def require(data: Any, key: str, context: str) -> Any:
    """
    Get a required field from a JSON object.

    Args:
        data: Decoded JSON object
        key: Field name
        context: What is being parsed, for the error message

    Returns:
        Field value

    Raises:
        CrowdinResponseError: If data is not an object or the field is
            missing or null
    """
    if not isinstance(data, dict) or data.get(key) is None:
        raise CrowdinResponseError(f"Missing required field '{key}' in {context}")
    return data[key]


def _resource(response: Any, context: str) -> Dict[str, Any]:
    data = require(response, "data", context)
    if not isinstance(data, dict):
        raise CrowdinResponseError(f"Expected an object in {context}")
    return data


def _collection(response: Any, context: str) -> List[Dict[str, Any]]:
    """
    Unwrap a collection response into its item payloads.

    A missing or non-list envelope fails the whole response. Items whose
    own ``data`` wrapper is missing are skipped with a warning.
    """
    items = require(response, "data", context)
    if not isinstance(items, list):
        raise CrowdinResponseError(f"Expected a list in {context}")

    records: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        data = item.get("data") if isinstance(item, dict) else None
        if not isinstance(data, dict):
            logger.warning(f"Skipping malformed entry #{index} in {context}")
            continue
        records.append(data)
    return records


def parse_user_info(response: Dict[str, Any]) -> UserInfo:
    """
    Parse ``GET user`` response.

    The display name falls back from a blank or missing ``fullName`` to
    first and last name, then to the login.

    Args:
        response: Raw API response

    Returns:
        UserInfo
    """
    data = _resource(response, "user response")
    login = str(require(data, "username", "user response"))

    name = str(data.get("fullName") or "")
    if not name.strip():
        name = f"{data.get('firstName') or ''} {data.get('lastName') or ''}"
    if not name.strip():
        name = login

    return UserInfo(login=login, name=name)


def parse_project_listings(response: Dict[str, Any]) -> List[ProjectListing]:
    """
    Parse ``GET projects`` response.

    ``publicDownloads`` is tri-state: only null (or absent) means the
    project's file listing is forbidden, so such projects are skipped.

    Args:
        response: Raw API response

    Returns:
        Accessible projects in API order
    """
    projects: List[ProjectListing] = []
    for data in _collection(response, "projects response"):
        if data.get("publicDownloads") is None:
            logger.debug(f"Skipping project without file access: {data.get('id')}")
            continue
        try:
            projects.append(
                ProjectListing(
                    name=str(require(data, "name", "projects response")),
                    id=require(data, "id", "projects response"),
                )
            )
        except CrowdinResponseError as e:
            logger.warning(f"Skipping project entry: {e}")
    return projects


def parse_project_header(response: Dict[str, Any]) -> ProjectInfo:
    """Parse ``GET projects/{id}`` into a ProjectInfo without files."""
    data = _resource(response, "project response")
    return ProjectInfo(
        name=str(require(data, "name", "project response")),
        id=require(data, "id", "project response"),
        languages=[
            Language.try_parse(tag) for tag in data.get("targetLanguageIds") or []
        ],
    )


def parse_project_files(response: Dict[str, Any]) -> List[ProjectFile]:
    """
    Parse ``GET projects/{id}/files`` response.

    Asset files are not translatable and are skipped. Each path starts
    as "/<file name>".

    Args:
        response: Raw API response

    Returns:
        Project files in API order
    """
    files: List[ProjectFile] = []
    for data in _collection(response, "files response"):
        if data.get("type") == "assets":
            continue
        try:
            files.append(
                ProjectFile(
                    path="/" + str(require(data, "name", "files response")),
                    id=require(data, "id", "files response"),
                    directory_id=data.get("directoryId"),
                    branch_id=data.get("branchId"),
                )
            )
        except CrowdinResponseError as e:
            logger.warning(f"Skipping file entry: {e}")
    return files


def parse_directories(response: Dict[str, Any]) -> Dict[int, DirectoryEntry]:
    """Parse ``GET projects/{id}/directories`` into an id-keyed table."""
    directories: Dict[int, DirectoryEntry] = {}
    for data in _collection(response, "directories response"):
        try:
            entry = DirectoryEntry(
                id=require(data, "id", "directories response"),
                name=str(require(data, "name", "directories response")),
                parent_id=data.get("directoryId"),
            )
        except CrowdinResponseError as e:
            # Files below this directory get a shortened path
            logger.warning(f"Skipping directory entry: {e}")
            continue
        directories[entry.id] = entry
    return directories


def directory_path(directory_id: Optional[int], directories: Dict[int, DirectoryEntry]) -> str:
    """
    Build the path of a directory from the root down.

    The walk follows parent links upwards and stops at a top-level
    directory, at an id missing from ``directories`` or at an id already
    visited.

    Args:
        directory_id: Directory to resolve (None for the project root)
        directories: Directory table from parse_directories

    Returns:
        "/root/mid/leaf" style path, or empty string for the project root
    """
    names: List[str] = []
    seen = set()
    while directory_id is not None and directory_id not in seen:
        entry = directories.get(directory_id)
        if entry is None:
            logger.warning(f"Unknown directory {directory_id}, treating as root")
            break
        seen.add(directory_id)
        names.append(entry.name)
        directory_id = entry.parent_id

    return "".join("/" + name for name in reversed(names))


def apply_directory_paths(
    files: List[ProjectFile], directories: Dict[int, DirectoryEntry]
) -> None:
    """Prefix every file's path with its directory path, in place."""
    for project_file in files:
        project_file.path = directory_path(project_file.directory_id, directories) + project_file.path


def parse_branches(response: Dict[str, Any]) -> Dict[int, str]:
    """Parse ``GET projects/{id}/branches`` into an id → name table."""
    branches: Dict[int, str] = {}
    for data in _collection(response, "branches response"):
        try:
            branch_id = require(data, "id", "branches response")
            branches[branch_id] = str(require(data, "name", "branches response"))
        except CrowdinResponseError as e:
            logger.warning(f"Skipping branch entry: {e}")
    return branches


def apply_branch_prefixes(files: List[ProjectFile], branches: Dict[int, str]) -> None:
    """
    Prefix branch files' paths with "/<branch name>", in place.

    Must run after apply_directory_paths: the branch is the outermost
    path segment.
    """
    for project_file in files:
        if project_file.branch_id is None:
            continue
        branch = branches.get(project_file.branch_id)
        if branch is None:
            logger.warning(
                f"Unknown branch {project_file.branch_id} for {project_file.path}"
            )
            continue
        project_file.path = f"/{branch}{project_file.path}"


def parse_build_url(response: Dict[str, Any]) -> str:
    """Get the transient download URL from a translation build response."""
    return str(require(_resource(response, "build response"), "url", "build response"))


def parse_storage_id(response: Dict[str, Any]) -> int:
    """Get the storage ID from a ``POST storages`` response."""
    return require(_resource(response, "storage response"), "id", "storage response")
