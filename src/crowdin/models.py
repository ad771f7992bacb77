"""
Crowdin-specific data models.

This module defines data models for Crowdin users, projects and project
files. They are built by the parsers from Crowdin API v2 responses and
are independent of the wire format.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

_LANGUAGE_TAG_RE = re.compile(
    r"^(?P<lang>[A-Za-z]{2,3})"
    r"(?:[-_](?P<script>[A-Za-z]{4}))?"
    r"(?:[-_](?P<region>[A-Za-z]{2}|\d{3}))?$"
)


@dataclass(frozen=True)
class Language:
    """
    A target language of a project.

    Attributes:
        code: POSIX-style code (e.g., "pt_BR"), or the raw tag when it
            could not be parsed
        tag: BCP 47 tag as sent to the API (e.g., "pt-BR")
        is_valid: Whether the tag was recognized
    """

    code: str
    tag: str
    is_valid: bool = True

    @classmethod
    def try_parse(cls, value: str) -> "Language":
        """
        Parse a language tag without ever failing.

        Recognized tags are normalized (lowercase language, titlecase
        script, uppercase region). Anything else is kept verbatim with
        ``is_valid`` set to False so it still occupies its slot.

        Args:
            value: Language tag such as "de", "pt-BR", "sr-Latn-RS" or "es-419"

        Returns:
            Language instance
        """
        text = str(value).strip()
        match = _LANGUAGE_TAG_RE.match(text)
        if not match:
            return cls(code=text, tag=text, is_valid=False)

        parts = [match.group("lang").lower()]
        if match.group("script"):
            parts.append(match.group("script").title())
        if match.group("region"):
            parts.append(match.group("region").upper())

        return cls(code="_".join(parts), tag="-".join(parts))

    @property
    def language_tag(self) -> str:
        """BCP 47 tag used in API paths and payloads."""
        return self.tag

    def __str__(self) -> str:
        return self.code


@dataclass
class UserInfo:
    """
    Authenticated Crowdin user.

    Attributes:
        login: Crowdin username
        name: Display name (full name, first + last name, or login)
    """

    login: str
    name: str


@dataclass
class ProjectListing:
    """A project visible to the signed-in user."""

    name: str
    id: int


@dataclass
class ProjectFile:
    """
    A translatable source file in a project.

    ``path`` starts as "/<file name>" and is prefixed with the directory
    path and then the branch name while the project tree is resolved.
    ``directory_id`` and ``branch_id`` are None when the file sits at the
    project root or outside any branch.
    """

    path: str
    id: int
    directory_id: Optional[int] = None
    branch_id: Optional[int] = None

    @property
    def extension(self) -> str:
        """File extension without the dot (empty if none)."""
        name = self.path.rsplit("/", 1)[-1]
        return name.rsplit(".", 1)[-1] if "." in name else ""


@dataclass
class ProjectInfo:
    """
    Project details with fully-qualified file paths.

    Attributes:
        name: Project name
        id: Project ID
        languages: Target languages, in the order the API lists them
        files: Project files (asset files excluded)
    """

    name: str
    id: int
    languages: List[Language] = field(default_factory=list)
    files: List[ProjectFile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the project
        """
        return {
            "name": self.name,
            "id": self.id,
            "languages": [language.tag for language in self.languages],
            "files": [
                {
                    "path": f.path,
                    "id": f.id,
                    "directory_id": f.directory_id,
                    "branch_id": f.branch_id,
                }
                for f in self.files
            ],
        }
