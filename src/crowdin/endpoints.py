"""
Crowdin API v2 endpoint definitions.

Paths are relative to the tenant API base
(https://{domain}.crowdin.com/api/v2 or https://crowdin.com/api/v2).

Documentation: https://developer.crowdin.com/api/v2/
"""

# Collections are fetched as a single page of this size.
PAGE_LIMIT = 500

# User
USER = "user"

# Projects
PROJECTS = "projects"
PROJECT = "projects/{projectId}"
PROJECT_FILES = "projects/{projectId}/files"
PROJECT_DIRECTORIES = "projects/{projectId}/directories"
PROJECT_BRANCHES = "projects/{projectId}/branches"

# Translations
TRANSLATION_BUILD_FILE = "projects/{projectId}/translations/builds/files/{fileId}"
TRANSLATION_UPLOAD = "projects/{projectId}/translations/{languageId}"

# Storage
STORAGES = "storages"
STORAGE_FILENAME_HEADER = "Crowdin-API-FileName"
