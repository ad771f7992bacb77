"""Tests for Crowdin response parsers."""

import logging

import pytest

from src.crowdin.exceptions import CrowdinResponseError
from src.crowdin.models import ProjectFile
from src.crowdin.parsers import (
    DirectoryEntry,
    apply_branch_prefixes,
    apply_directory_paths,
    directory_path,
    parse_branches,
    parse_build_url,
    parse_directories,
    parse_project_files,
    parse_project_header,
    parse_project_listings,
    parse_storage_id,
    parse_user_info,
    require,
)


def collection(*items):
    """Wrap items the way Crowdin wraps list responses."""
    return {
        "data": [{"data": item} for item in items],
        "pagination": {"offset": 0, "limit": 500},
    }


@pytest.fixture
def directories():
    return {
        10: DirectoryEntry(id=10, name="root"),
        20: DirectoryEntry(id=20, name="mid", parent_id=10),
        30: DirectoryEntry(id=30, name="leaf", parent_id=20),
    }


class TestRequire:
    """Tests for require."""

    def test_returns_present_field(self):
        assert require({"id": 0}, "id", "test") == 0

    @pytest.mark.parametrize("data", [{}, {"id": None}, None, ["id"]])
    def test_missing_field_raises(self, data):
        """Missing or null fields raise CrowdinResponseError."""
        with pytest.raises(CrowdinResponseError, match="Missing required field 'id' in test"):
            require(data, "id", "test")


class TestParseUserInfo:
    """Tests for parse_user_info."""

    def test_full_name(self):
        user = parse_user_info({"data": {"username": "jdoe", "fullName": "Jane Doe"}})

        assert user.login == "jdoe"
        assert user.name == "Jane Doe"

    def test_blank_full_name_falls_back_to_first_and_last(self):
        """A blank fullName uses first and last name."""
        user = parse_user_info(
            {
                "data": {
                    "username": "jdoe",
                    "fullName": "  ",
                    "firstName": "Jane",
                    "lastName": "Doe",
                }
            }
        )

        assert user.name == "Jane Doe"

    def test_no_name_falls_back_to_login(self):
        """Without any name parts the login is the display name."""
        user = parse_user_info({"data": {"username": "jdoe", "firstName": None}})

        assert user.name == "jdoe"

    def test_missing_username_raises(self):
        with pytest.raises(CrowdinResponseError, match="username"):
            parse_user_info({"data": {"fullName": "Jane Doe"}})

    def test_missing_data_envelope_raises(self):
        with pytest.raises(CrowdinResponseError, match="'data'"):
            parse_user_info({"username": "jdoe"})


class TestParseProjectListings:
    """Tests for parse_project_listings."""

    def test_only_projects_with_public_downloads_setting_are_listed(self):
        """publicDownloads true or false is accessible, null or absent is not."""
        projects = parse_project_listings(
            collection(
                {"id": 1, "name": "Open", "publicDownloads": True},
                {"id": 2, "name": "Managed", "publicDownloads": False},
                {"id": 3, "name": "Hidden", "publicDownloads": None},
                {"id": 4, "name": "Unknown"},
            )
        )

        assert [(p.id, p.name) for p in projects] == [(1, "Open"), (2, "Managed")]

    def test_empty_collection(self):
        assert parse_project_listings({"data": []}) == []

    def test_data_must_be_a_list(self):
        with pytest.raises(CrowdinResponseError, match="Expected a list"):
            parse_project_listings({"data": {"id": 1}})


class TestParseProjectHeader:
    """Tests for parse_project_header."""

    def test_languages_keep_api_order(self):
        project = parse_project_header(
            {"data": {"id": 7, "name": "Editor", "targetLanguageIds": ["uk", "de", "pt-BR"]}}
        )

        assert project.id == 7
        assert project.name == "Editor"
        assert [lang.tag for lang in project.languages] == ["uk", "de", "pt-BR"]
        assert project.files == []

    def test_missing_language_list_is_empty(self):
        project = parse_project_header({"data": {"id": 7, "name": "Editor"}})

        assert project.languages == []

    def test_missing_name_raises(self):
        with pytest.raises(CrowdinResponseError, match="name"):
            parse_project_header({"data": {"id": 7}})


class TestParseProjectFiles:
    """Tests for parse_project_files."""

    def test_assets_are_skipped(self):
        files = parse_project_files(
            collection(
                {"id": 1, "name": "messages.po", "type": "gettext", "directoryId": None},
                {"id": 2, "name": "logo.png", "type": "assets"},
                {"id": 3, "name": "guide.md", "directoryId": 30, "branchId": 5},
            )
        )

        assert [(f.id, f.path) for f in files] == [(1, "/messages.po"), (3, "/guide.md")]
        assert files[0].directory_id is None
        assert files[0].branch_id is None
        assert files[1].directory_id == 30
        assert files[1].branch_id == 5


class TestDirectoryPaths:
    """Tests for directory path reconstruction."""

    def test_parse_directories(self):
        table = parse_directories(
            collection(
                {"id": 10, "name": "root", "directoryId": None},
                {"id": 20, "name": "mid", "directoryId": 10},
            )
        )

        assert table == {
            10: DirectoryEntry(id=10, name="root"),
            20: DirectoryEntry(id=20, name="mid", parent_id=10),
        }

    def test_nested_directory_path(self, directories):
        assert directory_path(30, directories) == "/root/mid/leaf"

    def test_root_has_empty_path(self, directories):
        assert directory_path(None, directories) == ""

    def test_missing_parent_stops_walk(self, caplog):
        """An unknown parent is treated as the root."""
        table = {5: DirectoryEntry(id=5, name="orphan", parent_id=99)}

        with caplog.at_level(logging.WARNING, logger="src.crowdin.parsers"):
            assert directory_path(5, table) == "/orphan"

        assert "Unknown directory 99" in caplog.text

    def test_unknown_directory_gives_root_path(self, directories):
        assert directory_path(404, directories) == ""

    def test_cycle_terminates(self):
        """A parent loop ends once a directory repeats."""
        table = {
            1: DirectoryEntry(id=1, name="a", parent_id=2),
            2: DirectoryEntry(id=2, name="b", parent_id=1),
        }

        assert directory_path(1, table) == "/b/a"

    def test_apply_directory_paths(self, directories):
        files = [
            ProjectFile(path="/f", id=1),
            ProjectFile(path="/f", id=2, directory_id=30),
        ]

        apply_directory_paths(files, directories)

        assert [f.path for f in files] == ["/f", "/root/mid/leaf/f"]


class TestBranchPrefixes:
    """Tests for branch prefixing."""

    def test_parse_branches(self):
        assert parse_branches(collection({"id": 5, "name": "main"})) == {5: "main"}

    def test_branch_is_outermost_segment(self, directories):
        files = [ProjectFile(path="/f", id=1, directory_id=30, branch_id=5)]

        apply_directory_paths(files, directories)
        apply_branch_prefixes(files, {5: "branch"})

        assert files[0].path == "/branch/root/mid/leaf/f"

    def test_file_outside_branch_is_unchanged(self):
        files = [ProjectFile(path="/f", id=1)]

        apply_branch_prefixes(files, {5: "main"})

        assert files[0].path == "/f"

    def test_unknown_branch_leaves_path_unchanged(self, caplog):
        files = [ProjectFile(path="/doc/f", id=1, branch_id=6)]

        with caplog.at_level(logging.WARNING, logger="src.crowdin.parsers"):
            apply_branch_prefixes(files, {5: "main"})

        assert files[0].path == "/doc/f"
        assert "Unknown branch 6" in caplog.text


class TestTransferResponses:
    """Tests for build and storage responses."""

    def test_parse_build_url(self):
        response = {"data": {"url": "https://cdn.example/file.po", "expireIn": "2026-01-01"}}

        assert parse_build_url(response) == "https://cdn.example/file.po"

    def test_parse_build_url_missing_url(self):
        with pytest.raises(CrowdinResponseError, match="url"):
            parse_build_url({"data": {}})

    def test_parse_storage_id(self):
        assert parse_storage_id({"data": {"id": 99, "fileName": "crowdin.po"}}) == 99

    def test_parse_storage_id_missing_id(self):
        with pytest.raises(CrowdinResponseError, match="'id'"):
            parse_storage_id({"data": {"fileName": "crowdin.po"}})


class TestMalformedEntries:
    """One bad item never fails a whole collection."""

    def test_project_without_name_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="src.crowdin.parsers"):
            projects = parse_project_listings(
                collection(
                    {"id": 1, "publicDownloads": True},
                    {"id": 2, "name": "Site", "publicDownloads": True},
                )
            )

        assert [(p.id, p.name) for p in projects] == [(2, "Site")]
        assert "Missing required field 'name'" in caplog.text

    def test_file_without_name_or_id_is_skipped(self):
        files = parse_project_files(
            collection(
                {"id": 1, "type": "gettext"},
                {"name": "orphan.po", "type": "gettext"},
                {"id": 3, "name": "messages.po", "type": "gettext"},
            )
        )

        assert [(f.id, f.path) for f in files] == [(3, "/messages.po")]

    def test_directory_without_name_is_skipped(self):
        table = parse_directories(
            collection(
                {"id": 10, "name": "root"},
                {"id": 20, "directoryId": 10},
                {"id": 30, "name": "leaf", "directoryId": 20},
            )
        )

        assert sorted(table) == [10, 30]

    def test_skipped_directory_shortens_path(self):
        """Files below a skipped directory keep the part of the path that resolved."""
        table = parse_directories(
            collection(
                {"id": 10, "name": "root"},
                {"id": 20, "name": None, "directoryId": 10},
                {"id": 30, "name": "leaf", "directoryId": 20},
            )
        )
        files = [ProjectFile(path="/f.po", id=1, directory_id=30)]

        apply_directory_paths(files, table)

        assert files[0].path == "/leaf/f.po"

    def test_branch_without_name_is_skipped(self):
        branches = parse_branches(collection({"id": 5}, {"id": 6, "name": "main"}))

        assert branches == {6: "main"}

    @pytest.mark.parametrize("item", [{}, {"data": None}, {"data": [1]}, "text", None])
    def test_item_without_data_wrapper_is_skipped(self, item, caplog):
        response = {"data": [item, {"data": {"id": 6, "name": "main"}}]}

        with caplog.at_level(logging.WARNING, logger="src.crowdin.parsers"):
            assert parse_branches(response) == {6: "main"}

        assert "Skipping malformed entry #0 in branches response" in caplog.text

    def test_missing_envelope_still_fails(self):
        with pytest.raises(CrowdinResponseError, match="'data'"):
            parse_project_files({"pagination": {"offset": 0}})
