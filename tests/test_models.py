import pytest

from app_factory.lib.errors import UnknownTargetError
from app_factory.lib.models import Project, get_build_target


def test_get_build_target():
    assert get_build_target("Android APK").arch == "ARM64-v8a"
    with pytest.raises(UnknownTargetError):
        get_build_target("iOS IPA")


def test_new_project_defaults():
    project = Project.new("Notes")

    assert project.status == "draft"
    assert project.files == []
    assert project.to_dict()["name"] == "Notes"
    assert project.get_file("App.tsx") is None
