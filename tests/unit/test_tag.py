"""Tests for image tag generation."""

from datetime import datetime, timezone

import pytest

from nais_build.exceptions import ConfigurationError
from nais_build.git import GitMetadata
from nais_build.tag import generate_tag

NOW = datetime(2024, 3, 7, 9, 5, 1, tzinfo=timezone.utc)
DEFAULT_TEMPLATE = "{{ iso_date }}.{{ iso_time }}.{{ git_short_sha }}"


def test_default_template(git_metadata):
    assert generate_tag(DEFAULT_TEMPLATE, git_metadata, NOW) == "20240307.090501.0123456"


def test_dirty_suffix():
    metadata = GitMetadata(commit="abc", short_commit="abc", dirty=True)

    assert generate_tag("{{git_short_sha}}", metadata, NOW) == "abc-dirty"


def test_literal_template(git_metadata):
    assert generate_tag("latest", git_metadata, NOW) == "latest"


def test_unknown_placeholder(git_metadata):
    with pytest.raises(ConfigurationError, match="branch"):
        generate_tag("{{ branch }}", git_metadata, NOW)


def test_defaults_to_current_time(git_metadata):
    tag = generate_tag("{{ iso_date }}", git_metadata)

    assert len(tag) == 8
    assert tag.isdigit()
