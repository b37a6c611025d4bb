"""Docker image tag generation from a template."""

import re
from datetime import datetime, timezone
from typing import Optional

from .exceptions import ConfigurationError
from .git import GitMetadata

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")
DIRTY_SUFFIX = "-dirty"


def generate_tag(
    template: str, metadata: GitMetadata, now: Optional[datetime] = None
) -> str:
    """
    Render an image tag.

    Supported placeholders: {{ iso_date }}, {{ iso_time }}, {{ git_short_sha }}.
    Tags built from a working tree with uncommitted changes get a -dirty suffix.

    Raises:
        ConfigurationError: If the template contains an unknown placeholder
    """
    now = now or datetime.now(timezone.utc)
    values = {
        "iso_date": now.strftime("%Y%m%d"),
        "iso_time": now.strftime("%H%M%S"),
        "git_short_sha": metadata.short_commit,
    }

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in values:
            raise ConfigurationError(f"unknown placeholder in docker tag template: {name}")
        return values[name]

    tag = PLACEHOLDER_PATTERN.sub(substitute, template)
    if metadata.dirty:
        tag += DIRTY_SUFFIX
    return tag
