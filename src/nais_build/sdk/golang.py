"""Build Go projects."""

import os
from typing import List, Tuple

from ..exceptions import BuildTargetError, EmptyFilenameError
from .base import Sdk

COMMANDS_DIRECTORY = "cmd"

DOCKERFILE_TEMPLATE = """\
# Dockerfile generated by NAIS build

#
# Builder image
#
FROM {builder_image} AS builder
ENV GOOS=linux
ENV CGO_ENABLED=0
WORKDIR /src

# Copy go.mod and go.sum files into source directory
# so that dependencies can be downloaded before the source code.
COPY go.* /src/
RUN go mod download
COPY . /src

# Test all modules
RUN go test ./...

# Build all binaries found in ./cmd/*
{build_commands}

#
# Runtime image
#
FROM {runtime_image}
WORKDIR /app
{copy_commands}
{default_target}
"""


class Golang(Sdk):
    """Go modules, one binary per directory in ./cmd."""

    name = "go"
    marker = "go.mod"

    def build_targets(self) -> List[str]:
        """Return the names of the directories in ./cmd, sorted.

        Raises:
            BuildTargetError: If ./cmd cannot be listed
            EmptyFilenameError: If a directory name is not valid text
        """
        commands_dir = self.source_directory / COMMANDS_DIRECTORY
        try:
            with os.scandir(commands_dir) as entries:
                names = [entry.name for entry in entries if entry.is_dir()]
        except OSError as e:
            raise BuildTargetError(f"filesystem error: {e}") from e

        for name in names:
            if not name:
                raise EmptyFilenameError()
            try:
                name.encode("utf-8")
            except UnicodeEncodeError as e:
                raise EmptyFilenameError(
                    f"target name is not valid text: {name!r}"
                ) from e

        return sorted(names)

    def render(self, targets: Tuple[str, ...]) -> str:
        build_commands = "\n".join(
            f"RUN go build -a -installsuffix cgo -o /build/{t} ./cmd/{t}"
            for t in targets
        )
        copy_commands = "\n".join(
            f"COPY --from=builder /build/{t} /app/{t}" for t in targets
        )
        if len(targets) == 1:
            default_target = f'CMD ["/app/{targets[0]}"]'
        else:
            default_target = "# Default CMD omitted due to multiple targets specified"

        return DOCKERFILE_TEMPLATE.format(
            builder_image=self.images.build_docker_image,
            runtime_image=self.images.runtime_docker_image,
            build_commands=build_commands,
            copy_commands=copy_commands,
            default_target=default_target,
        )
