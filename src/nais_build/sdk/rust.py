"""Build Rust projects with Cargo."""

from typing import List, Tuple

from ..exceptions import BuildTargetError
from .base import Sdk

try:
    import tomllib
except ImportError:  # python < 3.11
    import tomli as tomllib

DOCKERFILE_TEMPLATE = """\
# Dockerfile generated by NAIS build

#
# Builder image
#
FROM {builder_image} AS builder
RUN apk add --no-cache musl-dev
WORKDIR /src
COPY . /src

# Test all crates
RUN cargo test --release

# Build all binaries declared in Cargo.toml
{build_commands}

#
# Runtime image
#
FROM {runtime_image}
WORKDIR /app
{copy_commands}
{default_target}
"""


class Rust(Sdk):
    """Cargo packages, one target per binary."""

    name = "rust"
    marker = "Cargo.toml"

    def build_targets(self) -> List[str]:
        """Return the [[bin]] names of Cargo.toml, or the package name, sorted."""
        manifest = self.source_directory / self.marker
        try:
            with manifest.open("rb") as handle:
                cargo = tomllib.load(handle)
        except OSError as e:
            raise BuildTargetError(f"filesystem error: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise BuildTargetError(f"parse {manifest}: {e}") from e

        bins = cargo.get("bin", [])
        if not isinstance(bins, list) or not all(isinstance(b, dict) for b in bins):
            raise BuildTargetError(f"parse {manifest}: [[bin]] must be an array of tables")
        package = cargo.get("package", {})
        if not isinstance(package, dict):
            raise BuildTargetError(f"parse {manifest}: [package] must be a table")

        binaries = [str(b["name"]) for b in bins if b.get("name")]
        if binaries:
            return sorted(binaries)

        package_name = package.get("name")
        if package_name:
            return [str(package_name)]
        return []

    def render(self, targets: Tuple[str, ...]) -> str:
        build_commands = "\n".join(
            f"RUN cargo build --release --bin {t}" for t in targets
        )
        copy_commands = "\n".join(
            f"COPY --from=builder /src/target/release/{t} /app/{t}" for t in targets
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
