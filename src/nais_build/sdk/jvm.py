"""Build JVM projects with Gradle or Maven.

JVM builds do not derive targets from the filesystem; each tool runs a fixed
sequence of phases and the resulting jar is copied to /app/app.jar.
"""

from typing import ClassVar, List, Tuple

from .base import Sdk

DOCKERFILE_TEMPLATE = """\
# Dockerfile generated by NAIS build

#
# Builder image
#
FROM {builder_image} AS builder
WORKDIR /src
COPY . /src

# Run build phases: {phases}
{build_commands}
RUN mkdir -p /build && cp "$(ls {jar_glob} | grep -v -e '-plain.jar$' -e '/original-' | head -n 1)" /build/app.jar

#
# Runtime image
#
FROM {runtime_image}
WORKDIR /app
COPY --from=builder /build/app.jar /app/app.jar
CMD ["java", "-jar", "/app/app.jar"]
"""


class JvmSdk(Sdk):
    """Shared rendering for JVM build tools."""

    targets: ClassVar[Tuple[str, ...]]
    command: ClassVar[str]
    jar_glob: ClassVar[str]

    def build_targets(self) -> List[str]:
        return list(self.targets)

    def render(self, targets: Tuple[str, ...]) -> str:
        return DOCKERFILE_TEMPLATE.format(
            builder_image=self.images.build_docker_image,
            runtime_image=self.images.runtime_docker_image,
            phases=", ".join(targets),
            build_commands="\n".join(f"RUN {self.command} {t}" for t in targets),
            jar_glob=self.jar_glob,
        )


class Gradle(JvmSdk):
    """Gradle projects built with the checked-in wrapper script."""

    name = "gradle"
    marker = "gradlew"
    targets = ("test", "build")
    command = "./gradlew --no-daemon"
    jar_glob = "build/libs/*.jar"


class Maven(JvmSdk):
    """Maven projects, including multi-module reactors."""

    name = "maven"
    marker = "pom.xml"
    targets = ("test", "package")
    command = "mvn --batch-mode"
    jar_glob = "target/*.jar"
