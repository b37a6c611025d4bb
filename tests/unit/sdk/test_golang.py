"""Tests for the Go SDK."""

import os
from unittest.mock import MagicMock, patch

import pytest

from nais_build.exceptions import BuildTargetError, EmptyFilenameError
from nais_build.sdk import Golang, detect


class TestBuildTargets:
    """Test discovery of binaries in ./cmd."""

    def test_sorted_subdirectories(self, go_project, settings):
        sdk = Golang(go_project, settings.sdk.go)

        assert sdk.build_targets() == ["svcA", "svcB"]

    def test_files_are_not_targets(self, go_project, settings):
        (go_project / "cmd" / "README.md").write_text("docs\n")

        assert Golang(go_project, settings.sdk.go).build_targets() == ["svcA", "svcB"]

    def test_empty_cmd_directory(self, tmp_path, settings):
        (tmp_path / "go.mod").write_text("module x\n")
        (tmp_path / "cmd").mkdir()

        assert Golang(tmp_path, settings.sdk.go).build_targets() == []

    def test_missing_cmd_directory(self, tmp_path, settings):
        (tmp_path / "go.mod").write_text("module x\n")

        with pytest.raises(BuildTargetError, match="filesystem error"):
            Golang(tmp_path, settings.sdk.go).build_targets()

    def test_undecodable_name(self, go_project, settings):
        entry = MagicMock()
        entry.name = "bad\udcff"
        entry.is_dir.return_value = True
        scandir = MagicMock()
        scandir.return_value.__enter__.return_value = iter([entry])

        with patch("nais_build.sdk.golang.os.scandir", scandir):
            with pytest.raises(EmptyFilenameError):
                Golang(go_project, settings.sdk.go).build_targets()

    def test_stable_order(self, tmp_path, settings):
        (tmp_path / "go.mod").write_text("module x\n")
        for name in ("zeta", "alpha", "mid"):
            os.makedirs(tmp_path / "cmd" / name)

        sdk = Golang(tmp_path, settings.sdk.go)

        assert sdk.build_targets() == ["alpha", "mid", "zeta"]
        assert sdk.build_targets() == sdk.build_targets()


class TestDockerfile:
    """Test the generated Dockerfile."""

    def test_two_targets(self, go_project, settings):
        """End to end: detect a Go module with svcA and svcB and render it."""
        variant = detect(go_project, settings.sdk)
        dockerfile = variant.dockerfile()
        lines = dockerfile.splitlines()

        build_lines = [line for line in lines if line.startswith("RUN go build")]
        copy_lines = [line for line in lines if line.startswith("COPY --from=builder")]

        assert build_lines == [
            "RUN go build -a -installsuffix cgo -o /build/svcA ./cmd/svcA",
            "RUN go build -a -installsuffix cgo -o /build/svcB ./cmd/svcB",
        ]
        assert copy_lines == [
            "COPY --from=builder /build/svcA /app/svcA",
            "COPY --from=builder /build/svcB /app/svcB",
        ]
        assert "# Default CMD omitted due to multiple targets specified" in lines
        assert not any(line.startswith("CMD") for line in lines)

    def test_single_target_sets_cmd(self, tmp_path, settings):
        (tmp_path / "go.mod").write_text("module x\n")
        (tmp_path / "cmd" / "server").mkdir(parents=True)

        dockerfile = detect(tmp_path, settings.sdk).dockerfile()

        assert 'CMD ["/app/server"]' in dockerfile.splitlines()

    def test_zero_targets(self, tmp_path, settings):
        (tmp_path / "go.mod").write_text("module x\n")
        (tmp_path / "cmd").mkdir()

        dockerfile = detect(tmp_path, settings.sdk).dockerfile()

        assert "RUN go build" not in dockerfile
        assert "# Default CMD omitted" in dockerfile

    def test_images(self, go_project, settings):
        dockerfile = detect(go_project, settings.sdk).dockerfile()

        assert f"FROM {settings.sdk.go.build_docker_image} AS builder" in dockerfile
        assert f"FROM {settings.sdk.go.runtime_docker_image}\n" in dockerfile
        assert "RUN go test ./..." in dockerfile

    def test_generation_does_no_io(self, go_project, settings):
        """Rendering uses the targets resolved at detection time."""
        variant = detect(go_project, settings.sdk)
        (go_project / "cmd" / "svcC").mkdir()

        assert "svcC" not in variant.dockerfile()
        assert variant.build_targets == ("svcA", "svcB")
