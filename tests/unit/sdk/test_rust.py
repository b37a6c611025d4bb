"""Tests for the Rust SDK."""

import pytest

from nais_build.exceptions import BuildTargetError
from nais_build.sdk import Rust, detect


class TestBuildTargets:
    def test_package_name(self, tmp_path, settings):
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "nb"\n')

        assert Rust(tmp_path, settings.sdk.rust).build_targets() == ["nb"]

    def test_bin_sections_sorted(self, tmp_path, settings):
        (tmp_path / "Cargo.toml").write_text(
            '[package]\nname = "tools"\n\n'
            '[[bin]]\nname = "worker"\npath = "src/worker.rs"\n\n'
            '[[bin]]\nname = "api"\npath = "src/api.rs"\n'
        )

        assert Rust(tmp_path, settings.sdk.rust).build_targets() == ["api", "worker"]

    def test_workspace_without_package(self, tmp_path, settings):
        (tmp_path / "Cargo.toml").write_text('[workspace]\nmembers = ["a"]\n')

        assert Rust(tmp_path, settings.sdk.rust).build_targets() == []

    def test_invalid_manifest(self, tmp_path, settings):
        (tmp_path / "Cargo.toml").write_text("[package\n")

        with pytest.raises(BuildTargetError, match="parse"):
            Rust(tmp_path, settings.sdk.rust).build_targets()


class TestDockerfile:
    def test_single_binary(self, tmp_path, settings):
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "nb"\n')

        dockerfile = detect(tmp_path, settings.sdk).dockerfile()
        lines = dockerfile.splitlines()

        assert "RUN cargo build --release --bin nb" in lines
        assert "COPY --from=builder /src/target/release/nb /app/nb" in lines
        assert 'CMD ["/app/nb"]' in lines


class TestInvalidManifestShapes:
    """TOML-valid manifests with the wrong structure are reported, not crashed on."""

    @pytest.mark.parametrize(
        "cargo",
        [
            'bin = "x"\n',
            "bin = [1]\n",
            'package = "x"\n',
        ],
    )
    def test_wrong_shape(self, tmp_path, settings, cargo):
        (tmp_path / "Cargo.toml").write_text(cargo)

        with pytest.raises(BuildTargetError, match="must be"):
            Rust(tmp_path, settings.sdk.rust).build_targets()
