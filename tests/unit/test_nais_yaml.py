"""Tests for nais.yaml detection and parsing."""

import pytest

from nais_build.exceptions import ManifestError
from nais_build.nais_yaml import NaisYaml, detect_nais_yaml

MANIFEST = """\
apiVersion: nais.io/v1alpha1
kind: Application
metadata:
  name: myapp
  namespace: myteam
spec:
  image: {{ image }}
"""


class TestDetect:
    def test_root_file(self, tmp_path):
        (tmp_path / "nais.yaml").write_text(MANIFEST)

        assert detect_nais_yaml(tmp_path) == tmp_path / "nais.yaml"

    def test_candidate_order(self, tmp_path):
        (tmp_path / "nais.yml").write_text(MANIFEST)
        (tmp_path / ".nais.yaml").write_text(MANIFEST)

        assert detect_nais_yaml(tmp_path) == tmp_path / ".nais.yaml"

    def test_nais_directory(self, tmp_path):
        (tmp_path / ".nais").mkdir()
        (tmp_path / ".nais" / "dev-gcp.yaml").write_text(MANIFEST)

        assert detect_nais_yaml(tmp_path) == tmp_path / ".nais" / "dev-gcp.yaml"

    def test_root_before_nais_directory(self, tmp_path):
        (tmp_path / ".nais").mkdir()
        (tmp_path / ".nais" / "nais.yaml").write_text(MANIFEST)
        (tmp_path / "prod.yml").write_text(MANIFEST)

        assert detect_nais_yaml(tmp_path) == tmp_path / "prod.yml"

    def test_none_found(self, tmp_path):
        with pytest.raises(ManifestError, match="no nais.yaml"):
            detect_nais_yaml(tmp_path)


class TestParse:
    def test_team_and_app(self):
        manifest = NaisYaml.parse(MANIFEST)

        assert manifest == NaisYaml(team="myteam", app="myapp")

    def test_first_document_used(self):
        text = MANIFEST + "---\nmetadata:\n  name: other\n  namespace: otherteam\n"

        assert NaisYaml.parse(text).app == "myapp"

    def test_leading_empty_document(self):
        assert NaisYaml.parse("---\n---\n" + MANIFEST).team == "myteam"

    def test_missing_namespace(self):
        with pytest.raises(ManifestError, match="name and namespace"):
            NaisYaml.parse("metadata:\n  name: myapp\n")

    def test_no_metadata(self):
        with pytest.raises(ManifestError, match="no metadata"):
            NaisYaml.parse("kind: Application\n")

    def test_empty(self):
        with pytest.raises(ManifestError):
            NaisYaml.parse("")

    def test_invalid_yaml(self):
        with pytest.raises(ManifestError, match="deserialize"):
            NaisYaml.parse("metadata: [unclosed\n")

    def test_parse_file_missing(self, tmp_path):
        with pytest.raises(ManifestError, match="read"):
            NaisYaml.parse_file(tmp_path / "nais.yaml")

    def test_templated_metadata_is_empty(self):
        manifest = NaisYaml.parse("metadata:\n  name: {{ app }}\n  namespace: {{ team }}\n")

        assert manifest == NaisYaml(team="", app="")

    def test_partly_templated_value_is_empty(self):
        manifest = NaisYaml.parse(
            'metadata:\n  name: "myapp-{{ env }}"\n  namespace: myteam\n'
        )

        assert manifest == NaisYaml(team="myteam", app="")
