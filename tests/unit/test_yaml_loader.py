# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for YAML loader utilities."""

from pathlib import Path

import pytest

from edurecords.core.config.yaml_loader import YAMLLoadError, load_yaml


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml_file(self, tmp_path: Path) -> None:
        """Test loading a valid YAML file."""
        yaml_file = tmp_path / "grading.yaml"
        yaml_file.write_text("bands:\n  - {min_marks: 0, letter: F, point: 0}\n")

        result = load_yaml(yaml_file)

        assert result == {"bands": [{"min_marks": 0, "letter": "F", "point": 0}]}

    def test_load_empty_yaml_file_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that empty YAML files return empty dict."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises YAMLLoadError."""
        with pytest.raises(YAMLLoadError, match="does not exist"):
            load_yaml(tmp_path / "nope.yaml")

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        """Test a directory path is rejected."""
        with pytest.raises(YAMLLoadError, match="not a file"):
            load_yaml(tmp_path)

    def test_invalid_syntax(self, tmp_path: Path) -> None:
        """Test malformed YAML is reported."""
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("bands: [unclosed\n")

        with pytest.raises(YAMLLoadError, match="Invalid YAML syntax"):
            load_yaml(yaml_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """Test the root must be a mapping."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(YAMLLoadError, match="must be a mapping"):
            load_yaml(yaml_file)
