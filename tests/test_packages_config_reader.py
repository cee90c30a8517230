"""Tests for the packages.config reader."""

import os
import tempfile

import pytest

from common.errors import InvalidDescriptorError, MalformedDescriptorError
from normalizers.packages_config import read_packages_config
from projectmodel.models import RawPackageRecord


def _write(tmpdir, content, name="packages.config"):
    path = os.path.join(tmpdir, name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


class TestReadPackagesConfig:
    """Test reading package records."""

    def test_one_record_per_package_element(self):
        """Each <package> element yields a record carrying its attribute text."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, """<?xml version="1.0" encoding="utf-8"?>
<packages>
  <package id="Newtonsoft.Json" version="13.0.1" targetFramework="net48" />
  <package id="xunit" version="2.4.1" targetFramework="net48" developmentDependency="true" />
  <package id="Serilog" version="2.10.0" targetFramework="net472" />
</packages>""")

            records = read_packages_config(path)

            assert len(records) == 3
            assert records[0] == RawPackageRecord("Newtonsoft.Json", "13.0.1", "net48", "")
            assert records[1].is_development_dependency
            assert records[2].target_framework == "net472"

    def test_missing_attributes_are_empty_strings(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, '<packages><package id="OnlyId" /></packages>')

            records = read_packages_config(path)

            assert records == [RawPackageRecord(package_id="OnlyId")]
            assert records[0].version == ""
            assert not records[0].is_development_dependency

    def test_absent_file_is_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert read_packages_config(os.path.join(tmpdir, "packages.config")) is None

    def test_present_but_empty_is_empty_list(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "<packages />")
            assert read_packages_config(path) == []

    def test_malformed_xml_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "<packages><package id='x'></packages>")
            with pytest.raises(MalformedDescriptorError) as excinfo:
                read_packages_config(path)
            assert excinfo.value.path == path
            assert isinstance(excinfo.value, InvalidDescriptorError)

    def test_blank_path_rejected(self):
        with pytest.raises(ValueError):
            read_packages_config("  ")

    def test_same_bytes_same_records(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, '<packages><package id="A" version="1.0" /></packages>')
            assert read_packages_config(path) == read_packages_config(path)
