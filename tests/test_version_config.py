"""Tests for version configuration loading and validation."""

import dataclasses
import json
from datetime import datetime, timezone

import pytest

from api_versioning import (
    ConfigurationError,
    DeprecationInfo,
    SemanticVersion,
    VersionRegistry,
    load_version_registry,
)


class TestSemanticVersion:
    """Test strict X.Y.Z parsing and ordering."""

    def test_parse_round_trips(self):
        for text in ["0.1.0", "1.20.3", "10.0.12"]:
            assert str(SemanticVersion.parse(text)) == text

    def test_parse_components(self):
        version = SemanticVersion.parse("1.20.3")
        assert (version.major, version.minor, version.patch) == (1, 20, 3)
        assert version.minor_key == "1.20"

    @pytest.mark.parametrize("text", [
        "", "1.2", "v1.2.3", "1.2.3.4", "1.2.x", "-1.2.3", " 1.2.3",
        "1.2.3\n", "\u0661.2.3",
    ])
    def test_parse_rejects_non_strict_input(self, text):
        with pytest.raises(ValueError):
            SemanticVersion.parse(text)
        assert SemanticVersion.is_valid(text) is False

    def test_ordering_is_numeric(self):
        assert SemanticVersion.parse("0.2.10") > SemanticVersion.parse("0.2.9")
        assert SemanticVersion.parse("0.10.0") > SemanticVersion.parse("0.9.99")
        assert SemanticVersion.parse("1.0.0") > SemanticVersion.parse("0.99.99")
        assert SemanticVersion.parse("0.2.0") == SemanticVersion.parse("0.2.0")

    def test_leading_zeros_keep_their_spelling(self):
        version = SemanticVersion.parse("0.2.07")
        assert str(version) == "0.2.07"
        assert version.full == "0.2.07"
        # Ordering and equality stay numeric
        assert version == SemanticVersion.parse("0.2.7")
        assert version > SemanticVersion.parse("0.2.6")


class TestStrictVersionStrings:
    """Test that only exact X.Y.Z strings reach the registry."""

    def test_trailing_newline_rejected_as_stable(self, version_data):
        version_data["stable"] = "0.2.0\n"
        with pytest.raises(ConfigurationError, match="not a valid semantic version"):
            VersionRegistry.from_dict(version_data)

    def test_trailing_newline_rejected_as_known_version(self, version_data):
        version_data["supported"].append("0.3.0\n")
        with pytest.raises(ConfigurationError, match="X.Y.Z format"):
            VersionRegistry.from_dict(version_data)


class TestVersionRegistryValidation:
    """Test the invariants enforced when the registry is built."""

    def test_default_configuration_is_valid(self, registry):
        assert registry.stable == "0.2.0"
        assert dict(registry.aliases) == {"v0": "0.2.0"}
        assert registry.supported == ("0.1.0", "0.2.0")
        assert registry.sunsetted == ()
        assert registry.deprecated["0.1.0"].sunset == datetime(2027, 2, 8, tzinfo=timezone.utc)

    def test_invalid_stable_format(self, version_data):
        version_data["stable"] = "v0.2"
        with pytest.raises(ConfigurationError, match="not a valid semantic version"):
            VersionRegistry.from_dict(version_data)

    def test_stable_cannot_be_sunsetted(self, version_data):
        version_data["sunsetted"] = ["0.2.0"]
        version_data["supported"] = ["0.1.0"]
        with pytest.raises(ConfigurationError, match="cannot be in sunsetted list"):
            VersionRegistry.from_dict(version_data)

    def test_stable_cannot_be_deprecated(self, version_data):
        version_data["deprecated"]["0.2.0"] = {"sunset": "2027-06-01T00:00:00Z"}
        with pytest.raises(ConfigurationError, match="cannot be in deprecated list"):
            VersionRegistry.from_dict(version_data)

    def test_sunsetted_and_supported_overlap(self, version_data):
        version_data["supported"].append("0.0.9")
        version_data["sunsetted"] = ["0.0.9"]
        with pytest.raises(ConfigurationError, match="both sunsetted and supported"):
            VersionRegistry.from_dict(version_data)

    def test_sunsetted_and_deprecated_overlap(self, version_data):
        version_data["deprecated"]["0.0.9"] = {"sunset": "2026-01-01T00:00:00Z"}
        version_data["sunsetted"] = ["0.0.9"]
        with pytest.raises(ConfigurationError, match="both sunsetted and deprecated"):
            VersionRegistry.from_dict(version_data)

    def test_duplicate_supported_versions(self, version_data):
        version_data["supported"] = ["0.1.0", "0.2.0", "0.1.0"]
        with pytest.raises(ConfigurationError) as exc_info:
            VersionRegistry.from_dict(version_data)
        assert exc_info.value.details["duplicates"] == ["0.1.0"]

    def test_unparseable_sunset_date(self, version_data):
        version_data["deprecated"]["0.1.0"] = {"sunset": "next tuesday"}
        with pytest.raises(ConfigurationError, match="not a valid date-time"):
            VersionRegistry.from_dict(version_data)

    def test_rules_are_checked_in_order(self, version_data):
        # Stable both sunsetted and deprecated: the sunsetted rule fires first
        version_data["sunsetted"] = ["0.2.0"]
        version_data["deprecated"]["0.2.0"] = {"sunset": "garbage"}
        with pytest.raises(ConfigurationError, match="sunsetted list"):
            VersionRegistry.from_dict(version_data)

    def test_known_versions_must_be_semver(self, version_data):
        version_data["supported"].append("0.3")
        with pytest.raises(ConfigurationError, match="X.Y.Z format"):
            VersionRegistry.from_dict(version_data)

    def test_alias_target_must_be_known(self, version_data):
        version_data["aliases"]["v1"] = "1.0.0"
        with pytest.raises(ConfigurationError, match="unknown version 1.0.0"):
            VersionRegistry.from_dict(version_data)

    def test_schema_rejects_wrong_types(self, version_data):
        version_data["supported"] = "0.1.0"
        with pytest.raises(ConfigurationError) as exc_info:
            VersionRegistry.from_dict(version_data)
        assert "supported" in exc_info.value.details

    def test_schema_rejects_unknown_keys(self, version_data):
        version_data["beta"] = ["0.3.0"]
        with pytest.raises(ConfigurationError):
            VersionRegistry.from_dict(version_data)

    def test_schema_requires_stable(self, version_data):
        del version_data["stable"]
        with pytest.raises(ConfigurationError):
            VersionRegistry.from_dict(version_data)

    def test_supported_and_deprecated_may_overlap(self, lifecycle_registry):
        assert "0.2.0" in lifecycle_registry.supported
        assert "0.2.0" in lifecycle_registry.deprecated

    def test_error_carries_api_payload(self, version_data):
        version_data["stable"] = "latest"
        with pytest.raises(ConfigurationError) as exc_info:
            VersionRegistry.from_dict(version_data)
        payload = exc_info.value.to_dict()
        assert payload["code"] == "INVALID_CONFIGURATION"
        assert payload["details"] == {"stable": "latest"}


class TestVersionRegistryBehaviour:
    """Test the read-only registry API."""

    def test_registry_is_read_only(self, registry):
        with pytest.raises(dataclasses.FrozenInstanceError):
            registry.stable = "0.1.0"
        with pytest.raises(TypeError):
            registry.aliases["v9"] = "0.1.0"
        with pytest.raises(TypeError):
            registry.deprecated["0.2.0"] = DeprecationInfo(sunset=datetime.now(timezone.utc))

    def test_direct_construction_accepts_datetimes(self):
        sunset = datetime(2027, 3, 1)
        registry = VersionRegistry(
            stable="1.0.0",
            supported=["0.9.0", "1.0.0"],
            deprecated={"0.9.0": DeprecationInfo(sunset=sunset)},
        )
        assert registry.deprecated["0.9.0"].sunset == datetime(2027, 3, 1, tzinfo=timezone.utc)

    def test_known_versions_order(self, lifecycle_registry):
        assert lifecycle_registry.known_versions() == ["0.2.0", "0.2.9", "0.2.10", "0.3.0", "0.1.0", "0.1.5"]

    def test_to_dict(self, registry, version_data):
        assert registry.to_dict() == version_data


class TestLoadVersionRegistry:
    """Test loading the registry from JSON files."""

    def test_builtin_configuration(self):
        assert load_version_registry().stable == "0.2.0"

    def test_load_from_file(self, tmp_path, lifecycle_data):
        config_file = tmp_path / "versions.json"
        config_file.write_text(json.dumps(lifecycle_data))

        registry = load_version_registry(str(config_file))
        assert registry.stable == "0.3.0"
        assert registry.sunsetted == ("0.1.0", "0.1.5")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_version_registry(str(tmp_path / "missing.json"))

    def test_malformed_json(self, tmp_path):
        config_file = tmp_path / "versions.json"
        config_file.write_text("{stable: 0.2.0")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_version_registry(str(config_file))

    def test_non_object_json(self, tmp_path):
        config_file = tmp_path / "versions.json"
        config_file.write_text('["0.2.0"]')
        with pytest.raises(ConfigurationError, match="must be a JSON object"):
            load_version_registry(str(config_file))

    def test_invalid_file_contents(self, tmp_path, version_data):
        version_data["deprecated"]["0.2.0"] = {"sunset": "2027-01-01T00:00:00Z"}
        config_file = tmp_path / "versions.json"
        config_file.write_text(json.dumps(version_data))
        with pytest.raises(ConfigurationError, match="deprecated list"):
            load_version_registry(str(config_file))
