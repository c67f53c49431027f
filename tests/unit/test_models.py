"""Tests for decoding registry responses into models."""

from datetime import datetime, timezone

import pytest
from semantic_version import Version

from jsr_registry.errors import DecodeError
from jsr_registry.info import Info
from jsr_registry.models import (
    Dependency,
    DependencyKind,
    DependencyType,
    ManifestEntry,
    Meta,
    ModuleGraph2,
    NpmCompMeta,
    Package,
    TimeInfo,
    VersionInfo,
)


class TestMeta:
    """Test package metadata decoding."""

    def test_decode_meta(self, sample_meta):
        """Should decode versions keyed by semantic version."""
        meta = Meta.from_json(sample_meta)

        assert meta.get_info() == Info("dunno", "object")
        assert meta.latest == Version("1.2.0")
        assert meta.versions[Version("1.0.0")].yanked is True
        assert meta.versions[Version("1.1.0")] == VersionInfo()
        assert meta.versions[Version("1.2.0")].created_at == datetime(
            2024, 5, 2, 10, 15, 30, 123456, tzinfo=timezone.utc
        )

    def test_yanked_and_published_versions(self, sample_meta):
        """Should split versions by yanked flag, oldest first."""
        meta = Meta.from_json(sample_meta)
        assert meta.yanked_versions() == [Version("1.0.0")]
        assert meta.published_versions() == [Version("1.1.0"), Version("1.2.0")]

    def test_equality_ignores_versions(self, sample_meta):
        """Should compare scope, name and latest only."""
        full = Meta.from_json(sample_meta)
        trimmed = Meta(scope="dunno", name="object", latest=Version("1.2.0"), versions={})

        assert full == trimmed
        assert hash(full) == hash(trimmed)
        assert full != Meta(scope="dunno", name="object", latest=Version("1.1.0"))

    def test_malformed_version_key_fails(self, sample_meta):
        """Should not tolerate bad keys outside of TimeInfo."""
        sample_meta["versions"]["latest"] = {}
        with pytest.raises(DecodeError, match="invalid semantic version"):
            Meta.from_json(sample_meta)

    def test_missing_field_fails(self, sample_meta):
        """Should name the missing field."""
        del sample_meta["latest"]
        with pytest.raises(DecodeError, match="missing field 'latest'"):
            Meta.from_json(sample_meta)

    def test_created_at_uses_fixed_dialect(self, sample_meta):
        """Should reject createdAt values with a numeric offset."""
        sample_meta["versions"]["1.2.0"]["createdAt"] = "2024-05-02T10:15:30+00:00"
        with pytest.raises(DecodeError):
            Meta.from_json(sample_meta)

    def test_to_json_matches_wire_shape(self, sample_meta):
        """Should write the same wire shape it reads."""
        meta = Meta.from_json(sample_meta)
        data = meta.to_json()
        assert data["latest"] == "1.2.0"
        assert data["versions"]["1.2.0"]["createdAt"] == "2024-05-02T10:15:30.123456Z"
        assert data["versions"]["1.0.0"] == {"yanked": True}


class TestPackage:
    """Test version manifest decoding."""

    def test_decode_package(self, sample_package):
        """Should decode manifest, module graph and exports."""
        package = Package.from_json(sample_package)

        assert package.manifest["/mod.ts"] == ManifestEntry(size=2048, checksum="sha256-aaaa")
        assert package.module_graph1 is None
        assert package.module_graph2["/utils.ts"].dependencies is None
        assert package.main_entry() == "./mod.ts"

        first = package.module_graph2["/mod.ts"].dependencies[0]
        assert first.type is DependencyType.STATIC
        assert first.kind is DependencyKind.IMPORT
        assert first.specifier_range == ((3, 20), (3, 32))

    def test_module_graph1_is_kept_raw(self, sample_package):
        """Should carry moduleGraph1 through untouched."""
        sample_package["moduleGraph1"] = {"/mod.ts": {"deps": ["./a.ts"]}}
        package = Package.from_json(sample_package)
        assert package.module_graph1 == {"/mod.ts": {"deps": ["./a.ts"]}}

    def test_manifest_entries_order_by_size_then_checksum(self):
        """Should order entries by (size, checksum)."""
        entries = [
            ManifestEntry(10, "b"),
            ManifestEntry(5, "z"),
            ManifestEntry(10, "a"),
        ]
        assert sorted(entries) == [
            ManifestEntry(5, "z"),
            ManifestEntry(10, "a"),
            ManifestEntry(10, "b"),
        ]

    def test_unknown_dependency_type_fails(self, sample_package):
        """Should reject unknown enum values."""
        sample_package["moduleGraph2"]["/mod.ts"]["dependencies"][0]["type"] = "lazy"
        with pytest.raises(DecodeError, match="unknown variant 'lazy'"):
            Package.from_json(sample_package)

    def test_negative_size_fails(self, sample_package):
        """Should require an unsigned size."""
        sample_package["manifest"]["/mod.ts"]["size"] = -1
        with pytest.raises(DecodeError):
            Package.from_json(sample_package)

    def test_to_json_uses_camel_case(self, sample_package):
        """Should write moduleGraph keys in camel case."""
        data = Package.from_json(sample_package).to_json()
        assert data["moduleGraph1"] is None
        assert data["moduleGraph2"]["/mod.ts"]["dependencies"][0]["specifierRange"] == [
            [3, 20],
            [3, 32],
        ]


class TestDependencyOrder:
    """Test the canonical dependency order."""

    def _dep(self, specifier, start, end):
        return Dependency(DependencyType.STATIC, DependencyKind.IMPORT, specifier, (start, end))

    def test_sorted_by_specifier_range(self, sample_package):
        """Should order by start position, then end position."""
        graph = Package.from_json(sample_package).module_graph2["/mod.ts"]
        assert [dep.specifier for dep in graph.sorted_dependencies()] == [
            "./lazy.ts",
            "./utils.ts",
        ]

    def test_equal_ranges_keep_input_order(self):
        """Should keep input order for equal ranges."""
        graph = ModuleGraph2(
            dependencies=(
                self._dep("./b.ts", (1, 0), (1, 5)),
                self._dep("./a.ts", (1, 0), (1, 5)),
                self._dep("./c.ts", (0, 0), (0, 5)),
            )
        )
        assert [dep.specifier for dep in graph.sorted_dependencies()] == [
            "./c.ts",
            "./b.ts",
            "./a.ts",
        ]

    def test_no_dependencies(self):
        """Should return an empty list when dependencies are absent."""
        assert ModuleGraph2().sorted_dependencies() == []


class TestTimeInfo:
    """Test the flattened TimeInfo object."""

    def test_malformed_sibling_keys_are_dropped(self):
        """Should decode created/modified and skip bad version entries."""
        info = TimeInfo.from_json(
            {
                "created": "2023-01-01T00:00:00Z",
                "modified": "2023-06-01T00:00:00Z",
                "1.0.0": "2023-01-01T00:00:00Z",
                "not-a-version": "garbage",
            }
        )

        assert info.created == datetime(2023, 1, 1, tzinfo=timezone.utc)
        assert info.modified == datetime(2023, 6, 1, tzinfo=timezone.utc)
        assert info.versions == {Version("1.0.0"): datetime(2023, 1, 1, tzinfo=timezone.utc)}

    def test_created_is_required(self):
        """Should fail without created."""
        with pytest.raises(DecodeError, match="missing field 'created'"):
            TimeInfo.from_json({"modified": "2023-06-01T00:00:00Z"})

    def test_invalid_modified_fails(self):
        """Should not tolerate a malformed fixed field."""
        with pytest.raises(DecodeError):
            TimeInfo.from_json({"created": "2023-01-01T00:00:00Z", "modified": "soon"})

    def test_to_json_flattens_versions(self):
        """Should write versions as siblings of created and modified."""
        stamp = datetime(2023, 1, 1, tzinfo=timezone.utc)
        data = TimeInfo(created=stamp, modified=stamp, versions={Version("1.0.0"): stamp}).to_json()

        assert data == {
            "created": "2023-01-01T00:00:00+00:00",
            "modified": "2023-01-01T00:00:00+00:00",
            "1.0.0": "2023-01-01T00:00:00+00:00",
        }
        assert "versions" not in data

    def test_decode_what_it_encodes(self):
        """Should read back its own output."""
        stamp = datetime(2023, 1, 1, 12, 30, tzinfo=timezone.utc)
        original = TimeInfo(created=stamp, modified=stamp, versions={Version("0.1.0"): stamp})
        assert TimeInfo.from_json(original.to_json()) == original


class TestNpmCompMeta:
    """Test npm-compatible metadata decoding."""

    def test_decode_npm_meta(self, sample_npm_meta):
        """Should decode dist-tags, versions and flattened time."""
        meta = NpmCompMeta.from_json(sample_npm_meta)

        assert meta.dist_tags.latest == Version("1.2.0")
        assert meta.get_info() == Info("dunno", "object")
        assert meta.published_at(Version("1.2.0")) == datetime(
            2024, 5, 2, 10, 15, 30, 123000, tzinfo=timezone.utc
        )

        package = meta.latest_package()
        assert package.version == Version("1.2.0")
        assert package.dist.tarball.host == "npm.jsr.io"
        assert package.dependencies["@jsr/std__assert"].expression == "^1.0.0"
        assert Version("1.4.0") in package.dependencies["@jsr/std__assert"]

    def test_missing_optional_fields_default(self, sample_npm_meta):
        """Should default description and dependencies when absent."""
        entry = sample_npm_meta["versions"]["1.2.0"]
        del entry["description"]
        del entry["dependencies"]

        package = NpmCompMeta.from_json(sample_npm_meta).latest_package()
        assert package.description == ""
        assert package.dependencies == {}

    def test_relative_tarball_fails(self, sample_npm_meta):
        """Should require an absolute tarball URL."""
        sample_npm_meta["versions"]["1.2.0"]["dist"]["tarball"] = "/dunno__object-1.2.0.tgz"
        with pytest.raises(DecodeError, match="absolute URL"):
            NpmCompMeta.from_json(sample_npm_meta)

    def test_to_json_uses_hyphenated_dist_tags(self, sample_npm_meta):
        """Should write dist-tags with its wire name."""
        data = NpmCompMeta.from_json(sample_npm_meta).to_json()
        assert data["dist-tags"] == {"latest": "1.2.0"}
        assert data["versions"]["1.2.0"]["dependencies"] == {"@jsr/std__assert": "^1.0.0"}
        assert data["time"]["1.2.0"] == "2024-05-02T10:15:30.123000+00:00"
