"""Core data models for the JSR registry client.

Every model is a frozen snapshot decoded from one registry response. Models
never reference the fetcher or each other; related values are copied in.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import httpx
from semantic_version import NpmSpec, Version

from . import codec
from .errors import DecodeError
from .info import Info
from .npm_name import DEFAULT_PROVIDER_SCOPE, from_npm_comp_name

SpecifierRange = tuple[tuple[int, int], tuple[int, int]]


@dataclass(frozen=True)
class VersionInfo:
    """Per-version entry of ``meta.json``."""

    yanked: bool = False
    created_at: datetime | None = None  # fixed ``.ffffffZ`` dialect on the wire

    @classmethod
    def from_json(cls, data: Any, where: str = "version") -> "VersionInfo":
        obj = codec.expect_object(data, where)
        yanked = codec.expect_bool(obj.get("yanked", False), f"{where}.yanked")
        created_at = None
        if obj.get("createdAt") is not None:
            created_at = codec.decode_fixed_timestamp(obj["createdAt"], f"{where}.createdAt")
        return cls(yanked=yanked, created_at=created_at)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"yanked": self.yanked}
        if self.created_at is not None:
            data["createdAt"] = codec.encode_fixed_timestamp(self.created_at)
        return data


@dataclass(frozen=True, eq=False)
class Meta:
    """Package metadata from ``@scope/name/meta.json``.

    Two snapshots are equal when they name the same package at the same
    latest version; the ``versions`` map is not compared.
    """

    scope: str
    name: str
    latest: Version
    versions: dict[Version, VersionInfo] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "Meta":
        obj = codec.expect_object(data, "meta")
        raw_versions = codec.expect_object(codec.require(obj, "versions", "meta"), "meta.versions")
        versions = {}
        for key, entry in raw_versions.items():
            where = f"meta.versions[{key!r}]"
            versions[codec.decode_version(key, where)] = VersionInfo.from_json(entry, where)
        return cls(
            scope=codec.expect_str(codec.require(obj, "scope", "meta"), "meta.scope"),
            name=codec.expect_str(codec.require(obj, "name", "meta"), "meta.name"),
            latest=codec.decode_version(codec.require(obj, "latest", "meta"), "meta.latest"),
            versions=versions,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "scope": self.scope,
            "name": self.name,
            "latest": codec.encode_version(self.latest),
            "versions": {
                codec.encode_version(version): entry.to_json()
                for version, entry in self.versions.items()
            },
        }

    def get_info(self) -> Info:
        return Info(scope=self.scope, name=self.name)

    def yanked_versions(self) -> list[Version]:
        return sorted(v for v, entry in self.versions.items() if entry.yanked)

    def published_versions(self) -> list[Version]:
        """Versions that are not yanked, oldest first."""
        return sorted(v for v, entry in self.versions.items() if not entry.yanked)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Meta):
            return NotImplemented
        return (self.scope, self.name, self.latest) == (other.scope, other.name, other.latest)

    def __hash__(self) -> int:
        return hash((self.scope, self.name, self.latest))


@dataclass(frozen=True, order=True)
class ManifestEntry:
    """One file of a published version.

    The checksum is carried as reported and never verified.
    """

    size: int
    checksum: str

    @classmethod
    def from_json(cls, data: Any, where: str = "manifest") -> "ManifestEntry":
        obj = codec.expect_object(data, where)
        return cls(
            size=codec.expect_uint(codec.require(obj, "size", where), f"{where}.size"),
            checksum=codec.expect_str(codec.require(obj, "checksum", where), f"{where}.checksum"),
        )

    def to_json(self) -> dict[str, Any]:
        return {"size": self.size, "checksum": self.checksum}


class DependencyType(str, Enum):
    """Whether a dependency comes from an ``import`` statement or ``import()``."""

    STATIC = "static"
    DYNAMIC = "dynamic"


class DependencyKind(str, Enum):
    IMPORT = "import"
    EXPORT = "export"


def _decode_enum(enum_cls, value: Any, where: str):
    text = codec.expect_str(value, where)
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DecodeError(f"{where}: unknown variant {text!r}, expected one of {allowed}") from None


def _decode_range(value: Any, where: str) -> SpecifierRange:
    pair = codec.expect_array(value, where)
    if len(pair) != 2:
        raise DecodeError(f"{where}: expected 2 positions, found {len(pair)}")
    positions = []
    for index, raw in enumerate(pair):
        point = codec.expect_array(raw, f"{where}[{index}]")
        if len(point) != 2:
            raise DecodeError(f"{where}[{index}]: expected [line, column]")
        positions.append(
            (
                codec.expect_uint(point[0], f"{where}[{index}][0]", bits=32),
                codec.expect_uint(point[1], f"{where}[{index}][1]", bits=32),
            )
        )
    return positions[0], positions[1]


@dataclass(frozen=True)
class Dependency:
    """A single import or export recorded in module graph 2.

    The registry does not document ``specifier_range``; it appears to hold
    the start and end ``(line, column)`` of the specifier in the source.
    Sorting compares ``specifier_range`` only, and ``sorted()`` keeps equal
    ranges in their original order.
    """

    type: DependencyType
    kind: DependencyKind
    specifier: str
    specifier_range: SpecifierRange

    @classmethod
    def from_json(cls, data: Any, where: str = "dependency") -> "Dependency":
        obj = codec.expect_object(data, where)
        return cls(
            type=_decode_enum(DependencyType, codec.require(obj, "type", where), f"{where}.type"),
            kind=_decode_enum(DependencyKind, codec.require(obj, "kind", where), f"{where}.kind"),
            specifier=codec.expect_str(
                codec.require(obj, "specifier", where), f"{where}.specifier"
            ),
            specifier_range=_decode_range(
                codec.require(obj, "specifierRange", where), f"{where}.specifierRange"
            ),
        )

    def to_json(self) -> dict[str, Any]:
        start, end = self.specifier_range
        return {
            "type": self.type.value,
            "kind": self.kind.value,
            "specifier": self.specifier,
            "specifierRange": [list(start), list(end)],
        }

    def __lt__(self, other: "Dependency") -> bool:
        if not isinstance(other, Dependency):
            return NotImplemented
        return self.specifier_range < other.specifier_range


@dataclass(frozen=True)
class ModuleGraph2:
    dependencies: tuple[Dependency, ...] | None = None

    @classmethod
    def from_json(cls, data: Any, where: str = "moduleGraph2") -> "ModuleGraph2":
        obj = codec.expect_object(data, where)
        raw = obj.get("dependencies")
        if raw is None:
            return cls()
        items = codec.expect_array(raw, f"{where}.dependencies")
        return cls(
            dependencies=tuple(
                Dependency.from_json(item, f"{where}.dependencies[{index}]")
                for index, item in enumerate(items)
            )
        )

    def to_json(self) -> dict[str, Any]:
        if self.dependencies is None:
            return {"dependencies": None}
        return {"dependencies": [dep.to_json() for dep in self.dependencies]}

    def sorted_dependencies(self) -> list[Dependency]:
        return sorted(self.dependencies or ())


@dataclass(frozen=True)
class Package:
    """Metadata of one published version, from ``@scope/name/<version>_meta.json``.

    Manifest and module graph keys are file paths starting with ``/``.
    ``module_graph1`` only appears on early packages and is kept as raw JSON.
    """

    manifest: dict[str, ManifestEntry]
    exports: dict[str, str]
    module_graph1: dict[str, Any] | None = None
    module_graph2: dict[str, ModuleGraph2] | None = None

    @classmethod
    def from_json(cls, data: Any) -> "Package":
        obj = codec.expect_object(data, "package")
        manifest = {
            path: ManifestEntry.from_json(entry, f"manifest[{path!r}]")
            for path, entry in codec.expect_object(
                codec.require(obj, "manifest", "package"), "package.manifest"
            ).items()
        }
        exports = {
            key: codec.expect_str(target, f"exports[{key!r}]")
            for key, target in codec.expect_object(
                codec.require(obj, "exports", "package"), "package.exports"
            ).items()
        }

        module_graph1 = None
        if obj.get("moduleGraph1") is not None:
            module_graph1 = codec.expect_object(obj["moduleGraph1"], "package.moduleGraph1")

        module_graph2 = None
        if obj.get("moduleGraph2") is not None:
            module_graph2 = {
                path: ModuleGraph2.from_json(graph, f"moduleGraph2[{path!r}]")
                for path, graph in codec.expect_object(
                    obj["moduleGraph2"], "package.moduleGraph2"
                ).items()
            }

        return cls(
            manifest=manifest,
            exports=exports,
            module_graph1=module_graph1,
            module_graph2=module_graph2,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "manifest": {path: entry.to_json() for path, entry in self.manifest.items()},
            "moduleGraph1": self.module_graph1,
            "moduleGraph2": (
                None
                if self.module_graph2 is None
                else {path: graph.to_json() for path, graph in self.module_graph2.items()}
            ),
            "exports": dict(self.exports),
        }

    def main_entry(self) -> str | None:
        """Target of the ``"."`` export, if the package has one."""
        return self.exports.get(".")


@dataclass(frozen=True)
class TimeInfo:
    """Publication timestamps from the npm-compatible metadata.

    On the wire ``created``, ``modified`` and one key per version share a
    single flat object.
    """

    created: datetime
    modified: datetime
    versions: dict[Version, datetime] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any, where: str = "time") -> "TimeInfo":
        obj = codec.expect_object(data, where)
        created = codec.decode_rfc3339(codec.require(obj, "created", where), f"{where}.created")
        modified = codec.decode_rfc3339(codec.require(obj, "modified", where), f"{where}.modified")
        others = {key: value for key, value in obj.items() if key not in ("created", "modified")}
        return cls(
            created=created,
            modified=modified,
            versions=codec.decode_version_time_map(others, where),
        )

    def to_json(self) -> dict[str, str]:
        data = {
            "created": codec.encode_rfc3339(self.created),
            "modified": codec.encode_rfc3339(self.modified),
        }
        data.update(codec.encode_version_time_map(self.versions))
        return data


@dataclass(frozen=True)
class NpmDist:
    tarball: httpx.URL
    shasum: str
    integrity: str

    @classmethod
    def from_json(cls, data: Any, where: str = "dist") -> "NpmDist":
        obj = codec.expect_object(data, where)
        return cls(
            tarball=codec.decode_url(codec.require(obj, "tarball", where), f"{where}.tarball"),
            shasum=codec.expect_str(codec.require(obj, "shasum", where), f"{where}.shasum"),
            integrity=codec.expect_str(
                codec.require(obj, "integrity", where), f"{where}.integrity"
            ),
        )

    def to_json(self) -> dict[str, str]:
        return {
            "tarball": codec.encode_url(self.tarball),
            "shasum": self.shasum,
            "integrity": self.integrity,
        }


def _decode_range_spec(value: Any, where: str) -> NpmSpec:
    text = codec.expect_str(value, where)
    try:
        return NpmSpec(text)
    except ValueError:
        raise DecodeError(f"{where}: invalid version range {text!r}") from None


@dataclass(frozen=True)
class NpmCompPackage:
    """One version entry of the npm-compatible metadata."""

    name: str
    version: Version
    dist: NpmDist
    description: str = ""
    dependencies: dict[str, NpmSpec] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any, where: str = "package") -> "NpmCompPackage":
        obj = codec.expect_object(data, where)
        raw_deps = codec.expect_object(obj.get("dependencies") or {}, f"{where}.dependencies")
        return cls(
            name=codec.expect_str(codec.require(obj, "name", where), f"{where}.name"),
            version=codec.decode_version(codec.require(obj, "version", where), f"{where}.version"),
            description=codec.expect_str(obj.get("description", ""), f"{where}.description"),
            dist=NpmDist.from_json(codec.require(obj, "dist", where), f"{where}.dist"),
            dependencies={
                dep: _decode_range_spec(spec, f"{where}.dependencies[{dep!r}]")
                for dep, spec in raw_deps.items()
            },
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": codec.encode_version(self.version),
            "description": self.description,
            "dist": self.dist.to_json(),
            "dependencies": {dep: spec.expression for dep, spec in self.dependencies.items()},
        }


@dataclass(frozen=True)
class DistTags:
    latest: Version


@dataclass(frozen=True)
class NpmCompMeta:
    """Package metadata as served by the npm-compatible registry."""

    name: str
    versions: dict[Version, NpmCompPackage]
    dist_tags: DistTags
    time: TimeInfo
    description: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "NpmCompMeta":
        obj = codec.expect_object(data, "npm meta")
        tags = codec.expect_object(codec.require(obj, "dist-tags", "npm meta"), "dist-tags")
        versions = {}
        for key, entry in codec.expect_object(
            codec.require(obj, "versions", "npm meta"), "npm meta.versions"
        ).items():
            where = f"versions[{key!r}]"
            versions[codec.decode_version(key, where)] = NpmCompPackage.from_json(entry, where)
        return cls(
            name=codec.expect_str(codec.require(obj, "name", "npm meta"), "npm meta.name"),
            versions=versions,
            description=codec.expect_str(obj.get("description", ""), "npm meta.description"),
            dist_tags=DistTags(
                latest=codec.decode_version(
                    codec.require(tags, "latest", "dist-tags"), "dist-tags.latest"
                )
            ),
            time=TimeInfo.from_json(codec.require(obj, "time", "npm meta")),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "versions": {
                codec.encode_version(version): package.to_json()
                for version, package in self.versions.items()
            },
            "description": self.description,
            "dist-tags": {"latest": codec.encode_version(self.dist_tags.latest)},
            "time": self.time.to_json(),
        }

    def get_info(self, provider_scope: str = DEFAULT_PROVIDER_SCOPE) -> Info:
        """Decode ``name`` back into the JSR scope and name.

        Raises:
            NpmCompNameError: If ``name`` is not a valid npm-compatible name
        """
        return from_npm_comp_name(self.name, provider_scope)

    def latest_package(self) -> NpmCompPackage | None:
        return self.versions.get(self.dist_tags.latest)

    def published_at(self, version: Version) -> datetime | None:
        return self.time.versions.get(version)
