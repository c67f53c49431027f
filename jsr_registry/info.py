"""Package identity values and their fluent builders."""

import re
from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable

from semantic_version import Version

_PRINTED_NAME = re.compile(r"^@([^/@\s]+)/([^/@\s]+)$")


@dataclass(frozen=True, order=True)
class Info:
    """Scope and name of a JSR package.

    ``Info(scope="dunno", name="object")`` identifies ``@dunno/object``.
    """

    scope: str
    name: str

    @classmethod
    def parse(cls, text: str) -> "Info":
        """Parse the printed ``@scope/name`` form.

        Raises:
            ValueError: If the text is not ``@scope/name``.
        """
        match = _PRINTED_NAME.match(text.strip())
        if not match:
            raise ValueError(f"Expected a package name like @scope/name, got {text!r}")
        return cls(scope=match.group(1), name=match.group(2))

    def get_info(self) -> "Info":
        return self

    def __str__(self) -> str:
        return f"@{self.scope}/{self.name}"


@runtime_checkable
class GetInfo(Protocol):
    """Anything that can expose the scope and name of a package."""

    def get_info(self) -> Info: ...


@runtime_checkable
class GetProviderScope(Protocol):
    """Anything that can expose the npm-compat provider scope."""

    def get_provider_scope(self) -> str: ...


@dataclass(frozen=True)
class MetaBuilder:
    """Identity used to look up package metadata.

    Setters return a new builder, so a builder can be shared freely.
    """

    scope: str = ""
    name: str = ""

    @classmethod
    def from_info(cls, source: GetInfo) -> "MetaBuilder":
        info = source.get_info()
        return cls(scope=info.scope, name=info.name)

    def set_scope(self, value: str) -> "MetaBuilder":
        return replace(self, scope=value)

    def set_name(self, value: str) -> "MetaBuilder":
        return replace(self, name=value)

    def get_info(self) -> Info:
        return Info(scope=self.scope, name=self.name)


@dataclass(frozen=True)
class PackageBuilder:
    """Identity of one published version of a package."""

    scope: str = ""
    name: str = ""
    version: Version = field(default_factory=lambda: Version("0.0.0"))

    @classmethod
    def from_info(cls, source: GetInfo, version: Version | None = None) -> "PackageBuilder":
        """Copy scope and name from ``source``.

        Args:
            source: Any value exposing ``get_info()``
            version: Version to start with, ``0.0.0`` when omitted

        Returns:
            A new package builder
        """
        info = source.get_info()
        if version is None:
            return cls(scope=info.scope, name=info.name)
        return cls(scope=info.scope, name=info.name, version=version)

    def set_scope(self, value: str) -> "PackageBuilder":
        return replace(self, scope=value)

    def set_name(self, value: str) -> "PackageBuilder":
        return replace(self, name=value)

    def set_version(self, value: Version) -> "PackageBuilder":
        return replace(self, version=value)

    def from_meta_builder(self, builder: MetaBuilder) -> "PackageBuilder":
        """Take scope and name from ``builder``, keeping this version."""
        return replace(self, scope=builder.scope, name=builder.name)

    def get_info(self) -> Info:
        return Info(scope=self.scope, name=self.name)
