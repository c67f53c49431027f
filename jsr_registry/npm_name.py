"""Translation between JSR names and npm-compatible package names.

The npm-compatible registry hosts every JSR package under one provider
scope, so ``@dunno/object`` becomes ``@jsr/dunno__object``.
"""

from .errors import NameFormatError, PrefixMismatchError
from .info import GetInfo, GetProviderScope, Info

DEFAULT_PROVIDER_SCOPE = "jsr"
SEPARATOR = "__"


def _provider(provider_scope: str | GetProviderScope) -> str:
    if isinstance(provider_scope, str):
        return provider_scope
    return provider_scope.get_provider_scope()


def to_npm_comp_name(
    info: GetInfo, provider_scope: str | GetProviderScope = DEFAULT_PROVIDER_SCOPE
) -> str:
    """Build the npm-compatible name for a package.

    Args:
        info: Anything exposing the package scope and name
        provider_scope: Provider scope string, or an object exposing one

    Returns:
        Name like ``@jsr/scope__name``
    """
    ident = info.get_info()
    return f"@{_provider(provider_scope)}/{ident.scope}{SEPARATOR}{ident.name}"


def from_npm_comp_name(
    value: str, provider_scope: str | GetProviderScope = DEFAULT_PROVIDER_SCOPE
) -> Info:
    """Recover scope and name from an npm-compatible name.

    Scopes or names that themselves contain ``__`` cannot be recovered.

    Raises:
        PrefixMismatchError: If ``value`` is not under ``@<provider_scope>/``
        NameFormatError: If the remainder is not ``scope__name``
    """
    provider = _provider(provider_scope)
    prefix = f"@{provider}/"
    if not value.startswith(prefix):
        raise PrefixMismatchError(provider)

    parts = value[len(prefix):].split(SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise NameFormatError()

    scope, name = parts
    return Info(scope=scope, name=name)
