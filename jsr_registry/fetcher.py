"""Fetching and decoding of JSR registry metadata."""

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import httpx

from .config import FetcherConfig
from .errors import DecodeError, HttpStatusError, TransportError
from .info import GetInfo, PackageBuilder
from .models import Meta, NpmCompMeta, Package
from .npm_name import to_npm_comp_name

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Fetcher:
    """Read-only client for the JSR metadata API.

    Every fetch performs one GET request and returns the decoded model, or
    ``None`` when the registry answers 404. Failures raise ``FetchError``
    subclasses whose messages never contain the request URL.
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the fetcher.

        Args:
            config: Hosts and provider scope, defaults to the public registry
            client: Caller-owned HTTP client. When omitted, each fetch opens
                a short-lived client using ``config.timeout``.
        """
        self.config = config or FetcherConfig()
        self._client = client

    def get_provider_scope(self) -> str:
        return self.config.provider_scope

    async def fetch_meta(self, info: GetInfo) -> Meta | None:
        """Get the package metadata (versions and latest version).

        See https://jsr.io/docs/api#package-metadata
        """
        ident = info.get_info()
        return await self._fetch(
            self.config.host,
            f"@{ident.scope}/{ident.name}/meta.json",
            Meta.from_json,
            f"meta {ident}",
        )

    async def fetch_version_manifest(self, builder: PackageBuilder) -> Package | None:
        """Get the file manifest, module graphs and exports of one version.

        See https://jsr.io/docs/api#package-version-metadata
        """
        return await self._fetch(
            self.config.host,
            f"@{builder.scope}/{builder.name}/{builder.version}_meta.json",
            Package.from_json,
            f"package @{builder.scope}/{builder.name}@{builder.version}",
        )

    async def fetch_npm_comp_meta(self, info: GetInfo) -> NpmCompMeta | None:
        """Get the package metadata from the npm-compatible registry."""
        ident = info.get_info()
        return await self._fetch(
            self.config.npm_comp_host,
            to_npm_comp_name(ident, self.config.provider_scope),
            NpmCompMeta.from_json,
            f"npm meta {ident}",
        )

    async def fetch_metas(self, infos: Iterable[GetInfo]) -> list[Meta]:
        return await self._fetch_each(infos, self.fetch_meta)

    async def fetch_manifests(self, builders: Iterable[PackageBuilder]) -> list[Package]:
        return await self._fetch_each(builders, self.fetch_version_manifest)

    async def fetch_npm_comp_metas(self, infos: Iterable[GetInfo]) -> list[NpmCompMeta]:
        return await self._fetch_each(infos, self.fetch_npm_comp_meta)

    async def _fetch_each(self, items: Iterable[Any], fetch_one: Callable) -> list:
        """Fetch items one after another, dropping the ones that were not found.

        The first error aborts the whole batch.
        """
        results = []
        count = 0
        for item in items:
            count += 1
            value = await fetch_one(item)
            if value is not None:
                results.append(value)
        logger.debug("Batch fetched %d of %d items", len(results), count)
        return results

    async def _fetch(
        self, base: str, path: str, decode: Callable[[Any], T], label: str
    ) -> T | None:
        """Send one GET and classify the response.

        Args:
            base: Host base URL the path is resolved against
            path: Registry path relative to ``base``
            decode: Builds the model from parsed JSON
            label: Human-readable target for logs, never the URL

        Returns:
            The decoded model, or None on HTTP 404
        """
        logger.debug("Fetching %s", label)
        try:
            url = httpx.URL(base).join(path)
            response = await self._get(url)
        except httpx.InvalidURL:
            raise TransportError("Could not build the request URL") from None
        except httpx.RequestError as exc:
            # Chaining would expose the request (and its URL) through __cause__
            raise TransportError(f"Request failed: {type(exc).__name__}") from None

        if response.status_code == 404:
            logger.debug("%s not found", label)
            return None
        if not response.is_success:
            logger.debug("%s answered with HTTP %d", label, response.status_code)
            raise HttpStatusError(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError(f"Response body is not valid JSON: {exc}") from None
        return decode(data)

    async def _get(self, url: httpx.URL) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            return await client.get(url)
