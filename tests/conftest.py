"""Pytest configuration and fixtures."""


import pytest


@pytest.fixture
def sample_meta():
    """Wire form of @dunno/object/meta.json."""
    return {
        "scope": "dunno",
        "name": "object",
        "latest": "1.2.0",
        "versions": {
            "1.2.0": {"createdAt": "2024-05-02T10:15:30.123456Z"},
            "1.1.0": {},
            "1.0.0": {"yanked": True},
        },
    }


@pytest.fixture
def sample_package():
    """Wire form of @dunno/object/1.2.0_meta.json."""
    return {
        "manifest": {
            "/mod.ts": {"size": 2048, "checksum": "sha256-aaaa"},
            "/deno.json": {"size": 120, "checksum": "sha256-bbbb"},
        },
        "moduleGraph2": {
            "/mod.ts": {
                "dependencies": [
                    {
                        "type": "static",
                        "kind": "import",
                        "specifier": "./utils.ts",
                        "specifierRange": [[3, 20], [3, 32]],
                    },
                    {
                        "type": "dynamic",
                        "kind": "import",
                        "specifier": "./lazy.ts",
                        "specifierRange": [[1, 7], [1, 18]],
                    },
                ]
            },
            "/utils.ts": {},
        },
        "exports": {".": "./mod.ts"},
    }


@pytest.fixture
def sample_npm_meta():
    """Wire form of the npm-compatible metadata for @dunno/object."""
    return {
        "name": "@jsr/dunno__object",
        "description": "Object helpers",
        "dist-tags": {"latest": "1.2.0"},
        "versions": {
            "1.2.0": {
                "name": "@jsr/dunno__object",
                "version": "1.2.0",
                "description": "Object helpers",
                "dist": {
                    "tarball": "https://npm.jsr.io/~/11/@jsr/dunno__object/1.2.0.tgz",
                    "shasum": "0123456789abcdef",
                    "integrity": "sha512-xyz",
                },
                "dependencies": {"@jsr/std__assert": "^1.0.0"},
            }
        },
        "time": {
            "created": "2024-01-01T00:00:00Z",
            "modified": "2024-05-02T10:15:30.123Z",
            "1.2.0": "2024-05-02T10:15:30.123Z",
        },
    }
