"""Shared fixtures: sample descriptors and a small populated index."""

from __future__ import annotations

import os

import pytest

from mimeregistry.mime_type import MimeType
from mimeregistry.registry import RegistryIndex


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MIMEREGISTRY__* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("MIMEREGISTRY__"):
            monkeypatch.delenv(name)


@pytest.fixture()
def text_xml() -> MimeType:
    return MimeType("text/xml", extensions=["xml", "xsd"], encoding="8bit")


@pytest.fixture()
def application_xml() -> MimeType:
    return MimeType("application/xml", extensions=["xml", "xsl"], registered=True)


@pytest.fixture()
def sample_types(text_xml: MimeType, application_xml: MimeType) -> list[MimeType]:
    return [
        text_xml,
        application_xml,
        MimeType("text/plain", extensions=["txt", "asc"], registered=True),
        MimeType("text/plain", extensions=["readme"], docs="README files"),
        MimeType("image/png", extensions=["png"], registered=True),
        MimeType("image/x-png", extensions=["png"], obsolete=True, use_instead="image/png"),
        MimeType("multipart/mixed", registered=True),
    ]


@pytest.fixture()
def index(sample_types: list[MimeType]) -> RegistryIndex:
    idx = RegistryIndex()
    idx.add(*sample_types, quiet=True)
    return idx
