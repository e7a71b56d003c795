"""Shared fixtures: module jar builder and an in-memory fetcher."""

import os
import struct
import zipfile

import pytest

from constants import Constants
from registry.fetcher import ArtifactFetcher, FetchedArtifact, artifact_file_name
from versioning.errors import ArtifactNotFoundError
from versioning.models import Coordinate


def module_config(module_id, version, requires=()):
    """Render a minimal config.xml; ``requires`` is a list of (uid, version)."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<!DOCTYPE module PUBLIC "-//OpenMRS//DTD OpenMRS Config 1.2//EN" '
        '"http://resources.openmrs.org/doctype/config-1.2.dtd">',
        '<module configVersion="1.2">',
        f"  <id>{module_id}</id>",
        f"  <name>{module_id.title()}</name>",
        f"  <version>{version}</version>",
        "  <require_version>2.0.0</require_version>",
    ]
    if requires:
        lines.append("  <require_modules>")
        for uid, req_version in requires:
            lines.append(f'    <require_module version="{req_version}">{uid}</require_module>')
        lines.append("  </require_modules>")
    lines.append("</module>")
    return "\n".join(lines)


def write_jar(path, config_xml=None):
    """Write a jar at ``path``; no config.xml entry when ``config_xml`` is None."""
    with zipfile.ZipFile(path, "w") as jar:
        jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        if config_xml is not None:
            jar.writestr(Constants.DESCRIPTOR_ENTRY, config_xml)
    return str(path)


def write_corrupt_jar(path, config_xml):
    """Write a jar whose deflated config.xml stream is overwritten with junk."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as jar:
        jar.writestr(Constants.DESCRIPTOR_ENTRY, config_xml)
    with zipfile.ZipFile(path) as jar:
        info = jar.getinfo(Constants.DESCRIPTOR_ENTRY)
    with open(path, "r+b") as fh:
        fh.seek(info.header_offset + 26)
        name_len, extra_len = struct.unpack("<HH", fh.read(4))
        fh.seek(info.header_offset + 30 + name_len + extra_len)
        fh.write(b"\xff" * info.compress_size)
    return str(path)


class FakeFetcher(ArtifactFetcher):
    """Serves jars for registered (artifact id, version) pairs.

    ``modules`` maps ``(artifact_id, version)`` to a config.xml string or None
    for an artifact without descriptor. Only ``group``/``file_type`` are served.
    Every call is recorded in ``calls`` and every success in ``fetched``.
    """

    def __init__(self, modules, group=Constants.GROUP_MODULE, file_type="jar"):
        self.modules = dict(modules)
        self.group = group
        self.file_type = file_type
        self.calls = []
        self.fetched = []

    @property
    def name(self):
        return "fake"

    def add(self, artifact_id, version, requires=(), descriptor=True):
        module_id = artifact_id.replace("-omod", "")
        self.modules[(artifact_id, version)] = (
            module_config(module_id, version, requires) if descriptor else None
        )

    def fetch(self, namespace, identifier, version, file_type, destination_dir):
        self.calls.append((namespace, identifier, version, file_type))
        key = (identifier, version)
        if namespace != self.group or file_type != self.file_type or key not in self.modules:
            raise ArtifactNotFoundError(f"{namespace}:{identifier}:{version}:{file_type}")
        path = os.path.join(destination_dir, artifact_file_name(identifier, version, file_type))
        write_jar(path, self.modules[key])
        self.fetched.append(key)
        return FetchedArtifact(path=path, coordinate=Coordinate(namespace, identifier, version, file_type))


@pytest.fixture
def fake_fetcher():
    """An empty FakeFetcher; register modules with ``add``."""
    return FakeFetcher({})


@pytest.fixture
def make_jar(tmp_path):
    """Factory writing a module jar into tmp_path and returning its path."""
    def _make(name="module.jar", config_xml=None):
        return write_jar(tmp_path / name, config_xml)
    return _make


@pytest.fixture
def restore_constants():
    """Snapshot Constants and restore it after the test."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield Constants
    for key, value in saved.items():
        setattr(Constants, key, value)
