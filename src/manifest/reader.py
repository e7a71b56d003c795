"""Module descriptor reader.

An OpenMRS module artifact is a jar carrying a ``config.xml`` descriptor at
its root. The descriptor lists the modules it needs::

    <require_modules>
        <require_module version="2.1.0">org.openmrs.module.idgen</require_module>
    </require_modules>

Descriptors come from downloaded artifacts, so they are parsed with entity
declarations and external references forbidden. A DOCTYPE pointing at the
public OpenMRS DTD is accepted but never loaded.
"""
from __future__ import annotations

import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import List, Optional
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.errors import ManifestParseError, UnsupportedIdentifierFormatError
from versioning.models import Coordinate

logger = logging.getLogger(__name__)


@dataclass
class ModuleDescriptor:
    """The parts of config.xml that matter for resolution and reporting."""
    module_id: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    require_version: Optional[str] = None
    required_modules: List[Coordinate] = field(default_factory=list)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child_text(root: Element, name: str) -> Optional[str]:
    for child in root:
        if _local_name(child.tag) == name:
            text = "".join(child.itertext()).strip()
            return text or None
    return None


def split_uid(uid: str) -> Optional[Coordinate]:
    """Split a required-module unique id into namespace and identifier.

    Returns None for ids without a namespace separator; those entries are
    skipped.

    Raises:
        UnsupportedIdentifierFormatError: for ids outside the known namespaces.
    """
    if "." not in uid:
        return None
    # Longest prefix first so "org.openmrs.module." wins over "org.openmrs.".
    for prefix in sorted(Constants.UID_PREFIXES, key=len, reverse=True):
        if uid.startswith(prefix):
            return Coordinate(
                namespace=Constants.UID_PREFIXES[prefix],
                identifier=uid[len(prefix):],
                version="",
            )
    raise UnsupportedIdentifierFormatError(uid)


def parse_descriptor(xml_bytes: bytes) -> ModuleDescriptor:
    """Parse descriptor bytes into a ModuleDescriptor.

    Raises:
        ManifestParseError: on malformed XML, forbidden entity use, or an
            unsupported required-module id. No partial result is returned.
    """
    try:
        root = DefusedET.fromstring(
            xml_bytes,
            forbid_dtd=False,
            forbid_entities=True,
            forbid_external=True,
        )
    except DefusedXmlException as e:
        raise ManifestParseError(f"Forbidden XML construct in descriptor: {e}") from e
    except ParseError as e:
        raise ManifestParseError(f"Malformed descriptor: {e}") from e

    descriptor = ModuleDescriptor(
        module_id=_child_text(root, "id"),
        name=_child_text(root, "name"),
        version=_child_text(root, "version"),
        require_version=_child_text(root, "require_version"),
    )
    for el in root.iter():
        if _local_name(el.tag) != Constants.REQUIRE_MODULE_TAG:
            continue
        uid = "".join(el.itertext()).strip()
        version = (el.get("version") or "").strip()
        dep = split_uid(uid)
        if dep is None:
            if is_debug_enabled(logger):
                logger.debug("Skipping required module without namespace", extra=extra_context(
                    event="parse", component="manifest", action="split_uid",
                    outcome="skipped", target=uid
                ))
            continue
        descriptor.required_modules.append(
            Coordinate(namespace=dep.namespace, identifier=dep.identifier, version=version)
        )
    return descriptor


def read_descriptor(artifact_file: str) -> Optional[ModuleDescriptor]:
    """Read the descriptor embedded in ``artifact_file``.

    Returns:
        ModuleDescriptor, or None when the artifact has no descriptor entry.

    Raises:
        ManifestParseError: if the artifact is not a readable archive or the
            descriptor cannot be parsed.
    """
    try:
        with zipfile.ZipFile(artifact_file) as jar:
            try:
                data = jar.read(Constants.DESCRIPTOR_ENTRY)
            except KeyError:
                return None
    except zipfile.BadZipFile as e:
        raise ManifestParseError(f"Not a module archive: {artifact_file}") from e
    except OSError as e:
        raise ManifestParseError(f"Cannot read artifact {artifact_file}: {e}") from e
    except (zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
        raise ManifestParseError(f"Corrupt descriptor in {artifact_file}: {e}") from e
    return parse_descriptor(data)


def extract_required_modules(artifact_file: str) -> List[Coordinate]:
    """Return the required-module coordinates declared by ``artifact_file``.

    An artifact without a descriptor is a leaf and yields an empty list.
    """
    descriptor = read_descriptor(artifact_file)
    if descriptor is None:
        logger.debug("No %s in %s", Constants.DESCRIPTOR_ENTRY, artifact_file)
        return []
    return descriptor.required_modules
