"""Reads version metadata from the binary AndroidManifest.xml inside an APK.

An APK is a ZIP archive whose manifest is compiled to Android binary XML.
pyaxmlparser decodes that into an lxml tree; this module only applies the
rules a release needs on top of it.
"""

import re
import zipfile
import zlib
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pyaxmlparser.axmlprinter import AXMLPrinter

from errors import ValidationError

PLATFORM = "android"
MANIFEST_ENTRY = "AndroidManifest.xml"
ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"

INT32_MAX = 2 ** 31 - 1

# Column widths in models.application and models.release
MAX_PACKAGE_NAME_LENGTH = 256
MAX_VERSION_NAME_LENGTH = 256

_DECIMAL = re.compile(r"-?\d+")
_HEX = re.compile(r"0[xX][0-9a-fA-F]+")


class ManifestFormatError(Exception):
    """The manifest is not well-formed binary XML or lacks required data."""


@dataclass(frozen=True)
class ManifestInfo:
    package_name: str
    version_code: int
    version_name: str
    min_sdk_version: int
    target_sdk_version: int
    native_abis: Tuple[str, ...] = ()
    platform: str = PLATFORM


def decode_manifest(data: bytes):
    """Decode binary XML into the lxml <manifest> element."""
    try:
        root = AXMLPrinter(data).get_xml_obj()
    except Exception as exc:
        # The decoder reports malformed input with assorted exception types
        raise ManifestFormatError("manifest is not valid binary XML") from exc
    if root is None or root.tag != "manifest":
        raise ManifestFormatError("missing <manifest> element")
    return root


def _attribute(element, name: str) -> Optional[str]:
    value = element.get(f"{{{ANDROID_NAMESPACE}}}{name}")
    if value is None:
        value = element.get(name)
    return value


def _require_string(element, name: str, max_length: int) -> str:
    value = _attribute(element, name)
    if value is None:
        raise ManifestFormatError(f"<{element.tag}> is missing {name}")
    if value.startswith("@"):
        raise ManifestFormatError(f"{name} references a resource, which is not supported")
    if not value:
        raise ManifestFormatError(f"{name} is empty")
    if len(value) > max_length:
        raise ManifestFormatError(f"{name} is longer than {max_length} characters")
    return value


def _parse_int(name: str, value: str) -> int:
    value = value.strip()
    if value.startswith("@"):
        raise ManifestFormatError(f"{name} references a resource, which is not supported")
    if _HEX.fullmatch(value):
        return int(value, 16)
    if _DECIMAL.fullmatch(value):
        return int(value)
    raise ManifestFormatError(f"{name} is not an integer")


def _require_version_code(element) -> int:
    value = _attribute(element, "versionCode")
    if value is None:
        raise ManifestFormatError(f"<{element.tag}> is missing versionCode")
    version_code = _parse_int("versionCode", value)
    if not 1 <= version_code <= INT32_MAX:
        raise ManifestFormatError("versionCode must be a positive 32-bit integer")
    return version_code


def _optional_int(element, name: str, default: int) -> int:
    if element is None:
        return default
    value = _attribute(element, name)
    if value is None:
        return default
    return _parse_int(name, value)


def read_manifest(root, native_abis: Tuple[str, ...] = ()) -> ManifestInfo:
    # Platform defaults: minSdkVersion 1, targetSdkVersion = minSdkVersion
    uses_sdk = root.find("uses-sdk")
    min_sdk = _optional_int(uses_sdk, "minSdkVersion", 1)
    target_sdk = _optional_int(uses_sdk, "targetSdkVersion", min_sdk)

    return ManifestInfo(
        package_name=_require_string(root, "package", MAX_PACKAGE_NAME_LENGTH),
        version_code=_require_version_code(root),
        version_name=_require_string(root, "versionName", MAX_VERSION_NAME_LENGTH),
        min_sdk_version=min_sdk,
        target_sdk_version=target_sdk,
        native_abis=native_abis,
    )


def _native_abis(names: List[str]) -> Tuple[str, ...]:
    abis = set()
    for name in names:
        parts = name.split("/")
        if len(parts) >= 3 and parts[0] == "lib" and parts[1]:
            abis.add(parts[1])
    return tuple(sorted(abis))


def _read_manifest_entry(archive: zipfile.ZipFile) -> bytes:
    try:
        return archive.read(MANIFEST_ENTRY)
    except KeyError as exc:
        raise ManifestFormatError(f"{MANIFEST_ENTRY} not found") from exc
    except (RuntimeError, NotImplementedError, EOFError, zlib.error) as exc:
        # Encrypted entries and unsupported compression land here
        raise ManifestFormatError(f"cannot read {MANIFEST_ENTRY}: {exc}") from exc


class ApkManifestParser:
    """Extracts package identity and version fields from an APK on disk.

    Only understands Android packages; other platforms need their own parser
    exposing the same `parse(path)` method.
    """

    platform = PLATFORM

    def parse(self, path: str) -> ManifestInfo:
        try:
            with zipfile.ZipFile(path) as archive:
                manifest_bytes = _read_manifest_entry(archive)
                abis = _native_abis(archive.namelist())
            return read_manifest(decode_manifest(manifest_bytes), abis)
        except zipfile.BadZipFile as exc:
            raise ValidationError("artifact_url", "invalid APK file: not a ZIP archive") from exc
        except ManifestFormatError as exc:
            raise ValidationError("artifact_url", f"invalid APK file: {exc}") from exc
