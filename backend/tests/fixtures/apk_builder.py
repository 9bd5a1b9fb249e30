"""Builds small but structurally real APKs for tests.

The manifest is encoded as Android binary XML the way aapt lays it out: a
file header, a string pool, a resource-id map, the android namespace and one
start/end element chunk pair per element.
"""

import io
import struct
import zipfile
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

RES_STRING_POOL_TYPE = 0x0001
RES_XML_TYPE = 0x0003
RES_XML_START_NAMESPACE_TYPE = 0x0100
RES_XML_END_NAMESPACE_TYPE = 0x0101
RES_XML_START_ELEMENT_TYPE = 0x0102
RES_XML_END_ELEMENT_TYPE = 0x0103
RES_XML_RESOURCE_MAP_TYPE = 0x0180

UTF8_FLAG = 1 << 8
NO_INDEX = 0xFFFFFFFF

TYPE_REFERENCE = 0x01
TYPE_STRING = 0x03
TYPE_INT_DEC = 0x10

ANDROID_PREFIX = "android"
ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"

ATTRIBUTE_RESOURCE_IDS = {
    "label": 0x01010001,
    "minSdkVersion": 0x0101020C,
    "versionCode": 0x0101021B,
    "versionName": 0x0101021C,
    "targetSdkVersion": 0x01010270,
}


class ResourceRef(NamedTuple):
    """An attribute value pointing at a resource, e.g. @string/app_version."""

    resource_id: int


AttributeValue = Union[int, str, ResourceRef]
Element = Tuple[str, Sequence[Tuple[str, AttributeValue]]]


def _align4(data: bytes) -> bytes:
    return data + b"\x00" * (-len(data) % 4)


def _length8(n: int) -> bytes:
    if n >= 0x80:
        return bytes([(n >> 8) | 0x80, n & 0xFF])
    return bytes([n])


def _length16(n: int) -> bytes:
    if n >= 0x8000:
        return struct.pack("<HH", (n >> 16) | 0x8000, n & 0xFFFF)
    return struct.pack("<H", n)


class _StringPool:
    def __init__(self, resource_names: List[str]):
        # Resource-mapped attribute names occupy the first slots
        self.strings: List[str] = list(resource_names)

    def index(self, value: str) -> int:
        if value not in self.strings:
            self.strings.append(value)
        return self.strings.index(value)

    def encode(self, utf8: bool) -> bytes:
        offsets = []
        data = b""
        for value in self.strings:
            offsets.append(len(data))
            if utf8:
                raw = value.encode("utf-8")
                data += _length8(len(value)) + _length8(len(raw)) + raw + b"\x00"
            else:
                raw = value.encode("utf-16-le")
                data += _length16(len(raw) // 2) + raw + b"\x00\x00"
        data = _align4(data)

        header_size = 28
        strings_start = header_size + 4 * len(offsets)
        header = struct.pack(
            "<HHIIIIII",
            RES_STRING_POOL_TYPE,
            header_size,
            strings_start + len(data),
            len(offsets),
            0,
            UTF8_FLAG if utf8 else 0,
            strings_start,
            0,
        )
        return header + struct.pack(f"<{len(offsets)}I", *offsets) + data


def _node(chunk_type: int, body: bytes) -> bytes:
    return struct.pack("<HHIII", chunk_type, 16, 16 + len(body), 1, NO_INDEX) + body


def _encode_attribute(pool: _StringPool, attr_name: str, value: AttributeValue) -> bytes:
    # Everything but the manifest's package attribute lives in the android namespace
    namespace = NO_INDEX if attr_name == "package" else pool.index(ANDROID_NAMESPACE)
    name_index = pool.index(attr_name)
    if isinstance(value, ResourceRef):
        raw, data_type, data = NO_INDEX, TYPE_REFERENCE, value.resource_id
    elif isinstance(value, str):
        index = pool.index(value)
        raw, data_type, data = index, TYPE_STRING, index
    else:
        raw, data_type, data = NO_INDEX, TYPE_INT_DEC, value & 0xFFFFFFFF
    return struct.pack("<IIIHBBI", namespace, name_index, raw, 8, 0, data_type, data)


def encode_binary_xml(elements: Iterable[Element], *, utf8: bool = False) -> bytes:
    """Encode a flat list of elements (name, [(attribute, value), ...])."""
    elements = list(elements)
    resource_attrs = []
    for _name, attributes in elements:
        for attr_name, _value in attributes:
            if attr_name in ATTRIBUTE_RESOURCE_IDS and attr_name not in resource_attrs:
                resource_attrs.append(attr_name)

    pool = _StringPool(resource_attrs)
    prefix = pool.index(ANDROID_PREFIX)
    uri = pool.index(ANDROID_NAMESPACE)

    body = _node(RES_XML_START_NAMESPACE_TYPE, struct.pack("<II", prefix, uri))
    for name, attributes in elements:
        encoded = b"".join(_encode_attribute(pool, attr, value) for attr, value in attributes)
        ext = struct.pack("<IIHHHHHH", NO_INDEX, pool.index(name), 20, 20, len(attributes), 0, 0, 0)
        body += _node(RES_XML_START_ELEMENT_TYPE, ext + encoded)
    for name, _attributes in reversed(elements):
        body += _node(RES_XML_END_ELEMENT_TYPE, struct.pack("<II", NO_INDEX, pool.index(name)))
    body += _node(RES_XML_END_NAMESPACE_TYPE, struct.pack("<II", prefix, uri))

    resource_ids = [ATTRIBUTE_RESOURCE_IDS[name] for name in resource_attrs]
    resource_map = struct.pack(
        f"<HHI{len(resource_ids)}I",
        RES_XML_RESOURCE_MAP_TYPE,
        8,
        8 + 4 * len(resource_ids),
        *resource_ids,
    )

    content = pool.encode(utf8) + resource_map + body
    return struct.pack("<HHI", RES_XML_TYPE, 8, 8 + len(content)) + content


def manifest_elements(
    package_name: Optional[str] = "com.example.app",
    version_code: Optional[AttributeValue] = 1,
    version_name: Optional[AttributeValue] = "1.0",
    min_sdk: Optional[AttributeValue] = None,
    target_sdk: Optional[AttributeValue] = None,
    include_uses_sdk: bool = True,
) -> List[Element]:
    """Manifest attributes set to None are left out."""
    manifest_attrs = []
    if version_code is not None:
        manifest_attrs.append(("versionCode", version_code))
    if version_name is not None:
        manifest_attrs.append(("versionName", version_name))
    if package_name is not None:
        manifest_attrs.append(("package", package_name))

    elements: List[Element] = [("manifest", manifest_attrs)]
    if include_uses_sdk:
        sdk_attrs = []
        if min_sdk is not None:
            sdk_attrs.append(("minSdkVersion", min_sdk))
        if target_sdk is not None:
            sdk_attrs.append(("targetSdkVersion", target_sdk))
        elements.append(("uses-sdk", sdk_attrs))
    elements.append(("application", [("label", "Example")]))
    return elements


def build_manifest(*, utf8: bool = False, **fields) -> bytes:
    return encode_binary_xml(manifest_elements(**fields), utf8=utf8)


def build_apk(
    manifest: Optional[bytes] = None,
    *,
    native_abis: Sequence[str] = (),
    include_manifest: bool = True,
    **fields,
) -> bytes:
    """Return the bytes of an APK whose manifest declares the given fields."""
    if manifest is None:
        manifest = build_manifest(**fields)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        if include_manifest:
            archive.writestr("AndroidManifest.xml", manifest)
        archive.writestr("classes.dex", b"dex\n035\x00" + b"\x00" * 64)
        archive.writestr("res/values/strings.xml", b"<resources/>")
        for abi in native_abis:
            archive.writestr(f"lib/{abi}/libnative.so", b"\x7fELF")
    return buffer.getvalue()


def mark_manifest_encrypted(apk: bytes) -> bytes:
    """Set the "encrypted" flag on the manifest entry, which build_apk writes first."""
    data = bytearray(apk)
    local = data.find(b"PK\x03\x04")
    central = data.find(b"PK\x01\x02")
    for flags_offset in (local + 6, central + 8):
        (flags,) = struct.unpack_from("<H", data, flags_offset)
        struct.pack_into("<H", data, flags_offset, flags | 0x1)
    return bytes(data)
