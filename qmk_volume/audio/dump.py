"""
Decoding of the pw-dump object stream
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List

from loguru import logger

MAX_BUFFER = 16 * 1024 * 1024


class ObjectKind(str, Enum):
    METADATA = "metadata"
    NODE = "node"
    OTHER = "other"


@dataclass(frozen=True)
class GlobalObject:
    """A registry object as announced by PipeWire"""

    id: int
    kind: ObjectKind
    props: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetadataProperty:
    subject: int
    key: str
    type: str
    value: str


def object_kind(obj: Dict[str, Any]) -> ObjectKind:
    t = str(obj.get("type") or "")
    if t.endswith(":Metadata"):
        return ObjectKind.METADATA
    if t.endswith(":Node"):
        return ObjectKind.NODE
    return ObjectKind.OTHER


def props_from_obj(obj: Dict[str, Any]) -> Dict[str, str]:
    """Merge top level and info props, values as strings"""
    out: Dict[str, str] = {}
    info = obj.get("info")
    sources = [obj.get("props"), info.get("props") if isinstance(info, dict) else None]
    for src in sources:
        if not isinstance(src, dict):
            continue
        for k, v in src.items():
            if v is None:
                out[str(k)] = ""
            elif isinstance(v, bool):
                out[str(k)] = "true" if v else "false"
            else:
                out[str(k)] = str(v)
    return out


def is_removal(obj: Dict[str, Any]) -> bool:
    return "info" in obj and obj["info"] is None


def node_params(obj: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Props parameter entries of a node object"""
    info = obj.get("info")
    if not isinstance(info, dict):
        return []
    params = info.get("params")
    if not isinstance(params, dict):
        return []
    props = params.get("Props")
    if not isinstance(props, list):
        return []
    return [p for p in props if isinstance(p, dict)]


def metadata_properties(obj: Dict[str, Any]) -> List[MetadataProperty]:
    entries = obj.get("metadata")
    if not isinstance(entries, list):
        return []

    out = []
    for entry in entries:
        if not isinstance(entry, dict) or "key" not in entry:
            continue
        value = entry.get("value")
        if value is not None and not isinstance(value, str):
            value = json.dumps(value)
        try:
            subject = int(entry.get("subject") or 0)
        except (TypeError, ValueError):
            subject = 0
        out.append(
            MetadataProperty(
                subject=subject,
                key=str(entry["key"]),
                type=str(entry.get("type") or ""),
                value=value,
            )
        )
    return out


class DumpDecoder:
    """Incrementally splits the pw-dump output into objects

    pw-dump --monitor writes one JSON array per update, arrays may arrive
    split across reads.
    """

    def __init__(self):
        self._decoder = json.JSONDecoder()
        self._buffer = ""

    def feed(self, text: str) -> Iterator[Dict[str, Any]]:
        self._buffer += text
        while True:
            stripped = self._buffer.lstrip()
            if not stripped:
                self._buffer = ""
                return
            try:
                value, end = self._decoder.raw_decode(stripped)
            except json.JSONDecodeError as e:
                if _incomplete(stripped) and len(stripped) < MAX_BUFFER:
                    # wait for the rest of the update
                    self._buffer = stripped
                    return
                logger.error(f"Discarding undecodable pw-dump output: {e}")
                self._buffer = ""
                return
            self._buffer = stripped[end:]

            items = value if isinstance(value, list) else [value]
            for item in items:
                if isinstance(item, dict) and "id" in item:
                    yield item
                else:
                    logger.warning(f"Ignoring unexpected pw-dump entry: {item!r}")


def _incomplete(text: str) -> bool:
    """True if text looks like the start of a value that has not ended yet"""
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth < 0:
                return False
    return depth > 0 or in_string
