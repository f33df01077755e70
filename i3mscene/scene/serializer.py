"""Deterministic JSON encoding of scene documents.

Output is stable byte for byte: keys follow model field order, floats are
printed as their shortest 32-bit form, children and assets keep the order the
document was built with. Files are written through a temporary file and an
atomic rename so a failed write never leaves a truncated document behind.

Node trees can be arbitrarily deep (long bone chains), so encoding and
decoding walk the nesting with explicit stacks rather than recursion.
"""

from __future__ import annotations

import json
import logging
import math
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from ..core.errors import SerializationError, WriteError
from .document import NodeRecord, SceneDocument

logger = logging.getLogger(__name__)

ENCODING = "utf-8"

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_scalar_decoder = json.JSONDecoder()
_END = object()


def _check_finite(document: SceneDocument) -> None:
    for record in document.walk():
        for field_name in ("position", "rotation", "scale"):
            values = getattr(record, field_name)
            if not all(math.isfinite(v) for v in values):
                raise SerializationError(
                    f"Node {record.name!r} has a non-finite {field_name}: {list(values)}"
                )


def _record_fields(record: NodeRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "position": list(record.position),
        "rotation": list(record.rotation),
        "scale": list(record.scale),
        "children": [],
    }


def _document_payload(document: SceneDocument) -> dict[str, Any]:
    """Plain JSON payload of a document, built without recursion."""
    nodes = []
    stack = []
    for root in document.nodes:
        fields = _record_fields(root)
        nodes.append(fields)
        stack.append((root, fields))

    while stack:
        record, fields = stack.pop()
        for child in record.children:
            child_fields = _record_fields(child)
            fields["children"].append(child_fields)
            stack.append((child, child_fields))

    return {"nodes": nodes, "assets": list(document.assets)}


def _dump_json(value: Any, indent: int) -> str:
    """Same text as ``json.dumps(value, indent=indent)`` for any nesting depth."""
    chunks: list[str] = []
    # Open containers: [item iterator, is_dict, depth, first item pending]
    stack: list[list] = []

    while True:
        if isinstance(value, (dict, list)) and value:
            is_dict = isinstance(value, dict)
            chunks.append("{" if is_dict else "[")
            items: Iterator = iter(value.items()) if is_dict else iter(value)
            stack.append([items, is_dict, len(stack) + 1, True])
        elif isinstance(value, dict):
            chunks.append("{}")
        elif isinstance(value, list):
            chunks.append("[]")
        else:
            chunks.append(json.dumps(value, ensure_ascii=False, allow_nan=False))

        while stack:
            frame = stack[-1]
            items, is_dict, depth, first = frame
            item = next(items, _END)
            if item is _END:
                stack.pop()
                chunks.append("\n" + " " * (indent * (depth - 1)) + ("}" if is_dict else "]"))
                continue

            chunks.append(("\n" if first else ",\n") + " " * (indent * depth))
            frame[3] = False
            if is_dict:
                key, value = item
                chunks.append(json.dumps(key, ensure_ascii=False) + ": ")
            else:
                value = item
            break
        else:
            return "".join(chunks)


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _read_key(text: str, idx: int) -> tuple[str, int]:
    if text[idx:idx + 1] != '"':
        raise json.JSONDecodeError("Expecting property name enclosed in double quotes", text, idx)
    key, idx = json.decoder.scanstring(text, idx + 1)
    idx = _skip(text, idx)
    if text[idx:idx + 1] != ":":
        raise json.JSONDecodeError("Expecting ':' delimiter", text, idx)
    return key, _skip(text, idx + 1)


def _load_json(text: str) -> Any:
    """Parse JSON text without recursing into nested containers.

    Scalars are decoded by the standard JSON decoder; objects and arrays are
    tracked on an explicit stack.
    """
    # Open containers paired with the key awaiting a value (None for arrays)
    stack: list[tuple[dict | list, str | None]] = []
    idx = _skip(text, 0)

    while True:
        char = text[idx:idx + 1]
        if char in ("{", "["):
            container: dict | list = {} if char == "{" else []
            closer = "}" if char == "{" else "]"
            idx = _skip(text, idx + 1)
            if text[idx:idx + 1] != closer:
                key = None
                if char == "{":
                    key, idx = _read_key(text, idx)
                stack.append((container, key))
                continue
            idx += 1
            value: Any = container
        else:
            value, idx = _scalar_decoder.raw_decode(text, idx)

        while True:
            if not stack:
                idx = _skip(text, idx)
                if idx != len(text):
                    raise json.JSONDecodeError("Extra data", text, idx)
                return value

            container, key = stack[-1]
            if isinstance(container, dict):
                container[key] = value
            else:
                container.append(value)

            idx = _skip(text, idx)
            char = text[idx:idx + 1]
            if char == ",":
                idx = _skip(text, idx + 1)
                if isinstance(container, dict):
                    key, idx = _read_key(text, idx)
                    stack[-1] = (container, key)
                break

            closer = "}" if isinstance(container, dict) else "]"
            if char != closer:
                raise json.JSONDecodeError(f"Expecting ',' or '{closer}'", text, idx)
            stack.pop()
            idx += 1
            value = container


def _node_list(value: Any, owner: str) -> list:
    if not isinstance(value, list):
        raise SerializationError(f"{owner} must be a list, got {type(value).__name__}")
    return value


def _document_from_payload(payload: Any) -> SceneDocument:
    """Validate a decoded payload one record at a time, without recursion."""
    if not isinstance(payload, dict):
        raise SerializationError("Scene document must be a JSON object")

    roots: list[NodeRecord] = []
    stack = [
        (raw, roots)
        for raw in reversed(_node_list(payload.get("nodes", []), "nodes"))
    ]
    while stack:
        raw, siblings = stack.pop()
        if not isinstance(raw, dict):
            raise SerializationError(f"Node entry must be a JSON object, got {type(raw).__name__}")
        record = NodeRecord.model_validate({k: v for k, v in raw.items() if k != "children"})
        siblings.append(record)
        children = _node_list(raw.get("children", []), f"children of {record.name!r}")
        stack.extend((child, record.children) for child in reversed(children))

    return SceneDocument(nodes=roots, assets=payload.get("assets", []))


def serialize(document: SceneDocument, indent: int = 2) -> bytes:
    """Encode a document as UTF-8 JSON.

    Raises:
        SerializationError: If a transform contains NaN or infinity
    """
    _check_finite(document)
    try:
        text = _dump_json(_document_payload(document), indent)
    except ValueError as e:
        raise SerializationError(f"Cannot encode document: {e}") from e
    return (text + "\n").encode(ENCODING)


def deserialize(data: bytes | str) -> SceneDocument:
    """Decode a document produced by ``serialize``.

    Raises:
        SerializationError: If the data is not a valid scene document
    """
    try:
        text = data.decode(ENCODING) if isinstance(data, bytes) else data
        return _document_from_payload(_load_json(text))
    except (ValueError, ValidationError) as e:
        raise SerializationError(f"Invalid scene document: {e}") from e


def write_atomic(path: Path | str, data: bytes) -> Path:
    """Write bytes to ``path`` all-or-nothing.

    The data goes to a uniquely named temporary file beside the target,
    which then replaces the target in one rename.

    Raises:
        WriteError: If the file cannot be written
    """
    path = Path(path)
    try:
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
    except OSError as e:
        raise WriteError(f"Cannot create temporary file in {path.parent}: {e}") from e

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise WriteError(f"Cannot write {path}: {e}") from e

    logger.debug(f"Wrote {len(data)} bytes to {path}")
    return path


def write_document(document: SceneDocument, path: Path | str, indent: int = 2) -> Path:
    """Serialize a document and write it atomically to ``path``."""
    return write_atomic(path, serialize(document, indent=indent))


def read_document(path: Path | str) -> SceneDocument:
    """Read a document previously written by ``write_document``."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SerializationError(f"Cannot read {path}: {e}") from e
    return deserialize(data)
