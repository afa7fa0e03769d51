"""Reading and writing request documents.

Requests are JSON or YAML files in camelCase wire format. The file suffix
picks the parser: ``.yaml``/``.yml`` go through ruamel.yaml, everything else
is parsed as JSON.
"""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML

from depgraph.graph.errors import DocumentError
from depgraph.models.documents import AnalysisRequest, FixRequest, SuggestionRequest

T = TypeVar("T", bound=BaseModel)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in YAML_SUFFIXES


def _read_raw(path: Path) -> Any:
    if not path.exists():
        raise DocumentError(source=str(path), reason="File not found")
    try:
        with path.open("r", encoding="utf-8") as f:
            if _is_yaml(path):
                return YAML(typ="safe").load(f)
            return json.load(f)
    except DocumentError:
        raise
    except Exception as e:
        raise DocumentError(source=str(path), reason=f"Cannot parse document: {e}") from e


def parse_document(data: Any, model: type[T], source: str = "<request>") -> T:
    """Validate raw document data against a request model.

    Args:
        data: Parsed JSON/YAML content.
        model: Request model to validate against.
        source: Label used in error messages.

    Returns:
        The validated request.

    Raises:
        DocumentError: If the data is not a mapping or fails validation.
    """
    if not isinstance(data, dict):
        raise DocumentError(source=source, reason="Top level must be a mapping")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise DocumentError(source=source, reason=first["msg"], location=location) from e


def load_document(path: Path, model: type[T]) -> T:
    """Read and validate a request document from disk.

    Raises:
        DocumentError: If the file is missing, unparseable or invalid.
    """
    return parse_document(_read_raw(path), model, source=str(path))


def load_request(path: Path) -> AnalysisRequest:
    """Load an analysis request (``workItems`` plus ``connections``)."""
    return load_document(path, AnalysisRequest)


def load_suggestion_request(path: Path) -> SuggestionRequest:
    """Load a suggestion request (``candidates`` plus the snapshot)."""
    return load_document(path, SuggestionRequest)


def load_fix_request(path: Path) -> FixRequest:
    """Load a fix request (``connectionId``, ``action``, ``newType``)."""
    return load_document(path, FixRequest)


def save_request(request: BaseModel, path: Path) -> Path:
    """Write a request document in camelCase wire format.

    The suffix of *path* decides between YAML and JSON, matching
    :func:`load_request`.

    Args:
        request: Document to write.
        path: Destination file.

    Returns:
        The written path.
    """
    data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        if _is_yaml(path):
            yaml = YAML()
            yaml.default_flow_style = False
            yaml.indent(mapping=2, sequence=4, offset=2)
            yaml.dump(data, f)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
    return path
