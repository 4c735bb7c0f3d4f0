"""Template and template version mapping."""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Any

_CONTENT_FIELDS = ("template", "subject", "text", "html")
_VARIABLE_PATTERN = re.compile(r"\{\{[\s\S]*?\}\}")
_VARIABLE_NAME_PATTERN = re.compile(r"\{\{\s*([^}\s]+)[\s\S]*?\}\}")


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / 1024**i, 2)
    return f"{value:g} {units[i]}"


def _content(version: dict[str, Any]) -> str:
    return " ".join(str(version.get(f) or "") for f in _CONTENT_FIELDS)


def template_size(version: dict[str, Any]) -> dict[str, Any]:
    size = sum(len(version.get(f) or "") for f in _CONTENT_FIELDS)
    return {
        "bytes": size,
        "kb": round(size / 1024, 2),
        "readable": format_bytes(size),
    }


def has_template_variables(version: dict[str, Any]) -> bool:
    return bool(_VARIABLE_PATTERN.search(_content(version)))


def count_template_variables(version: dict[str, Any]) -> int:
    """Number of distinct handlebars variable names."""
    return len(set(_VARIABLE_NAME_PATTERN.findall(_content(version))))


def process_template(template: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": template.get("name"),
        "description": template.get("description"),
        "created_at": template.get("createdAt") or template.get("created_at"),
        "id": template.get("id"),
        "version_count": template.get("version_count") or 0,
        "raw": template,
    }


def process_template_details(template: dict[str, Any]) -> dict[str, Any]:
    version = template.get("version") or {}
    return {
        "name": template.get("name"),
        "description": template.get("description"),
        "created_at": template.get("createdAt") or template.get("created_at"),
        "id": template.get("id"),
        "version": {
            "tag": version.get("tag"),
            "engine": version.get("engine"),
            "mjml": version.get("mjml"),
        },
        "raw": template,
    }


def process_template_version(version: dict[str, Any]) -> dict[str, Any]:
    return {
        "tag": version.get("tag"),
        "engine": version.get("engine"),
        "created_at": version.get("createdAt") or version.get("created_at"),
        "comment": version.get("comment"),
        "content": {f: version.get(f) for f in _CONTENT_FIELDS},
        "headers": version.get("headers") or {},
        "mjml": version.get("mjml") or False,
        "metadata": {
            "size": template_size(version),
            "has_variables": has_template_variables(version),
            "variable_count": count_template_variables(version),
        },
        "raw": version,
    }


def summarize_templates(templates: list[dict[str, Any]]) -> dict[str, Any]:
    total_versions = 0
    total_size = 0
    with_variables = 0
    variable_count = 0
    by_engine: Counter[str] = Counter()
    content_types = {"html": 0, "text": 0, "both": 0}

    for template in templates:
        for version in template.get("versions") or []:
            total_versions += 1
            if version.get("engine"):
                by_engine[version["engine"]] += 1

            metadata = version.get("metadata") or {}
            total_size += (metadata.get("size") or {}).get("bytes") or 0
            with_variables += bool(metadata.get("has_variables"))
            variable_count += metadata.get("variable_count") or 0

            content = version.get("content") or {}
            has_html, has_text = bool(content.get("html")), bool(content.get("text"))
            if has_html and has_text:
                content_types["both"] += 1
            elif has_html:
                content_types["html"] += 1
            elif has_text:
                content_types["text"] += 1

    return {
        "total_templates": len(templates),
        "total_versions": total_versions,
        "total_size": total_size,
        "total_size_formatted": format_bytes(total_size),
        "by_engine": dict(by_engine),
        "variable_usage": {
            "versions_with_variables": with_variables,
            "total_variable_count": variable_count,
            "average_per_version": round(variable_count / total_versions, 2) if total_versions else 0,
        },
        "content_types": content_types,
    }
