"""
Write the OpenAPI schema of the HydroMinder API to interfaces/openapi.json.

The schema is built from an application wired to an in-memory store, so
generating it never touches the reminder database.

Usage:
    python -m hydrominder.generate_openapi
"""
from __future__ import annotations

import dataclasses
import json
import os
from typing import Any, Dict, List, Optional

from .application import create_app, openapi_tags
from .settings import get_settings


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Add any of the application's tag descriptions missing from the schema.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


def _default_out_path() -> str:
    # <container_root>/interfaces/openapi.json, where src/ sits under container_root
    src_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(os.path.dirname(src_dir), "interfaces", "openapi.json")


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Generate the OpenAPI schema file and return the written file path."""
    settings = dataclasses.replace(get_settings(), persistence_backend="memory")
    schema = create_app(settings).openapi()
    _ensure_tags(schema)

    out_path = out_path or _default_out_path()
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main() -> None:
    print(f"Wrote OpenAPI schema to: {generate_openapi()}")


if __name__ == "__main__":
    main()
