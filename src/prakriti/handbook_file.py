"""Handbook file format - portable snapshots of the handbook hierarchy.

A handbook file is YAML and round-trips a whole snapshot, so an admin can
back up the handbook before a reset or move it between installs.

Format specification:
```yaml
handbook:
  version: "1.0"
  exported_at: "2026-01-17T10:30:00Z"

categories:
  - id: "2"
    name: "కషాయాలు"
    items:
      - id: "jeevamrutham"
        name: "జీవామృతం"
        screen: "inputs"
        image: "https://picsum.photos/seed/jeevamrutham/400/300"
        sections:
          - id: "usage"
            title: "వాడుక"
            content: |
              నీటితో కలిపి పొలానికి పారించాలి.
```
"""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from prakriti.models import Handbook


HANDBOOK_FILE_VERSION = "1.0"


def generate_handbook_document(handbook: Handbook) -> dict:
    """Build the file structure for a snapshot."""
    return {
        "handbook": {
            "version": HANDBOOK_FILE_VERSION,
            "exported_at": datetime.now(timezone.utc).isoformat(),
        },
        "categories": handbook.model_dump(mode="json")["categories"],
    }


class _HandbookDumper(yaml.SafeDumper):
    """Safe dumper that writes multi-line text as literal blocks."""


def _str_representer(dumper, data):
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_HandbookDumper.add_representer(str, _str_representer)


def export_handbook_yaml(handbook: Handbook, output_path: Optional[Path] = None) -> str:
    """Export a snapshot to YAML.

    Args:
        handbook: Snapshot to export
        output_path: Optional path to write file to

    Returns:
        YAML string
    """
    yaml_content = yaml.dump(
        generate_handbook_document(handbook),
        Dumper=_HandbookDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=100,
    )

    if output_path:
        output_path.write_text(yaml_content, encoding="utf-8")

    return yaml_content


def parse_handbook_file(path: Path) -> dict:
    """Parse a handbook YAML file into a dictionary."""
    content = path.read_text(encoding="utf-8")
    return yaml.safe_load(content) or {}


def validate_handbook_document(document: dict) -> tuple[bool, list[str]]:
    """Validate a parsed handbook file.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    if not isinstance(document, dict):
        return False, ["Handbook file must be a mapping"]

    if "handbook" not in document:
        errors.append("Missing required 'handbook' section")
    elif not isinstance(document["handbook"], dict) or "version" not in document["handbook"]:
        errors.append("Missing handbook version")

    categories = document.get("categories")
    if not isinstance(categories, list):
        errors.append("Missing required 'categories' list")
        return False, errors

    category_ids = Counter()
    item_ids = Counter()

    for c_index, category in enumerate(categories):
        if not isinstance(category, dict):
            errors.append(f"Category #{c_index + 1} must be a mapping")
            continue
        for key in ("id", "name"):
            if key not in category:
                errors.append(f"Category #{c_index + 1} is missing '{key}'")
        if "id" in category:
            category_ids[str(category["id"])] += 1
        for i_index, item in enumerate(category.get("items") or []):
            if not isinstance(item, dict):
                errors.append(f"Item #{i_index + 1} of category #{c_index + 1} must be a mapping")
                continue
            for key in ("id", "name"):
                if key not in item:
                    errors.append(
                        f"Item #{i_index + 1} of category #{c_index + 1} is missing '{key}'"
                    )
            if "id" in item:
                item_ids[str(item["id"])] += 1
            section_ids = Counter(
                str(section["id"])
                for section in item.get("sections") or []
                if isinstance(section, dict) and "id" in section
            )
            errors += [
                f"Duplicate section id '{section_id}' in item '{item.get('id')}'"
                for section_id, count in section_ids.items()
                if count > 1
            ]

    errors += [f"Duplicate category id '{c}'" for c, count in category_ids.items() if count > 1]
    errors += [f"Duplicate item id '{i}'" for i, count in item_ids.items() if count > 1]

    return len(errors) == 0, errors


def handbook_from_document(document: dict) -> Handbook:
    """Build a snapshot from a validated handbook file."""
    return Handbook.model_validate({"categories": document["categories"]})
