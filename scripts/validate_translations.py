#!/usr/bin/env python3
"""Check translation catalogues for missing keys and dangling references."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
TRANSLATIONS_DIR = REPO_ROOT / "src" / "nomina" / "translations"
CONFIG_DATA_DIR = REPO_ROOT / "src" / "nomina" / "backend" / "config" / "data"

# Key families the backend builds dynamically and therefore needs in every locale.
REQUIRED_PREFIXES = (
    "incidences.",
    "units.",
    "perceptions.",
    "deductions.",
    "provisions.",
    "rates.",
    "totals.",
)


class ValidationError(Exception):
    """Raised when validation detects unrecoverable issues."""


def _flatten_messages(tree: dict, prefix: str = "") -> dict[str, str]:
    items: dict[str, str] = {}
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            items.update(_flatten_messages(value, path))
        else:
            items[path] = "" if value is None else str(value)
    return items


def load_catalogues(directory: Path) -> dict[str, dict[str, dict[str, str]]]:
    catalogues: dict[str, dict[str, dict[str, str]]] = {}
    for path in sorted(directory.glob("*.json")):
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        backend = payload.get("backend") if isinstance(payload, dict) else None
        frontend = payload.get("frontend") if isinstance(payload, dict) else None
        if not isinstance(backend, dict) or not isinstance(frontend, dict):
            raise ValidationError(f"{path.name} must define backend/frontend mappings")

        catalogues[path.stem] = {
            "backend": _flatten_messages(backend),
            "frontend": _flatten_messages(frontend),
        }

    if not catalogues:
        raise ValidationError(f"No translation catalogues found in {directory}")
    return catalogues


def config_message_keys(directory: Path) -> set[str]:
    """Collect ``*_key`` values referenced by the YAML rate tables."""

    keys: set[str] = set()

    def traverse(node: object, key_hint: str | None = None) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                traverse(value, key_hint=str(key))
        elif isinstance(node, list):
            for item in node:
                traverse(item, key_hint=key_hint)
        elif isinstance(node, str) and key_hint and key_hint.endswith("_key"):
            keys.add(node)

    for yaml_path in sorted(directory.glob("*.yaml")):
        with yaml_path.open("r", encoding="utf-8") as handle:
            traverse(yaml.safe_load(handle))
    return keys


def find_issues(
    catalogues: dict[str, dict[str, dict[str, str]]],
    referenced: set[str],
    base_locale: str,
) -> list[str]:
    if base_locale not in catalogues:
        return [f"Base locale '{base_locale}' has no catalogue"]

    issues: list[str] = []
    base = catalogues[base_locale]
    for locale, sections in sorted(catalogues.items()):
        for section in ("backend", "frontend"):
            missing = set(base[section]) - set(sections[section])
            if missing:
                issues.append(
                    f"Locale '{locale}' missing {section} keys: {', '.join(sorted(missing))}"
                )
            empty = sorted(key for key, value in sections[section].items() if not value.strip())
            if empty:
                issues.append(f"Locale '{locale}' has empty {section} messages: {', '.join(empty)}")

    for prefix in REQUIRED_PREFIXES:
        if not any(key.startswith(prefix) for key in base["backend"]):
            issues.append(f"Base locale defines no '{prefix}*' keys")

    dangling = sorted(referenced - set(base["backend"]))
    if dangling:
        issues.append(f"Configuration references unknown keys: {', '.join(dangling)}")
    return issues


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-locale", default="en")
    args = parser.parse_args(argv)

    try:
        catalogues = load_catalogues(TRANSLATIONS_DIR)
    except ValidationError as error:
        print(f"error: {error}")
        return 1

    issues = find_issues(catalogues, config_message_keys(CONFIG_DATA_DIR), args.base_locale)
    for issue in issues:
        print(f"  - {issue}")
    if not issues:
        print(f"{len(catalogues)} catalogue(s) OK")
    return 1 if issues else 0


if __name__ == "__main__":
    sys.exit(main())
