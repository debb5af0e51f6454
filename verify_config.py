#!/usr/bin/env python3
"""Simple script to verify config.example.yaml structure without importing the package."""

from pathlib import Path

import yaml

VALID_SOURCE_TYPES = ["ziprecruiter", "careerbuilder"]


def verify_config_structure():
    """Verify config.example.yaml has the expected structure."""
    config_file = Path("config.example.yaml")

    if not config_file.exists():
        print("✗ config.example.yaml not found")
        return False

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse config.example.yaml: {e}")
        return False

    errors = []

    if not isinstance(config, dict):
        print("✗ config.example.yaml must contain a mapping")
        return False

    sources = config.get("sources")
    if sources is not None:
        if not isinstance(sources, list):
            errors.append("'sources' must be a list")
        elif len(sources) == 0:
            errors.append("'sources' list is empty")
        else:
            for idx, source in enumerate(sources):
                if not isinstance(source, dict):
                    errors.append(f"Source {idx} is not a dictionary")
                    continue
                for key in ("name", "type"):
                    if key not in source:
                        errors.append(f"Source {idx} missing key: {key}")
                if "type" in source and source["type"] not in VALID_SOURCE_TYPES:
                    errors.append(f"Source {idx} has invalid type: {source['type']}")

    for key in ("pipeline", "http", "logging"):
        if key in config and not isinstance(config[key], dict):
            errors.append(f"'{key}' must be of type dict")

    pipeline = config.get("pipeline") or {}
    if isinstance(pipeline, dict):
        for key in ("default_limit", "default_recency_days", "max_pages", "pool_size"):
            if key in pipeline and not isinstance(pipeline[key], int):
                errors.append(f"pipeline.{key} must be an integer")

    if errors:
        print("✗ config.example.yaml validation failed:")
        for error in errors:
            print(f"  - {error}")
        return False

    print("✓ config.example.yaml structure is valid")
    print(f"  - {len(sources or [])} sources configured")
    print(f"  - Max pages: {pipeline.get('max_pages', 'default')}")
    print(f"  - Pool size: {pipeline.get('pool_size', 'default')}")
    return True


if __name__ == "__main__":
    import sys
    success = verify_config_structure()
    sys.exit(0 if success else 1)
