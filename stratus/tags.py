"""
Tagging utilities for consistent stack tagging across deployments.
"""

from typing import Dict, List, Optional

APP_TAG = "stratus-application"
ENV_TAG = "stratus-environment"
WORKLOAD_TAG = "stratus-service"

RESERVED_TAGS = {APP_TAG, ENV_TAG, WORKLOAD_TAG}


def base_tags(app: str, env: str, workload: Optional[str] = None,
              extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Generate the tags applied to every stack stratus deploys.

    Args:
        app: Application name
        env: Environment name
        workload: Workload name, for workload stacks
        extra: User-provided resource tags

    Returns:
        Dictionary of tags to apply to the stack

    Raises:
        ValueError: If a user tag overrides a reserved key
    """
    tags: Dict[str, str] = {}

    # User tags go first so reserved keys can't be shadowed silently.
    if extra:
        for key in extra:
            if key in RESERVED_TAGS:
                raise ValueError(f"Tag {key} is reserved for stratus")
        tags.update(extra)

    tags[APP_TAG] = app
    tags[ENV_TAG] = env
    if workload:
        tags[WORKLOAD_TAG] = workload
    return tags


def parse_user_tags(tag_strings: List[str]) -> Dict[str, str]:
    """
    Parse user-provided tag strings in format "key=value".

    Args:
        tag_strings: List of tag strings in "key=value" format

    Returns:
        Dictionary of parsed tags

    Raises:
        ValueError: If tag string format is invalid
    """
    tags = {}

    for tag_str in tag_strings:
        if "=" not in tag_str:
            raise ValueError(f"Invalid tag format: {tag_str}. Expected 'key=value'")

        key, value = tag_str.split("=", 1)
        if not key.strip() or not value.strip():
            raise ValueError(f"Invalid tag format: {tag_str}. Key and value must not be empty")

        tags[key.strip()] = value.strip()

    return tags


def to_cfn_tags(tags: Dict[str, str]) -> List[Dict[str, str]]:
    """Convert a tag dictionary to the CloudFormation Key/Value list, sorted by key."""
    return [{"Key": k, "Value": tags[k]} for k in sorted(tags)]
