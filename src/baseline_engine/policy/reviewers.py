"""Adaptive review thresholds keyed on maintainer count."""

from __future__ import annotations

from typing import Any

# (bucket id, label, min maintainers, max maintainers or None)
REVIEW_BUCKETS = (
    ("maintainers_le_1", "<=1 maintainer", 0, 1),
    ("maintainers_2_to_5", "2-5 maintainers", 2, 5),
    ("maintainers_ge_6", ">=6 maintainers", 6, None),
)


def default_review_thresholds() -> dict[str, dict[str, Any]]:
    return {
        "maintainers_le_1": {
            "required_non_author_approvals": 0,
            "require_strict_ci": True,
            "require_codeowners": False,
        },
        "maintainers_2_to_5": {
            "required_non_author_approvals": 1,
            "require_strict_ci": True,
            "require_codeowners": False,
        },
        "maintainers_ge_6": {
            "required_non_author_approvals": 2,
            "require_strict_ci": True,
            "require_codeowners": True,
        },
    }


def active_bucket(maintainer_count: int) -> str:
    """Pick the threshold bucket that applies to a maintainer count."""
    for bucket_id, _label, low, high in REVIEW_BUCKETS:
        if maintainer_count >= low and (high is None or maintainer_count <= high):
            return bucket_id
    return REVIEW_BUCKETS[0][0]


def resolve_active_review_policy(
    maintainer_count: int,
    thresholds: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Select the review policy for the observed maintainer count.

    Args:
        maintainer_count: Collaborators with write access or above.
        thresholds: Configured buckets. Missing buckets use the defaults.

    Returns:
        Dict with ``active_bucket``, ``maintainer_count`` and ``policy``.
    """
    count = max(0, int(maintainer_count or 0))
    bucket = active_bucket(count)
    defaults = default_review_thresholds()
    selected = (thresholds or {}).get(bucket) or defaults[bucket]
    return {
        "active_bucket": bucket,
        "maintainer_count": count,
        "policy": {
            "required_non_author_approvals": int(selected.get("required_non_author_approvals", 0)),
            "require_strict_ci": bool(selected.get("require_strict_ci")),
            "require_codeowners": bool(selected.get("require_codeowners")),
        },
    }
