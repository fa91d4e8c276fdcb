"""Plan-entitlement advisor.

Given only the owner type and repository visibility, predict whether
plan-gated GitHub features are likely available. The verdicts are advice
for doctor and for annotating the initial capability stub; they never
replace a probed capability.
"""

from __future__ import annotations

from typing import Any

FEATURE_DOCS = {
    "rulesets": (
        "https://docs.github.com/en/repositories/configuring-branches-and-merges-in-your-repository"
        "/managing-rulesets/about-rulesets"
    ),
    "merge_queue": (
        "https://docs.github.com/en/repositories/configuring-branches-and-merges-in-your-repository"
        "/configuring-pull-request-merges/managing-a-merge-queue"
    ),
    "environment_required_reviewers": (
        "https://docs.github.com/en/actions/reference/workflows-and-actions"
        "/deployments-and-environments#required-reviewers"
    ),
    "custom_deployment_protection_rules": (
        "https://docs.github.com/en/actions/reference/workflows-and-actions"
        "/deployments-and-environments#deployment-protection-rules"
    ),
}

ENTITLEMENT_STATES = ("likely_supported", "plan_dependent", "unlikely_supported")

_PRIVATE_REMEDIATION = {
    "rulesets": (
        "Private repository ruleset enforcement may require paid GitHub plans. "
        "Verify plan entitlement and repo admin access."
    ),
    "environment_required_reviewers": (
        "Required reviewers for private environments can be plan-dependent. "
        "If unsupported, keep matrix rules documented and enforce via policy checks."
    ),
    "custom_deployment_protection_rules": (
        "Custom deployment protection rules for private repositories can require higher-tier plans. "
        "Use advisory mode and explicit approvals if unavailable."
    ),
}


def normalize_owner_type(value: Any) -> str:
    raw = str(value or "").strip().lower()
    if raw == "organization":
        return "Organization"
    if raw == "user":
        return "User"
    return "unknown"


def _row(feature: str, state: str, reason: str, remediation: str = "") -> dict[str, str]:
    return {
        "feature": feature,
        "state": state,
        "reason": reason,
        "remediation": remediation,
        "docs_url": FEATURE_DOCS.get(feature, ""),
    }


def _visibility_row(feature: str, private: bool) -> dict[str, str]:
    if not private:
        return _row(feature, "likely_supported", "public_repository")
    return _row(feature, "plan_dependent", "private_repository", _PRIVATE_REMEDIATION[feature])


def _merge_queue_row(owner_type: str, private: bool) -> dict[str, str]:
    if owner_type != "Organization":
        return _row(
            "merge_queue", "unlikely_supported", "organization_repo_expected",
            "Merge queue is typically available for organization-owned repositories. "
            "Use organization ownership or disable merge-queue triggers.",
        )
    if not private:
        return _row("merge_queue", "likely_supported", "public_organization_repository")
    return _row(
        "merge_queue", "plan_dependent", "private_organization_repository",
        "Private organization repositories may require Enterprise plan support for merge queue. "
        "If unavailable, disable merge-queue triggers.",
    )


def evaluate_entitlements(owner_type: Any = None, repository_private: Any = None) -> dict[str, Any]:
    """Advise on plan-gated features for a repository.

    Args:
        owner_type: "Organization", "User" or anything else (case-insensitive).
        repository_private: Only ``True`` counts as private; None means unknown
            and is treated like public.

    Returns:
        Dict with ``owner_type``, ``repository_visibility``, ``features`` (a
        list of rows) and ``by_feature`` (the same rows keyed by feature id).
    """
    owner = normalize_owner_type(owner_type)
    private = repository_private is True
    features = [
        _visibility_row("rulesets", private),
        _merge_queue_row(owner, private),
        _visibility_row("environment_required_reviewers", private),
        _visibility_row("custom_deployment_protection_rules", private),
    ]
    return {
        "owner_type": owner,
        "repository_visibility": "private" if private else "public_or_unknown",
        "feature_count": len(features),
        "features": features,
        "by_feature": {row["feature"]: row for row in features},
    }
