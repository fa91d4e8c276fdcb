"""Typed configuration for `.baseline/config.yaml`.

The YAML mapping is validated once, at load time, into the dataclasses
below. Missing keys take their documented defaults; wrong types, unknown
enum values and unknown module ids raise ConfigError naming the key path.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from baseline_engine.catalog import (
    APPLY_MODES,
    BRANCH_TOPOLOGIES,
    CI_MODES,
    CONFIG_VERSION,
    DEFAULT_MODULES,
    MODULES,
    POLICY_PROFILES,
    UPDATE_CHANNELS,
)
from baseline_engine.errors import ConfigError
from baseline_engine.policy.branching import resolve_topology
from baseline_engine.policy.deployments import (
    build_approval_matrix,
    default_components,
    default_environments,
)
from baseline_engine.policy.reviewers import REVIEW_BUCKETS, default_review_thresholds

DEFAULT_ACTION_REFS: dict[str, str] = {
    "actions/checkout": "v6",
    "actions/setup-node": "v6",
    "actions/dependency-review-action": "v4",
    "github/codeql-action/init": "v3",
    "github/codeql-action/analyze": "v3",
}

DEFAULT_FULL_LANE_PATHS = [".github/workflows/", "config/policy/", "scripts/ops/"]


# ── Section dataclasses ───────────────────────────────────────────


@dataclass
class PolicyConfig:
    profile: str = "strict"
    require_github_app: bool = False
    require_pinned_action_refs: bool = False
    enforce_codeowners_protected_paths: bool = True


@dataclass
class BranchSpec:
    name: str
    role: str
    protected: bool = True
    allowed_sources: list[str] = field(default_factory=list)


@dataclass
class ReviewPolicy:
    required_non_author_approvals: int = 0
    require_strict_ci: bool = True
    require_codeowners: bool = False


@dataclass
class BranchingConfig:
    topology: str = "two_branch"
    branches: list[BranchSpec] = field(default_factory=list)
    review_thresholds: dict[str, ReviewPolicy] = field(default_factory=dict)


@dataclass
class FullLaneTriggers:
    merge_queue: bool = True
    manual_dispatch: bool = True
    label: str = "ci:full"
    paths: list[str] = field(default_factory=lambda: list(DEFAULT_FULL_LANE_PATHS))


@dataclass
class ChangeProfile:
    id: str
    description: str = ""
    include_re: list[str] = field(default_factory=list)
    exclude_re: list[str] = field(default_factory=list)
    skip_full_lane: bool = False
    run_fast_checks: bool = True


@dataclass
class CIConfig:
    mode: str = "two_lane"
    node_version: str = "22"
    full_lane_triggers: FullLaneTriggers = field(default_factory=FullLaneTriggers)
    change_profiles: list[ChangeProfile] = field(default_factory=list)
    action_refs: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ACTION_REFS))


@dataclass
class Environment:
    name: str
    branch_roles: list[str] = field(default_factory=list)
    default: bool = False


@dataclass
class Component:
    id: str
    name: str = ""
    path: str = "."
    enabled: bool = True


@dataclass
class ApprovalRule:
    environment: str
    component: str
    approval_required: bool = False
    min_approvers: int = 0
    allow_self_approval: bool = True
    allowed_roles: list[str] = field(default_factory=list)


@dataclass
class DeploymentsConfig:
    require_environment_reviewers: bool = True
    environments: list[Environment] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    approval_matrix: list[ApprovalRule] = field(default_factory=list)


@dataclass
class AllowlistEntry:
    id: str
    head_ref_prefix: str = ""
    base_ref: str = ""
    allowed_paths: list[str] = field(default_factory=list)


@dataclass
class PlanningConfig:
    required: bool = True
    automation_allowlist: list[AllowlistEntry] = field(default_factory=list)


@dataclass
class SecurityConfig:
    code_scanning: bool = True
    dependency_review: bool = True
    languages: list[str] = field(default_factory=lambda: ["javascript-typescript"])


@dataclass
class UpdatesConfig:
    channel: str = "stable"
    apply_mode: str = "pr_first"
    pr_command: list[str] = field(default_factory=list)


@dataclass
class EngineConfig:
    """Validated `.baseline/config.yaml`."""

    version: int = CONFIG_VERSION
    modules: list[str] = field(default_factory=lambda: list(DEFAULT_MODULES))
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    branching: BranchingConfig = field(default_factory=BranchingConfig)
    ci: CIConfig = field(default_factory=CIConfig)
    deployments: DeploymentsConfig = field(default_factory=DeploymentsConfig)
    planning: PlanningConfig = field(default_factory=PlanningConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    updates: UpdatesConfig = field(default_factory=UpdatesConfig)

    def is_enabled(self, module_id: str) -> bool:
        return module_id in self.modules

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "EngineConfig":
        """Validate a raw mapping and resolve every default.

        Raises:
            ConfigError: On any invalid shape.
        """
        return _parse_config(data)


# ── Field readers ─────────────────────────────────────────────────


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _mapping(data: Any, path: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {_type_name(data)}")
    return data


def _bool(data: dict, key: str, default: bool, path: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{path}.{key}: expected a boolean, got {_type_name(value)}")
    return value


def _int(data: dict, key: str, default: int, path: str) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{path}.{key}: expected a non-negative integer, got {value!r}")
    return value


def _str(data: dict, key: str, default: str, path: str, choices: tuple[str, ...] | None = None) -> str:
    value = data.get(key, default)
    if isinstance(value, float):
        raise ConfigError(f"{path}.{key}: expected a string, got number {value!r}; quote the value")
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ConfigError(f"{path}.{key}: expected a string, got {_type_name(value)}")
    if choices and value not in choices:
        raise ConfigError(
            f"{path}.{key}: invalid value '{value}' (valid: {', '.join(choices)})"
        )
    return value


def _str_list(data: dict, key: str, default: list[str], path: str) -> list[str]:
    value = data.get(key, default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{path}.{key}: expected a list of strings")
    return list(value)


def _list_of_mappings(data: dict, key: str, path: str) -> list[dict] | None:
    if key not in data or data[key] is None:
        return None
    value = data[key]
    if not isinstance(value, list):
        raise ConfigError(f"{path}.{key}: expected a list, got {_type_name(value)}")
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"{path}.{key}[{i}]: expected a mapping, got {_type_name(item)}")
    return value


def _required_str(data: dict, key: str, path: str) -> str:
    value = _str(data, key, "", path)
    if not value.strip():
        raise ConfigError(f"{path}.{key}: required")
    return value


# ── Section parsers ───────────────────────────────────────────────


def _parse_modules(raw: Any) -> list[str]:
    if raw is None:
        return list(DEFAULT_MODULES)
    if isinstance(raw, dict):
        # Pre-2.3 shape: modules: {enabled: [...]}
        raw = raw.get("enabled", list(DEFAULT_MODULES))
    if not isinstance(raw, list) or not all(isinstance(m, str) for m in raw):
        raise ConfigError("modules: expected a list of module ids")
    unknown = [m for m in raw if m not in MODULES]
    if unknown:
        raise ConfigError(
            f"modules: unknown module id(s) {', '.join(unknown)} "
            f"(valid: {', '.join(MODULES)})"
        )
    return list(dict.fromkeys(raw))


def _parse_policy(data: dict) -> PolicyConfig:
    p = "policy"
    return PolicyConfig(
        profile=_str(data, "profile", "strict", p, POLICY_PROFILES),
        require_github_app=_bool(data, "require_github_app", False, p),
        require_pinned_action_refs=_bool(data, "require_pinned_action_refs", False, p),
        enforce_codeowners_protected_paths=_bool(data, "enforce_codeowners_protected_paths", True, p),
    )


def _parse_branching(data: dict) -> BranchingConfig:
    p = "branching"
    topology = _str(data, "topology", "two_branch", p, BRANCH_TOPOLOGIES)
    raw_branches = _list_of_mappings(data, "branches", p)
    if raw_branches is None:
        raw_branches = resolve_topology(topology)
    branches = [
        BranchSpec(
            name=_required_str(b, "name", f"{p}.branches[{i}]"),
            role=_required_str(b, "role", f"{p}.branches[{i}]"),
            protected=_bool(b, "protected", True, f"{p}.branches[{i}]"),
            allowed_sources=_str_list(b, "allowed_sources", [], f"{p}.branches[{i}]"),
        )
        for i, b in enumerate(raw_branches)
    ]

    raw_thresholds = _mapping(data.get("review_thresholds"), f"{p}.review_thresholds")
    defaults = default_review_thresholds()
    thresholds: dict[str, ReviewPolicy] = {}
    for bucket_id, _label, _low, _high in REVIEW_BUCKETS:
        tp = f"{p}.review_thresholds.{bucket_id}"
        bucket = _mapping(raw_thresholds.get(bucket_id), tp)
        base = defaults[bucket_id]
        thresholds[bucket_id] = ReviewPolicy(
            required_non_author_approvals=_int(
                bucket, "required_non_author_approvals", base["required_non_author_approvals"], tp,
            ),
            require_strict_ci=_bool(bucket, "require_strict_ci", base["require_strict_ci"], tp),
            require_codeowners=_bool(bucket, "require_codeowners", base["require_codeowners"], tp),
        )
    return BranchingConfig(topology=topology, branches=branches, review_thresholds=thresholds)


def default_change_profiles() -> list[dict[str, Any]]:
    return [
        {"id": "docs", "description": "Docs-only changes",
         "include_re": ["^docs/", "\\.(md|mdx)$"], "exclude_re": [],
         "skip_full_lane": True, "run_fast_checks": True},
        {"id": "ci", "description": "CI/policy changes",
         "include_re": ["^\\.github/", "^config/ci/", "^scripts/ops/ci/"], "exclude_re": [],
         "skip_full_lane": False, "run_fast_checks": True},
        {"id": "app", "description": "Application/runtime changes",
         "include_re": ["^apps/", "^packages/", "^scripts/"], "exclude_re": ["^docs/"],
         "skip_full_lane": False, "run_fast_checks": True},
    ]


def _parse_ci(data: dict) -> CIConfig:
    p = "ci"
    tp = f"{p}.full_lane_triggers"
    triggers_raw = _mapping(data.get("full_lane_triggers"), tp)
    triggers = FullLaneTriggers(
        merge_queue=_bool(triggers_raw, "merge_queue", True, tp),
        manual_dispatch=_bool(triggers_raw, "manual_dispatch", True, tp),
        label=_str(triggers_raw, "label", "ci:full", tp),
        paths=_str_list(triggers_raw, "paths", DEFAULT_FULL_LANE_PATHS, tp),
    )

    raw_profiles = _list_of_mappings(data, "change_profiles", p)
    if raw_profiles is None:
        raw_profiles = default_change_profiles()
    profiles = []
    for i, cp in enumerate(raw_profiles):
        cpp = f"{p}.change_profiles[{i}]"
        profiles.append(ChangeProfile(
            id=_required_str(cp, "id", cpp),
            description=_str(cp, "description", "", cpp),
            include_re=_str_list(cp, "include_re", [], cpp),
            exclude_re=_str_list(cp, "exclude_re", [], cpp),
            skip_full_lane=_bool(cp, "skip_full_lane", False, cpp),
            run_fast_checks=_bool(cp, "run_fast_checks", True, cpp),
        ))

    refs_raw = _mapping(data.get("action_refs"), f"{p}.action_refs")
    action_refs = dict(DEFAULT_ACTION_REFS)
    for action, ref in refs_raw.items():
        if not isinstance(ref, str) or not ref.strip():
            raise ConfigError(f"{p}.action_refs.{action}: expected a non-empty string ref")
        action_refs[str(action)] = ref.strip()

    return CIConfig(
        mode=_str(data, "mode", "two_lane", p, CI_MODES),
        node_version=_str(data, "node_version", "22", p),
        full_lane_triggers=triggers,
        change_profiles=profiles,
        action_refs=action_refs,
    )


def _parse_deployments(data: dict, profile: str) -> DeploymentsConfig:
    p = "deployments"
    raw_envs = _list_of_mappings(data, "environments", p)
    if raw_envs is None:
        raw_envs = default_environments()
    environments = [
        Environment(
            name=_required_str(e, "name", f"{p}.environments[{i}]"),
            branch_roles=_str_list(e, "branch_roles", [], f"{p}.environments[{i}]"),
            default=_bool(e, "default", False, f"{p}.environments[{i}]"),
        )
        for i, e in enumerate(raw_envs)
    ]

    raw_comps = _list_of_mappings(data, "components", p)
    if raw_comps is None:
        raw_comps = default_components()
    components = []
    for i, c in enumerate(raw_comps):
        cp = f"{p}.components[{i}]"
        cid = _required_str(c, "id", cp)
        components.append(Component(
            id=cid,
            name=_str(c, "name", cid, cp),
            path=_str(c, "path", ".", cp),
            enabled=_bool(c, "enabled", True, cp),
        ))

    raw_matrix = _list_of_mappings(data, "approval_matrix", p)
    if raw_matrix is None:
        raw_matrix = build_approval_matrix(
            [e.name for e in environments],
            [c.id for c in components],
            profile,
        )
    matrix = []
    for i, r in enumerate(raw_matrix):
        rp = f"{p}.approval_matrix[{i}]"
        matrix.append(ApprovalRule(
            environment=_required_str(r, "environment", rp),
            component=_required_str(r, "component", rp),
            approval_required=_bool(r, "approval_required", False, rp),
            min_approvers=_int(r, "min_approvers", 0, rp),
            allow_self_approval=_bool(r, "allow_self_approval", True, rp),
            allowed_roles=_str_list(r, "allowed_roles", [], rp),
        ))

    return DeploymentsConfig(
        require_environment_reviewers=_bool(data, "require_environment_reviewers", True, p),
        environments=environments,
        components=components,
        approval_matrix=matrix,
    )


def _check_deploy_choices(deployments: DeploymentsConfig) -> None:
    # The deploy workflow's choice inputs need at least one option each
    if not deployments.environments:
        raise ConfigError("deployments.environments: at least one environment is required")
    if not any(c.enabled for c in deployments.components):
        raise ConfigError(
            "deployments.components: at least one enabled component is required "
            "while core-deployments is enabled"
        )


def default_automation_allowlist() -> list[dict[str, Any]]:
    return [{
        "id": "plan_archive",
        "head_ref_prefix": "automation/plan-archive/",
        "base_ref": "dev",
        "allowed_paths": ["docs/ops/plans/"],
    }]


def _parse_planning(data: dict) -> PlanningConfig:
    p = "planning"
    raw = _list_of_mappings(data, "automation_allowlist", p)
    if raw is None:
        raw = default_automation_allowlist()
    allowlist = [
        AllowlistEntry(
            id=_required_str(a, "id", f"{p}.automation_allowlist[{i}]"),
            head_ref_prefix=_str(a, "head_ref_prefix", "", f"{p}.automation_allowlist[{i}]"),
            base_ref=_str(a, "base_ref", "", f"{p}.automation_allowlist[{i}]"),
            allowed_paths=_str_list(a, "allowed_paths", [], f"{p}.automation_allowlist[{i}]"),
        )
        for i, a in enumerate(raw)
    ]
    return PlanningConfig(required=_bool(data, "required", True, p), automation_allowlist=allowlist)


def _parse_security(data: dict) -> SecurityConfig:
    p = "security"
    return SecurityConfig(
        code_scanning=_bool(data, "code_scanning", True, p),
        dependency_review=_bool(data, "dependency_review", True, p),
        languages=_str_list(data, "languages", ["javascript-typescript"], p),
    )


def _parse_updates(data: dict) -> UpdatesConfig:
    p = "updates"
    return UpdatesConfig(
        channel=_str(data, "channel", "stable", p, UPDATE_CHANNELS),
        apply_mode=_str(data, "apply_mode", "pr_first", p, APPLY_MODES),
        pr_command=_str_list(data, "pr_command", [], p),
    )


def _parse_config(data: Any) -> EngineConfig:
    root = _mapping(data, "config")
    version = root.get("version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        raise ConfigError(f"version: unsupported config version {version!r} (expected {CONFIG_VERSION})")

    policy = _parse_policy(_mapping(root.get("policy"), "policy"))
    modules = _parse_modules(root.get("modules"))
    deployments = _parse_deployments(_mapping(root.get("deployments"), "deployments"), policy.profile)
    if "core-deployments" in modules:
        _check_deploy_choices(deployments)
    return EngineConfig(
        version=CONFIG_VERSION,
        modules=modules,
        policy=policy,
        branching=_parse_branching(_mapping(root.get("branching"), "branching")),
        ci=_parse_ci(_mapping(root.get("ci"), "ci")),
        deployments=deployments,
        planning=_parse_planning(_mapping(root.get("planning"), "planning")),
        security=_parse_security(_mapping(root.get("security"), "security")),
        updates=_parse_updates(_mapping(root.get("updates"), "updates")),
    )
