"""Workflow templates for generated GitHub Actions files.

Templates use str.format() with named placeholders; literal GitHub
expressions are written with doubled braces (``${{{{ ... }}}}``).
Action references are substituted from ``ci.action_refs`` so that the
pinned-reference gate sees exactly what is written.
"""

from __future__ import annotations

import json

GENERATED_HEADER = "# Managed by baseline-engine. Edit .baseline/config.yaml, not this file.\n"

# ── PR gate ───────────────────────────────────────────────────────

PR_GATE = """\
{header}name: Baseline PR Gate

on:
  pull_request:
    types: [opened, synchronize, reopened, edited, ready_for_review]
{merge_group_trigger}{dispatch_trigger}
permissions:
  contents: read
  pull-requests: read

jobs:
  classify:
    name: baseline-classify
    runs-on: ubuntu-latest
    outputs:
      run_full: ${{{{ steps.mode.outputs.run_full }}}}
    steps:
      - name: Checkout
        uses: {checkout}

      - name: Resolve lane mode
        id: mode
        env:
          CI_MODE: "{mode}"
          MERGE_QUEUE: "{merge_queue}"
          MANUAL_DISPATCH: "{manual_dispatch}"
          FULL_LANE_LABEL: {label}
          EVENT_NAME: ${{{{ github.event_name }}}}
          PR_LABELS: ${{{{ toJson(github.event.pull_request.labels.*.name) }}}}
        run: |
          run_full=0
          if [ "$CI_MODE" = "full" ]; then run_full=1; fi
          if [ "$CI_MODE" = "two_lane" ] && [ "$MERGE_QUEUE" = "1" ] && [ "$EVENT_NAME" = "merge_group" ]; then run_full=1; fi
          if [ "$MANUAL_DISPATCH" = "1" ] && [ "$EVENT_NAME" = "workflow_dispatch" ]; then run_full=1; fi
          if [ "$EVENT_NAME" = "pull_request" ] && echo "$PR_LABELS" | grep -qiF "$FULL_LANE_LABEL"; then run_full=1; fi
          if [ "$CI_MODE" = "fast_only" ]; then run_full=0; fi
          echo "run_full=$run_full" >> "$GITHUB_OUTPUT"

  baseline-fast-lane:
    name: baseline-fast-lane
    needs: [classify]
    runs-on: ubuntu-latest
    steps:
      - name: Checkout
        uses: {checkout}
      - name: Setup Node
        uses: {setup_node}
        with:
          node-version: {node_version}
          cache: npm
      - name: Install
        run: npm ci --no-audit --no-fund
      - name: Fast checks
        run: npm test

  baseline-full-lane:
    name: baseline-full-lane
    needs: [classify]
    if: ${{{{ needs.classify.outputs.run_full == '1' }}}}
    uses: ./.github/workflows/baseline-node-run.yml
    with:
      node_version: {node_version}
      run: npm run test:full --if-present
"""

MERGE_GROUP_TRIGGER = """\
  merge_group:
    types: [checks_requested]
"""

DISPATCH_TRIGGER = """\
  workflow_dispatch:
"""

# ── Reusable node runner ──────────────────────────────────────────

NODE_RUN = """\
{header}name: Baseline Node Run (Reusable)

on:
  workflow_call:
    inputs:
      timeout_minutes:
        type: number
        required: false
        default: 20
      node_version:
        type: string
        required: false
        default: {node_version}
      run:
        type: string
        required: true

permissions:
  contents: read

jobs:
  run:
    runs-on: ubuntu-latest
    timeout-minutes: ${{{{ inputs.timeout_minutes }}}}
    steps:
      - name: Checkout
        uses: {checkout}

      - name: Setup Node
        uses: {setup_node}
        with:
          node-version: ${{{{ inputs.node_version }}}}
          cache: npm

      - name: Install
        run: npm ci --no-audit --no-fund

      - name: Run
        shell: bash
        run: ${{{{ inputs.run }}}}
"""

# ── Deploy ────────────────────────────────────────────────────────

DEPLOY = """\
{header}name: Baseline Deploy

on:
  workflow_dispatch:
    inputs:
      environment:
        description: Target environment
        required: true
        type: choice
        options:
{environment_options}
      component:
        description: Deployment component
        required: true
        type: choice
        options:
{component_options}

permissions:
  contents: read

jobs:
  baseline-deploy:
    name: baseline-deploy
    runs-on: ubuntu-latest
    timeout-minutes: 30
{environment_binding}    steps:
      - name: Checkout
        uses: {checkout}
      - name: Show deployment selection
        run: |
          echo "environment=${{{{ inputs.environment }}}}"
          echo "component=${{{{ inputs.component }}}}"
      - name: Deploy
        run: |
          if [ -x scripts/deploy/deploy.sh ]; then
            scripts/deploy/deploy.sh "${{{{ inputs.environment }}}}" "${{{{ inputs.component }}}}"
          else
            echo "No scripts/deploy/deploy.sh hook; nothing to deploy."
          fi
"""

ENVIRONMENT_BINDING = """\
    environment: ${{ inputs.environment }}
"""

# ── Security ──────────────────────────────────────────────────────

SECURITY = """\
{header}name: Baseline Security

on:
  pull_request:
  push:
    branches: [{default_branch}]

permissions:
  contents: read
  security-events: write

jobs:
{jobs}"""

CODE_SCANNING_JOB = """\
  baseline-code-scanning:
    name: baseline-code-scanning
    runs-on: ubuntu-latest
    strategy:
      fail-fast: false
      matrix:
        language: [{languages}]
    steps:
      - name: Checkout
        uses: {checkout}
      - name: Initialize CodeQL
        uses: {codeql_init}
        with:
          languages: ${{{{ matrix.language }}}}
      - name: Analyze
        uses: {codeql_analyze}
"""

DEPENDENCY_REVIEW_JOB = """\
  baseline-dependency-review:
    name: baseline-dependency-review
    if: ${{{{ github.event_name == 'pull_request' }}}}
    runs-on: ubuntu-latest
    steps:
      - name: Checkout
        uses: {checkout}
      - name: Dependency review
        uses: {dependency_review}
"""

NO_SECURITY_JOBS = """\
  baseline-code-scanning:
    name: baseline-code-scanning
    runs-on: ubuntu-latest
    steps:
      - name: Security checks disabled
        run: echo "Code scanning and dependency review are turned off in effective settings."
"""


def action(refs: dict[str, str], name: str) -> str:
    """``owner/repo[/path]@ref`` for an action, using its configured ref."""
    return f"{name}@{refs[name]}"


def scalar(value: str) -> str:
    """Render a config string as a double-quoted YAML scalar.

    JSON strings are valid YAML flow scalars, so quotes, colons and
    ``#`` in user values survive parsing unchanged.
    """
    return json.dumps(value)


def yaml_options(values: list[str], indent: int = 10) -> str:
    prefix = " " * indent
    return "\n".join(f"{prefix}- {scalar(value)}" for value in values)
