"""Policy derivation for branches, reviewers, deployments, effective settings and gates."""
