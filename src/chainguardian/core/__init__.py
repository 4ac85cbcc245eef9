"""Core risk assessment pipeline: inventory, registries, evaluation, SBOM, orchestration."""
