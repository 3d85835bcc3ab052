"""Domain layer: submission models and orchestration services."""
