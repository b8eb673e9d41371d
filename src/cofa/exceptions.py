"""Custom exception hierarchy for the cofa package."""


class CofaError(Exception):
    """Base exception for all cofa errors."""


class ConfigurationError(CofaError):
    """Missing or invalid configuration."""


class ClusterNotFoundError(CofaError):
    """Requested cluster id is absent from the current snapshot."""

    def __init__(self, cluster_id: str) -> None:
        self.cluster_id = cluster_id
        super().__init__(f"Cluster {cluster_id} not found")


class UnknownToolError(CofaError):
    """Tool name is not registered in the tool registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")
