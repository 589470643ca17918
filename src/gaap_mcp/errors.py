class GaapError(Exception):
    """Base class for faults raised by the bridge itself."""


class MissingConfigurationError(GaapError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            "Missing required environment variable"
            f"{'s' if len(missing) > 1 else ''}: {', '.join(missing)}"
        )


class UnknownToolError(GaapError):
    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown tool '{name}'. Available tools: {', '.join(available)}")


class ToolCallError(GaapError):
    """Raised from the MCP tool handler; the SDK reports it as an isError result."""
