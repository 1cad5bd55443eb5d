"""
Tool base class and common types.

Every challenge tool inherits from ChallengeTool and implements execute().
The shared __call__ validates inputs and turns failures into a
ToolResult, so callers (registry, CLI, agents) never see an exception.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolParameter:
    """
    Tool parameter specification.

    Attributes:
        name: Parameter name
        type: Accepted Python type
        description: Human-readable description for tool selection
        required: Whether parameter is required
        default: Default value if not required
    """

    name: str
    type: type
    description: str
    required: bool = True
    default: Any = None

    @property
    def type_name(self) -> str:
        return self.type.__name__

    def validate(self, value: Any) -> tuple[bool, str | None]:
        """
        Validate one parameter value.

        bool is rejected where a number is expected: True is an int in
        Python, but never a meaningful count or score.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if value is None:
            if self.required:
                return False, f"Required parameter '{self.name}' is missing"
            return True, None

        wrong_bool = isinstance(value, bool) and self.type is not bool
        if wrong_bool or not isinstance(value, self.type):
            return (
                False,
                f"Parameter '{self.name}' must be {self.type_name}, got {type(value).__name__}",
            )

        return True, None


@dataclass(frozen=True)
class ToolResult:
    """
    Result from tool execution.

    Attributes:
        success: Whether execution succeeded
        data: JSON-ready result payload
        error: Error message if success=False
        metadata: Optional metadata (challenge id, type, ...)
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] | None = None


class ChallengeTool(ABC):
    """
    Abstract base class for challenge tools.

    Challenge tools are deterministic wrappers around the evaluation engine
    and the bundled catalogue: no network, no persistence.

    Subclasses must implement:
        - name: Unique tool identifier
        - description: What the tool does and when to call it
        - parameters: List of ToolParameter specs
        - execute(): Core tool logic
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool identifier (lowercase, underscores)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Description used for tool selection. Name the inputs and the output."""

    @property
    @abstractmethod
    def parameters(self) -> list[ToolParameter]:
        """Parameters this tool accepts, required ones first."""

    def validate_inputs(self, **kwargs: Any) -> tuple[bool, str | None]:
        """
        Validate all input parameters, stopping at the first failure.

        Returns:
            Tuple of (is_valid, error_message)
        """
        for param in self.parameters:
            is_valid, error = param.validate(kwargs.get(param.name))
            if not is_valid:
                return False, error
        return True, None

    @abstractmethod
    def execute(self, **kwargs: Any) -> ToolResult:
        """Run the tool with already-validated parameters."""

    def __call__(self, **kwargs: Any) -> ToolResult:
        """
        Validate inputs, then execute.

        Returns:
            ToolResult; validation errors and unexpected exceptions become
            success=False results.
        """
        is_valid, error = self.validate_inputs(**kwargs)
        if not is_valid:
            return ToolResult(success=False, error=error)

        try:
            return self.execute(**kwargs)
        except Exception as e:
            logger.exception("Tool %s failed", self.name)
            return ToolResult(success=False, error=f"Tool execution failed: {e}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize the tool's name, description and parameters."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type_name,
                    "description": p.description,
                    "required": p.required,
                    "default": p.default,
                }
                for p in self.parameters
            ],
        }
