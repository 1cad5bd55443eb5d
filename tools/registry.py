"""
Tool registry with automatic discovery.

Scans a package for concrete ChallengeTool subclasses and registers one
instance of each by name.
"""

import importlib
import inspect
import logging
import pkgutil

from tools.base import ChallengeTool

logger = logging.getLogger(__name__)

DEFAULT_TOOL_PACKAGE = "tools.challenges"


class ToolRegistry:
    """
    Registry for challenge tools.

    Usage:
        registry = ToolRegistry()
        registry.discover()

        tool = registry.get("evaluate_challenge")
        result = tool(challenge_id="sm4-01-slice-breaks", sampler={...})
    """

    def __init__(self) -> None:
        self._tools: dict[str, ChallengeTool] = {}

    def register(self, tool: ChallengeTool) -> None:
        """
        Register a tool instance.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ChallengeTool | None:
        """Return the tool registered under ``name``, or None."""
        return self._tools.get(name)

    def list_tools(self) -> list[dict]:
        """Serialized descriptions of every registered tool, sorted by name."""
        return [self._tools[name].to_dict() for name in sorted(self._tools)]

    def discover(self, package_name: str = DEFAULT_TOOL_PACKAGE) -> int:
        """
        Register every concrete ChallengeTool subclass defined in the package.

        Classes are registered only from the module that defines them, so a
        tool imported into another module is not registered twice.

        Args:
            package_name: Package to scan

        Returns:
            Number of tools discovered (0 if the package cannot be imported)
        """
        try:
            package = importlib.import_module(package_name)
        except ImportError:
            return 0
        if not hasattr(package, "__path__"):
            return 0

        count = 0

        for _finder, module_name, _is_pkg in pkgutil.walk_packages(
            package.__path__, prefix=f"{package_name}."
        ):
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                logger.warning("Skipping tool module %s: import failed", module_name, exc_info=True)
                continue

            for _name, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, ChallengeTool)
                    and obj is not ChallengeTool
                    and not inspect.isabstract(obj)
                    and obj.__module__ == module.__name__
                ):
                    self.register(obj())
                    count += 1

        logger.debug("Discovered %d tools in %s", count, package_name)
        return count

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


_registry: ToolRegistry | None = None


def get_registry() -> ToolRegistry:
    """
    Global tool registry singleton, discovered on first call.
    """
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
        _registry.discover()
    return _registry
