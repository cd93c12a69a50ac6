"""
Tool Registry

Maps each tool name to its handler, its pydantic arguments model and the JSON
input schema published in the manifest. Tool modules register themselves with
the module-level `registry` through the `registry.tool(...)` decorator; the
server reads the manifest from it and dispatches through it. Services can be
disabled at startup, which hides their tools from both.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Type

from pydantic import BaseModel, ConfigDict, ValidationError

from core.errors import InvalidArgumentsError, UnknownToolError

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]


class ToolArguments(BaseModel):
    """
    Base class for tool arguments.

    Fields are snake_case and aliased to the camelCase names of the manifest.
    Validation is strict (no "3" -> 3 coercion) and unknown keys are ignored.
    """

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore", frozen=True)


def _describe_validation_error(tool_name: str, error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "arguments"
    if first["type"] == "missing":
        return f"Missing required argument '{location}' for tool {tool_name}"
    return f"Argument '{location}' for tool {tool_name} is invalid: {first['msg']}"


@dataclass(frozen=True)
class ToolSpec:
    """A single tool: its public description and the coroutine that runs it."""

    name: str
    description: str
    input_schema: Dict[str, Any]
    args_model: Type[ToolArguments]
    handler: Handler
    service: str

    def manifest_entry(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def parse_arguments(self, args: Dict[str, Any]) -> ToolArguments:
        """
        Validate raw arguments into the tool's arguments model.

        Raises:
            InvalidArgumentsError: On the first validation error pydantic reports.
        """
        try:
            return self.args_model.model_validate(args)
        except ValidationError as e:
            raise InvalidArgumentsError(_describe_validation_error(self.name, e)) from e


class ToolRegistry:
    def __init__(self):
        self._tools: Dict[str, ToolSpec] = {}
        self._enabled_services: Optional[Set[str]] = None

    def tool(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        args_model: Type[ToolArguments],
        service: str,
    ):
        """
        Decorator that registers a handler under the given tool name.

        Args:
            name: Public tool name, e.g. 'sheets.get_values'.
            description: One-line description shown in the manifest.
            input_schema: JSON schema of the tool's arguments object, as published.
            args_model: Model the arguments are validated into before the handler runs.
            service: Service the tool belongs to ('sheets' or 'drive'), used for filtering.
        """

        def decorator(func: Handler) -> Handler:
            if name in self._tools:
                raise ValueError(f"Tool '{name}' is already registered")
            self._tools[name] = ToolSpec(
                name=name,
                description=description,
                input_schema=input_schema,
                args_model=args_model,
                handler=func,
                service=service,
            )
            logger.debug(f"Registering tool: {name}")
            return func

        return decorator

    def set_enabled_services(self, services: Optional[Set[str]]) -> None:
        """Restrict the registry to the given services. None enables everything."""
        self._enabled_services = set(services) if services is not None else None
        if services is not None:
            logger.info(f"Enabled services: {', '.join(sorted(services))}")

    def is_tool_enabled(self, spec: ToolSpec) -> bool:
        if self._enabled_services is None:
            return True
        return spec.service in self._enabled_services

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None or not self.is_tool_enabled(spec):
            raise UnknownToolError(f"Unknown tool: {name}")
        return spec

    def names(self) -> List[str]:
        return [name for name, spec in self._tools.items() if self.is_tool_enabled(spec)]

    def manifest_tools(self) -> List[Dict[str, Any]]:
        """Manifest entries for every enabled tool, in registration order."""
        return [spec.manifest_entry() for spec in self._tools.values() if self.is_tool_enabled(spec)]


# Global registry the tool modules register into
registry = ToolRegistry()
