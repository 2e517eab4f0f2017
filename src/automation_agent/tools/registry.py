"""Capability registry for tool discovery and dispatch.

This module provides the CapabilityRegistry that holds capability modules in
registration order, aggregates their tool declarations, and routes tool calls
to the first module that handles them.
"""

import time
from typing import Any

from automation_agent.llm_client.types import ModelTier
from automation_agent.telemetry import (
    TOOL_CALL_COMPLETED,
    TOOL_CALL_FAILED,
    TOOL_CALL_STARTED,
    TOOL_UNKNOWN,
    TraceContext,
    get_logger,
)
from automation_agent.tools.base import CapabilityModule
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolExecutionError

log = get_logger(__name__)


class CapabilityRegistry:
    """Ordered collection of capability modules.

    Module order matters: declarations are concatenated in registration order
    and a call is routed to the first module that does not answer NotHandled.
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._modules: list[CapabilityModule] = []
        log.debug("capability_registry_initialized")

    def register(self, module: CapabilityModule) -> None:
        """Append a capability module.

        Args:
            module: Module instance to register.

        Raises:
            ValueError: If the same module instance is already registered.
        """
        if any(existing is module for existing in self._modules):
            raise ValueError(f"Module '{module.name}' is already registered")
        self._modules.append(module)
        log.debug("capability_module_registered", module=module.name, position=len(self._modules))

    @property
    def modules(self) -> tuple[CapabilityModule, ...]:
        """Registered modules, in registration order."""
        return tuple(self._modules)

    def declarations(self, tier: ModelTier) -> list[ToolDeclaration]:
        """Tool declarations of all modules for the given tier.

        Args:
            tier: Active model tier.

        Returns:
            Concatenated declarations in registration order.
        """
        return [decl for module in self._modules for decl in module.declare_tools(tier)]

    async def _dispatch_to_module(
        self, module: CapabilityModule, name: str, arguments: dict[str, Any]
    ) -> ToolCallResult | None:
        try:
            return await module.dispatch(name, arguments)
        except ToolExecutionError:
            raise
        except Exception as e:
            raise ToolExecutionError(name, e) from e

    async def dispatch(
        self,
        name: str,
        arguments: dict[str, Any],
        trace_ctx: TraceContext | None = None,
    ) -> ToolCallResult:
        """Execute a tool call.

        Never raises for tool failures: an unknown name or a module exception
        is turned into an error result the model can read.

        Args:
            name: Tool name requested by the model.
            arguments: Tool arguments.
            trace_ctx: Trace context for telemetry.

        Returns:
            ToolCallResult of the handling module, or an error result.
        """
        if trace_ctx is None:
            trace_ctx = TraceContext.new_trace()
        _, span_id = trace_ctx.new_span()

        log.info(
            TOOL_CALL_STARTED,
            tool_name=name,
            arguments=arguments,
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )
        start_time = time.time()

        for module in self._modules:
            try:
                result = await self._dispatch_to_module(module, name, arguments)
            except ToolExecutionError as e:
                latency_ms = (time.time() - start_time) * 1000
                log.error(
                    TOOL_CALL_FAILED,
                    tool_name=name,
                    module=module.name,
                    error=str(e.cause),
                    latency_ms=latency_ms,
                    trace_id=trace_ctx.trace_id,
                    span_id=span_id,
                    exc_info=True,
                )
                return ToolCallResult.error(name, str(e))

            if result is None:
                continue

            log.info(
                TOOL_CALL_COMPLETED,
                tool_name=name,
                module=module.name,
                success=not result.is_error,
                has_binary=result.binary is not None,
                latency_ms=(time.time() - start_time) * 1000,
                trace_id=trace_ctx.trace_id,
                span_id=span_id,
            )
            return result

        log.warning(
            TOOL_UNKNOWN,
            tool_name=name,
            registered_modules=[module.name for module in self._modules],
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )
        return ToolCallResult.error(name, f"Error: Unknown tool '{name}'.")
