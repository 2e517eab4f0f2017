"""Round loop of the orchestrator.

A run is a small state machine:

    idle -> awaiting_response -> (processing_tool_calls -> awaiting_response)* -> done | failed

Each state has a step function that performs its work and returns the next
state. The service round-trip in ``step_generate`` is the only suspension
point besides tool I/O; tool calls of a round are dispatched strictly in the
order the model emitted them.
"""

import json
import time

from automation_agent.llm_client.types import (
    GenerateRequest,
    GenerationError,
    Role,
    TextPart,
    ToolResultPart,
    Turn,
)
from automation_agent.orchestrator.types import (
    TERMINAL_STATES,
    ExecutionContext,
    LoopState,
    OrchestratorComponents,
    RunResult,
)
from automation_agent.telemetry import (
    ITERATION_LIMIT_REACHED,
    ROUND_DISCARDED,
    ROUND_STARTED,
    RUN_COMPLETED,
    RUN_FAILED,
    RUN_INTERRUPTED,
    RUN_STARTED,
    STATE_TRANSITION,
    TraceContext,
    get_logger,
)

log = get_logger(__name__)


async def step_init(
    ctx: ExecutionContext, components: OrchestratorComponents, trace_ctx: TraceContext
) -> LoopState:
    """Append the user's message."""
    components.transcript.append(Turn.user_text(ctx.user_message))
    ctx.iteration = 0
    return LoopState.AWAITING_RESPONSE


async def _confirm_continuation(
    ctx: ExecutionContext, components: OrchestratorComponents
) -> bool:
    log.info(
        ITERATION_LIMIT_REACHED,
        trace_id=ctx.trace_id,
        max_iterations=components.max_iterations,
        rounds=ctx.rounds,
    )
    proceed = await components.reporter.prompt_continue(
        f"Reached the maximum number of rounds per request ({components.max_iterations}) "
        "and the task is not finished yet."
    )
    if proceed:
        ctx.iteration = 0
        return True

    ctx.interrupted = True
    components.reporter.report_error("Task interrupted by the user.")
    path = components.interrupted_snapshot_path
    if components.transcript.save(path):
        components.reporter.report_error(f"The conversation was saved to {path}.")
    else:
        components.reporter.report_error("Could not save the conversation.")
    log.warning(RUN_INTERRUPTED, trace_id=ctx.trace_id, rounds=ctx.rounds, snapshot=str(path))
    return False


async def step_generate(
    ctx: ExecutionContext, components: OrchestratorComponents, trace_ctx: TraceContext
) -> LoopState:
    """Run one service round-trip and append the model turn.

    Asks for confirmation first when the iteration bound has been reached.
    """
    if ctx.iteration >= components.max_iterations:
        if not await _confirm_continuation(ctx, components):
            return LoopState.FAILED

    ctx.iteration += 1
    ctx.rounds += 1

    # The tier is fixed for the whole round
    ctx.round_tier = components.tiers.active
    client = components.tiers.client
    declarations = components.registry.declarations(ctx.round_tier)

    log.info(
        ROUND_STARTED,
        trace_id=ctx.trace_id,
        iteration=ctx.iteration,
        round=ctx.rounds,
        tier=ctx.round_tier.value,
        model=client.model_name,
        tools_count=len(declarations),
    )
    components.reporter.report_thinking(ctx.iteration, client.model_name)

    request = GenerateRequest(
        contents=components.transcript.turns,
        tools=declarations,
        system_instruction=components.system_instruction,
    )
    start_time = time.time()
    response = await client.generate(request, trace_ctx=trace_ctx)
    duration_ms = int((time.time() - start_time) * 1000)
    components.usage.record_usage(
        response.model_name or client.model_name, duration_ms, response.usage, trace_id=ctx.trace_id
    )

    turn = response.turn
    components.transcript.append(turn)
    ctx.response = turn

    for part in turn.parts:
        if isinstance(part, TextPart):
            components.reporter.report_text(part.text, client.model_name)

    if not turn.tool_calls:
        ctx.reply = turn.text
        return LoopState.DONE
    return LoopState.PROCESSING_TOOL_CALLS


async def step_tool_calls(
    ctx: ExecutionContext, components: OrchestratorComponents, trace_ctx: TraceContext
) -> LoopState:
    """Dispatch the round's tool calls and append their results.

    Appends one ``tool`` turn with the results in request order, then one
    ``user`` turn per binary result. A round whose only call switched the
    tier is removed from the transcript again.
    """
    if ctx.response is None:
        raise RuntimeError("No model turn to process")

    calls = ctx.response.tool_calls
    results: list[ToolResultPart] = []
    followups: list[Turn] = []

    for call in calls:
        components.reporter.report_tool_call(
            call.name, json.dumps(call.arguments, ensure_ascii=False)
        )
        result = await components.registry.dispatch(call.name, call.arguments, trace_ctx=trace_ctx)
        ctx.tool_calls.append(call.name)
        components.usage.record_action(call.name, result.text)

        injection = components.injector.inject(result)
        results.append(injection.part)
        if injection.followup is not None:
            followups.append(injection.followup)
        components.reporter.report_tool_result(injection.summary)

    components.transcript.append(Turn(role=Role.TOOL, parts=results))
    for followup in followups:
        components.transcript.append(followup)

    if len(calls) == 1 and components.tiers.active is not ctx.round_tier:
        components.transcript.rollback(2 + len(followups))
        log.info(
            ROUND_DISCARDED,
            trace_id=ctx.trace_id,
            round=ctx.rounds,
            tool_name=calls[0].name,
            from_tier=ctx.round_tier.value if ctx.round_tier else None,
            to_tier=components.tiers.active.value,
        )

    ctx.response = None
    return LoopState.AWAITING_RESPONSE


def handle_failure(
    ctx: ExecutionContext, components: OrchestratorComponents, error: Exception
) -> LoopState:
    """Roll back a dangling model turn, write the recovery snapshot and report."""
    ctx.error = error
    components.transcript.rollback_dangling_model_turn()
    components.usage.record_error(f"Agent error: {error}")
    components.reporter.report_error(str(error))

    path = components.recovery_snapshot_path
    if components.transcript.save(path):
        components.reporter.report_error(
            f"The conversation was backed up to {path}. Use /load {path} to reload it and retry."
        )
    else:
        components.reporter.report_error("Could not back up the conversation.")
    return LoopState.FAILED


async def execute_run(ctx: ExecutionContext, components: OrchestratorComponents) -> ExecutionContext:
    """Main execution loop: iterate states until terminal.

    Args:
        ctx: Execution context of this run.
        components: Collaborators of the orchestrator.

    Returns:
        Updated execution context after the state machine completed.
    """
    state = ctx.state
    trace_ctx = TraceContext(trace_id=ctx.trace_id)

    log.info(
        RUN_STARTED,
        trace_id=ctx.trace_id,
        user_message=ctx.user_message,
        transcript_turns=len(components.transcript),
    )

    step_functions = {
        LoopState.IDLE: step_init,
        LoopState.AWAITING_RESPONSE: step_generate,
        LoopState.PROCESSING_TOOL_CALLS: step_tool_calls,
    }

    while state not in TERMINAL_STATES:
        log.debug(STATE_TRANSITION, trace_id=ctx.trace_id, from_state=state.value)
        ctx.state = state
        try:
            state = await step_functions[state](ctx, components, trace_ctx)
        except GenerationError as e:
            state = handle_failure(ctx, components, e)
        except Exception as e:
            log.error(
                "round_unexpected_error",
                trace_id=ctx.trace_id,
                state=state.value,
                error_type=type(e).__name__,
                exc_info=True,
            )
            state = handle_failure(ctx, components, e)

    ctx.state = state
    if state is LoopState.DONE:
        log.info(
            RUN_COMPLETED,
            trace_id=ctx.trace_id,
            rounds=ctx.rounds,
            reply_length=len(ctx.reply),
            tool_calls=len(ctx.tool_calls),
        )
    else:
        log.warning(
            RUN_FAILED,
            trace_id=ctx.trace_id,
            rounds=ctx.rounds,
            interrupted=ctx.interrupted,
            error=str(ctx.error) if ctx.error else None,
            error_type=type(ctx.error).__name__ if ctx.error else None,
        )
    return ctx


def build_result(ctx: ExecutionContext) -> RunResult:
    """Convert a finished execution context into a RunResult."""
    return RunResult(
        state=ctx.state,
        text=ctx.reply,
        rounds=ctx.rounds,
        error=ctx.error,
        interrupted=ctx.interrupted,
        trace_id=ctx.trace_id,
        tool_calls=list(ctx.tool_calls),
    )
