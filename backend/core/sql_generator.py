"""
SQL generation orchestrator — drives the model through schema grounding,
tool-assisted table sampling and structured JSON output.

    AWAITING_MODEL → {TOOL_CALL_PENDING → AWAITING_MODEL}* → TERMINAL(result)

Each call owns its conversation. Tool calls are served one at a time, in the
order the model listed them. Only unusable final content is tolerated (the loop
simply asks again); everything else propagates. The loop is bounded by max_turns.
"""
import json
import logging
import re
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from config import settings
from core.errors import AppError, MalformedOutputError, MaxTurnsExceededError
from core.progress import ProgressEmitter
from core.prompt_builder import build_initial_prompt, build_followup_prompt
from core.tool_executor import SAMPLE_TABLE, ToolExecutor
from models.chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    Message,
    ToolChoice,
    ToolChoiceFunction,
)
from models.display import GenerationResult, QueryContext

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```json\s*|\s*```")


class ModelGateway(Protocol):
    def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        ...


class SchemaSource(Protocol):
    def get_formatted_schema(self, connection_string: str) -> str:
        ...


def parse_final_content(content: str) -> GenerationResult:
    """Strip Markdown fences and validate the {"display": [...]} payload."""
    cleaned = _FENCE_RE.sub("", content).strip()
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise MalformedOutputError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("display"), list):
        raise MalformedOutputError("Response has no display array")
    if not data["display"]:
        raise MalformedOutputError("Response display array is empty")
    try:
        return GenerationResult.model_validate(data)
    except ValidationError as e:
        raise MalformedOutputError(f"Invalid display config: {e}") from e


class SqlGenerator:
    def __init__(
        self,
        schema_provider: SchemaSource,
        gateway: ModelGateway,
        tool_executor: ToolExecutor,
        max_turns: Optional[int] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ):
        self.schema_provider = schema_provider
        self.gateway = gateway
        self.tool_executor = tool_executor
        self.max_turns = max_turns or settings.GENERATION_MAX_TURNS
        self.temperature = settings.GENERATION_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.GENERATION_MAX_TOKENS
        self.model = model

    def generate_sql(
        self,
        query: str,
        connection_string: str,
        progress: Optional[ProgressEmitter] = None,
    ) -> GenerationResult:
        """Fresh generation. The first model turn is forced to sample a table."""
        schema_text = self.schema_provider.get_formatted_schema(connection_string)
        messages = [
            Message(role="system", content=build_initial_prompt(schema_text)),
            Message(role="user", content=query),
        ]
        return self._run(
            messages,
            connection_string,
            progress or ProgressEmitter(),
            force_sampling=True,
            status="Generating SQL query...",
            final_status="Finalizing SQL queries",
        )

    def generate_followup_sql(
        self,
        followup_instruction: str,
        previous_context: QueryContext,
        connection_string: str,
        progress: Optional[ProgressEmitter] = None,
    ) -> GenerationResult:
        """Amend a previous result set. The model decides whether to sample at all."""
        schema_text = self.schema_provider.get_formatted_schema(connection_string)
        system = build_followup_prompt(followup_instruction, previous_context, schema_text)
        messages = [
            Message(role="system", content=system),
            Message(role="user", content=followup_instruction),
        ]
        return self._run(
            messages,
            connection_string,
            progress or ProgressEmitter(),
            force_sampling=False,
            status="Processing follow-up instruction...",
            final_status="Finalizing SQL queries for follow-up",
        )

    @staticmethod
    def _tool_choice(turn: int, force_sampling: bool) -> Union[str, ToolChoice]:
        if force_sampling and turn == 1:
            return ToolChoice(function=ToolChoiceFunction(name=SAMPLE_TABLE))
        return "auto"

    def _run(
        self,
        messages: list[Message],
        connection_string: str,
        progress: ProgressEmitter,
        force_sampling: bool,
        status: str,
        final_status: str,
    ) -> GenerationResult:
        tools = self.tool_executor.get_tool_definitions()
        try:
            for turn in range(1, self.max_turns + 1):
                progress.emit("generating", status)

                request = ChatCompletionRequest(
                    messages=list(messages),
                    tools=tools,
                    tool_choice=self._tool_choice(turn, force_sampling),
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    model=self.model,
                )
                reply = self.gateway.chat_completion(request).choices[0].message

                # Appended even when the reply has no content
                messages.append(Message(role="assistant", content=reply.content, tool_calls=reply.tool_calls))

                if reply.tool_calls:
                    logger.info("Tool calls detected: %s", [tc.function.name for tc in reply.tool_calls])
                    for tool_call in reply.tool_calls:
                        result = self.tool_executor.handle_tool_call(tool_call, connection_string, progress)
                        messages.append(Message(
                            role="tool",
                            content=result.content,
                            tool_call_id=result.tool_call_id,
                            name=result.name,
                        ))
                    continue

                if reply.content:
                    try:
                        result = parse_final_content(reply.content)
                    except MalformedOutputError as e:
                        logger.warning(
                            "Unusable model output on turn %d/%d: %s | %s",
                            turn, self.max_turns, e, reply.content[:500],
                        )
                        continue
                    progress.emit("finalizing", final_status)
                    return result

                logger.warning("Empty model turn %d/%d", turn, self.max_turns)

            raise MaxTurnsExceededError(self.max_turns)
        except AppError as e:
            logger.error("Error generating SQL: %s", e)
            raise
