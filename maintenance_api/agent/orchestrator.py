"""
Chat orchestration: answer locally when we can, otherwise ask the LLM.

Flow for one request (nothing is kept between requests):

    resolve flight context → classify → confident summary? ── yes → templated reply
                                                            └─ no  → enrich system prompt → provider

Confident squadron questions never reach the provider: the numbers come
straight from the aggregator, so they're exact, instant and free. Everything
else is forwarded with the relevant slice of the dataset embedded in the
system prompt so the model doesn't have to guess.

Every step is written to the audit log after the step's outcome is known.
Audit writes never raise, so they can't change the reply. Failures outside the
error taxonomy are recorded as "internal-error" before they propagate.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Sequence

from fastapi.concurrency import run_in_threadpool
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    ChatMessage,
    HumanMessage,
    SystemMessage,
)
from pydantic import ValidationError

from maintenance_api.agent.aggregator import aggregate, pct, summarize_flight
from maintenance_api.agent.classifier import (
    GREETING_POLICY,
    SQUADRON_POLICY,
    IntentPolicy,
    classify,
    is_confident,
)
from maintenance_api.agent.llm import CompletionClient
from maintenance_api.agent.prompts import SQUADRON_INSTRUCTION, load_prompts, select_prompt
from maintenance_api.config import Settings
from maintenance_api.errors import BadRequest, MaintenanceAPIError, StorageError
from maintenance_api.models.chat import ChatRequest, ClassificationResult, HistoryTurn
from maintenance_api.models.flight import Flight, SquadronSummary
from maintenance_api.storage import AuditLog, FlightStore

logger = logging.getLogger("maintenance-api.chat")

# Caps on what goes into the system prompt, to keep the payload small.
MAX_CONTEXT_COMPONENTS = 80
MAX_LISTED_FLIGHTS = 10

GREETING_REPLY = "Hello! I am your AI for BI assistant. How can I help you today?"

_ROLE_MESSAGES = {"system": SystemMessage, "user": HumanMessage, "assistant": AIMessage}


@dataclass(frozen=True)
class ChatContext:
    """Per-process collaborators of the orchestrators. Built once, read-only after."""

    store: FlightStore
    audit: AuditLog
    prompts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings, log_name: str = "ai.log") -> "ChatContext":
        return cls(
            store=FlightStore(settings),
            audit=AuditLog(settings.log_dir / log_name),
            prompts=load_prompts(settings.prompts_file),
        )


@dataclass
class FlightData:
    """Snapshot of the data a single chat request works from."""

    flights: list[Flight]
    flight: Flight | None = None


def history_messages(history: Sequence[HistoryTurn]) -> list[BaseMessage]:
    """Prior turns as chat messages; turns missing a role or content are dropped."""
    messages: list[BaseMessage] = []
    for turn in history:
        if not turn.role or not turn.content:
            continue
        message_cls = _ROLE_MESSAGES.get(turn.role)
        if message_cls is None:
            messages.append(ChatMessage(role=turn.role, content=turn.content))
        else:
            messages.append(message_cls(content=turn.content))
    return messages


class ChatOrchestrator:
    """Squadron assistant: local summaries, Azure OpenAI for the rest."""

    policy: IntentPolicy = SQUADRON_POLICY

    def __init__(self, context: ChatContext, client: CompletionClient):
        self.context = context
        self.client = client

    @property
    def audit(self) -> AuditLog:
        return self.context.audit

    async def handle(self, request: ChatRequest) -> str:
        """Answer one chat request. Anything unexpected is audited, then re-raised."""
        try:
            return await self.respond(request)
        except MaintenanceAPIError:
            raise
        except Exception as e:
            await self.record("internal-error", kind=type(e).__name__, detail=str(e)[:1000])
            raise

    async def record(self, event: str, **fields) -> None:
        """Audit append on a worker thread; file writes stay off the event loop."""
        await run_in_threadpool(self.audit.append, event, **fields)

    async def respond(self, request: ChatRequest) -> str:
        message = request.message
        if not message:
            raise BadRequest("missing message")

        await self.record(
            "request",
            message=message[:512],
            flightId=request.flightId,
            promptId=request.promptId,
        )
        logger.info(
            "request flight=%s prompt=%s msg=%r",
            request.flightId or "<none>",
            request.promptId or "default",
            message[:120].replace("\n", " "),
        )

        data = await run_in_threadpool(self.load_data, request.flightId)

        cls = classify(message, self.policy)
        await self.record("classification", message=message[:256], classification=cls.model_dump())
        logger.info(
            "classification intent=%s confidence=%.2f flightMention=%s",
            cls.intent,
            cls.confidence,
            cls.flightIdMention,
        )

        if is_confident(cls, self.policy):
            reply = self.local_reply(data)
            await self.record(
                "local-reply",
                flightId=request.flightId,
                message=message[:512],
                reply=reply[:2000],
            )
            logger.info("answered locally (%s)", cls.intent)
            return reply

        messages = self.compose(request, cls, data)
        try:
            reply = await self.client.complete(messages)
        except MaintenanceAPIError as e:
            await self.record("ai-error", kind=type(e).__name__, detail=str(e.detail)[:1000])
            raise
        await self.record("ai-reply", reply=reply[:2000])
        return reply

    # --- Steps ---

    def load_data(self, flight_id: str | None) -> FlightData:
        """Current flights plus the selected aircraft, if it can be found.

        An unreadable master file degrades to an empty squadron rather than
        failing the chat; the selected aircraft may still come from its override.
        """
        store = self.context.store
        try:
            flights = store.load_flights()
        except StorageError as e:
            logger.warning("Chat continuing without flight data: %s", e.detail)
            flights = []

        flight = None
        if flight_id:
            try:
                record = store.get_flight(flight_id)
            except (BadRequest, StorageError) as e:
                logger.warning("No context for flight %s: %s", flight_id, e.message)
                record = None
            if isinstance(record, dict):
                try:
                    flight = Flight.model_validate(record)
                except ValidationError as e:
                    logger.warning("Malformed record for flight %s: %s", flight_id, e)
        return FlightData(flights=flights, flight=flight)

    def local_reply(self, data: FlightData) -> str:
        squad = aggregate(data.flights)
        if data.flight is not None:
            return render_flight_scoped_reply(data.flight, squad)
        return render_squadron_reply(squad)

    def compose(
        self, request: ChatRequest, cls: ClassificationResult, data: FlightData
    ) -> list[BaseMessage]:
        system_prompt = self.system_prompt(request, cls, data)
        messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        messages.extend(history_messages(request.history))
        messages.append(HumanMessage(content=request.message))
        return messages

    def system_prompt(self, request: ChatRequest, cls: ClassificationResult, data: FlightData) -> str:
        prompt = select_prompt(self.context.prompts, request.promptId)

        leans_summary = cls.intent == self.policy.label
        if leans_summary:
            prompt = SQUADRON_INSTRUCTION + "\n\n" + prompt

        flight = data.flight
        if flight is not None:
            components = [
                c.model_dump(include={"id", "displayName", "componentName", "status", "maintenanceDue"})
                for c in flight.components[:MAX_CONTEXT_COMPONENTS]
            ]
            prompt += (
                f"\n\nFlight context (id: {flight.id}, displayName: {flight.displayName or ''}): "
                f"{json.dumps({'components': components})}"
            )
            if leans_summary:
                summary = summarize_flight(flight)
                prompt += f"\n\nLocal flight summary: worstStatus={summary.worstStatus}; keyIssue={summary.keyIssue}"
        else:
            listed = [{"id": f.id, "displayName": f.displayName} for f in data.flights[:MAX_LISTED_FLIGHTS]]
            squad = aggregate(data.flights)
            prompt += f"\n\nAvailable flights: {json.dumps(listed)}\n\n{squadron_summary_line(squad)}"
            if leans_summary:
                prompt += f"\n\nLocal squadron critical IDs: {json.dumps(squad.nonDeployableIds)}"
        return prompt


class GreetingOrchestrator(ChatOrchestrator):
    """Alternate assistant backed by Neuro-SAN; only greetings are answered locally."""

    policy = GREETING_POLICY

    def load_data(self, flight_id: str | None) -> FlightData:
        return FlightData(flights=[])

    def local_reply(self, data: FlightData) -> str:
        return GREETING_REPLY

    def compose(
        self, request: ChatRequest, cls: ClassificationResult, data: FlightData
    ) -> list[BaseMessage]:
        messages = history_messages(request.history)
        messages.append(HumanMessage(content=request.message))
        return messages


# --- Templates ---


def squadron_summary_line(squad: SquadronSummary) -> str:
    return (
        f"Squadron summary: totalFlights={squad.totalFlights}; "
        f"flightsAllGood={squad.flightsAllGood}; "
        f"flightsWithWarnings={squad.flightsWithWarnings}; "
        f"flightsWithCritical={squad.flightsWithCritical}; "
        f"deployable={squad.deployableCount} ({squad.deployablePct}%); "
        f"inServiceOrMaintenancePlanned={squad.inServiceCount}."
    )


def render_squadron_reply(squad: SquadronSummary) -> str:
    lines = [
        "Squadron summary (from local data):",
        f"- Total aircraft: {squad.totalFlights}",
        f"- Flights all good: {squad.flightsAllGood}",
        f"- Flights with warnings: {squad.flightsWithWarnings}",
        f"- Flights with critical issues: {squad.flightsWithCritical}",
        f"- Deployable: {squad.deployableCount} ({squad.deployablePct}%)",
        f"- In-service/maintenance planned: {squad.inServiceCount}",
    ]
    if squad.nonDeployableIds:
        lines.append(f"- Non-deployable IDs: {json.dumps(squad.nonDeployableIds)}")
    lines.append("")
    lines.append("If you want details for a specific aircraft, mention its flight id (for example: A400-03).")
    return "\n".join(lines)


def render_flight_scoped_reply(flight: Flight, squad: SquadronSummary) -> str:
    summary = summarize_flight(flight)
    name = flight.displayName or flight.id
    critical_pct = pct(squad.flightsWithCritical, squad.totalFlights)
    state = "non-deployable" if summary.worstStatus == "Critical" else "deployable"
    return (
        f"Context: {flight.id}\n\n"
        f"I’m currently scoped to {name}. Do you want:\n"
        f"- A: a short summary for this selected aircraft, or\n"
        f"- B: a squadron-level summary (aggregate across all flights)?\n\n"
        f"If you want the squadron summary now, here's the latest from the dataset:\n"
        f"- Total aircraft: {squad.totalFlights}\n"
        f"- Deployable (no Critical components): {squad.deployableCount} ({squad.deployablePct}%)\n"
        f"- Non-deployable (≥ 1 Critical): {squad.flightsWithCritical} ({critical_pct}%) "
        f"IDs: {json.dumps(squad.nonDeployableIds)}\n\n"
        f"Quick summary for {flight.id}:\n"
        f"- Worst status: {summary.worstStatus}\n"
        f"- Key issue: {summary.keyIssue} Aircraft is {state} until the issue is resolved.\n\n"
        f"Tell me which view you want (A or B), or ask for per-component details for {flight.id}."
    )
