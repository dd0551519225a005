"""Workflow engine driving drafts through their approval states."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Set, TypeVar

from pydantic import ValidationError

from .contracts import (
    ActorRole,
    AvailableTransition,
    Draft,
    DraftStatus,
    ErrorKind,
    HistoryEntry,
    ListingContext,
    TransitionParams,
    TransitionResult,
    utcnow,
)
from .exceptions import InfrastructureError
from .notifications import NotificationDispatcher, NotificationSpec, notification_for
from .persistence import DraftRepository
from .registry import available_transitions, get_transition

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ListingContextProvider(Protocol):
    """Supplies source listing data for a draft."""

    async def get_context(self, draft: Draft) -> Optional[ListingContext]:
        """Return the listing context for ``draft`` if one is known."""


class WorkflowEngine:
    """Executes guarded, role-checked transitions on drafts.

    The engine owns every status change. Collaborators are injected: the
    repository stores drafts and history, the dispatcher delivers
    notifications, and the optional context provider supplies listing data
    for the ``validate`` guard.
    """

    def __init__(
        self,
        repository: DraftRepository,
        dispatcher: Optional[NotificationDispatcher] = None,
        context_provider: Optional[ListingContextProvider] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._dispatcher = dispatcher
        self._context_provider = context_provider
        self._clock = clock
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    async def execute(
        self,
        draft_id: str,
        transition_name: str,
        actor_id: str,
        actor_role: ActorRole | str,
        params: Optional[Mapping[str, Any]] = None,
        context: ListingContext | Mapping[str, Any] | None = None,
    ) -> TransitionResult:
        """Run ``transition_name`` on a draft on behalf of an actor.

        Args:
            draft_id: Draft to transition.
            transition_name: Registered transition name.
            actor_id: Identifier recorded in the history entry.
            actor_role: Role the actor is acting as.
            params: Transition parameters (generation output, comments,
                channels, ...). Snake or camel case keys are accepted.
            context: Listing data for guards. Falls back to
                ``params["listing"]`` and then to the context provider.

        Returns:
            A successful result carrying the updated draft, or a failed result
            describing the domain error. Failed results never change the draft.

        Raises:
            InfrastructureError: If the repository fails.
        """

        transition = get_transition(transition_name)
        if transition is None:
            return self._reject(
                ErrorKind.UNKNOWN_TRANSITION,
                f"Unknown transition: {transition_name}",
                transition=transition_name,
            )

        role = ActorRole.parse(actor_role)
        if role is None or not transition.allows(role):
            required = ", ".join(sorted(r.value for r in transition.roles))
            role_name = role.value if role else actor_role
            return self._reject(
                ErrorKind.UNAUTHORIZED,
                f"Role '{role_name}' not authorized for transition "
                f"'{transition_name}'. Required: {required}",
                transition=transition_name,
            )

        draft = await self._call(
            "load draft", draft_id, self._repository.get_draft(draft_id)
        )
        if draft is None:
            return self._reject(
                ErrorKind.NOT_FOUND,
                f"Draft not found: {draft_id}",
                transition=transition_name,
            )

        if draft.status is not transition.source:
            return self._reject(
                ErrorKind.INVALID_STATE,
                f"Invalid transition: cannot '{transition_name}' from "
                f"'{draft.status.value}' (expected '{transition.source.value}')",
                transition=transition_name,
            )

        raw_params = dict(params or {})
        try:
            call_params = TransitionParams.model_validate(raw_params)
        except ValidationError as exc:
            reasons = [
                f"Invalid parameter '{'.'.join(str(p) for p in err['loc'])}': {err['msg']}"
                for err in exc.errors()
            ]
            return self._reject(
                ErrorKind.GUARD_FAILED,
                f"Guard failed: {'; '.join(reasons)}",
                reasons=reasons,
                transition=transition_name,
            )

        try:
            listing = await self._resolve_context(draft, call_params, context)
        except ValidationError as exc:
            reasons = [f"Invalid listing context: {err['msg']}" for err in exc.errors()]
            return self._reject(
                ErrorKind.GUARD_FAILED,
                f"Guard failed: {'; '.join(reasons)}",
                reasons=reasons,
                transition=transition_name,
            )
        guard_result = transition.guard(draft, listing, call_params)
        if not guard_result.valid:
            return self._reject(
                ErrorKind.GUARD_FAILED,
                f"Guard failed: {'; '.join(guard_result.errors)}",
                reasons=guard_result.errors,
                transition=transition_name,
            )

        now = self._clock()
        patch = transition.effect(draft, call_params, actor_id, now)
        patch.update(status=transition.target, updated_at=now)
        entry = HistoryEntry(
            draft_id=draft_id,
            from_status=transition.source,
            to_status=transition.target,
            actor_id=actor_id,
            actor_role=role,
            comments=call_params.comments or None,
            metadata={
                "transition": transition_name,
                "guard_result": guard_result.model_dump(),
                "params": sorted(raw_params),
            },
            created_at=now,
        )

        # the status change and its history entry commit together
        updated = await self._call(
            "update draft",
            draft_id,
            self._repository.conditional_update(
                draft_id, transition.source, patch, history=entry
            ),
        )
        if updated is None:
            return self._reject(
                ErrorKind.INVALID_STATE,
                f"Invalid transition: draft '{draft_id}' left '{transition.source.value}' "
                f"before '{transition_name}' could be applied",
                transition=transition_name,
            )

        logger.info(
            f"Draft {draft_id}: {transition.source.value} -> {transition.target.value} "
            f"via {transition_name} (by {role.value} {actor_id})"
        )

        spec = notification_for(transition_name)
        if spec is not None:
            self._notify(spec, updated, actor_id)

        return TransitionResult.succeeded(updated, transition=transition_name)

    async def add_comment(
        self,
        draft_id: str,
        actor_id: str,
        actor_role: ActorRole | str,
        comments: Optional[str],
    ) -> TransitionResult:
        """Record a comment in the draft's history without changing its state."""

        if not comments or not comments.strip():
            return self._reject(ErrorKind.INVALID_INPUT, "Comment required")

        role = ActorRole.parse(actor_role)
        if role is None:
            return self._reject(ErrorKind.UNAUTHORIZED, f"Unknown role '{actor_role}'")

        draft = await self._call(
            "load draft", draft_id, self._repository.get_draft(draft_id)
        )
        if draft is None:
            return self._reject(ErrorKind.NOT_FOUND, f"Draft not found: {draft_id}")

        entry = HistoryEntry(
            draft_id=draft_id,
            from_status=draft.status,
            to_status=draft.status,
            actor_id=actor_id,
            actor_role=role,
            comments=comments.strip(),
            metadata={"kind": "comment"},
            created_at=self._clock(),
        )
        await self._call("append history", draft_id, self._repository.append_history(entry))
        return TransitionResult.succeeded(draft)

    # ------------------------------------------------------------------
    async def get_draft(self, draft_id: str) -> Optional[Draft]:
        return await self._call("load draft", draft_id, self._repository.get_draft(draft_id))

    async def history(self, draft_id: str) -> list[HistoryEntry]:
        """Audit trail for ``draft_id``, newest first."""
        return await self._call(
            "load history", draft_id, self._repository.list_history(draft_id)
        )

    def available_transitions(
        self, status: DraftStatus | str, role: ActorRole | str
    ) -> list[AvailableTransition]:
        return available_transitions(status, role)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight notification dispatches to finish."""
        if self._pending:
            await asyncio.wait(set(self._pending), timeout=timeout)

    # ------------------------------------------------------------------
    def _reject(
        self,
        error: ErrorKind,
        message: str,
        reasons: Optional[list[str]] = None,
        transition: Optional[str] = None,
    ) -> TransitionResult:
        logger.warning(f"Rejected {transition or 'request'}: {message}")
        return TransitionResult.failed(error, message, reasons=reasons, transition=transition)

    async def _call(self, operation: str, draft_id: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except Exception as exc:
            logger.exception(f"Failed to {operation} for draft {draft_id}")
            raise InfrastructureError(operation, draft_id) from exc

    async def _resolve_context(
        self,
        draft: Draft,
        params: TransitionParams,
        context: ListingContext | Mapping[str, Any] | None,
    ) -> ListingContext:
        if context is not None:
            if isinstance(context, ListingContext):
                return context
            return ListingContext.model_validate(dict(context))
        if params.listing is not None:
            return params.listing
        if self._context_provider is not None:
            provided = await self._call(
                "load listing context",
                draft.id,
                self._context_provider.get_context(draft),
            )
            if provided is not None:
                return provided
        return ListingContext()

    def _notify(self, spec: NotificationSpec, draft: Draft, actor_id: str) -> None:
        if self._dispatcher is None:
            return
        task = asyncio.create_task(self._dispatch(spec, draft, actor_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _dispatch(self, spec: NotificationSpec, draft: Draft, actor_id: str) -> None:
        try:
            await self._dispatcher.send(spec, draft, actor_id)
        except Exception:
            logger.exception(
                f"Notification {spec.template} for draft {draft.id} failed; "
                "transition already committed"
            )
