"""Optimistic mutation executor.

Runs a create, update or delete through the states::

    VALIDATING -> APPLYING -> COMMITTING -> DONE
    VALIDATING -> REJECTED
    APPLYING/COMMITTING -> ROLLING_BACK -> FAILED

The change is applied to the entity cache before the remote call so the UI
reflects it immediately. If the remote call fails, times out, or is
cancelled, every cache key touched while applying is restored to its
snapshot before the error is surfaced. Failed writes are never retried.

Mutations that share a lock scope are queued, so a mutation always applies
on top of the committed (or rolled back) state of the previous one.
Mutations in unrelated scopes run concurrently.
"""

import asyncio
import itertools
import uuid
from collections.abc import Awaitable, Callable, Iterable
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lunarconsole.core.exceptions import BackendError, NetworkFailure
from lunarconsole.core.logging import get_logger
from lunarconsole.domain.entities.validation import Err, Result
from lunarconsole.domain.services.entity_cache import CacheKey, CacheSnapshot, EntityCache, Resource

logger = get_logger(__name__)

LockKey = tuple[str, str]


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationState(str, Enum):
    VALIDATING = "validating"
    REJECTED = "rejected"
    APPLYING = "applying"
    COMMITTING = "committing"
    DONE = "done"
    ROLLING_BACK = "rolling_back"
    FAILED = "failed"


@dataclass(frozen=True)
class MutationTarget:
    """What a mutation acts on.

    Attributes:
        resource: Cached resource the entity lives in.
        scope: Collection name, settings category, or empty for flat resources.
        entity_id: Identifier of the entity; None for creates.
    """

    resource: Resource
    scope: str = ""
    entity_id: Any = None

    @property
    def lock_key(self) -> LockKey:
        return (self.resource.value, self.scope)


@dataclass
class PendingMutation:
    """A submitted mutation, alive until it is done or rolled back."""

    kind: MutationKind
    target: MutationTarget
    payload: Any
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: MutationState = MutationState.VALIDATING
    snapshot: CacheSnapshot | None = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a submitted mutation.

    Attributes:
        state: DONE, REJECTED or FAILED.
        item: The server's canonical entity (None for deletes and failures).
        field_errors: Per-field validation errors when REJECTED.
        error: The backend error when FAILED.
    """

    state: MutationState
    item: Any = None
    field_errors: dict[str, Any] = field(default_factory=dict)
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.state == MutationState.DONE

    @property
    def message(self) -> str | None:
        if self.error is not None:
            return self.error.message
        if self.field_errors:
            return "; ".join(getattr(e, "message", str(e)) for e in self.field_errors.values())
        return None


@dataclass
class MutationPlan:
    """Everything the executor needs to run one mutation.

    Attributes:
        kind: Create, update or delete.
        target: The entity (or scope, for creates) being mutated.
        payload: Submitted data.
        remote: Coroutine factory issuing the backend call with the validated payload.
        apply: Synchronous optimistic change to the cache.
        commit: Writes the server response into the cache after success.
        touched_keys: Returns every cache key ``apply`` may change.
        validate: Optional check returning ``Ok(payload)`` or ``Err(errors)``.
        lock_keys: Extra lock scopes beyond the target's own.
        timeout: Seconds to wait for the remote call.
    """

    kind: MutationKind
    target: MutationTarget
    payload: Any
    remote: Callable[[Any], Awaitable[Any]]
    apply: Callable[[EntityCache, Any], None]
    commit: Callable[[EntityCache, Any], None]
    touched_keys: Callable[[EntityCache], Iterable[CacheKey]]
    validate: Callable[[Any], Result] | None = None
    lock_keys: tuple[LockKey, ...] = ()
    timeout: float | None = None


class OptimisticMutationExecutor:
    """Applies mutations optimistically against an entity cache."""

    def __init__(self, cache: EntityCache, timeout_seconds: float = 30.0) -> None:
        """Initialize the executor.

        Args:
            cache: The cache mutations are applied to.
            timeout_seconds: Default bound on each remote call.
        """
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self._locks: dict[LockKey, asyncio.Lock] = {}
        self._pending: dict[str, PendingMutation] = {}
        self._temp_ids = itertools.count(1)

    @property
    def pending(self) -> list[PendingMutation]:
        """Mutations that have not finished yet."""
        return list(self._pending.values())

    def next_temp_id(self) -> int:
        """Return a negative placeholder id for an optimistically created entity."""
        return -next(self._temp_ids)

    def _lock(self, key: LockKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def _transition(self, mutation: PendingMutation, state: MutationState) -> None:
        mutation.state = state
        logger.debug(
            "Mutation state changed",
            mutation_id=mutation.id,
            kind=mutation.kind.value,
            resource=mutation.target.resource.value,
            scope=mutation.target.scope,
            entity_id=mutation.target.entity_id,
            state=state.value,
        )

    def _rollback(self, mutation: PendingMutation) -> None:
        self._transition(mutation, MutationState.ROLLING_BACK)
        if mutation.snapshot is not None:
            self.cache.restore(mutation.snapshot)
        mutation.snapshot = None
        self._transition(mutation, MutationState.FAILED)

    async def submit(self, plan: MutationPlan) -> MutationResult:
        """Run a mutation plan to completion.

        Returns:
            A MutationResult in state DONE, REJECTED or FAILED.

        Raises:
            asyncio.CancelledError: If the caller cancels while the remote
                call is in flight; the cache is rolled back first.
        """
        mutation = PendingMutation(kind=plan.kind, target=plan.target, payload=plan.payload)

        payload = plan.payload
        if plan.validate is not None:
            validation = plan.validate(plan.payload)
            if isinstance(validation, Err):
                self._transition(mutation, MutationState.REJECTED)
                logger.info(
                    "Mutation rejected by validation",
                    mutation_id=mutation.id,
                    kind=plan.kind.value,
                    scope=plan.target.scope,
                    fields=sorted(validation.error),
                )
                return MutationResult(state=MutationState.REJECTED, field_errors=dict(validation.error))
            payload = validation.value
        mutation.payload = payload

        lock_keys = sorted({plan.target.lock_key, *plan.lock_keys})
        self._pending[mutation.id] = mutation
        try:
            async with AsyncExitStack() as stack:
                for key in lock_keys:
                    await stack.enter_async_context(self._lock(key))
                return await self._run(plan, mutation)
        finally:
            self._pending.pop(mutation.id, None)

    async def _run(self, plan: MutationPlan, mutation: PendingMutation) -> MutationResult:
        self._transition(mutation, MutationState.APPLYING)
        mutation.snapshot = self.cache.snapshot(plan.touched_keys(self.cache))
        try:
            plan.apply(self.cache, mutation.payload)
        except Exception:
            self._rollback(mutation)
            raise

        self._transition(mutation, MutationState.COMMITTING)
        timeout = plan.timeout if plan.timeout is not None else self.timeout_seconds
        try:
            response = await asyncio.wait_for(plan.remote(mutation.payload), timeout=timeout)
        except BackendError as e:
            return self._fail(mutation, e)
        except asyncio.TimeoutError:
            return self._fail(mutation, NetworkFailure(f"Request timed out after {timeout:g}s"))
        except asyncio.CancelledError:
            self._rollback(mutation)
            logger.warning("Mutation cancelled, cache rolled back", mutation_id=mutation.id)
            raise
        except Exception:
            self._rollback(mutation)
            raise

        plan.commit(self.cache, response)
        mutation.snapshot = None
        self._transition(mutation, MutationState.DONE)
        logger.info(
            "Mutation committed",
            mutation_id=mutation.id,
            kind=plan.kind.value,
            resource=plan.target.resource.value,
            scope=plan.target.scope,
            entity_id=plan.target.entity_id,
        )
        return MutationResult(state=MutationState.DONE, item=response)

    def _fail(self, mutation: PendingMutation, error: BackendError) -> MutationResult:
        self._rollback(mutation)
        logger.warning(
            "Mutation failed, cache rolled back",
            mutation_id=mutation.id,
            kind=mutation.kind.value,
            scope=mutation.target.scope,
            entity_id=mutation.target.entity_id,
            error=error.message,
        )
        return MutationResult(state=MutationState.FAILED, error=error)
