from __future__ import annotations

from typing import Any, Optional, Protocol

from dps_allocation.allocation.payload_policy import ExamplePayloadPolicy, PayloadPolicy
from dps_allocation.allocation.target_selector import (
    IndexSource,
    default_index_source,
    select_target,
)
from dps_allocation.domain.entities.allocation import (
    AllocationDecision,
    AllocationRequest,
    InitialTwin,
)


class TraceSink(Protocol):
    """Where trace lines go; a `logging.Logger` or `LoggerAdapter` fits."""

    def info(self, msg: str, *args: Any) -> None:
        ...


class _NoTrace:
    def info(self, msg: str, *args: Any) -> None:
        return None


class AllocationEvaluator:
    """
    Maps a provisioning request to an allocation decision.

    Holds only configuration (payload policy, default index source), so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        payload_policy: Optional[PayloadPolicy] = None,
        index_source: Optional[IndexSource] = None,
    ):
        self._payload_policy = payload_policy or ExamplePayloadPolicy()
        self._index_source = index_source or default_index_source()

    @property
    def payload_policy(self) -> PayloadPolicy:
        return self._payload_policy

    def evaluate(
        self,
        req: AllocationRequest,
        *,
        index_source: Optional[IndexSource] = None,
        trace: Optional[TraceSink] = None,
    ) -> AllocationDecision:
        trace = trace or _NoTrace()

        trace.info(
            "allocation.input targets=%s enrollment_keys=%s device_context=%s",
            list(req.linked_targets),
            sorted(req.enrollment_context),
            req.device_runtime_context is not None,
        )

        selected = select_target(req.linked_targets, index_source or self._index_source)
        trace.info("allocation.selected target=%s", selected or "<none>")

        decision = AllocationDecision(
            selected_target=selected,
            initial_state=InitialTwin.from_webhook(),
            payload=self._payload_policy.derive(req),
        )

        trace.info(
            "allocation.output target=%s policy=%s payload_keys=%s",
            decision.selected_target or "<none>",
            self._payload_policy.name(),
            sorted(decision.payload) if decision.payload is not None else None,
        )
        return decision
