from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from dps_allocation.errors import PayloadShapeError

WEBHOOK_TAG = "twinReturnedFromWebhook"

# first mapping wins; a null enrollmentGroup falls through to individualEnrollment
ENROLLMENT_KEYS = (
    "enrollmentGroup",
    "individualEnrollment",
    "enrollmentContext",
    "enrollment_context",
)


def ensure_record(value: Any) -> Optional[dict[str, Any]]:
    """Accept a record or absence; anything else breaks the transport contract."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    raise PayloadShapeError(f"payload must be an object or null, got {type(value).__name__}")


class AllocationRequest(BaseModel):
    """
    Custom allocation request as posted by the provisioning service.

    Every field is optional and wrongly typed values degrade to "absent".
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    linked_targets: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("linkedHubs", "linkedTargets", "linked_targets"),
    )
    enrollment_context: dict[str, Any] = Field(default_factory=dict)
    device_runtime_context: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("deviceRuntimeContext", "device_runtime_context"),
    )

    @model_validator(mode="before")
    @classmethod
    def pick_enrollment(cls, data):
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        data["enrollment_context"] = next(
            (data[k] for k in ENROLLMENT_KEYS if isinstance(data.get(k), Mapping)), None
        )
        return data

    @field_validator("linked_targets", mode="before")
    @classmethod
    def keep_string_targets(cls, v):
        if not isinstance(v, (list, tuple)):
            return ()
        # empty names would be indistinguishable from "no target"
        return tuple(t for t in v if isinstance(t, str) and t)

    @field_validator("enrollment_context", mode="before")
    @classmethod
    def mapping_or_empty(cls, v):
        if isinstance(v, Mapping):
            return dict(v)
        return {}

    @field_validator("device_runtime_context", mode="before")
    @classmethod
    def mapping_or_none(cls, v):
        if isinstance(v, Mapping):
            return dict(v)
        return None


class InitialTwin(BaseModel):
    model_config = ConfigDict(frozen=True)

    tags: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_webhook(cls) -> InitialTwin:
        return cls(tags={WEBHOOK_TAG: True})


class AllocationDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_target: str = ""
    initial_state: InitialTwin = Field(default_factory=InitialTwin.from_webhook)
    payload: Optional[dict[str, Any]] = None

    @field_validator("payload", mode="before")
    @classmethod
    def payload_is_record(cls, v):
        return ensure_record(v)


class AllocationResponse(BaseModel):
    """Response body; field names are fixed by the provisioning service."""

    iotHubHostName: str
    initialTwin: InitialTwin
    payload: Optional[dict[str, Any]] = None

    @field_validator("payload", mode="before")
    @classmethod
    def payload_is_record(cls, v):
        return ensure_record(v)

    @classmethod
    def from_decision(cls, decision: AllocationDecision) -> AllocationResponse:
        return cls(
            iotHubHostName=decision.selected_target,
            initialTwin=decision.initial_state,
            payload=decision.payload,
        )
