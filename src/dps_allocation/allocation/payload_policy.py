from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional

from dps_allocation.domain.entities.allocation import AllocationRequest, ensure_record

# A payload is a record or nothing. Bare scalars are rejected by the transport.
Payload = Optional[Mapping[str, Any]]

EXAMPLE_PAYLOAD: Mapping[str, Any] = {"hello": "world", "arr": [1, 2, 3, 4, 5, 6], "num": 123}


class PayloadPolicy(ABC):
    """
    Decides what, if anything, is echoed back alongside the allocation.

    Concrete policies override only _derive_core(); derive() rejects anything
    that is not a record or None.
    """

    def derive(self, req: AllocationRequest) -> Payload:
        return ensure_record(self._derive_core(req))

    @abstractmethod
    def _derive_core(self, req: AllocationRequest) -> Payload:
        pass

    @abstractmethod
    def name(self) -> str:
        pass


class NoPayloadPolicy(PayloadPolicy):
    def name(self):
        return "none"

    def _derive_core(self, req: AllocationRequest) -> Payload:
        return None


class StaticPayloadPolicy(PayloadPolicy):
    def __init__(self, payload: Payload):
        # fail at configuration time, never at response time
        self._payload = copy.deepcopy(ensure_record(payload))

    def name(self):
        return "static"

    def _derive_core(self, req: AllocationRequest) -> Payload:
        if self._payload is None:
            return None
        # nested lists and dicts too; callers may mutate what they get
        return copy.deepcopy(self._payload)


class ExamplePayloadPolicy(StaticPayloadPolicy):
    def __init__(self):
        super().__init__(EXAMPLE_PAYLOAD)

    def name(self):
        return "example"


def _dig(mapping: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(mapping, Mapping):
            return None
        mapping = mapping.get(key)
    return mapping


class EchoDeviceDataPolicy(PayloadPolicy):
    """
    Echo the device-supplied `deviceRuntimeContext.data` back to the device,
    but only for enrollments whose initial twin is tagged `returnData`.
    """

    def name(self):
        return "echo"

    def _derive_core(self, req: AllocationRequest) -> Payload:
        if not _dig(req.enrollment_context, "initialTwin", "tags", "returnData"):
            return None

        data = _dig(req.device_runtime_context, "data")
        if data is None:
            return None
        if isinstance(data, Mapping):
            return dict(data)
        return {"data": data}
