from __future__ import annotations

from dps_allocation.allocation.payload_policy import (
    EchoDeviceDataPolicy,
    ExamplePayloadPolicy,
    NoPayloadPolicy,
    Payload,
    PayloadPolicy,
    StaticPayloadPolicy,
)


class PayloadPolicyFactory:
    def __init__(self, static_payload: Payload = None):
        self._policies: dict[str, PayloadPolicy] = {
            "example": ExamplePayloadPolicy(),
            "none": NoPayloadPolicy(),
            "echo": EchoDeviceDataPolicy(),
        }
        if static_payload is not None:
            self._policies["static"] = StaticPayloadPolicy(static_payload)

    def get(self, name: str) -> PayloadPolicy:
        if name == "static" and name not in self._policies:
            raise ValueError("Payload policy 'static' requires STATIC_PAYLOAD")
        if name not in self._policies:
            raise ValueError(f"Unknown payload policy: {name}")
        return self._policies[name]
