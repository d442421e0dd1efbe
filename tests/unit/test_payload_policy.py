from __future__ import annotations

import pytest

from dps_allocation.allocation.payload_policy import (
    EXAMPLE_PAYLOAD,
    EchoDeviceDataPolicy,
    ExamplePayloadPolicy,
    NoPayloadPolicy,
    PayloadPolicy,
    StaticPayloadPolicy,
)
from dps_allocation.allocation.policy_factory import PayloadPolicyFactory
from dps_allocation.domain.entities.allocation import AllocationRequest
from dps_allocation.errors import PayloadShapeError


def _echo_request(tags, data) -> AllocationRequest:
    return AllocationRequest.model_validate(
        {
            "enrollmentGroup": {"initialTwin": {"tags": tags}},
            "deviceRuntimeContext": {"registrationId": "dev-1", "data": data},
        }
    )


def test_example_policy_returns_example_record() -> None:
    payload = ExamplePayloadPolicy().derive(AllocationRequest())
    assert payload == {"hello": "world", "arr": [1, 2, 3, 4, 5, 6], "num": 123}


def test_example_policy_returns_fresh_copy() -> None:
    policy = ExamplePayloadPolicy()
    first = policy.derive(AllocationRequest())
    first["hello"] = "changed"
    assert policy.derive(AllocationRequest())["hello"] == "world"


def test_none_policy() -> None:
    assert NoPayloadPolicy().derive(AllocationRequest()) is None


def test_static_policy_record() -> None:
    record = {"greeting": "world", "numbers": [1, 2, 3, 4, 5, 6], "count": 123}
    assert StaticPayloadPolicy(record).derive(AllocationRequest()) == record


@pytest.mark.parametrize("scalar", [123, "123"])
def test_static_policy_rejects_scalar_at_construction(scalar) -> None:
    with pytest.raises(PayloadShapeError):
        StaticPayloadPolicy(scalar)


def test_echo_policy_returns_device_data_when_tagged() -> None:
    req = _echo_request({"returnData": True}, {"specialUrl": "github.com/foo"})
    assert EchoDeviceDataPolicy().derive(req) == {"specialUrl": "github.com/foo"}


def test_echo_policy_wraps_scalar_device_data() -> None:
    req = _echo_request({"returnData": True}, 42)
    assert EchoDeviceDataPolicy().derive(req) == {"data": 42}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"enrollmentGroup": {"initialTwin": {"tags": {"returnData": False}}}},
        {"enrollmentGroup": {"initialTwin": "broken"}, "deviceRuntimeContext": {"data": {"a": 1}}},
        {"enrollmentGroup": {"initialTwin": {"tags": {"returnData": True}}}},
        {
            "enrollmentGroup": {"initialTwin": {"tags": {"returnData": True}}},
            "deviceRuntimeContext": {"data": None},
        },
    ],
)
def test_echo_policy_absent_when_unavailable(body) -> None:
    assert EchoDeviceDataPolicy().derive(AllocationRequest.model_validate(body)) is None


@pytest.mark.parametrize("name", ["example", "none", "echo"])
def test_factory_known_policies(name) -> None:
    assert PayloadPolicyFactory().get(name).name() == name


def test_factory_static_needs_payload() -> None:
    with pytest.raises(ValueError):
        PayloadPolicyFactory().get("static")
    assert PayloadPolicyFactory(static_payload={"a": 1}).get("static").name() == "static"


def test_factory_unknown_policy() -> None:
    with pytest.raises(ValueError):
        PayloadPolicyFactory().get("random")


def test_factory_rejects_scalar_static_payload() -> None:
    with pytest.raises(PayloadShapeError):
        PayloadPolicyFactory(static_payload=123)


def test_example_policy_nested_values_are_not_shared() -> None:
    policy = ExamplePayloadPolicy()
    first = policy.derive(AllocationRequest())
    first["arr"].append(99)

    assert policy.derive(AllocationRequest())["arr"] == [1, 2, 3, 4, 5, 6]
    assert EXAMPLE_PAYLOAD["arr"] == [1, 2, 3, 4, 5, 6]


def test_static_policy_does_not_alias_configured_record() -> None:
    record = {"nested": {"items": [1]}}
    policy = StaticPayloadPolicy(record)
    record["nested"]["items"].append(2)

    payload = policy.derive(AllocationRequest())
    assert payload == {"nested": {"items": [1]}}
    payload["nested"]["items"].append(3)
    assert policy.derive(AllocationRequest()) == {"nested": {"items": [1]}}


class _ScalarPolicy(PayloadPolicy):
    def name(self):
        return "scalar"

    def _derive_core(self, req):
        return "123"


def test_derive_rejects_scalar_from_subclass() -> None:
    with pytest.raises(PayloadShapeError):
        _ScalarPolicy().derive(AllocationRequest())
