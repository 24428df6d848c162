"""Schema-level validation rules (no database involved)."""

import pytest
from pydantic import ValidationError

from box_organizer.models.qr_code import QR_SHORT_ID_PATTERN
from box_organizer.schemas.auth import RegisterRequest
from box_organizer.schemas.box import BoxCreate, BoxUpdate
from box_organizer.schemas.common import first_error_per_field
from box_organizer.schemas.location import LocationCreate, LocationUpdate
from box_organizer.schemas.qr_code import LabelRequest, QrBatchRequest
from box_organizer.schemas.workspace import MemberAdd


@pytest.mark.parametrize("value", ["QR-ABC123", "QR-000000", "QR-ZZZZZZ"])
def test_short_id_pattern_accepts(value: str) -> None:
    assert QR_SHORT_ID_PATTERN.match(value)


@pytest.mark.parametrize(
    "value",
    ["qr-ABC123", "QR-abc123", "QR-ABC12", "QR-ABC1234", "ABC123", "QRABC123", "QR-ABC12!", ""],
)
def test_short_id_pattern_rejects(value: str) -> None:
    assert not QR_SHORT_ID_PATTERN.match(value)


def test_register_normalizes_email() -> None:
    body = RegisterRequest(email="  Alice@Inventory.IO ", password="long-enough")
    assert body.email == "alice@inventory.io"


@pytest.mark.parametrize("password", ["short", "x" * 129])
def test_register_password_bounds(password: str) -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(email="alice@inventory.io", password=password)


def test_name_is_trimmed_and_required() -> None:
    assert LocationCreate(workspace_id="w", name="  Garage ").name == "Garage"
    with pytest.raises(ValidationError):
        LocationCreate(workspace_id="w", name="   ")
    with pytest.raises(ValidationError):
        LocationCreate(workspace_id="w", name="x" * 256)


def test_description_limit() -> None:
    BoxCreate(workspace_id="w", name="Box", description="d" * 10_000)
    with pytest.raises(ValidationError):
        BoxCreate(workspace_id="w", name="Box", description="d" * 10_001)


def test_tags_are_normalized() -> None:
    box = BoxCreate(workspace_id="w", name="Box", tags=[" winter ", "", "winter", "tools"])
    assert box.tags == ["winter", "tools"]


def test_tag_limits() -> None:
    with pytest.raises(ValidationError):
        BoxCreate(workspace_id="w", name="Box", tags=[f"t{i}" for i in range(11)])
    with pytest.raises(ValidationError):
        BoxCreate(workspace_id="w", name="Box", tags=["x" * 51])


def test_location_patch_needs_a_field() -> None:
    with pytest.raises(ValidationError):
        LocationUpdate()
    assert LocationUpdate(description=None).model_fields_set == {"description"}
    with pytest.raises(ValidationError):
        LocationUpdate(name=None)


def test_box_patch_needs_a_field() -> None:
    with pytest.raises(ValidationError):
        BoxUpdate()
    assert BoxUpdate(location_id=None).location_id is None


@pytest.mark.parametrize("quantity,ok", [(0, False), (1, True), (100, True), (101, False)])
def test_batch_quantity_bounds(quantity: int, ok: bool) -> None:
    if ok:
        assert QrBatchRequest(workspace_id="w", quantity=quantity).quantity == quantity
    else:
        with pytest.raises(ValidationError):
            QrBatchRequest(workspace_id="w", quantity=quantity)


def test_label_request_validates_short_ids() -> None:
    LabelRequest(workspace_id="w", short_ids=["QR-ABC123"])
    with pytest.raises(ValidationError):
        LabelRequest(workspace_id="w", short_ids=["qr-abc123"])
    with pytest.raises(ValidationError):
        LabelRequest(workspace_id="w", short_ids=[])


def test_owner_role_cannot_be_granted() -> None:
    with pytest.raises(ValidationError):
        MemberAdd(email="bob@inventory.io", role="owner")


def test_first_error_per_field_keeps_one_message() -> None:
    errors = [
        {"loc": ("body", "name"), "msg": "Value error, Name is required"},
        {"loc": ("body", "name"), "msg": "second complaint"},
        {"loc": ("query", "q"), "msg": "too short"},
    ]
    assert first_error_per_field(errors) == {"name": "Name is required", "q": "too short"}


def test_first_error_per_field_from_real_errors() -> None:
    with pytest.raises(ValidationError) as exc_info:
        BoxCreate(workspace_id="w", name="", tags=["x" * 51])
    details = first_error_per_field(exc_info.value.errors())
    assert set(details) == {"name", "tags"}
    assert details["name"] == "Name is required"
