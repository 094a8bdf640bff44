"""Base model and shared field types for hub payloads.

Every hub model inherits from :class:`HubBaseModel`, which is frozen and
ignores unknown keys so older controllers and dashboards that send extra
fields keep working.

Device identifiers use the :data:`DeviceId` annotated type: surrounding
whitespace is stripped and empty identifiers are rejected.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict


def normalize_device_id(value: Any) -> str:
    """Strip *value* and reject empty identifiers."""
    device = str(value).strip()
    if not device:
        raise ValueError("device must be non-empty")
    return device


DeviceId = Annotated[str, AfterValidator(normalize_device_id)]
"""Annotated type for a non-empty, stripped device identifier."""


class HubBaseModel(BaseModel):
    """Base for hub request and response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
