"""
Custom event payloads.

Known dashboard telemetry is modelled as a tagged union keyed by the
event name. Anything that does not match a known shape is kept as an
opaque key/value payload; interpretation never rejects an event.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    _raw: dict[str, Any] | None = PrivateAttr(default=None)

    @classmethod
    def from_event_data(cls, data: dict[str, Any]) -> _Payload:
        payload = cls.model_validate(data)
        payload._raw = dict(data)
        return payload

    def to_event_data(self) -> dict[str, Any]:
        """
        Client data with declared fields replaced by their coerced values.

        Keys keep the spelling the client sent; nulls and extras pass through.
        """
        if self._raw is None:
            return self.model_dump(by_alias=True, mode="json", exclude_none=True)
        fields = type(self).model_fields
        coerced = self.model_dump(mode="json", include=set(fields))
        out = dict(self._raw)
        for name, info in fields.items():
            for key in {name, info.alias or name}:
                if key in out:
                    out[key] = coerced[name]
        return out


class ClickPayload(_Payload):
    element: str


class NavigationPayload(_Payload):
    to: str


class LanguageChangePayload(_Payload):
    from_: str = Field(alias="from")
    to: str


class SectionViewPayload(_Payload):
    section: str


class CarouselInteractionPayload(_Payload):
    action: str
    slide_index: int | None = None


class ButtonClickPayload(_Payload):
    button: str
    location: str | None = None


class FormSubmitPayload(_Payload):
    form: str
    success: bool


class DownloadPayload(_Payload):
    file: str


class ExternalLinkClickPayload(_Payload):
    url: str


class OpaquePayload(BaseModel):
    """Fallback for arbitrary client telemetry."""

    data: dict[str, Any] = Field(default_factory=dict)

    def to_event_data(self) -> dict[str, Any]:
        return dict(self.data)


KnownPayload = (
    ClickPayload
    | NavigationPayload
    | LanguageChangePayload
    | SectionViewPayload
    | CarouselInteractionPayload
    | ButtonClickPayload
    | FormSubmitPayload
    | DownloadPayload
    | ExternalLinkClickPayload
)
EventPayload = KnownPayload | OpaquePayload

EVENT_PAYLOADS: dict[str, type[_Payload]] = {
    "click": ClickPayload,
    "navigation": NavigationPayload,
    "language_change": LanguageChangePayload,
    "section_view": SectionViewPayload,
    "carousel_interaction": CarouselInteractionPayload,
    "button_click": ButtonClickPayload,
    "form_submit": FormSubmitPayload,
    "download": DownloadPayload,
    "external_link_click": ExternalLinkClickPayload,
}


def parse_event_payload(event_name: str, data: dict[str, Any] | None) -> EventPayload:
    """Interpret event data by its event name, falling back to opaque."""
    data = data or {}
    model = EVENT_PAYLOADS.get(event_name)
    if model is None:
        return OpaquePayload(data=data)
    try:
        return model.from_event_data(data)
    except ValidationError:
        return OpaquePayload(data=data)


def normalize_event_data(event_name: str, data: dict[str, Any] | None) -> dict[str, Any]:
    """Event data as it should be stored."""
    return parse_event_payload(event_name, data).to_event_data()
