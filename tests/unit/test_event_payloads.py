"""
Tests for custom event payload interpretation.
"""

from __future__ import annotations

from src.components.analytics import (
    EVENT_PAYLOADS,
    OpaquePayload,
    normalize_event_data,
    parse_event_payload,
)
from src.components.analytics.events import (
    CarouselInteractionPayload,
    FormSubmitPayload,
    LanguageChangePayload,
)


class TestKnownEvents:
    def test_registry_names(self) -> None:
        assert set(EVENT_PAYLOADS) == {
            "click",
            "navigation",
            "language_change",
            "section_view",
            "carousel_interaction",
            "button_click",
            "form_submit",
            "download",
            "external_link_click",
        }

    def test_language_change_uses_from_key(self) -> None:
        payload = parse_event_payload("language_change", {"from": "id", "to": "en"})

        assert isinstance(payload, LanguageChangePayload)
        assert payload.from_ == "id"
        assert payload.to_event_data() == {"from": "id", "to": "en"}

    def test_carousel_slide_index_camel_case(self) -> None:
        payload = parse_event_payload(
            "carousel_interaction", {"action": "next", "slideIndex": 2}
        )

        assert isinstance(payload, CarouselInteractionPayload)
        assert payload.slide_index == 2
        assert payload.to_event_data() == {"action": "next", "slideIndex": 2}

    def test_form_submit_success_flag(self) -> None:
        payload = parse_event_payload("form_submit", {"form": "contact", "success": True})
        assert isinstance(payload, FormSubmitPayload)
        assert payload.success is True

    def test_extra_keys_preserved(self) -> None:
        data = normalize_event_data("click", {"element": "logo", "x": 10})
        assert data == {"element": "logo", "x": 10}

    def test_null_values_preserved(self) -> None:
        data = normalize_event_data("click", {"element": "cta", "variant": None})
        assert data == {"element": "cta", "variant": None}

    def test_null_optional_field_preserved(self) -> None:
        data = normalize_event_data("button_click", {"button": "signup", "location": None})
        assert data == {"button": "signup", "location": None}

    def test_client_key_spelling_kept(self) -> None:
        data = normalize_event_data("carousel_interaction", {"action": "next", "slide_index": 2})
        assert data == {"action": "next", "slide_index": 2}

    def test_declared_fields_coerced(self) -> None:
        data = normalize_event_data(
            "carousel_interaction", {"action": "next", "slideIndex": "2", "auto": True}
        )
        assert data == {"action": "next", "slideIndex": 2, "auto": True}

    def test_directly_built_payload_dumps_camel_case(self) -> None:
        payload = CarouselInteractionPayload(action="prev", slide_index=1)
        assert payload.to_event_data() == {"action": "prev", "slideIndex": 1}


class TestOpaqueFallback:
    def test_unknown_event_stored_verbatim(self) -> None:
        data = {"anything": [1, 2, 3]}
        payload = parse_event_payload("scroll_depth", data)

        assert isinstance(payload, OpaquePayload)
        assert normalize_event_data("scroll_depth", data) == data

    def test_malformed_known_event_stored_verbatim(self) -> None:
        data = {"slideIndex": "not-a-number"}
        payload = parse_event_payload("carousel_interaction", data)

        assert isinstance(payload, OpaquePayload)
        assert payload.to_event_data() == data

    def test_missing_data_is_empty(self) -> None:
        assert normalize_event_data("scroll_depth", None) == {}
