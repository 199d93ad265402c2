from __future__ import annotations

from consensus.schemas import Specialty
from consensus.specialties import DEFAULT_TRANSFORMS, template_transform, transform_for


def test_every_specialty_has_a_default_transform():
    assert set(DEFAULT_TRANSFORMS) == set(Specialty)


def test_string_payload_is_wrapped():
    out = DEFAULT_TRANSFORMS[Specialty.CREATIVE]("a fox in snow")
    assert out.startswith("As a creative AI specialist")
    assert "a fox in snow" in out


def test_mapping_payload_keeps_other_keys():
    payload = {"prompt": "a {curly} fox", "image": "data:..."}
    out = DEFAULT_TRANSFORMS[Specialty.TECHNICAL](payload)

    assert out["image"] == "data:..."
    assert "a {curly} fox" in out["prompt"]
    assert payload["prompt"] == "a {curly} fox"


def test_opaque_payload_passes_through():
    payload = [1, 2, 3]
    assert template_transform("X {prompt}")(payload) is payload


def test_missing_transform_is_identity():
    assert transform_for(Specialty.AESTHETIC, {})("raw") == "raw"
