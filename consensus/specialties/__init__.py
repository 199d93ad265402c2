"""Per-specialty payload transforms.

Each specialty wraps the request prompt in its own instruction template
before the payload reaches the task executor. The engine accepts any mapping
of ``Specialty -> callable`` so callers can swap these out.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from consensus.schemas import Specialty
from consensus.specialties.aesthetic import AESTHETIC
from consensus.specialties.balanced import BALANCED
from consensus.specialties.creative import CREATIVE
from consensus.specialties.technical import TECHNICAL

PayloadTransform = Callable[[Any], Any]

TEMPLATES: dict[Specialty, str] = {
    Specialty.CREATIVE: CREATIVE,
    Specialty.TECHNICAL: TECHNICAL,
    Specialty.AESTHETIC: AESTHETIC,
    Specialty.BALANCED: BALANCED,
}


def template_transform(template: str) -> PayloadTransform:
    """Build a transform that applies ``template`` to the prompt of a payload.

    Strings are formatted directly. Mappings get their ``"prompt"`` entry
    rewritten and every other key passed through. Anything else is returned
    untouched.
    """

    def _transform(payload: Any) -> Any:
        if isinstance(payload, str):
            return template.format(prompt=payload)
        if isinstance(payload, Mapping) and isinstance(payload.get("prompt"), str):
            return {**payload, "prompt": template.format(prompt=payload["prompt"])}
        return payload

    return _transform


DEFAULT_TRANSFORMS: dict[Specialty, PayloadTransform] = {
    specialty: template_transform(template) for specialty, template in TEMPLATES.items()
}


def transform_for(specialty: Specialty, transforms: Mapping[Specialty, PayloadTransform]) -> PayloadTransform:
    return transforms.get(specialty, lambda payload: payload)
