"""
Posting website forms to the intake endpoint.

Mirrors what the site's forms do in the browser: inputs are flattened into a
record tagged with the form type and sent once. The response is never read,
so a call that does not raise counts as a successful submission.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from intakeapi.config import config
from intakeapi.models.intake import FORM_TYPE_KEY

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you! We've received your submission and will be in touch soon."
ERROR_MESSAGE = (
    "Something went wrong. Please try again or email us directly at "
    f"{config.EMAIL_TO}."
)
RESTORE_AFTER_SUCCESS = 4.0
ERROR_BANNER_TTL = 6.0


@dataclass
class FormInput:
    name: str
    value: str = ""
    type: str = "text"
    checked: bool = False


@dataclass
class SubmissionOutcome:
    ok: bool
    message: str
    reset_form: bool = False
    # seconds until the submit button is usable again
    restore_after: float = 0.0
    # seconds the banner stays up, None for until dismissed
    banner_ttl: Optional[float] = None


def collect_fields(form_type: str, inputs: Iterable[FormInput]) -> Dict[str, Any]:
    data: Dict[str, Any] = {FORM_TYPE_KEY: form_type}
    for field in inputs:
        if field.type == "checkbox":
            if field.checked:
                data.setdefault(field.name, []).append(field.value)
        elif field.value and field.name:
            data[field.name] = field.value
    return data


async def submit_form(
    form_type: str,
    inputs: Iterable[FormInput],
    *,
    client: Optional[httpx.AsyncClient] = None,
    url: Optional[str] = None,
    on_conversion: Optional[Callable[[str], Any]] = None,
) -> SubmissionOutcome:
    data = collect_fields(form_type, inputs)
    url = url or config.INTAKE_URL

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=None) as own_client:
                await own_client.post(url, json=data)
        else:
            await client.post(url, json=data)
    except httpx.HTTPError as e:
        logger.warning(f"Submitting '{form_type}' form failed: {e!r}")
        return SubmissionOutcome(
            ok=False,
            message=ERROR_MESSAGE,
            banner_ttl=ERROR_BANNER_TTL
        )

    if on_conversion is not None:
        on_conversion(form_type)

    return SubmissionOutcome(
        ok=True,
        message=SUCCESS_MESSAGE,
        reset_form=True,
        restore_after=RESTORE_AFTER_SUCCESS
    )
