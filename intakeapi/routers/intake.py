import json
import logging
from datetime import datetime
from typing import Annotated
from zoneinfo import ZoneInfo

import httpx
from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from intakeapi.config import config
from intakeapi.models.intake import HealthResponse, IntakeResponse
from intakeapi.notifications import get_mail_client, send_notification
from intakeapi.sheets import FORM_TYPE_KEY, append_submission
from intakeapi.storage import DEFAULT_RESUME_FILENAME, is_data_uri, save_resume

router = APIRouter()
logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime | None = None) -> str:
    """US-style local time, e.g. `10/19/2026, 3:04:05 PM`."""
    moment = moment or datetime.now(ZoneInfo(config.TIMEZONE))
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"
    )


def parse_record(raw: bytes) -> dict:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Submission body must be a JSON object")
    return data


@router.get("", response_model=HealthResponse, status_code=200)
async def health():
    return HealthResponse(message="Alephic Labs form endpoint is active.")


@router.post("", response_model=IntakeResponse, status_code=200)
async def submit(
    request: Request,
    mail_client: Annotated[httpx.AsyncClient, Depends(get_mail_client)],
):
    """
    Payload:
    {
      "_formType": "contact",
      "name": "Ada",
      "services": ["Strategy", "Build"],
      "resume_file": "data:application/pdf;base64,...",   # optional
      "resume_filename": "ada.pdf"                         # optional
    }

    Steps run in order and stop at the first failure. The error message names
    the step that failed; steps logged as done before it have already taken
    effect.
    """
    step = "parse"
    done = []
    try:
        data = parse_record(await request.body())
        form_type = str(data.get(FORM_TYPE_KEY) or "unknown")
        timestamp = format_timestamp()
        done.append(step)

        step = "resume upload"
        if is_data_uri(data.get("resume_file")):
            filename = data.get("resume_filename") or DEFAULT_RESUME_FILENAME
            result = await run_in_threadpool(save_resume, data["resume_file"], filename)
            data["resume_file"] = result.url if result.ok else result.error
        data.pop("resume_filename", None)
        done.append(step)

        step = "sheet append"
        await append_submission(form_type, timestamp, data)
        done.append(step)

        step = "email notification"
        await send_notification(mail_client, form_type, timestamp, data)
        done.append(step)
    except Exception as e:
        logger.error(f"Submission failed at {step} (completed: {done or 'nothing'}): {e}")
        return IntakeResponse(status="error", message=f"{step} failed: {e}")

    logger.info(f"Submission received for form type '{form_type}'")
    return IntakeResponse(status="success", message="Submission received")
