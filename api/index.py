# Serverless entrypoint for the intake API
# The Python runtime serves the ASGI `app` object exposed here.

from intakeapi.main import app  # noqa: F401
