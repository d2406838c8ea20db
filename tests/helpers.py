"""Constants and helpers shared by the gateway tests."""

import re

API_KEY = "test-secret"
AUTH_HEADERS = {"Authorization": f"Bearer {API_KEY}"}

TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


def submitted_envelopes(publisher):
    """Envelopes passed to ``submit``, in call order."""
    return [call.args[0] for call in publisher.submit.call_args_list]
