import base64, json, requests
from logging import getLogger
from requests import Response

from app.src.constants import (
    OPENOBSERVE_ENABLED,
    OPENOBSERVE_HOST,
    OPENOBSERVE_ORG,
    OPENOBSERVE_PASSWORD,
    OPENOBSERVE_PORT,
    OPENOBSERVE_PROTOCOL,
    OPENOBSERVE_STREAM,
    OPENOBSERVE_TIMEOUT,
    OPENOBSERVE_USERNAME,
)

# Prepare Basic Auth credentials
credentials = base64.b64encode(
    bytes(OPENOBSERVE_USERNAME + ":" + OPENOBSERVE_PASSWORD, "utf-8")
).decode("utf-8")

# Default headers for all requests
headers = {"Content-type": "application/json", "Authorization": "Basic " + credentials}

# Construct OpenObserve endpoint URL
openobserve_host = f"{OPENOBSERVE_PROTOCOL}://{OPENOBSERVE_HOST}:{OPENOBSERVE_PORT}"
openobserve_url = f"{openobserve_host}/api/{OPENOBSERVE_ORG}/{OPENOBSERVE_STREAM}/_json"


def logEvent(eventData: dict, enabled: bool = OPENOBSERVE_ENABLED) -> Response | None:
    """
    Send an event log to the configured OpenObserve instance.

    This function serializes the given event data as JSON and sends it
    to the OpenObserve API using HTTP POST with Basic authentication.
    Audit shipping never fails the calling request: when disabled nothing is
    sent, and a failed shipment is reported on Uvicorn's error logger.

    Args:
        eventData (dict): A dictionary representing the event log to be sent.
            Example:
                {
                    "_method": "PUT",
                    "_path": "/administration/driver/verification",
                    "_app_id": 4,
                    "_identity": "k3J9xYz"
                }
        enabled (bool): Whether shipping is switched on.

    Returns:
        requests.Response | None: The HTTP response returned by the OpenObserve
        API, or None when nothing was delivered.
    """
    if not enabled:
        return None
    try:
        return requests.post(
            openobserve_url,
            headers=headers,
            data=json.dumps(eventData, default=str),
            timeout=OPENOBSERVE_TIMEOUT,
        )
    except requests.RequestException as e:
        getLogger("uvicorn.error").warning(f"OpenObserve event not delivered: {e}")
        return None
