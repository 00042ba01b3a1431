from app.src import openobserve
from app.src.schemas import RequestInfo


def logEvent(requestInfo: RequestInfo, identity: str | None, data: dict) -> None:
    """
    Log an event to OpenObserve with request and user context.

    Args:
        requestInfo (RequestInfo): Metadata about the current request.
        identity (str | None): Identity of the user the event is about, if known.
        data (dict): Additional event-specific details to include in the log.

    Notes:
        - Automatically attaches `_app_id`, `_method`, `_path` and `_identity`.
        - Event data keys override nothing of the request context.
    """
    logDetails = dict(data)
    logDetails.update(
        {
            "_method": requestInfo.method,
            "_path": requestInfo.path,
            "_app_id": requestInfo.app_id,
        }
    )
    if identity is not None:
        logDetails["_identity"] = identity
    openobserve.logEvent(logDetails)
