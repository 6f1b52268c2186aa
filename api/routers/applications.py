"""
Application API Endpoints.

Endpoints for invoking ledger operations and reading applications.
"""

import json
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_dispatcher
from api.models import ErrorResponse, InvokeRequest, InvokeResponse
from services.dispatcher import Dispatcher, InvokeResult

router = APIRouter()

# Error code -> HTTP status. Anything unlisted is a client input problem.
_HTTP_STATUS = {
    "NOT_FOUND": 404,
    "UNKNOWN_FUNCTION": 404,
    "CONFLICT": 409,
    "INVALID_TRANSITION": 409,
    "STORE": 502,
}

_ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 404, 409, 502)
}


def _decode_payload(payload: bytes) -> Optional[Any]:
    if not payload:
        return None
    return json.loads(payload.decode("utf-8"))


def _to_response(result: InvokeResult) -> Union[InvokeResponse, JSONResponse]:
    if not result.ok:
        status_code = _HTTP_STATUS.get(result.error_code or "", 400)
        error = ErrorResponse(
            error=result.error_code or "ERROR",
            detail=result.message,
            status_code=status_code,
        )
        return JSONResponse(status_code=status_code, content=error.model_dump())
    return InvokeResponse(status=result.status, payload=_decode_payload(result.payload))


@router.post(
    "/invoke",
    response_model=InvokeResponse,
    responses=_ERROR_RESPONSES,
    summary="Invoke Ledger Operation",
    description="Run a named sale application operation with positional string arguments."
)
def invoke_operation(request: InvokeRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """
    Invoke a named operation.

    **Operations:**
    - `makeApplication` `[jsonRecord]`: create an application with status waiting
    - `acceptApplication` / `rejectApplication` / `cancelApplication` `[applicationId, status]`
    - `readApplication` `[{"applicationId": "..."}]`: return the stored record
    - `getBuyerApplications` / `getSellerApplications` `[personalCode]`
    - `getInApplications` / `getOutApplications` `[organizationId]`
    - `makeTestData` `[]`: seed the demo application

    **Example request:**
    ```json
    {
      "function": "acceptApplication",
      "args": ["LEP0000001", "accepted"]
    }
    ```

    Failures map to HTTP errors: 404 unknown id or function, 409 conflict or
    invalid transition, 502 ledger failure, 400 anything else.
    """
    return _to_response(dispatcher.invoke(request.function, request.args))


@router.get(
    "/applications/{application_id}",
    response_model=InvokeResponse,
    responses=_ERROR_RESPONSES,
    summary="Read Application",
    description="Return the stored sale application for an application ID."
)
def read_application(application_id: str, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """
    Convenience wrapper around `readApplication`.

    **Example usage:**
    ```
    GET /api/v1/applications/LEP0000001
    ```
    """
    wrapper = json.dumps({"applicationId": application_id})
    return _to_response(dispatcher.invoke("readApplication", [wrapper]))
