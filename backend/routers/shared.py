from typing import Callable, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from actions.common import ActionContext, check_caller
from results import ActionResult, ErrorKind
from views import cached_view

STATUS_BY_KIND = {
    ErrorKind.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(result: ActionResult, success_status: int = status.HTTP_200_OK) -> int:
    if result.success:
        return success_status
    return STATUS_BY_KIND.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def action_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code_for(result, success_status), content=result.to_payload())


def cached_response(
    ctx: ActionContext,
    path: str,
    run: Callable[[], ActionResult],
    permission: Optional[str] = None,
) -> JSONResponse:
    """Serve a read view through the view cache; privileged views check the caller before any cache hit."""
    if permission:
        denied = check_caller(ctx, permission)
        if denied is not None:
            return action_response(denied)

    outcome = {"status": status.HTTP_200_OK}

    def build():
        result = run()
        outcome["status"] = status_code_for(result)
        return result.success, result.to_payload()

    payload = cached_view(ctx.views, path, build)
    return JSONResponse(status_code=outcome["status"], content=payload)
