from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from server.api.dependencies import AuthServiceDep, CurrentUserDep
from server.utils.response import send_response

router = APIRouter(tags=["Users"])


@router.get("/me")
async def profile(user: CurrentUserDep, auth_service: AuthServiceDep) -> JSONResponse:
    return send_response(
        status.HTTP_200_OK, auth_service.user_out(user).model_dump(by_alias=True)
    )
