"""
Users API: Relational User Routes
==================================

What:  CRUD endpoints under /users backed by SqlUserService.
How:   Handlers return the service's Result; EnvelopeRoute renders it.
       Raised faults (not found, duplicate field, invalid UUID, body
       validation) reach the global exception handlers.

Route Inventory:
    POST   /users/create-user        201  create one user
    GET    /users/get-all-users      200  list users
    GET    /users/{user_id}          200  get one user (404 if missing)
    PATCH  /users/{user_id}          200  update one user
    DELETE /users/delete-multiple    200  delete many users by id
    DELETE /users/{user_id}          200  delete one user

/delete-multiple is declared before /{user_id} so it is not parsed as an id.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from users_api.results import Result
from users_api.routing import EnvelopeRoute
from users_api.schemas.envelope import FailureEnvelope, SuccessEnvelope
from users_api.schemas.user import (
    CreateUserRequest,
    DeleteUsersRequest,
    UpdateUserRequest,
)
from users_api.services.sql_user_service import SqlUserService, get_sql_user_service


router = APIRouter(prefix="/users", tags=["Users"], route_class=EnvelopeRoute)

_NOT_FOUND = {404: {"description": "User not found", "model": FailureEnvelope}}
_INVALID = {400: {"description": "Validation failed", "model": FailureEnvelope}}


@router.post(
    "/create-user",
    status_code=201,
    responses={201: {"model": SuccessEnvelope}, **_INVALID},
    summary="Create a new user",
)
async def create_user(
    payload: CreateUserRequest,
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.create(payload)


@router.get(
    "/get-all-users",
    responses={200: {"model": SuccessEnvelope}},
    summary="Retrieve all users",
)
async def list_users(
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.find_all()


@router.get(
    "/{user_id}",
    responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND, **_INVALID},
    summary="Retrieve a user by ID",
)
async def get_user(
    user_id: UUID,
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.find_one(user_id)


@router.patch(
    "/{user_id}",
    responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND, **_INVALID},
    summary="Update a user by ID",
)
async def update_user(
    user_id: UUID,
    payload: UpdateUserRequest,
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.update(user_id, payload)


@router.delete(
    "/delete-multiple",
    responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND, **_INVALID},
    summary="Remove multiple users by IDs",
)
async def delete_users(
    payload: DeleteUsersRequest,
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.remove_many(payload.ids)


@router.delete(
    "/{user_id}",
    responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND, **_INVALID},
    summary="Remove a user by ID",
)
async def delete_user(
    user_id: UUID,
    service: SqlUserService = Depends(get_sql_user_service),
) -> Result:
    return await service.remove(user_id)
