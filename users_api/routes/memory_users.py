"""
Users API: In-Memory User Routes
=================================

What:  The same CRUD endpoints as routes/users.py, under /memory/users,
       backed by MemoryUserService (integer ids, process-local storage).
How:   Missing users come back as SoftFailure values rather than raised
       errors; the envelope is identical to the relational variant's.
"""

from fastapi import APIRouter

from users_api.results import Result
from users_api.routing import EnvelopeRoute
from users_api.schemas.envelope import FailureEnvelope, SuccessEnvelope
from users_api.schemas.user import (
    CreateUserRequest,
    MemoryDeleteUsersRequest,
    UpdateUserRequest,
)
from users_api.services.memory_user_service import memory_user_service

router = APIRouter(prefix="/memory/users", tags=["Users (in-memory)"], route_class=EnvelopeRoute)

_NOT_FOUND = {404: {"description": "User not found", "model": FailureEnvelope}}


@router.post("/create-user", status_code=201, responses={201: {"model": SuccessEnvelope}})
async def create_user(payload: CreateUserRequest) -> Result:
    return await memory_user_service.create(payload)


@router.get("/get-all-users", responses={200: {"model": SuccessEnvelope}})
async def list_users() -> Result:
    return await memory_user_service.find_all()


@router.get("/{user_id}", responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND})
async def get_user(user_id: int) -> Result:
    return await memory_user_service.find_one(user_id)


@router.patch("/{user_id}", responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND})
async def update_user(user_id: int, payload: UpdateUserRequest) -> Result:
    return await memory_user_service.update(user_id, payload)


@router.delete("/delete-multiple", responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND})
async def delete_users(payload: MemoryDeleteUsersRequest) -> Result:
    return await memory_user_service.remove_many(payload.ids)


@router.delete("/{user_id}", responses={200: {"model": SuccessEnvelope}, **_NOT_FOUND})
async def delete_user(user_id: int) -> Result:
    return await memory_user_service.remove(user_id)
