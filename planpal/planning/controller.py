# controller.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from planpal.dependencies import get_store
from . import schema
from .store import NotFoundError, PlanningStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["planning"])


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/users/me", response_model=schema.User)
async def current_user(store: PlanningStore = Depends(get_store)):
    return store.current_user


@router.get("/groups", response_model=schema.GroupsResponse)
async def list_groups(store: PlanningStore = Depends(get_store)):
    return schema.GroupsResponse(groups=store.list_groups(), selected_group_id=store.selected_group_id)


@router.post("/groups/{group_id}/select", response_model=schema.Group)
async def select_group(group_id: str, store: PlanningStore = Depends(get_store)):
    try:
        return store.select_group(group_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.get("/groups/{group_id}/events", response_model=List[schema.Event])
async def group_events(group_id: str, store: PlanningStore = Depends(get_store)):
    try:
        store.get_group(group_id)
    except NotFoundError as e:
        raise _not_found(e)
    return store.filtered_events(group_id)


@router.get("/groups/{group_id}/polls", response_model=List[schema.Poll])
async def group_polls(group_id: str, store: PlanningStore = Depends(get_store)):
    try:
        store.get_group(group_id)
    except NotFoundError as e:
        raise _not_found(e)
    return store.filtered_polls(group_id)


@router.post("/polls/{poll_id}/vote", response_model=schema.Poll)
async def vote(poll_id: str, request: schema.VoteRequest, store: PlanningStore = Depends(get_store)):
    """
    Vote for an option. Voting for the option already held withdraws the vote.
    user_id defaults to the current user.
    """
    user_id = request.user_id or store.current_user.id
    try:
        return store.vote(poll_id, request.option_id, user_id)
    except NotFoundError as e:
        raise _not_found(e)
