# schema.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


class PlanningModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class User(PlanningModel):
    id: str
    name: str
    avatar_url: str = Field(alias="avatarUrl")


class Group(PlanningModel):
    id: str
    name: str
    members: List[User]


class RSVP(PlanningModel):
    user_id: str = Field(alias="userId")
    status: Literal["going", "not-going", "maybe"]


class Event(PlanningModel):
    id: str
    group_id: str = Field(alias="groupId")
    title: str
    date: str
    location: str
    rsvps: List[RSVP] = []


class PollOption(PlanningModel):
    id: str
    text: str
    votes: List[str] = []


class Poll(PlanningModel):
    id: str
    group_id: str = Field(alias="groupId")
    question: str
    options: List[PollOption]


class GroupsResponse(PlanningModel):
    groups: List[Group]
    selected_group_id: Optional[str] = Field(default=None, alias="selectedGroupId")


class VoteRequest(BaseModel):
    option_id: str
    user_id: Optional[str] = None
