from typing import Dict, List

from fastapi import APIRouter, HTTPException, status

from navaspurthi.api.schemas import EventPolicyResponse
from navaspurthi.services.event_policy_service import get_event_policies, list_events_by_class

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=Dict[str, List[EventPolicyResponse]])
def list_events():
    return list_events_by_class()


@router.get("/{event_name}", response_model=EventPolicyResponse)
def get_event(event_name: str):
    policy = get_event_policies().get(event_name)
    if policy is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return policy.to_dict()
