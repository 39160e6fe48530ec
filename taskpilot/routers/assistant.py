"""
Assistant Router - API endpoint for natural language requests.

HTTP handling only: all business logic lives in AssistantService, which
never raises for bad input. A 500 here means a bug, not a bad sentence.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from taskpilot.deps import get_assistant_service, get_user_id
from taskpilot.services.assistant_service import AssistantService
from taskpilot.services.intent_result import AssistantResponse


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/assistant", tags=["assistant"])


# ---------------------------------------------------------------------------
# REQUEST SCHEMA
# ---------------------------------------------------------------------------

class AssistantRequest(BaseModel):
    """
    Request schema for the /assistant endpoint.

    Example:
    {
        "text": "book a 30-minute team meeting Friday at 14:30 in meeting room B",
        "userId": "user-1"
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Natural language request",
    )
    user_id: Optional[str] = Field(
        default=None,
        alias="userId",
        description="Used when no X-User-Id header is sent",
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("", response_model=AssistantResponse, response_model_exclude_none=True)
async def handle_request(
    request: AssistantRequest,
    header_user_id: Optional[str] = Depends(get_user_id),
    service: AssistantService = Depends(get_assistant_service),
):
    """
    Classify a sentence, run the matching action and describe the outcome.

    **Examples:**
    - "Remind me to call the client tomorrow at 10:00"
    - "Add renew passport to my todo list"
    - "Book a 30-minute team meeting Friday at 14:30 in meeting room B"
    - "What is (12 + 8) * 3?"
    """
    user_id = header_user_id or (request.user_id.strip() if request.user_id else None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user id is required (X-User-Id header or userId field)",
        )

    try:
        return await service.handle(user_id, request.text)
    except Exception as e:
        logger.error(f"Failed to process request: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process request",
        )
