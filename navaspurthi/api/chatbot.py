from fastapi import APIRouter, HTTPException, status
from starlette.concurrency import run_in_threadpool

from navaspurthi.api.schemas import ChatbotResponse, ChatMessage, SuggestionsResponse
from navaspurthi.services.chatbot_service import answer_question, get_suggestions

router = APIRouter(prefix="/chatbot", tags=["chatbot"])


@router.post("", response_model=ChatbotResponse, response_model_exclude_none=True)
async def chat(body: ChatMessage):
    if not body.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")

    reply = await run_in_threadpool(answer_question, body.message, body.session_id)
    return ChatbotResponse(response=reply.text, type=reply.type, model=reply.model, session_id=body.session_id)


@router.get("/suggestions", response_model=SuggestionsResponse)
def suggestions():
    return SuggestionsResponse(suggestions=get_suggestions())
