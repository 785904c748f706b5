from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cyberguard.deps import get_db, get_orchestrator
from cyberguard.schemas import ChatRequest, ChatResponse
from cyberguard.services.chat_orchestrator import ChatOrchestrator
from cyberguard.services.chat_service import handle_chat_turn

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    payload: ChatRequest,
    db: Session = Depends(get_db),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """
    Store the user turn, get a reply (relay first, direct provider on
    failure), store the reply and return it.
    """
    return await handle_chat_turn(
        db,
        orchestrator,
        session_id=payload.session_id,
        message=payload.message,
        model=payload.model,
    )


__all__ = ["router"]
