from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    return {"status": "ok", "bot_ready": getattr(request.app.state, "bot", None) is not None}
