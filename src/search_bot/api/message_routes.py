"""
Bot Channel Routes

The messaging endpoint the channel posts activities to. Each message
activity is answered with exactly one reply activity in the response body;
other activity types are acknowledged with 202 and no body.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from .dependencies import get_bot_application
from .models import Activity, ReplyActivity
from ..bot.application import BotApplication

router = APIRouter(prefix="/api", tags=["bot"])


@router.post(
    "/messages",
    response_model=ReplyActivity,
    summary="Receive a bot channel activity",
    status_code=status.HTTP_200_OK,
)
async def messages(
    activity: Activity,
    bot: Annotated[BotApplication, Depends(get_bot_application)],
):
    # Retrieval and model failures are mapped by the global handlers
    reply = await bot.on_turn(activity)
    if reply is None:
        return Response(status_code=status.HTTP_202_ACCEPTED)
    return reply
