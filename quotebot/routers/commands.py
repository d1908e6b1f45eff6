from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotebot.bot.commands import looks_like_command
from quotebot.bot.handlers import Dispatcher
from .quotes import get_dispatcher

router = APIRouter(prefix="/commands", tags=["commands"])


class CommandIn(BaseModel):
    text: str = Field(..., max_length=4096)
    is_command: Optional[bool] = Field(
        None, description="Defaults to whether text starts with '/'"
    )


class CommandOut(BaseModel):
    reply: Optional[str]


@router.post("", response_model=CommandOut, summary="Run one chat message through the bot")
def run_command(payload: CommandIn, dispatcher: Dispatcher = Depends(get_dispatcher)):
    is_command = payload.is_command
    if is_command is None:
        is_command = looks_like_command(payload.text)
    # reply is None when the bot would stay silent
    return CommandOut(reply=dispatcher.handle(payload.text, is_command))
