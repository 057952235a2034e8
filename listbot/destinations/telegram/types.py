"""
Telegram Bot API wire types.

Only the fields this service reads or writes are modeled; everything else in
an inbound Update is ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


ParseMode = Literal["HTML", "Markdown", "MarkdownV2"]


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_Wire):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None
    language_code: str | None = None


class Chat(_Wire):
    id: int
    type: str
    title: str | None = None
    username: str | None = None


class Message(_Wire):
    message_id: int
    from_: User | None = Field(default=None, alias="from")
    chat: Chat
    date: int
    text: str | None = None


class CallbackQuery(_Wire):
    id: str
    from_: User = Field(alias="from")
    message: Message | None = None
    data: str | None = None


class Update(_Wire):
    update_id: int
    message: Message | None = None
    callback_query: CallbackQuery | None = None


class InlineKeyboardButton(_Wire):
    """A button carries exactly one action: a link or a callback token."""
    text: str = Field(min_length=1)
    url: str | None = None
    callback_data: str | None = Field(default=None, max_length=64)

    @model_validator(mode="after")
    def exactly_one_action(self) -> "InlineKeyboardButton":
        if (self.url is None) == (self.callback_data is None):
            raise ValueError("button needs exactly one of url or callback_data")
        return self


class InlineKeyboardMarkup(_Wire):
    inline_keyboard: list[list[InlineKeyboardButton]] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.inline_keyboard)


class InputMediaPhoto(_Wire):
    type: Literal["photo"] = "photo"
    media: str
    caption: str | None = None
    parse_mode: ParseMode | None = None


# --- tagged API result ---

@dataclass(frozen=True)
class ApiOk:
    result: Any


@dataclass(frozen=True)
class ApiErr:
    description: str
    error_code: int | None = None


ApiResult = Union[ApiOk, ApiErr]


def decode_api_response(body: Any) -> ApiResult:
    """
    Decode a Bot API envelope `{ok, result?, description?, error_code?}`.

    Anything that does not look like that envelope is an ApiErr.
    """
    if not isinstance(body, dict) or not isinstance(body.get("ok"), bool):
        return ApiErr(description="Malformed Bot API response")

    if body["ok"]:
        if "result" not in body:
            return ApiErr(description="Bot API response missing result")
        return ApiOk(result=body["result"])

    code = body.get("error_code")
    return ApiErr(
        description=str(body.get("description") or "Unknown Bot API error"),
        error_code=code if isinstance(code, int) else None,
    )
