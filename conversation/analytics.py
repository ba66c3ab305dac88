"""Usage metrics over a chat transcript."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

from shared.models import ChatMessage

TOP_INTENTS = 10
DAYS_WINDOW = 7


class IntentUsage(BaseModel):
    model_config = {"frozen": True}
    intent: str
    count: int


class DailyCount(BaseModel):
    model_config = {"frozen": True}
    date: str = Field(..., description="dd/MM label")
    count: int


class ChatAnalytics(BaseModel):
    model_config = {"frozen": True}

    total_messages: int = 0
    user_messages: int = 0
    bot_messages: int = 0
    error_messages: int = 0
    data_messages: int = 0
    normal_messages: int = 0
    top_intents: list[IntentUsage] = Field(default_factory=list)
    hourly_distribution: list[int] = Field(default_factory=lambda: [0] * 24)
    last_7_days: list[DailyCount] = Field(default_factory=list)
    success_rate: float = 0.0


def _parse_timestamp(value: str) -> datetime | None:
    raw = (value or "").strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def compute_chat_metrics(messages: list[ChatMessage], now: datetime | None = None) -> ChatAnalytics:
    """
    Counts by sender and response type, intent usage (top 10), hour of day of
    user messages, user messages per day over the last 7 days (oldest first),
    and success rate = (data + normal) / bot messages * 100.
    """
    now = now or datetime.now(timezone.utc)
    user = [m for m in messages if m.sender == "user"]
    bot = [m for m in messages if m.sender == "bot"]

    types = Counter(m.type for m in bot)
    intents = Counter(m.intent for m in bot if m.intent)
    # Counter.most_common keeps first-seen order among equal counts.
    top_intents = [IntentUsage(intent=name, count=count) for name, count in intents.most_common(TOP_INTENTS)]

    hourly = [0] * 24
    for message in user:
        parsed = _parse_timestamp(message.timestamp)
        if parsed is not None:
            hourly[parsed.hour] += 1

    last_days = []
    for offset in range(DAYS_WINDOW - 1, -1, -1):
        day = (now - timedelta(days=offset)).date()
        prefix = day.isoformat()
        count = sum(1 for m in user if m.timestamp.startswith(prefix))
        last_days.append(DailyCount(date=day.strftime("%d/%m"), count=count))

    success_rate = (types["data"] + types["normal"]) * 100 / len(bot) if bot else 0.0

    return ChatAnalytics(
        total_messages=len(messages),
        user_messages=len(user),
        bot_messages=len(bot),
        error_messages=types["error"],
        data_messages=types["data"],
        normal_messages=types["normal"],
        top_intents=top_intents,
        hourly_distribution=hourly,
        last_7_days=last_days,
        success_rate=success_rate,
    )
