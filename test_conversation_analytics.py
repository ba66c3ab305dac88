from __future__ import annotations

from datetime import datetime, timezone

from conversation.analytics import compute_chat_metrics
from shared.models import ChatMessage

NOW = datetime(2024, 5, 10, 18, 0, tzinfo=timezone.utc)


def _user(msg_id: str, timestamp: str) -> ChatMessage:
    return ChatMessage(id=msg_id, text="q", sender="user", timestamp=timestamp)


def _bot(msg_id: str, kind: str, intent: str | None = None) -> ChatMessage:
    return ChatMessage(id=msg_id, text="a", sender="bot", type=kind, intent=intent, timestamp="2024-05-10T09:00:00")


def test_empty_transcript():
    metrics = compute_chat_metrics([], now=NOW)

    assert metrics.total_messages == 0
    assert metrics.success_rate == 0.0
    assert metrics.hourly_distribution == [0] * 24
    assert [d.count for d in metrics.last_7_days] == [0] * 7


def test_counts_and_success_rate():
    messages = [
        ChatMessage(id="w", text="hola", sender="bot", type="welcome", timestamp="2024-05-10T08:00:00"),
        _user("u1", "2024-05-10T09:15:00+00:00"),
        _bot("b1", "data", "Mostrar Deudores"),
        _user("u2", "2024-05-10T09:45:00+00:00"),
        _bot("b2", "data", "Mostrar Deudores"),
        _user("u3", "2024-05-08T21:00:00Z"),
        _bot("b3", "error", "Ventas del Día"),
        _user("u4", "2024-04-01T10:00:00+00:00"),
        _bot("b4", "normal"),
    ]

    metrics = compute_chat_metrics(messages, now=NOW)

    assert metrics.total_messages == 9
    assert metrics.user_messages == 4
    assert metrics.bot_messages == 5
    assert (metrics.data_messages, metrics.normal_messages, metrics.error_messages) == (2, 1, 1)
    assert metrics.success_rate == 60.0
    assert [(u.intent, u.count) for u in metrics.top_intents] == [
        ("Mostrar Deudores", 2),
        ("Ventas del Día", 1),
    ]
    assert metrics.hourly_distribution[9] == 2
    assert metrics.hourly_distribution[21] == 1
    assert metrics.hourly_distribution[10] == 1


def test_last_seven_days_oldest_first():
    messages = [_user("u1", "2024-05-10T09:00:00"), _user("u2", "2024-05-04T09:00:00"), _user("u3", "2024-05-03T09:00:00")]

    days = compute_chat_metrics(messages, now=NOW).last_7_days

    assert [d.date for d in days] == ["04/05", "05/05", "06/05", "07/05", "08/05", "09/05", "10/05"]
    assert [d.count for d in days] == [1, 0, 0, 0, 0, 0, 1]


def test_top_intents_capped_at_ten():
    messages = [_bot(f"b{i}", "data", f"intent_{i}") for i in range(12)]
    assert len(compute_chat_metrics(messages, now=NOW).top_intents) == 10
