from datetime import datetime, time
from unittest.mock import Mock

from sky_chat import config
from sky_chat.chat import routes
from sky_chat.llm import UpstreamGenerationError


def turn(client, message, lead_state, history=None, path="/chat", **extra):
    return client.post(
        path,
        json={"message": message, "conversationHistory": history or [], "leadState": lead_state, **extra},
    )


def test_first_turn(client, fake_llm):
    resp = turn(client, "Hi", {"stage": "greeting"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["reply"] == fake_llm.reply
    assert body["leadState"]["stage"] == "asking_name"
    assert body["leadState"]["leadId"]


def test_lead_id_is_threaded(client):
    first = turn(client, "Hi", {"stage": "greeting"}).json()["leadState"]
    history = [{"text": "Hi", "isUser": True, "timestamp": "2026-10-15T14:00:00.000Z"}]
    second = turn(client, "Alex", first, history=history).json()["leadState"]

    assert second["leadId"] == first["leadId"]
    assert second["name"] == "Alex"


def test_user_info_alias(client):
    resp = client.post("/chat", json={"message": "Bia", "userInfo": {"stage": "asking_name"}})
    assert resp.json()["leadState"]["name"] == "Bia"


def test_split_reply_is_a_list(client, fake_llm):
    fake_llm.reply = (
        "Thanks so much for sharing that with me, it really helps a lot. "
        "Dental clinics lose many patients to missed calls every single week. "
        "Does that make sense for you?"
    )
    reply = turn(client, "dentistry", {"stage": "industry", "name": "Alex"}).json()["reply"]
    assert isinstance(reply, list)
    assert len(reply) > 1


def test_unknown_stage(client):
    resp = turn(client, "hi", {"stage": "pain_points"})
    assert resp.status_code == 422
    assert "pain_points" in resp.json()["error"]


def test_malformed_lead_state(client):
    for lead_state in ("greeting", [], {"stage": None}, {"stage": "booking", "proposedSlots": "9am"}):
        resp = turn(client, "a", lead_state)
        assert resp.status_code == 422, lead_state
        assert resp.json()["error"]


def test_history_that_is_not_a_list_is_ignored(client, fake_llm):
    resp = turn(client, "Alex", {"stage": "asking_name"}, conversationHistory=5)
    assert resp.status_code == 200
    assert len(fake_llm.calls[0]) == 2


def test_unknown_locale(client):
    resp = turn(client, "hi", {"stage": "greeting"}, locale="fr")
    assert resp.status_code == 422


def test_upstream_failure_keeps_state(client, fake_llm):
    fake_llm.reply = UpstreamGenerationError("OpenAI API error: 500")
    sent = {"stage": "collecting_email", "name": "Alex Smith"}
    resp = turn(client, "alex@example.com", sent, path="/chat/pt")

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "upstream_generation_failed"
    assert body["leadState"] == sent
    assert body["reply"].startswith("Estou com problemas")


def test_portuguese_booking(client, pt):
    resp = turn(client, "Curitiba", {"stage": "collecting_city", "name": "Bia Souza"}, path="/chat/pt")
    state = resp.json()["leadState"]

    assert state["stage"] == "booking"
    assert state["proposedSlots"][0] in pt.morning_slots
    assert state["proposedSlots"][1] in pt.afternoon_slots
    assert state["proposedDateLabel"] in pt.weekdays


def test_confirmation_notifies_owner(client, owner_sms):
    booking = {
        "stage": "booking",
        "name": "Alex Smith",
        "proposedSlots": ["10am", "3pm"],
        "proposedDateLabel": "Friday",
        "proposedDate": "2026-10-16",
    }
    state = turn(client, "3pm please", booking).json()["leadState"]

    assert state["stage"] == "confirmed"
    assert state["appointmentLabel"] == "Friday at 3pm"
    owner_sms.assert_called_once()
    assert "Friday at 3pm" in owner_sms.call_args[0][0]

    again = turn(client, "thanks", state).json()["leadState"]
    assert again == state
    owner_sms.assert_called_once()


def test_persistence_failure_does_not_fail_turn(client, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(routes, "save_turn", broken)
    resp = turn(client, "Hi", {"stage": "greeting"})

    assert resp.status_code == 200
    assert "leadId" not in resp.json()["leadState"]


def test_admin_pages(client):
    lead_id = turn(client, "Alex", {"stage": "asking_name"}).json()["leadState"]["leadId"]

    assert client.get("/admin/leads", params={"pw": "nope"}).status_code == 403

    listing = client.get("/admin/leads", params={"pw": "letmein"})
    assert listing.status_code == 200
    assert "Alex" in listing.text

    detail = client.get(f"/admin/leads/{lead_id}", params={"pw": "letmein"})
    assert detail.status_code == 200
    assert "Visitor:</strong> Alex" in detail.text

    assert client.get("/admin/leads/unknown", params={"pw": "letmein"}).status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_calendar_filter_and_event(client, monkeypatch, en):
    monkeypatch.setattr(config, "GOOGLE_CALENDAR_ID", "cal-1")
    busy = Mock(return_value={t for t in en.morning_slots.values() if t != time(11, 0)})
    event = Mock(return_value={"id": "ev1", "htmlLink": "https://calendar.example/ev1"})
    monkeypatch.setattr(routes, "busy_times", busy)
    monkeypatch.setattr(routes, "create_event", event)

    state = turn(client, "Austin", {"stage": "collecting_city", "name": "Alex Smith"}).json()["leadState"]
    assert state["proposedSlots"][0] == "11am"
    busy.assert_called_once()

    afternoon = state["proposedSlots"][1]
    confirmed = turn(client, f"{afternoon} works", state).json()["leadState"]
    assert confirmed["stage"] == "confirmed"

    start = event.call_args.kwargs["start"]
    assert start.tzinfo == config.BOOKING_TIMEZONE
    assert start.time() == en.afternoon_slots[afternoon]
    assert start.date() == datetime.fromisoformat(state["proposedDate"]).date()


def test_calendar_outage_still_offers_slots(client, monkeypatch, en):
    monkeypatch.setattr(config, "GOOGLE_CALENDAR_ID", "cal-1")
    monkeypatch.setattr(routes, "busy_times", Mock(side_effect=RuntimeError("google down")))

    state = turn(client, "Austin", {"stage": "collecting_city", "name": "Alex Smith"}).json()["leadState"]
    assert state["stage"] == "booking"
    assert state["proposedSlots"][0] in en.morning_slots
