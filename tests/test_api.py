"""HTTP tests for the planning and assistant routers."""

import json

import pytest
from fastapi.testclient import TestClient

from planpal.assistant import config
from planpal.dependencies import get_bot, get_registry, get_store
from planpal.main import app
from conftest import make_completion


@pytest.fixture
def client(bot, registry, store):
    app.dependency_overrides[get_bot] = lambda: bot
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestPlanningRoutes:

    def test_root_and_health(self, client):
        assert client.get("/").json()["ok"] is True
        assert client.get("/health").json() == {"status": "healthy"}

    def test_current_user(self, client):
        data = client.get("/api/users/me").json()
        assert data == {"id": "u1", "name": "Rohan", "avatarUrl": "https://i.pravatar.cc/150?u=rohan"}

    def test_list_groups(self, client):
        data = client.get("/api/groups").json()
        assert [g["name"] for g in data["groups"]] == ["Weekend Warriors", "Foodie Fam", "Movie Buffs"]
        assert data["selectedGroupId"] == "g1"

    def test_select_group(self, client):
        response = client.post("/api/groups/g2/select")
        assert response.status_code == 200
        assert response.json()["name"] == "Foodie Fam"
        assert client.get("/api/groups").json()["selectedGroupId"] == "g2"

    def test_select_unknown_group(self, client):
        assert client.post("/api/groups/nope/select").status_code == 404

    def test_group_events(self, client):
        events = client.get("/api/groups/g2/events").json()
        assert [e["title"] for e in events] == ["Dilli Chaat Crawl"]
        assert events[0]["groupId"] == "g2"
        assert events[0]["rsvps"][0] == {"userId": "u1", "status": "going"}

    def test_group_polls_unknown_group(self, client):
        assert client.get("/api/groups/nope/polls").status_code == 404

    def test_vote_toggles_for_current_user(self, client):
        first = client.post("/api/polls/p1/vote", json={"option_id": "o3"}).json()
        o3 = next(o for o in first["options"] if o["id"] == "o3")
        o1 = next(o for o in first["options"] if o["id"] == "o1")
        assert o3["votes"] == ["u1"]
        assert "u1" not in o1["votes"]

        second = client.post("/api/polls/p1/vote", json={"option_id": "o3"}).json()
        o3 = next(o for o in second["options"] if o["id"] == "o3")
        assert o3["votes"] == []

    def test_vote_for_other_user(self, client):
        poll = client.post("/api/polls/p2/vote", json={"option_id": "o5", "user_id": "u2"}).json()
        assert poll["options"][0]["votes"] == []
        assert poll["options"][1]["votes"] == ["u1", "u4", "u2"]

    def test_vote_unknown_option(self, client):
        assert client.post("/api/polls/p1/vote", json={"option_id": "o9"}).status_code == 404


class TestAssistantRoutes:

    def test_conversational_chat(self, client):
        response = client.post("/api/assistant/chat", json={"message": "How are you?", "session_id": "tab-1"})

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == "tab-1"
        assert data["outcome"] == "text"
        assert data["message"]["sender"] == "bot"
        assert data["message"]["text"] == "Namaste! 🎉"
        assert "suggestions" not in data["message"]

    def test_suggestion_chat(self, client, fake_client):
        suggestions = [{"name": "Jawan", "type": "Movie", "rating": 4.2, "reason": "Blockbuster",
                        "posterUrl": "https://image.tmdb.org/t/p/w500/jawan.jpg"}]
        fake_client.chat.completions.create.return_value = make_completion(json.dumps(suggestions))

        data = client.post("/api/assistant/chat", json={"message": "Suggest a movie"}).json()

        assert data["outcome"] == "suggestions"
        assert data["session_id"]
        assert data["message"]["suggestions"] == suggestions
        assert "text" not in data["message"]

    def test_failure_is_still_a_200(self, client, fake_client):
        fake_client.chat.completions.create.side_effect = ConnectionError("down")

        response = client.post("/api/assistant/chat", json={"message": "Hello"})

        assert response.status_code == 200
        assert response.json()["outcome"] == "fallback"
        assert response.json()["message"]["text"] == config.FALLBACK_TEXT

    def test_location_is_forwarded(self, client, fake_client):
        client.post("/api/assistant/chat", json={
            "message": "Where to?", "location": {"latitude": 18.52, "longitude": 73.85},
        })

        prompt = fake_client.chat.completions.create.call_args.kwargs["messages"][-1]["content"]
        assert "18.52" in prompt and "73.85" in prompt

    @pytest.mark.parametrize("body", [{"message": ""}, {"message": "   "}, {}])
    def test_blank_messages_are_rejected(self, client, fake_client, body):
        assert client.post("/api/assistant/chat", json=body).status_code == 422
        fake_client.chat.completions.create.assert_not_called()

    def test_history_has_no_placeholder_after_reply(self, client):
        client.post("/api/assistant/chat", json={"message": "Hi", "session_id": "tab-2"})

        history = client.get("/api/assistant/history", params={"session_id": "tab-2"}).json()

        assert [m["sender"] for m in history] == ["bot", "user", "bot"]
        assert history[1]["text"] == "Hi"
        assert all(m["id"] != "loading" for m in history)
        assert all("isLoading" not in m for m in history)

    def test_clear_session(self, client, registry):
        client.post("/api/assistant/chat", json={"message": "Hi", "session_id": "tab-3"})

        response = client.post("/api/assistant/clear", params={"session_id": "tab-3"})

        assert response.status_code == 204
        history = client.get("/api/assistant/history", params={"session_id": "tab-3"}).json()
        assert len(history) == 1

    def test_compact_hangout_type_reaches_the_wire_spaced(self, client, fake_client):
        reply = [{"name": "Juhu Beach", "type": "HangoutSpot", "rating": 4.3,
                  "reason": "Chaat and sunsets", "address": "Juhu Tara Rd, Mumbai"}]
        fake_client.chat.completions.create.return_value = make_completion(json.dumps(reply))

        data = client.post("/api/assistant/chat", json={"message": "Any hangout ideas?"}).json()

        assert data["outcome"] == "suggestions"
        assert data["message"]["suggestions"] == [{
            "name": "Juhu Beach", "type": "Hangout Spot", "rating": 4.3,
            "reason": "Chaat and sunsets", "address": "Juhu Tara Rd, Mumbai",
        }]

    def test_history_read_does_not_create_log(self, client, store):
        for _ in range(2):
            response = client.get("/api/assistant/history", params={"session_id": "ghost"})
            assert [m["id"] for m in response.json()] == ["1"]

        assert "ghost" not in store._chats
