"""Sending, listing and read-state of conversation messages."""

from uuid import uuid4

import pytest


@pytest.fixture
async def assigned_conversation(client, student, counselor, open_conversation):
    """A conversation from alice that carol has claimed."""
    conversation = await open_conversation(student, initial_message="first")
    response = await client.patch(
        f"/conversations/{conversation['id']}/assign/{counselor.id}", headers=counselor.headers
    )
    assert response.status_code == 200
    return response.json()["conversation"]


async def _send(client, conversation, sender, text="hello"):
    return await client.post(
        f"/conversations/{conversation['id']}/messages",
        json={"message_text": text},
        headers=sender.headers,
    )


class TestSend:
    async def test_owner_sends(self, client, student, open_conversation):
        conversation = await open_conversation(student)

        response = await _send(client, conversation, student, "still here")

        assert response.status_code == 201
        message = response.json()["data"]
        assert message["sender_type"] == "student"
        assert message["sender_id"] == str(student.id)
        assert message["conversation_id"] == conversation["id"]
        assert message["is_read"] is False

    async def test_assigned_counselor_sends(self, client, counselor, assigned_conversation):
        response = await _send(client, assigned_conversation, counselor, "I am listening")
        assert response.status_code == 201
        assert response.json()["data"]["sender_type"] == "counselor"

    async def test_other_student_is_forbidden(
        self, client, other_student, assigned_conversation
    ):
        response = await _send(client, assigned_conversation, other_student)
        assert response.status_code == 403

    async def test_unassigned_counselor_is_forbidden(self, client, student, counselor, open_conversation):
        conversation = await open_conversation(student)
        response = await _send(client, conversation, counselor)
        assert response.status_code == 403
        assert response.json()["detail"] == "You can only send messages to conversations assigned to you"

    async def test_colleague_is_forbidden(self, client, other_counselor, assigned_conversation):
        response = await _send(client, assigned_conversation, other_counselor)
        assert response.status_code == 403

    async def test_admin_does_not_send(self, client, admin, assigned_conversation):
        response = await _send(client, assigned_conversation, admin)
        assert response.status_code == 403

    async def test_unknown_conversation(self, client, student):
        response = await _send(client, {"id": str(uuid4())}, student)
        assert response.status_code == 404

    @pytest.mark.parametrize("text", ["", "x" * 2001])
    async def test_rejects_bad_length(self, client, student, open_conversation, text):
        conversation = await open_conversation(student)
        response = await _send(client, conversation, student, text)
        assert response.status_code == 422

    async def test_sending_leaves_conversation_untouched(
        self, client, student, counselor, assigned_conversation
    ):
        url = f"/conversations/{assigned_conversation['id']}"
        before = (await client.get(url, headers=student.headers)).json()["conversation"]

        await _send(client, assigned_conversation, counselor)

        after = (await client.get(url, headers=student.headers)).json()["conversation"]
        assert after["updated_at"] == before["updated_at"]
        assert after["status"] == before["status"]


class TestList:
    async def test_oldest_first(self, client, student, counselor, assigned_conversation):
        await _send(client, assigned_conversation, counselor, "second")
        await _send(client, assigned_conversation, student, "third")

        response = await client.get(
            f"/conversations/{assigned_conversation['id']}/messages", headers=student.headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [m["message_text"] for m in data["messages"]] == ["first", "second", "third"]
        assert [m["sender_type"] for m in data["messages"]] == ["student", "counselor", "student"]

    async def test_other_student_cannot_list(self, client, other_student, assigned_conversation):
        response = await client.get(
            f"/conversations/{assigned_conversation['id']}/messages",
            headers=other_student.headers,
        )
        assert response.status_code == 403

    async def test_admin_can_list(self, client, admin, assigned_conversation):
        response = await client.get(
            f"/conversations/{assigned_conversation['id']}/messages", headers=admin.headers
        )
        assert response.status_code == 200
        assert response.json()["count"] == 1


class TestMarkRead:
    async def test_counselor_marks_student_message(
        self, client, counselor, assigned_conversation
    ):
        message = assigned_conversation["messages"][0]
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/{message['id']}/read",
            headers=counselor.headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["is_read"] is True

    async def test_cannot_mark_own_message(self, client, student, assigned_conversation):
        message = assigned_conversation["messages"][0]
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/{message['id']}/read",
            headers=student.headers,
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "You cannot mark your own messages as read"

    async def test_message_from_another_conversation(
        self, client, student, counselor, assigned_conversation, open_conversation
    ):
        other = await open_conversation(student)
        message = assigned_conversation["messages"][0]

        response = await client.patch(
            f"/conversations/{other['id']}/messages/{message['id']}/read",
            headers=counselor.headers,
        )
        assert response.status_code == 404

    async def test_unknown_message(self, client, counselor, assigned_conversation):
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/{uuid4()}/read",
            headers=counselor.headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Message not found"

    async def test_admin_cannot_mark(self, client, admin, assigned_conversation):
        message = assigned_conversation["messages"][0]
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/{message['id']}/read",
            headers=admin.headers,
        )
        assert response.status_code == 403


class TestMarkAllRead:
    async def test_marks_counterpart_messages_once(
        self, client, student, counselor, assigned_conversation
    ):
        await _send(client, assigned_conversation, student, "another")
        await _send(client, assigned_conversation, counselor, "reply")
        url = f"/conversations/{assigned_conversation['id']}/messages/mark-all-read"

        first = await client.patch(url, headers=counselor.headers)
        second = await client.patch(url, headers=counselor.headers)

        assert first.status_code == 200
        assert first.json()["marked"] == 2
        assert second.json()["marked"] == 0

        listing = await client.get(
            f"/conversations/{assigned_conversation['id']}/messages", headers=student.headers
        )
        read_state = {m["message_text"]: m["is_read"] for m in listing.json()["messages"]}
        assert read_state == {"first": True, "another": True, "reply": False}

    async def test_other_student_forbidden(self, client, other_student, assigned_conversation):
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/mark-all-read",
            headers=other_student.headers,
        )
        assert response.status_code == 403

    async def test_admin_forbidden(self, client, admin, assigned_conversation):
        response = await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/mark-all-read",
            headers=admin.headers,
        )
        assert response.status_code == 403


class TestUnreadCount:
    async def _count(self, client, account):
        response = await client.get("/messages/unread-count", headers=account.headers)
        assert response.status_code == 200
        return response.json()["unread_count"]

    async def test_counts_follow_read_state(
        self, client, student, counselor, other_counselor, admin, assigned_conversation
    ):
        await _send(client, assigned_conversation, counselor, "reply one")
        await _send(client, assigned_conversation, counselor, "reply two")

        assert await self._count(client, student) == 2
        assert await self._count(client, counselor) == 1
        assert await self._count(client, other_counselor) == 0
        assert await self._count(client, admin) == 3

        await client.patch(
            f"/conversations/{assigned_conversation['id']}/messages/mark-all-read",
            headers=student.headers,
        )

        assert await self._count(client, student) == 0
        assert await self._count(client, counselor) == 1

    async def test_unassigned_conversations_do_not_count_for_counselors(
        self, client, student, counselor, open_conversation
    ):
        await open_conversation(student)
        assert await self._count(client, counselor) == 0
