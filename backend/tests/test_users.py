"""User directory and cascading account deletion."""

from uuid import UUID, uuid4

from sqlalchemy import func, select

from counsel.db.models import Conversation, Message, User, UserRole


async def _count(session_factory, model, *criteria) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        return (await session.execute(stmt)).scalar()


class TestDirectory:
    async def test_admin_lists_active_users(self, client, student, counselor, admin, make_user):
        await make_user("ghost", is_active=False)

        response = await client.get("/users", headers=admin.headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert {u["username"] for u in data["users"]} == {"alice", "carol", "root"}

    async def test_non_admins_cannot_list_users(self, client, student, counselor):
        assert (await client.get("/users", headers=student.headers)).status_code == 403
        assert (await client.get("/users", headers=counselor.headers)).status_code == 403

    async def test_counselors_sorted_by_username(
        self, client, student, counselor, other_counselor, make_user
    ):
        await make_user("aaron", UserRole.COUNSELOR)

        response = await client.get("/users/counselors", headers=counselor.headers)

        assert response.status_code == 200
        data = response.json()
        assert [c["username"] for c in data["counselors"]] == ["aaron", "carol", "dave"]
        assert data["count"] == 3

    async def test_students_cannot_list_counselors(self, client, student):
        response = await client.get("/users/counselors", headers=student.headers)
        assert response.status_code == 403


class TestDelete:
    async def test_deleting_counselor_removes_their_conversations(
        self,
        client,
        session_factory,
        student,
        other_student,
        counselor,
        admin,
        open_conversation,
    ):
        first = await open_conversation(student)
        second = await open_conversation(other_student)
        untouched = await open_conversation(student)
        for conversation in (first, second):
            await client.patch(
                f"/conversations/{conversation['id']}/assign/{counselor.id}",
                headers=counselor.headers,
            )
            await client.post(
                f"/conversations/{conversation['id']}/messages",
                json={"message_text": "reply"},
                headers=counselor.headers,
            )

        response = await client.delete(f"/users/{counselor.id}", headers=admin.headers)

        assert response.status_code == 200
        assert response.json()["user"] == {
            "id": str(counselor.id),
            "username": "carol",
            "role": "counselor",
        }
        assert await _count(session_factory, User, User.id == counselor.id) == 0
        assert await _count(session_factory, Conversation) == 1
        assert await _count(session_factory, Message) == 1
        assert await _count(session_factory, Message, Message.sender_id == counselor.id) == 0

        for conversation in (first, second):
            lookup = await client.get(
                f"/conversations/{conversation['id']}", headers=admin.headers
            )
            assert lookup.status_code == 404

        remaining = await client.get(f"/conversations/{untouched['id']}", headers=student.headers)
        assert remaining.status_code == 200

    async def test_deleting_twice_is_not_found(self, client, student, admin):
        first = await client.delete(f"/users/{student.id}", headers=admin.headers)
        second = await client.delete(f"/users/{student.id}", headers=admin.headers)
        assert first.status_code == 200
        assert second.status_code == 404

    async def test_unknown_user(self, client, admin):
        response = await client.delete(f"/users/{uuid4()}", headers=admin.headers)
        assert response.status_code == 404

    async def test_only_admins_delete_others(self, client, student, other_student, counselor):
        assert (
            await client.delete(f"/users/{other_student.id}", headers=student.headers)
        ).status_code == 403
        assert (
            await client.delete(f"/users/{other_student.id}", headers=counselor.headers)
        ).status_code == 403

    async def test_delete_own_account(self, client, session_factory, student, open_conversation):
        conversation = await open_conversation(student)

        response = await client.delete("/users/me", headers=student.headers)

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"
        assert await _count(session_factory, Conversation, Conversation.id == UUID(conversation["id"])) == 0
        assert await _count(session_factory, Message) == 0

        after = await client.get("/auth/profile", headers=student.headers)
        assert after.status_code == 401
