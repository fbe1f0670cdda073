"""
API tests for the comment reporting system.

Tests cover:
- Report endpoint (POST /comments/{comment_id}/reports)
- Report status (GET /comments/{comment_id}/reports)
- Thank-you notification and its failure isolation
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import CommentReportReason, NotificationKind
from surtidores.models import CommentReports


@pytest.mark.api
class TestReportComment:
    async def test_one_row_per_reason(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
        user,
        other_user,
        station,
        make_comment,
    ):
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["spam", "false_information", "spam"], "notes": "  Publicidad  "},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["reasons"] == ["spam", "false_information"]
        assert len(data["reports"]) == 2

        result = await db_session.execute(
            select(CommentReports).where(CommentReports.comment_id == comment.comment_id)
        )
        rows = result.scalars().all()
        assert {r.reason for r in rows} == {
            CommentReportReason.spam,
            CommentReportReason.false_information,
        }
        assert {r.notes for r in rows} == {"Publicidad"}
        assert len({r.created_at for r in rows}) == 1

    async def test_second_report_conflicts(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_comment
    ):
        comment = await make_comment(station, user)
        url = f"/api/v1/comments/{comment.comment_id}/reports"

        first = await client.post(url, json={"reasons": ["spam"]}, headers=auth_headers(other_user))
        second = await client.post(
            url, json={"reasons": ["other"]}, headers=auth_headers(other_user)
        )

        assert first.status_code == 201
        assert second.status_code == 409

    async def test_cannot_report_own_comment(
        self, client: AsyncClient, auth_headers, user, station, make_comment
    ):
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["spam"]},
            headers=auth_headers(user),
        )

        assert response.status_code == 400

    async def test_missing_comment(self, client: AsyncClient, auth_headers, user):
        response = await client.post(
            "/api/v1/comments/9999/reports", json={"reasons": ["spam"]}, headers=auth_headers(user)
        )

        assert response.status_code == 404

    async def test_reasons_required(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_comment
    ):
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": []},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "reasons"

    async def test_notes_over_limit_rejected(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_comment
    ):
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["other"], "notes": "n" * 289},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 400

    async def test_padded_notes_at_limit_accepted(
        self,
        client: AsyncClient,
        auth_headers,
        user,
        other_user,
        station,
        make_comment,
    ):
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["other"], "notes": " " + "n" * 288 + " "},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 201
        assert response.json()["reports"][0]["notes"] == "n" * 288


@pytest.mark.api
class TestReportNotification:
    async def test_thank_you_notification_sent_to_reporter(
        self, client: AsyncClient, notifier, auth_headers, user, other_user, station, make_comment
    ):
        comment = await make_comment(station, user)

        await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["inappropriate_content"], "notes": "Insultos"},
            headers=auth_headers(other_user),
        )

        assert notifier.kinds() == [NotificationKind.comment_report_thanks]
        kind, recipient, context = notifier.sent[0]
        assert recipient.user_id == other_user.user_id
        assert context["station_name"] == station.name
        assert context["reasons"] == "Contenido inapropiado"
        assert context["notes"] == "Insultos"

    async def test_notification_failure_does_not_fail_report(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        notifier,
        auth_headers,
        user,
        other_user,
        station,
        make_comment,
    ):
        notifier.fail_with = ConnectionError("redis down")
        comment = await make_comment(station, user)

        response = await client.post(
            f"/api/v1/comments/{comment.comment_id}/reports",
            json={"reasons": ["spam"]},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 201
        result = await db_session.execute(
            select(CommentReports).where(CommentReports.comment_id == comment.comment_id)
        )
        assert len(result.scalars().all()) == 1


@pytest.mark.api
class TestReportStatus:
    async def test_status_before_and_after(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_comment
    ):
        comment = await make_comment(station, user)
        url = f"/api/v1/comments/{comment.comment_id}/reports"

        before = await client.get(url, headers=auth_headers(other_user))
        await client.post(
            url, json={"reasons": ["spam", "other"]}, headers=auth_headers(other_user)
        )
        after = await client.get(url, headers=auth_headers(other_user))

        assert before.json() == {"comment_id": comment.comment_id, "has_reported": False, "report_count": 0}
        assert after.json() == {"comment_id": comment.comment_id, "has_reported": True, "report_count": 2}

    async def test_status_requires_authentication(
        self, client: AsyncClient, user, station, make_comment
    ):
        comment = await make_comment(station, user)

        response = await client.get(f"/api/v1/comments/{comment.comment_id}/reports")

        assert response.status_code == 401
