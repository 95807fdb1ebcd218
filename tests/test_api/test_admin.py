"""Tests for the admin listing and settings endpoints."""

from feedbacker.feedback.schemas import FeedbackPage


class TestAdminListing:
    def test_default_page(self, client, mock_repo, sample_record):
        resp = client.get("/admin/feedback")

        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 1
        assert body["nextOffset"] is None
        assert body["items"][0]["id"] == sample_record.id
        assert body["items"][0]["shopId"] == "shop-7"

        filters = mock_repo.list_feedback.call_args[0][0]
        assert filters.limit == 20
        assert filters.offset == 0
        assert filters.shop_id is None
        assert mock_repo.count.call_args[0][0] is filters

    def test_filters_forwarded(self, client, mock_repo):
        client.get(
            "/admin/feedback",
            params={
                "shopId": "shop-7",
                "sentiment": "negative",
                "since": "2026-02-01T00:00:00Z",
                "limit": 5,
                "offset": 10,
            },
        )

        filters = mock_repo.list_feedback.call_args[0][0]
        assert filters.shop_id == "shop-7"
        assert filters.sentiment == "negative"
        assert filters.since.month == 2
        assert filters.limit == 5
        assert filters.offset == 10

    def test_limit_capped(self, client, mock_repo):
        client.get("/admin/feedback", params={"limit": 5000})
        assert mock_repo.list_feedback.call_args[0][0].limit == 200

    def test_next_offset(self, client, mock_repo, sample_record):
        mock_repo.list_feedback.return_value = FeedbackPage(items=[sample_record], next_offset=20)
        resp = client.get("/admin/feedback")
        assert resp.json()["nextOffset"] == 20

    def test_invalid_sentiment(self, client, mock_repo):
        resp = client.get("/admin/feedback", params={"sentiment": "angry"})
        assert resp.status_code == 422
        assert resp.json()["reason"] == "invalid_request"
        assert resp.json()["error"].startswith("sentiment:")
        mock_repo.list_feedback.assert_not_called()

    def test_negative_offset(self, client):
        resp = client.get("/admin/feedback", params={"offset": -1})
        assert resp.status_code == 422


class TestAdminSettings:
    def test_get(self, client):
        resp = client.get("/admin/settings")
        assert resp.status_code == 200
        assert resp.json() == {"alertThreshold": 0.4}

    def test_put(self, client, mock_settings_service):
        resp = client.put("/admin/settings", json={"alertThreshold": 0.25})

        assert resp.status_code == 200
        assert resp.json() == {"alertThreshold": 0.25}
        mock_settings_service.set_alert_threshold.assert_awaited_once_with(0.25)

    def test_put_out_of_range(self, client, mock_settings_service):
        resp = client.put("/admin/settings", json={"alertThreshold": 1.5})

        assert resp.status_code == 422
        assert resp.json()["reason"] == "invalid_request"
        assert "alertThreshold" in resp.json()["error"]
        mock_settings_service.set_alert_threshold.assert_not_called()

    def test_put_missing_field(self, client):
        resp = client.put("/admin/settings", json={})
        assert resp.status_code == 422
