"""Report submission and browsing, including matching after submission."""
from lostfound.matching import LeaseRunLock, ReportKind
from lostfound.matching.lock import DEFAULT_LEASE_NAME
from lostfound.matching.sql_store import SqlAlchemyMatchStore
from lostfound.models import FoundItem, LostItem, Match, MatchRun, Notification, RunLease
from lostfound.security import issue_token

LOST_PAYLOAD = {
    "itemName": "iPhone 13",
    "category": "Electronics",
    "description": "black iphone with cracked screen",
    "locationLost": "Library",
    "dateLost": "2026-10-01",
}

FOUND_PAYLOAD = {
    "itemName": "iPhone",
    "category": "Electronics",
    "description": "found a black phone cracked screen near library",
    "locationFound": "Library entrance",
    "dateFound": "2026-10-03",
}


def test_submitting_reports_triggers_matching(client, make_user, as_user):
    loser, finder = make_user(), make_user()

    first = client.post("/api/v1/reports/lost", json=LOST_PAYLOAD, headers=as_user(loser))
    assert first.status_code == 201
    body = first.get_json()
    assert body["report"]["type"] == "lost"
    assert body["report"]["status"] == "pending"
    assert body["report"]["dateLost"] == "2026-10-01"
    assert body["matching"]["matchesFound"] == 0

    second = client.post("/api/v1/reports/found", json=FOUND_PAYLOAD, headers=as_user(finder))
    assert second.status_code == 201
    assert second.get_json()["matching"] == {"success": True, "matchesFound": 1, "message": "Found 1 potential matches"}

    assert Match.query.count() == 1
    assert {n.user_id for n in Notification.query.all()} == {loser.id, finder.id}


def test_matching_on_report_can_be_disabled(app, make_user, as_user):
    app.config["MATCH_ON_REPORT"] = False
    resp = app.test_client().post("/api/v1/reports/lost", json=LOST_PAYLOAD, headers=as_user(make_user()))
    assert resp.status_code == 201
    assert resp.get_json()["matching"] is None


def test_bearer_token_authenticates(client, make_user):
    user = make_user()
    token = issue_token(user.id)
    resp = client.post("/api/v1/reports/lost", json=LOST_PAYLOAD, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 201
    assert resp.get_json()["report"]["userId"] == user.id


def test_invalid_token_is_anonymous(client):
    resp = client.post("/api/v1/reports/lost", json=LOST_PAYLOAD, headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_submission_requires_user(client):
    resp = client.post("/api/v1/reports/found", json=FOUND_PAYLOAD)
    assert resp.status_code == 401
    assert FoundItem.query.count() == 0


def test_submission_validates_fields(client, make_user, as_user):
    payload = {**LOST_PAYLOAD, "dateLost": "yesterday"}
    payload.pop("category")

    resp = client.post("/api/v1/reports/lost", json=payload, headers=as_user(make_user()))

    assert resp.status_code == 400
    fields = resp.get_json()["fields"]
    assert set(fields) == {"category", "dateLost"}
    assert LostItem.query.count() == 0


def test_unknown_kind_is_404(client, make_user, as_user):
    resp = client.post("/api/v1/reports/misplaced", json=LOST_PAYLOAD, headers=as_user(make_user()))
    assert resp.status_code == 404


def test_list_filters(client, make_user, make_lost):
    owner, other = make_user(), make_user()
    make_lost(owner, item_name="Blue umbrella", category="Accessories", description="folding")
    make_lost(owner, item_name="Calculator", category="Electronics", description="casio fx")
    make_lost(other, item_name="Jacket", category="Clothing", status="closed")

    def names(query):
        return sorted(r["itemName"] for r in client.get(f"/api/v1/reports/lost{query}").get_json()["reports"])

    assert names("") == ["Blue umbrella", "Calculator"]
    assert names("?status=all") == ["Blue umbrella", "Calculator", "Jacket"]
    assert names("?category=Electronics") == ["Calculator"]
    assert names(f"?userId={other.id}&status=closed") == ["Jacket"]
    assert names("?q=umbrel") == ["Blue umbrella"]
    assert names("?q=CASIO") == ["Calculator"]


def test_get_single_report(client, make_user, make_found):
    found = make_found(make_user())
    resp = client.get(f"/api/v1/reports/found/{found.id}")
    assert resp.get_json()["report"]["locationFound"] == "Library entrance"
    assert client.get("/api/v1/reports/found/9999").status_code == 404


def test_owner_can_close_report_and_matching_skips_it(client, make_user, make_lost, make_found, as_user):
    loser = make_user()
    lost = make_lost(loser)
    make_found(make_user())

    resp = client.patch(f"/api/v1/reports/lost/{lost.id}/status", json={"status": "closed"}, headers=as_user(loser))
    assert resp.status_code == 200
    assert resp.get_json()["report"]["status"] == "closed"

    assert client.post("/api/v1/matching/run").get_json()["matchesFound"] == 0


def test_status_update_rules(client, make_user, make_lost, as_user):
    owner, stranger = make_user(), make_user()
    lost = make_lost(owner)
    url = f"/api/v1/reports/lost/{lost.id}/status"

    assert client.patch(url, json={"status": "closed"}).status_code == 401
    assert client.patch(url, json={"status": "closed"}, headers=as_user(stranger)).status_code == 403
    assert client.patch(url, json={"status": "lost-forever"}, headers=as_user(owner)).status_code == 400


def test_owner_can_delete_report(client, make_user, make_found, as_user):
    owner, stranger = make_user(), make_user()
    found_id = make_found(owner).id

    assert client.delete(f"/api/v1/reports/found/{found_id}", headers=as_user(stranger)).status_code == 403
    resp = client.delete(f"/api/v1/reports/found/{found_id}", headers=as_user(owner))

    assert resp.get_json() == {"deleted": found_id}
    assert FoundItem.query.count() == 0


def test_report_submitted_while_lease_is_held_asks_holder_to_rescan(client, make_user, make_found, as_user):
    make_found(make_user())
    other = LeaseRunLock(holder="other-worker")
    assert other.acquire()

    resp = client.post("/api/v1/reports/lost", json=LOST_PAYLOAD, headers=as_user(make_user()))

    assert resp.status_code == 201
    assert resp.get_json()["matching"] == {"success": False, "error": "A matching run is already in progress"}
    assert RunLease.query.filter_by(name=DEFAULT_LEASE_NAME).one().rerun_requested
    # The holder owes one more pass before it may let go
    assert not other.release_if_idle()
    assert RunLease.holder_of(DEFAULT_LEASE_NAME) == "other-worker"
    assert other.release_if_idle()


def test_report_submitted_during_a_run_is_matched_by_that_run(client, monkeypatch, make_user, make_lost, as_user):
    make_lost(make_user())
    finder = make_user()
    real_fetch = SqlAlchemyMatchStore.fetch_pending
    submitted = []

    def fetch_then_submit(self, kind):
        rows = real_fetch(self, kind)
        if kind == ReportKind.FOUND and not submitted:
            resp = client.post("/api/v1/reports/found", json=FOUND_PAYLOAD, headers=as_user(finder))
            submitted.append(resp.get_json()["matching"])
        return rows

    monkeypatch.setattr(SqlAlchemyMatchStore, "fetch_pending", fetch_then_submit)

    body = client.post("/api/v1/matching/run").get_json()

    assert submitted == [{"success": False, "error": "A matching run is already in progress"}]
    assert body == {"success": True, "matchesFound": 1, "message": "Found 1 potential matches"}
    assert Match.query.count() == 1
    assert sorted(r.status for r in MatchRun.query.all()) == ["failed", "succeeded"]
    assert RunLease.holder_of(DEFAULT_LEASE_NAME) is None


def test_list_rejects_unknown_status(client):
    resp = client.get("/api/v1/reports/lost?status=lost-forever")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid status"}
