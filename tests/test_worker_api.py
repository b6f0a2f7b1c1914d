from app.services.report_service import get_report_service
from tests.conftest import PROOF_URL


def _accept(report, admin, worker_id=None):
    return get_report_service().accept_report(
        report["id"], admin=admin, plan_notes="Fix this week", assigned_worker_id=worker_id
    )


def test_queue_contains_only_actionable_jobs(client, act_as, admin, citizen, worker, other_worker, make_report):
    pending = make_report(citizen)
    open_job = _accept(make_report(citizen), admin)
    mine = _accept(make_report(citizen), admin, worker_id=worker.id)
    theirs = _accept(make_report(citizen), admin, worker_id=other_worker.id)

    act_as(worker)
    ids = {r["id"] for r in client.get("/worker/jobs").json()["reports"]}

    assert ids == {open_job["id"], mine["id"]}
    assert pending["id"] not in ids
    assert theirs["id"] not in ids


def test_active_jobs_come_first(client, act_as, admin, citizen, worker, make_report):
    ready = _accept(make_report(citizen, created_minutes_ago=1), admin)
    active = _accept(make_report(citizen, created_minutes_ago=60), admin)
    get_report_service().start_job(active["id"], worker=worker)

    act_as(worker)
    reports = client.get("/worker/jobs").json()["reports"]

    assert [r["id"] for r in reports] == [active["id"], ready["id"]]
    assert reports[0]["allowed_transitions"] == ["Resolved"]
    assert reports[1]["allowed_transitions"] == ["In Progress"]


def test_job_started_by_someone_else_leaves_the_queue(client, act_as, admin, citizen, worker, other_worker, make_report):
    job = _accept(make_report(citizen), admin)
    get_report_service().start_job(job["id"], worker=other_worker)

    act_as(worker)
    assert client.get("/worker/jobs").json()["count"] == 0


def test_start_job(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    act_as(worker)
    resp = client.post(f"/worker/jobs/{job['id']}/start", json={"expected_version": 2})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Job started"
    assert body["report"]["status"] == "In Progress"
    assert body["report"]["worker_id"] == worker.id
    assert body["report"]["version"] == 3


def test_start_without_body(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    act_as(worker)
    assert client.post(f"/worker/jobs/{job['id']}/start").status_code == 200


def test_start_pending_report_is_invalid(client, act_as, citizen, worker, make_report):
    report = make_report(citizen)
    act_as(worker)
    assert client.post(f"/worker/jobs/{report['id']}/start").status_code == 400


def test_start_job_assigned_to_another_worker(client, act_as, admin, citizen, worker, other_worker, make_report):
    job = _accept(make_report(citizen), admin, worker_id=other_worker.id)
    act_as(worker)

    assert client.post(f"/worker/jobs/{job['id']}/start").status_code == 403
    assert get_report_service().get_report(job["id"], viewer=admin)["status"] == "Accepted"


def test_resolve_job(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    get_report_service().start_job(job["id"], worker=worker)
    act_as(worker)

    resp = client.post(
        f"/worker/jobs/{job['id']}/resolve",
        json={"resolution_notes": "Filled with cold mix asphalt", "resolution_image_url": PROOF_URL},
    )

    assert resp.status_code == 200
    report = resp.json()["report"]
    assert report["status"] == "Resolved"
    assert report["resolution_notes"] == "Filled with cold mix asphalt"
    assert report["resolution_image_url"] == PROOF_URL
    assert report["allowed_transitions"] == []
    assert [(h["from_status"], h["to_status"]) for h in report["status_history"]] == [
        ("Pending", "Accepted"),
        ("Accepted", "In Progress"),
        ("In Progress", "Resolved"),
    ]


def test_resolve_requires_proof(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    get_report_service().start_job(job["id"], worker=worker)
    act_as(worker)
    url = f"/worker/jobs/{job['id']}/resolve"

    assert client.post(url, json={"resolution_notes": "Done"}).status_code == 422
    assert client.post(url, json={"resolution_image_url": PROOF_URL}).status_code == 422
    assert client.post(url, json={"resolution_notes": "  ", "resolution_image_url": PROOF_URL}).status_code == 400


def test_only_the_starting_worker_resolves(client, act_as, admin, citizen, worker, other_worker, make_report):
    job = _accept(make_report(citizen), admin)
    get_report_service().start_job(job["id"], worker=worker)
    act_as(other_worker)

    resp = client.post(
        f"/worker/jobs/{job['id']}/resolve",
        json={"resolution_notes": "Done", "resolution_image_url": PROOF_URL},
    )
    assert resp.status_code == 403


def test_resolve_skipping_start_is_invalid(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    act_as(worker)
    resp = client.post(
        f"/worker/jobs/{job['id']}/resolve",
        json={"resolution_notes": "Done", "resolution_image_url": PROOF_URL},
    )
    assert resp.status_code == 400


def test_start_with_stale_version(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    act_as(worker)
    resp = client.post(f"/worker/jobs/{job['id']}/start", json={"expected_version": 1})

    assert resp.status_code == 409
    assert resp.json()["current_version"] == 2


def test_worker_routes_need_worker(client, act_as, admin, citizen, make_report):
    job = _accept(make_report(citizen), admin)
    act_as(admin)
    assert client.get("/worker/jobs").status_code == 403
    assert client.post(f"/worker/jobs/{job['id']}/start").status_code == 403
    act_as(citizen)
    assert client.get("/worker/jobs").status_code == 403


def test_citizen_sees_progress_without_actions(client, act_as, admin, citizen, worker, make_report):
    job = _accept(make_report(citizen), admin)
    get_report_service().start_job(job["id"], worker=worker)

    act_as(citizen)
    body = client.get(f"/reports/{job['id']}").json()
    assert body["status"] == "In Progress"
    assert body["allowed_transitions"] == []
