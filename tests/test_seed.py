import os
from datetime import datetime

from app.models.user import UserRole
from app.services.report_service import get_report_service
from app.services.status_workflow import StatusWorkflowEngine
from app.services.user_service import get_user_service
from scripts.seed_db import load_seed, write_to_db

SEED_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "db_seed.json")


def test_dry_run_writes_nothing(db):
    assert write_to_db(db, load_seed(SEED_PATH), apply=False) == 0
    assert get_report_service().get_all_reports() == []


def test_seed_loads_into_a_consistent_state(db):
    seed = load_seed(SEED_PATH)
    assert write_to_db(db, seed, apply=True) == sum(len(docs) for docs in seed.values())

    reports = get_report_service().get_all_reports()
    assert {r["id"] for r in reports} == set(seed["reports"])
    for report in reports:
        assert isinstance(report["createdAt"], datetime)
        history = report["statusHistory"]
        # Each recorded step is a real workflow transition and versions track them
        assert report["version"] == len(history) + 1
        for entry in history:
            assert StatusWorkflowEngine.is_valid_transition(entry["from"], entry["to"])
        if history:
            assert history[-1]["to"] == report["status"]

    assert [u.id for u in get_user_service().list_users(UserRole.WORKER)] == ["worker-demo"]
