import pytest
from sqlalchemy import event

from restohire.models import (
    MaterialType,
    ProgressStatus,
    Role,
    TrainingMaterial,
    TrainingModule,
    TrainingProgress,
)
from restohire.services.training import (
    completion_percentage,
    get_module_with_progress,
    list_modules,
    prerequisites_completed,
    record_material_progress,
)


def _module(db, title, materials=0, role=Role.WORKER, order=0, prerequisites=()):
    module = TrainingModule(title=title, target_role=role, order=order, is_required=False)
    module.prerequisites.extend(prerequisites)
    db.add(module)
    db.flush()
    for i in range(materials):
        db.add(TrainingMaterial(
            module_id=module.id,
            title=f"{title} part {i + 1}",
            type=MaterialType.DOCUMENT,
            order=i + 1,
        ))
    db.commit()
    db.refresh(module)
    return module


def _complete_all(db, module, user):
    for material in module.materials:
        record_material_progress(db, material.id, user, status=ProgressStatus.COMPLETED)


@pytest.mark.parametrize(
    "completed, total, expected",
    [(0, 0, 0), (0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 3, 100)],
)
def test_completion_percentage(completed, total, expected):
    assert completion_percentage(completed, total) == expected


def test_module_without_prerequisites_is_unlocked(db, make_user):
    user = make_user("w@example.com")
    module = _module(db, "Basics", materials=2)
    assert prerequisites_completed(db, module, user.id) is True


def test_prerequisite_gate(db, make_user):
    user = make_user("w@example.com")
    basics = _module(db, "Basics", materials=2)
    advanced = _module(db, "Advanced", materials=1, prerequisites=[basics])

    assert prerequisites_completed(db, advanced, user.id) is False

    record_material_progress(db, basics.materials[0].id, user, status=ProgressStatus.COMPLETED)
    assert prerequisites_completed(db, advanced, user.id) is False

    record_material_progress(db, basics.materials[1].id, user, status=ProgressStatus.COMPLETED)
    assert prerequisites_completed(db, advanced, user.id) is True


def test_prerequisite_gate_checks_one_level(db, make_user):
    user = make_user("w@example.com")
    hygiene = _module(db, "Hygiene", materials=1)
    basics = _module(db, "Basics", materials=1, prerequisites=[hygiene])
    service = _module(db, "Service", materials=1, prerequisites=[basics])
    _complete_all(db, basics, user)

    assert prerequisites_completed(db, basics, user.id) is False
    assert prerequisites_completed(db, service, user.id) is True


def test_prerequisite_gate_stops_at_first_incomplete(db, make_user):
    user = make_user("w@example.com")
    knife_skills = _module(db, "Knife skills", materials=1, order=1)
    allergens = _module(db, "Allergens", materials=1, order=2)
    _complete_all(db, allergens, user)
    line_cook = _module(db, "Line cook", materials=1, prerequisites=[knife_skills, allergens])
    assert [m.id for m in line_cook.prerequisites] == [knife_skills.id, allergens.id]
    for prerequisite in line_cook.prerequisites:
        assert prerequisite.materials

    progress_queries = []

    def count_progress_queries(conn, cursor, statement, parameters, context, executemany):
        if "training_progress" in statement:
            progress_queries.append(statement)

    engine = db.get_bind()
    event.listen(engine, "before_cursor_execute", count_progress_queries)
    try:
        assert prerequisites_completed(db, line_cook, user.id) is False
    finally:
        event.remove(engine, "before_cursor_execute", count_progress_queries)

    assert len(progress_queries) == 1


def test_empty_prerequisite_does_not_block(db, make_user):
    user = make_user("w@example.com")
    placeholder = _module(db, "Placeholder", materials=0)
    module = _module(db, "Real", materials=1, prerequisites=[placeholder])
    assert prerequisites_completed(db, module, user.id) is True


def test_module_progress_summary(db, make_user):
    user = make_user("w@example.com")
    basics = _module(db, "Basics", materials=3)
    advanced = _module(db, "Advanced", materials=1, prerequisites=[basics])
    record_material_progress(db, basics.materials[0].id, user, status=ProgressStatus.COMPLETED)

    detail = get_module_with_progress(db, basics.id, user.id)

    assert detail["progress"] == {
        "completion_percentage": 33,
        "completed_materials": 1,
        "total_materials": 3,
        "prerequisites_completed": True,
    }
    assert detail["materials"][0]["progress"]["status"] == "COMPLETED"
    assert detail["materials"][1]["progress"] is None
    assert detail["required_for"] == [{"id": advanced.id, "title": "Advanced"}]

    gated = get_module_with_progress(db, advanced.id, user.id)
    assert gated["prerequisites"] == [{"id": basics.id, "title": "Basics"}]
    assert gated["progress"]["prerequisites_completed"] is False


def test_module_without_materials_is_zero_percent(db, make_user):
    user = make_user("w@example.com")
    empty = _module(db, "Empty")
    assert get_module_with_progress(db, empty.id, user.id)["progress"]["completion_percentage"] == 0


def test_list_modules_filters(db, make_user):
    user = make_user("w@example.com")
    basics = _module(db, "Basics", materials=1, order=1)
    _module(db, "Service", materials=1, order=2)
    _module(db, "Empty", order=3)
    _module(db, "Owner onboarding", materials=1, role=Role.RESTAURANT_OWNER)
    _complete_all(db, basics, user)

    assert [m["title"] for m in list_modules(db, user)] == ["Basics", "Service", "Empty"]
    assert [m["title"] for m in list_modules(db, user, completed=True)] == ["Basics"]
    assert [m["title"] for m in list_modules(db, user, completed=False)] == ["Service", "Empty"]
    assert [
        m["title"] for m in list_modules(db, user, target_role=Role.RESTAURANT_OWNER)
    ] == ["Owner onboarding"]


def test_open_material_starts_progress(client, db, worker):
    user, headers = worker
    module = _module(db, "Basics", materials=2)
    first, second = module.materials

    response = client.get(f"/api/v1/training/materials/{first.id}", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["progress"]["status"] == "IN_PROGRESS"
    assert body["progress"]["started_at"] is not None
    assert body["navigation"]["next"] == {"id": second.id, "title": second.title}
    assert body["navigation"]["previous"] is None

    progress = db.query(TrainingProgress).filter(TrainingProgress.user_id == user["id"]).one()
    assert progress.status == ProgressStatus.IN_PROGRESS


def test_material_for_other_role_is_forbidden(client, db, owner):
    module = _module(db, "Basics", materials=1, role=Role.WORKER)
    response = client.get(f"/api/v1/training/materials/{module.materials[0].id}", headers=owner[1])
    assert response.status_code == 403
    assert response.json()["error"] == "You do not have access to this training material"


def test_update_material_progress_endpoint(client, db, worker):
    _, headers = worker
    module = _module(db, "Basics", materials=1)
    material_id = module.materials[0].id

    response = client.put(
        f"/api/v1/training/materials/{material_id}",
        json={"status": "COMPLETED", "time_spent_minutes": 12, "score": 90},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["completed_at"] is not None

    modules = client.get("/api/v1/training/modules?completed=true", headers=headers).json()
    assert [m["id"] for m in modules] == [module.id]

    detail = client.get(f"/api/v1/training/modules/{module.id}", headers=headers).json()
    assert detail["progress"]["completion_percentage"] == 100


def test_missing_module_is_404(client, worker):
    response = client.get("/api/v1/training/modules/999", headers=worker[1])
    assert response.status_code == 404
