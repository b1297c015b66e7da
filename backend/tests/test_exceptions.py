from exam_planner.core.exceptions import (
    AppError,
    DuplicateLocationError,
    IncompletePlanError,
    PlanningError,
    ResourceNotFoundError,
    ValidationError,
)


def test_planning_error_structure():
    err = PlanningError(message="No room left", details={"remaining": 0})
    assert err.status_code == 400
    assert err.message == "No room left"
    assert err.details == {"remaining": 0}
    assert isinstance(err, AppError)


def test_duplicate_location_error_names_every_duplicate():
    err = DuplicateLocationError(["Amphi 1", "Salle 3"])
    assert err.status_code == 409
    assert err.message == "Location used more than once: Amphi 1, Salle 3"
    assert err.details == {"duplicates": ["Amphi 1", "Salle 3"]}


def test_status_codes():
    assert ValidationError("bad").status_code == 422
    assert IncompletePlanError("short").status_code == 400
    assert ResourceNotFoundError("Location", "42").message == "Location with id 42 not found"


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}
