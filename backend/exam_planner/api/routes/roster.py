from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from exam_planner.api.deps import get_actor, get_db, get_roster
from exam_planner.core.exceptions import ResourceNotFoundError
from exam_planner.models.grouping_rule import GroupingRule
from exam_planner.schemas.roster import GroupingRuleCreate, GroupingRuleOut, StudentRef
from exam_planner.services.audit import log_activity
from exam_planner.services.roster import DatabaseRosterProvider

router = APIRouter()


@router.get("/roster/students", response_model=list[StudentRef])
def roster_students(
    module_code: str = Query(min_length=1, max_length=50),
    group: str | None = Query(default=None, max_length=50),
    roster: DatabaseRosterProvider = Depends(get_roster),
) -> list[StudentRef]:
    return roster.get_students(module_code, group)


@router.get("/grouping-rules", response_model=list[GroupingRuleOut])
def list_grouping_rules(
    db: Session = Depends(get_db),
    roster: DatabaseRosterProvider = Depends(get_roster),
) -> list[GroupingRuleOut]:
    rules = db.execute(select(GroupingRule).order_by(GroupingRule.module_pattern, GroupingRule.group_name)).scalars()
    return [
        GroupingRuleOut.model_validate(rule).model_copy(update={"student_count": len(roster.students_for_rule(rule))})
        for rule in rules
    ]


@router.post("/grouping-rules", response_model=GroupingRuleOut, status_code=status.HTTP_201_CREATED)
def create_grouping_rule(
    payload: GroupingRuleCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> GroupingRuleOut:
    rule = GroupingRule(**payload.model_dump())
    db.add(rule)
    db.flush()
    log_activity(
        db,
        actor=actor,
        action="grouping_rule.add",
        entity_type="grouping_rule",
        entity_id=rule.id,
        details=payload.model_dump(),
    )
    db.commit()
    db.refresh(rule)
    return rule


@router.get("/grouping-rules/{rule_id}/students", response_model=list[StudentRef])
def grouping_rule_students(
    rule_id: str,
    db: Session = Depends(get_db),
    roster: DatabaseRosterProvider = Depends(get_roster),
) -> list[StudentRef]:
    rule = db.get(GroupingRule, rule_id)
    if rule is None:
        raise ResourceNotFoundError("Grouping rule", rule_id)
    return roster.students_for_rule(rule)


@router.delete("/grouping-rules/{rule_id}")
def delete_grouping_rule(
    rule_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    rule = db.get(GroupingRule, rule_id)
    if rule is None:
        raise ResourceNotFoundError("Grouping rule", rule_id)
    log_activity(
        db,
        actor=actor,
        action="grouping_rule.remove",
        entity_type="grouping_rule",
        entity_id=rule.id,
        details={"module_pattern": rule.module_pattern, "group_name": rule.group_name},
    )
    db.delete(rule)
    db.commit()
    return {"success": True}
