from exam_planner.models.activity_log import ActivityLog  # noqa: F401
from exam_planner.models.enrollment import PedagogicalEnrollment  # noqa: F401
from exam_planner.models.exam_session import ExamAssignment, ExamSession  # noqa: F401
from exam_planner.models.grouping_rule import GroupingRule  # noqa: F401
from exam_planner.models.location import Location, LocationType  # noqa: F401
