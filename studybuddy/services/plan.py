"""
studybuddy/services/plan.py

Study plan generation and the owner-scoped plan passthroughs:
- fetch the user's pending assignments
- build prompt -> completion -> reconcile
- persist one StudyPlan only after the model output validated
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from studybuddy.core.errors import NoPendingWork, NotFound, ServiceUnavailable
from studybuddy.models.entities import Assignment, StudyPlan, StudySession
from studybuddy.services.completion import CompletionClient
from studybuddy.services.prompts import SYSTEM_PLAN_PROMPT, PendingAssignment, build_plan_prompt
from studybuddy.services.reconcile import ReconciledPlan, reconcile_plan
from studybuddy.services.store import RecordStore

log = logging.getLogger(__name__)


class StudyPlanService:
    def __init__(
        self,
        store: RecordStore,
        client: Optional[CompletionClient],
        *,
        list_limit: int = 10,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.client = client
        self.list_limit = list_limit
        self._today = today

    # --- generation ---
    def pending_assignments(self, user_id: int) -> List[PendingAssignment]:
        rows = self.store.find_owned(
            Assignment, user_id,
            Assignment.is_completed.is_(False),
            order_by=(Assignment.due_date, Assignment.id),
        )
        return [PendingAssignment.from_entity(a) for a in rows]

    def generate(self, user_id: int) -> StudyPlan:
        if self.client is None:
            raise ServiceUnavailable()

        pending = self.pending_assignments(user_id)
        if not pending:
            raise NoPendingWork()

        prompt = build_plan_prompt(pending, self._today())
        log.info("[PLAN] generating for user=%s with %d pending assignments", user_id, len(pending))
        text = self.client.complete(SYSTEM_PLAN_PROMPT, prompt)
        reconciled = reconcile_plan(text, pending)

        plan = self.store.insert(self._to_entity(user_id, reconciled))
        log.info("[PLAN] saved plan id=%s (%d sessions)", plan.id, len(plan.sessions))
        return plan

    @staticmethod
    def _to_entity(user_id: int, rp: ReconciledPlan) -> StudyPlan:
        return StudyPlan(
            user_id=user_id,
            title=rp.title,
            start_date=rp.start_date,
            end_date=rp.end_date,
            ai_generated_insights=rp.insights,
            sessions=[
                StudySession(
                    position=i,
                    assignment_id=s.assignment_id,
                    subject_id=s.subject_id,
                    date=s.date,
                    start_time=s.start_time,
                    end_time=s.end_time,
                    duration=s.duration,
                    topic=s.topic,
                    description=s.description,
                    tips=list(s.tips),
                )
                for i, s in enumerate(rp.sessions)
            ],
        )

    # --- passthroughs ---
    def list_recent(self, user_id: int) -> List[StudyPlan]:
        return self.store.find_owned(
            StudyPlan, user_id,
            order_by=(StudyPlan.created_at.desc(), StudyPlan.id.desc()),
            limit=self.list_limit,
        )

    def get(self, user_id: int, plan_id: int) -> StudyPlan:
        plan = self.store.find_one_owned(StudyPlan, user_id, plan_id)
        if plan is None:
            raise NotFound("Study plan not found")
        return plan

    def delete(self, user_id: int, plan_id: int) -> None:
        if not self.store.delete_owned(StudyPlan, user_id, plan_id):
            raise NotFound("Study plan not found")
