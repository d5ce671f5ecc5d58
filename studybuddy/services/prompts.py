"""
studybuddy/services/prompts.py

Turns a user's pending assignments into the study-plan generation request.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Sequence

from studybuddy.core.errors import NoPendingWork
from studybuddy.models.entities import Assignment

MAX_DAILY_HOURS = 6

SYSTEM_PLAN_PROMPT = (
    "You are a helpful study planning assistant. "
    "You MUST respond with valid JSON only, no markdown formatting or code blocks."
)

PLAN_JSON_LAYOUT = """{
  "title": "Study Plan Title",
  "startDate": "YYYY-MM-DD",
  "endDate": "YYYY-MM-DD",
  "sessions": [
    {
      "assignmentTitle": "Assignment title",
      "subjectName": "Subject name",
      "date": "YYYY-MM-DD",
      "startTime": "HH:MM AM/PM",
      "endTime": "HH:MM AM/PM",
      "duration": 90,
      "topic": "Specific topic to study",
      "description": "What to focus on",
      "tips": ["tip1", "tip2"]
    }
  ],
  "aiGeneratedInsights": {
    "summary": "Brief overview of the study plan",
    "recommendations": ["recommendation1", "recommendation2"],
    "estimatedTotalHours": 20,
    "priorityFocus": "Which assignments need most attention"
  }
}"""


@dataclass(frozen=True)
class PendingAssignment:
    """An incomplete assignment annotated with its subject's display name."""
    id: int
    subject_id: int
    title: str
    subject_name: str
    type: str
    due_date: date
    priority: str
    estimated_hours: float
    progress: int

    @classmethod
    def from_entity(cls, a: Assignment) -> "PendingAssignment":
        due = a.due_date.date() if isinstance(a.due_date, datetime) else a.due_date
        return cls(
            id=a.id,
            subject_id=a.subject_id,
            title=a.title,
            subject_name=a.subject.name if a.subject is not None else "",
            type=a.type,
            due_date=due,
            priority=a.priority,
            estimated_hours=a.estimated_hours,
            progress=a.progress,
        )

    def to_prompt_dict(self) -> dict:
        return {
            "title": self.title,
            "subject": self.subject_name,
            "type": self.type,
            "dueDate": self.due_date.isoformat(),
            "priority": self.priority,
            "estimatedHours": self.estimated_hours,
            "progress": self.progress,
        }


def build_plan_prompt(assignments: Sequence[PendingAssignment], today: Optional[date] = None) -> str:
    if not assignments:
        raise NoPendingWork()
    today = today or date.today()
    data: List[dict] = [a.to_prompt_dict() for a in assignments]

    return f"""You are an expert study planner for university students. Create a detailed, personalized study plan based on the following assignments:

{json.dumps(data, indent=2)}

Current date: {today.isoformat()}

Generate a study plan that:
1. Prioritizes assignments based on due dates and priority levels
2. Distributes study sessions evenly throughout the week
3. Allocates appropriate time based on estimated hours
4. Considers current progress on assignments
5. Includes breaks and doesn't schedule too many hours per day (max {MAX_DAILY_HOURS} hours)
6. Provides specific study tips for each session

Use the assignment titles and subject names exactly as given above.

Return ONLY a valid JSON object (no markdown, no backticks) with this exact structure:
{PLAN_JSON_LAYOUT}"""
