"""Text sent to the assistant pane on the user's behalf."""

from __future__ import annotations

from .models import QueuedTask

CLARIFY_TEMPLATE = """CLARIFY MODE

TASK ID: {task_id}
TASK: {content}

Interview me about this task. Ask about anything relevant: technical implementation, UI/UX, edge cases, concerns, tradeoffs, constraints, dependencies.

Guidelines:
- Skip questions the task description already answers
- Keep interviewing until you have complete clarity
- Always finish with "Anything else I should know?"

After the interview:
1. Write the agreed plan to a markdown file in the project's plan folder
2. Record it on the sidebar task by running:

   {command} clarify {task_id} --plan <PLAN_FILE>

3. Ask me: "Execute this task now, or save for later?"
   - execute: work on the task
   - save: confirm the task is clarified and stop"""


def build_clarify_prompt(task: QueuedTask, command: str = "tasksidebar") -> str:
    return CLARIFY_TEMPLATE.format(task_id=task.id, content=task.content, command=command)
