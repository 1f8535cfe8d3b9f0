"""
Celery tasks package.

Tasks are organized by domain:
- sla_tasks: Periodic SLA breach sweep
- notification_tasks: Interview feedback reminders
"""

from app.tasks import notification_tasks, sla_tasks

__all__ = ["notification_tasks", "sla_tasks"]
