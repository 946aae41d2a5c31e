"""Color code / task type repair for calendar entries.

Clients identify a day's category twice: as an integer ``task_type`` and as a
CSS-ish ``color_code`` of the form ``selected-color-<N>``. Older app builds
stored free-form colors ("blue"), and some rows drifted so the two disagree.
Every read, and every write through the compatibility endpoints, runs the
pair through :func:`normalize_color_code`:

* a color code without the ``selected-color-`` prefix is rebuilt from the
  task type;
* a color code whose number disagrees with the task type wins, and the task
  type is corrected to match it.

The repair is deterministic and idempotent.
"""
import logging
import re

logger = logging.getLogger(__name__)

COLOR_PREFIX = "selected-color-"
COLOR_NUMBER_RE = re.compile(r"selected-color-(\d+)")


def normalize_color_code(color_code: str | None, task_type: int | None) -> tuple[str | None, int | None]:
    """Return the repaired (color_code, task_type) pair."""
    if not color_code or not color_code.startswith(COLOR_PREFIX):
        if task_type is None:
            return color_code, task_type
        color_code = f"{COLOR_PREFIX}{task_type}"

    match = COLOR_NUMBER_RE.match(color_code)
    if match:
        color_type = int(match.group(1))
        if task_type != color_type:
            task_type = color_type
    return color_code, task_type


def normalize_task(task: dict) -> dict:
    """Repair a serialized calendar row in place and return it."""
    color_code, task_type = normalize_color_code(task.get("color_code"), task.get("task_type"))
    if color_code != task.get("color_code"):
        logger.debug("Normalizing color code for task %s to %s", task.get("id"), color_code)
    if task_type != task.get("task_type"):
        logger.debug(
            "Correcting task_type for task %s from %s to %s based on color_code",
            task.get("id"), task.get("task_type"), task_type,
        )
    task["color_code"] = color_code
    task["task_type"] = task_type
    return task
