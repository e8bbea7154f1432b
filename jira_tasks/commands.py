"""Parsing of ``/task`` slash command text into action parameters.

Examples::

    /task create Fix login bug --description "500 on submit" --assignee alice --force
    /task update Fix login bug --status done
    /task list --statuses "In Progress" --priority High --start-at 10
"""

import shlex
from typing import Any

ACTION_ALIASES = {
    "create": "createTask",
    "add": "createTask",
    "update": "updateTask",
    "move": "updateTask",
    "delete": "deleteTask",
    "remove": "deleteTask",
    "query": "queryTask",
    "show": "queryTask",
    "list": "listTasks",
    "ls": "listTasks",
}

# option -> (parameter name, repeatable)
OPTIONS = {
    "--description": ("description", False),
    "-d": ("description", False),
    "--assignee": ("assignee", True),
    "-a": ("assignee", True),
    "--status": ("status", False),
    "-s": ("status", False),
    "--statuses": ("statuses", True),
    "--priority": ("priorities", True),
    "-p": ("priorities", True),
    "--start-at": ("startAt", False),
}

USAGE = (
    "Usage: `/task <create|update|delete|query|list> [title] "
    "[--description TEXT] [--assignee NAME] [--status inProgress|done] "
    "[--statuses STATUS] [--priority PRIORITY] [--start-at N] [--force]`"
)


class CommandError(ValueError):
    """The command text could not be understood."""
    pass


def parse_command(text: str) -> tuple[str, dict[str, Any]]:
    """Split command text into a bot-facing action name and its parameters."""
    try:
        tokens = shlex.split(text or "")
    except ValueError as e:
        raise CommandError(f"Could not parse command: {e}") from e

    if not tokens:
        raise CommandError(USAGE)

    action = ACTION_ALIASES.get(tokens[0].lower())
    if action is None:
        raise CommandError(f"Unknown action '{tokens[0]}'. {USAGE}")

    params: dict[str, Any] = {}
    title_words: list[str] = []
    i = 1
    while i < len(tokens):
        token = tokens[i]
        if token == "--force":
            params["forceCreate"] = True
        elif token in OPTIONS:
            if i + 1 >= len(tokens):
                raise CommandError(f"Option {token} needs a value")
            name, repeatable = OPTIONS[token]
            value = tokens[i + 1]
            if repeatable:
                params.setdefault(name, []).append(value)
            else:
                params[name] = value
            i += 1
        elif token.startswith("--"):
            raise CommandError(f"Unknown option {token}. {USAGE}")
        else:
            title_words.append(token)
        i += 1

    if title_words:
        params["title"] = " ".join(title_words)

    # Create takes a list of assignees, list filters on a single one
    assignees = params.pop("assignee", [])
    if action == "createTask":
        params["assignees"] = assignees
    elif assignees:
        params["assignee"] = assignees[0]

    return action, params
