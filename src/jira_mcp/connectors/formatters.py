"""Markdown rendering for workflow transition results."""

from typing import Any, Dict, List


def format_transitions(response: Dict[str, Any], issue_key: str) -> str:
    """Render the transitions available for an issue."""
    lines: List[str] = [f"# Available Transitions for {issue_key}", ""]

    transitions = response.get("transitions") or []
    if not transitions:
        lines.append("*No transitions available from the current status.*")
        lines.append("")
        lines.extend([
            "This could mean:",
            "- The issue is in a final state",
            "- You don't have permission to transition this issue",
            "- The workflow doesn't allow transitions from the current status",
        ])
        return "\n".join(lines)

    lines.append(f"Found **{len(transitions)}** available transition(s):")
    lines.append("")

    for index, transition in enumerate(transitions, start=1):
        target = transition.get("to") or {}
        lines.append(f"## {index}. {transition.get('name', 'Unnamed')}")
        lines.append(f"**ID:** `{transition.get('id')}`")
        lines.append(f"**Target Status:** {target.get('name', 'Unknown')}")

        if target.get("description"):
            lines.append(f"**Description:** {target['description']}")

        category = target.get("statusCategory")
        if category:
            lines.append(
                f"**Category:** {category.get('name')} ({category.get('colorName')})"
            )

        if transition.get("hasScreen"):
            lines.append("")
            lines.append("**Note:** This transition has a screen with additional fields.")

            fields = transition.get("fields") or {}
            if fields:
                lines.append("")
                lines.append("### Required/Available Fields:")
                for field_id, field in fields.items():
                    required = "**[Required]**" if field.get("required") else "[Optional]"
                    lines.append(f"- **{field.get('name') or field_id}** {required}")

        lines.extend(["", "---", ""])

    lines.append("## Usage")
    lines.append("To transition this issue, use the `jira_transition_issue` tool with:")
    lines.append(f"- `issue_key`: {issue_key}")
    lines.append("- `transition_id`: One of the IDs listed above")
    lines.append("- `comment`: (optional) Add a comment with the transition")
    lines.append("- `fields`: (optional) Set additional fields if required")

    return "\n".join(lines)


def format_transition_result(
    issue_key: str,
    transition_id: str,
    updated_issue: Dict[str, Any],
    comment_added: bool = False,
) -> str:
    """Render the outcome of a transition using the re-fetched issue."""
    fields = updated_issue.get("fields") or {}
    status = (fields.get("status") or {}).get("name") or "Unknown"

    lines = [
        "# Transition Completed Successfully",
        "",
        f"Issue **{issue_key}** has been transitioned.",
        "",
        "## Updated Issue Status",
        f"- **Issue:** {updated_issue.get('key', issue_key)}",
        f"- **Summary:** {fields.get('summary', '')}",
        f"- **New Status:** {status}",
    ]
    if comment_added:
        lines.append("- **Comment:** added")
    lines.extend([
        "",
        f"The transition with ID `{transition_id}` was successfully applied.",
    ])
    return "\n".join(lines)
