"""Jira connector implementation.

Talks to Jira Cloud with basic auth (account email + API token).
Create an API token at https://id.atlassian.com/manage-profile/security/api-tokens
and set ATLASSIAN_SITE_NAME, ATLASSIAN_USER_EMAIL and ATLASSIAN_API_TOKEN.

Tools that take a user (assignee) accept an accountId, an email address, a
username or a display name; anything that is not already an accountId is
resolved through the UserResolver.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp import types

from ..users import UserResolver, default_resolver, search_users, search_users_with_picker
from .adf import adf_to_text, text_to_adf
from .base import BaseConnector
from .exceptions import JiraError, JiraValidationError
from .formatters import format_transition_result, format_transitions
from .transport import JiraCredentials, fetch_jira, require_credentials

logger = logging.getLogger(__name__)

API = "/rest/api/3"

DEFAULT_ISSUE_FIELDS = ["summary", "status", "assignee", "priority", "created", "updated"]

USER_IDENTIFIER_HINT = "accountId, email address, username or display name"


class JiraConnector(BaseConnector):
    """Jira connector for the Jira Cloud REST API v3."""

    def __init__(self, user_resolver: Optional[UserResolver] = None):
        super().__init__()
        self.user_resolver = user_resolver or default_resolver

    @property
    def display_name(self) -> str:
        return "Jira"

    @property
    def description(self) -> str:
        return "Access Jira projects, issues, workflow transitions, comments and users"

    async def get_tools(self) -> List[types.Tool]:
        """Get available Jira tools."""
        tools = [
            # Projects
            types.Tool(
                name="jira_list_projects",
                description="List Jira projects visible to the configured account",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Filter projects by key or name (case-insensitive substring)"
                        },
                        "max_results": {
                            "type": "integer",
                            "default": 50,
                            "minimum": 1,
                            "maximum": 100,
                            "description": "Maximum number of projects to return"
                        }
                    }
                }
            ),
            types.Tool(
                name="jira_get_project",
                description="Get details of a Jira project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_key": {
                            "type": "string",
                            "description": "Project key or ID (e.g., 'PROJ')"
                        }
                    },
                    "required": ["project_key"]
                }
            ),
            # Issues
            types.Tool(
                name="jira_search_issues",
                description="Search for Jira issues using JQL (Jira Query Language)",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "jql": {
                            "type": "string",
                            "description": "JQL query string (e.g., 'project = PROJ AND status = Open')"
                        },
                        "max_results": {
                            "type": "integer",
                            "default": 50,
                            "minimum": 1,
                            "maximum": 100,
                            "description": "Maximum number of results to return"
                        },
                        "fields": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Specific fields to include (e.g., ['summary', 'status', 'assignee'])"
                        }
                    },
                    "required": ["jql"]
                }
            ),
            types.Tool(
                name="jira_get_issue",
                description="Get detailed information about a specific Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key or ID (e.g., 'PROJ-123')"
                        },
                        "fields": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Specific fields to include"
                        }
                    },
                    "required": ["issue_key"]
                }
            ),
            types.Tool(
                name="jira_create_issue",
                description="Create a new Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_key": {
                            "type": "string",
                            "description": "Project key (e.g., 'PROJ')"
                        },
                        "summary": {
                            "type": "string",
                            "description": "Issue summary/title"
                        },
                        "issue_type": {
                            "type": "string",
                            "description": "Issue type (e.g., 'Task', 'Bug', 'Story')"
                        },
                        "description": {
                            "type": "string",
                            "description": "Issue description (plain text)"
                        },
                        "assignee": {
                            "type": "string",
                            "description": f"Assignee ({USER_IDENTIFIER_HINT})"
                        },
                        "priority_name": {
                            "type": "string",
                            "description": "Priority name (e.g., 'High', 'Medium', 'Low')"
                        },
                        "labels": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Array of label strings"
                        }
                    },
                    "required": ["project_key", "summary", "issue_type"]
                }
            ),
            types.Tool(
                name="jira_update_issue",
                description="Update fields of an existing Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key (e.g., 'PROJ-123')"
                        },
                        "summary": {
                            "type": "string",
                            "description": "New summary/title"
                        },
                        "description": {
                            "type": "string",
                            "description": "New description (plain text)"
                        },
                        "assignee": {
                            "type": "string",
                            "description": f"New assignee ({USER_IDENTIFIER_HINT})"
                        },
                        "priority_name": {
                            "type": "string",
                            "description": "New priority name"
                        },
                        "labels": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Replacement array of labels"
                        }
                    },
                    "required": ["issue_key"]
                }
            ),
            # Workflow
            types.Tool(
                name="jira_get_issue_transitions",
                description=(
                    "Get the workflow transitions available for an issue, including the "
                    "transition ID needed by jira_transition_issue and any screen fields"
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key or ID (e.g., 'PROJ-123')"
                        },
                        "expand": {
                            "type": "string",
                            "description": "Optional expansion (e.g., 'transitions.fields')"
                        }
                    },
                    "required": ["issue_key"]
                }
            ),
            types.Tool(
                name="jira_transition_issue",
                description=(
                    "Move an issue to a new status (e.g., 'To Do' -> 'In Progress'). "
                    "Use jira_get_issue_transitions first to find the transition ID. "
                    "Optionally adds a comment and sets fields required by the transition screen."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key or ID (e.g., 'PROJ-123')"
                        },
                        "transition_id": {
                            "type": "string",
                            "description": "ID of the transition to perform"
                        },
                        "comment": {
                            "type": "string",
                            "description": "Optional comment to add after the transition"
                        },
                        "fields": {
                            "type": "object",
                            "description": "Optional fields to set during the transition (e.g., resolution)"
                        },
                        "update": {
                            "type": "object",
                            "description": "Optional update operations for multi-value fields"
                        }
                    },
                    "required": ["issue_key", "transition_id"]
                }
            ),
            # Comments
            types.Tool(
                name="jira_add_comment",
                description="Add a comment to a Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key (e.g., 'PROJ-123')"
                        },
                        "body": {
                            "type": "string",
                            "description": "Comment text"
                        }
                    },
                    "required": ["issue_key", "body"]
                }
            ),
            types.Tool(
                name="jira_get_comments",
                description="Get comments on a Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key (e.g., 'PROJ-123')"
                        },
                        "max_results": {
                            "type": "integer",
                            "default": 50,
                            "minimum": 1,
                            "maximum": 100,
                            "description": "Maximum number of comments to return"
                        }
                    },
                    "required": ["issue_key"]
                }
            ),
            # Users
            types.Tool(
                name="jira_assign_issue",
                description="Assign an issue to a user",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_key": {
                            "type": "string",
                            "description": "Issue key (e.g., 'PROJ-123')"
                        },
                        "assignee": {
                            "type": "string",
                            "description": f"User to assign ({USER_IDENTIFIER_HINT})"
                        }
                    },
                    "required": ["issue_key", "assignee"]
                }
            ),
            types.Tool(
                name="jira_search_users",
                description="Search Jira users by email, username or display name",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search string"
                        }
                    },
                    "required": ["query"]
                }
            ),
            types.Tool(
                name="jira_resolve_user",
                description="Resolve an email, username or display name to a Jira accountId",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "identifier": {
                            "type": "string",
                            "description": f"User to look up ({USER_IDENTIFIER_HINT})"
                        }
                    },
                    "required": ["identifier"]
                }
            ),
            types.Tool(
                name="jira_get_current_user",
                description="Get information about the configured Jira account",
                inputSchema={
                    "type": "object",
                    "properties": {}
                }
            ),
        ]

        return tools

    async def execute_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Execute a Jira tool."""
        try:
            credentials = require_credentials(f"jira_{tool_name}")

            if tool_name == "list_projects":
                return await self._list_projects(credentials, arguments)
            elif tool_name == "get_project":
                return await self._get_project(credentials, arguments)
            elif tool_name == "search_issues":
                return await self._search_issues(credentials, arguments)
            elif tool_name == "get_issue":
                return await self._get_issue(credentials, arguments)
            elif tool_name == "create_issue":
                return await self._create_issue(credentials, arguments)
            elif tool_name == "update_issue":
                return await self._update_issue(credentials, arguments)
            elif tool_name == "get_issue_transitions":
                return await self._get_transitions(credentials, arguments)
            elif tool_name == "transition_issue":
                return await self._transition_issue(credentials, arguments)
            elif tool_name == "add_comment":
                return await self._add_comment(credentials, arguments)
            elif tool_name == "get_comments":
                return await self._get_comments(credentials, arguments)
            elif tool_name == "assign_issue":
                return await self._assign_issue(credentials, arguments)
            elif tool_name == "search_users":
                return await self._search_users(credentials, arguments)
            elif tool_name == "resolve_user":
                return await self._resolve_user(arguments)
            elif tool_name == "get_current_user":
                return await self._get_current_user(credentials)
            else:
                return f"Unknown tool: {tool_name}"

        except JiraError as e:
            logger.error("Jira tool %s failed: %s", tool_name, e)
            return f"Error executing Jira tool '{tool_name}': {e}"

    async def _resolve_assignee(self, identifier: str) -> str:
        account_id = await self.user_resolver.resolve(identifier)
        if not account_id:
            raise JiraValidationError(
                f"Could not find a Jira user matching '{identifier}'. "
                "Try the user's email address or use jira_search_users."
            )
        return account_id

    async def _build_issue_fields(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Map optional tool arguments shared by create and update to Jira fields."""
        fields: Dict[str, Any] = {}

        if "summary" in arguments:
            fields["summary"] = arguments["summary"]

        if "description" in arguments:
            fields["description"] = text_to_adf(arguments["description"])

        if arguments.get("assignee"):
            fields["assignee"] = {"accountId": await self._resolve_assignee(arguments["assignee"])}

        if "priority_name" in arguments:
            fields["priority"] = {"name": arguments["priority_name"]}

        if "labels" in arguments:
            fields["labels"] = arguments["labels"]

        return fields

    # Projects

    async def _list_projects(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """List accessible projects."""
        params: Dict[str, Any] = {"maxResults": arguments.get("max_results", 50)}
        if arguments.get("query"):
            params["query"] = arguments["query"]

        data = await fetch_jira(credentials, f"{API}/project/search", params=params)

        result = {
            "total": data.get("total", 0),
            "projects": [
                {
                    "id": project["id"],
                    "key": project["key"],
                    "name": project["name"],
                    "projectTypeKey": project.get("projectTypeKey"),
                }
                for project in data.get("values", [])
            ],
        }

        logger.debug("Found %d projects", len(result["projects"]))
        return json.dumps(result, indent=2)

    async def _get_project(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Get project details."""
        project = await fetch_jira(credentials, f"{API}/project/{arguments['project_key']}")

        result = {
            "id": project["id"],
            "key": project["key"],
            "name": project["name"],
            "description": project.get("description"),
            "projectTypeKey": project.get("projectTypeKey"),
            "lead": (project.get("lead") or {}).get("displayName"),
            "issueTypes": [t.get("name") for t in project.get("issueTypes", [])],
            "url": project.get("self"),
        }
        return json.dumps(result, indent=2)

    # Issues

    async def _search_issues(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Search issues using JQL."""
        jql = arguments["jql"]
        fields = arguments.get("fields", DEFAULT_ISSUE_FIELDS)

        # /search/jql rejects unbounded queries
        jql_upper = jql.upper().strip()
        if jql_upper.startswith("ORDER BY"):
            jql = f"updated >= -90d {jql}"
            logger.debug("Added time restriction to unbounded query: %s", jql)

        params = {
            "jql": jql,
            "maxResults": arguments.get("max_results", 50),
            "fields": ",".join(fields) if isinstance(fields, list) else fields,
        }

        data = await fetch_jira(credentials, f"{API}/search/jql", params=params)

        result = {
            "total": data.get("total", len(data.get("issues", []))),
            "issues": [
                {"key": issue["key"], "fields": issue.get("fields", {})}
                for issue in data.get("issues", [])
            ],
        }
        if data.get("nextPageToken"):
            result["nextPageToken"] = data["nextPageToken"]

        logger.debug("Found %d issues", len(result["issues"]))
        return json.dumps(result, indent=2)

    async def _get_issue(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Get issue details."""
        params = {}
        fields = arguments.get("fields")
        if fields:
            params["fields"] = ",".join(fields) if isinstance(fields, list) else fields

        issue = await fetch_jira(
            credentials, f"{API}/issue/{arguments['issue_key']}", params=params or None
        )

        issue_fields = issue.get("fields", {})
        if isinstance(issue_fields.get("description"), dict):
            issue_fields["description"] = adf_to_text(issue_fields["description"])

        return json.dumps(issue, indent=2)

    async def _create_issue(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Create a new issue."""
        fields = {
            "project": {"key": arguments["project_key"]},
            "issuetype": {"name": arguments["issue_type"]},
        }
        fields.update(await self._build_issue_fields(arguments))

        logger.debug("Creating Jira issue in project %s", arguments["project_key"])
        result = await fetch_jira(credentials, f"{API}/issue", method="POST", json={"fields": fields})

        logger.info("Created issue %s", result.get("key"))
        return json.dumps(result, indent=2)

    async def _update_issue(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Update an existing issue."""
        issue_key = arguments["issue_key"]
        fields = await self._build_issue_fields(arguments)
        if not fields:
            raise JiraValidationError("No fields to update were provided")

        # PUT returns 204 No Content on success
        await fetch_jira(
            credentials, f"{API}/issue/{issue_key}", method="PUT", json={"fields": fields}
        )

        logger.info("Issue %s updated (%s)", issue_key, ", ".join(sorted(fields)))
        return json.dumps(
            {"message": f"Issue {issue_key} updated successfully", "updatedFields": sorted(fields)},
            indent=2,
        )

    # Workflow

    async def _get_transitions(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Get available transitions for an issue."""
        issue_key = arguments["issue_key"]
        params = {"expand": arguments["expand"]} if arguments.get("expand") else None

        data = await fetch_jira(credentials, f"{API}/issue/{issue_key}/transitions", params=params)
        return format_transitions(data or {}, issue_key)

    async def _transition_issue(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Transition an issue, add the optional comment, then report the new status."""
        issue_key = arguments["issue_key"]
        transition_id = str(arguments["transition_id"])

        payload: Dict[str, Any] = {"transition": {"id": transition_id}}
        if arguments.get("fields"):
            payload["fields"] = arguments["fields"]
        if arguments.get("update"):
            payload["update"] = arguments["update"]

        logger.debug("Transitioning issue %s with transition %s", issue_key, transition_id)
        await fetch_jira(
            credentials, f"{API}/issue/{issue_key}/transitions", method="POST", json=payload
        )

        comment = arguments.get("comment")
        if comment:
            logger.debug("Adding comment to transitioned issue %s", issue_key)
            await fetch_jira(
                credentials,
                f"{API}/issue/{issue_key}/comment",
                method="POST",
                json={"body": text_to_adf(comment)},
            )

        updated_issue = await fetch_jira(
            credentials, f"{API}/issue/{issue_key}", params={"fields": "status,summary"}
        )

        logger.info("Issue %s transitioned with %s", issue_key, transition_id)
        return format_transition_result(
            issue_key, transition_id, updated_issue or {}, comment_added=bool(comment)
        )

    # Comments

    async def _add_comment(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Add a comment to an issue."""
        issue_key = arguments["issue_key"]

        comment = await fetch_jira(
            credentials,
            f"{API}/issue/{issue_key}/comment",
            method="POST",
            json={"body": text_to_adf(arguments["body"])},
        )

        result = {
            "id": comment.get("id"),
            "issue": issue_key,
            "author": (comment.get("author") or {}).get("displayName"),
            "created": comment.get("created"),
        }
        return json.dumps(result, indent=2)

    async def _get_comments(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Get comments for an issue."""
        issue_key = arguments["issue_key"]

        data = await fetch_jira(
            credentials,
            f"{API}/issue/{issue_key}/comment",
            params={"maxResults": arguments.get("max_results", 50)},
        )

        result = {
            "total": data.get("total", 0),
            "comments": [
                {
                    "id": comment["id"],
                    "author": (comment.get("author") or {}).get("displayName"),
                    "created": comment.get("created"),
                    "updated": comment.get("updated"),
                    "body": adf_to_text(comment.get("body")),
                }
                for comment in data.get("comments", [])
            ],
        }
        return json.dumps(result, indent=2)

    # Users

    async def _assign_issue(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Assign an issue to a user given any supported identifier."""
        issue_key = arguments["issue_key"]
        account_id = await self._resolve_assignee(arguments["assignee"])

        await fetch_jira(
            credentials,
            f"{API}/issue/{issue_key}/assignee",
            method="PUT",
            json={"accountId": account_id},
        )

        logger.info("Issue %s assigned to %s", issue_key, account_id)
        return json.dumps(
            {"message": f"Issue {issue_key} assigned successfully", "accountId": account_id},
            indent=2,
        )

    async def _search_users(self, credentials: JiraCredentials, arguments: Dict[str, Any]) -> str:
        """Search users, falling back to the picker when directory search is not permitted."""
        query = arguments["query"]

        result = await search_users(query, credentials)
        if not result.ok:
            result = await search_users_with_picker(query, credentials)
        if not result.ok:
            raise JiraError(f"User search failed: {result.failure}", operation="jira_search_users")

        users = [
            {
                "accountId": user.account_id,
                "displayName": user.display_name,
                "emailAddress": user.email_address,
                "active": user.active,
            }
            for user in result.candidates
        ]
        return json.dumps(users, indent=2)

    async def _resolve_user(self, arguments: Dict[str, Any]) -> str:
        identifier = arguments["identifier"]
        account_id = await self.user_resolver.resolve(identifier)
        return json.dumps(
            {"identifier": identifier, "accountId": account_id, "resolved": account_id is not None},
            indent=2,
        )

    async def _get_current_user(self, credentials: JiraCredentials) -> str:
        """Get current user information."""
        user = await fetch_jira(credentials, f"{API}/myself")

        result = {
            "accountId": user.get("accountId"),
            "displayName": user.get("displayName"),
            "emailAddress": user.get("emailAddress"),
            "timeZone": user.get("timeZone"),
            "active": user.get("active"),
        }
        return json.dumps(result, indent=2)
