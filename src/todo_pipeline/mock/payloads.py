"""
Canned JSON payloads served by the mock router.

Shapes mirror the real Todo API envelopes ({"success": ..., "data": ...}).
Builders that echo identifiers receive the MockContext of the request.
"""

import uuid
from typing import Any, Dict

from todo_pipeline.mock.rules import MockContext

_TIMESTAMP = "2024-01-15T10:30:00Z"

WORK_CATEGORY: Dict[str, Any] = {
    "id": "cat_1",
    "name": "Work",
    "color": "#FF5722",
    "createdAt": _TIMESTAMP,
}

PERSONAL_CATEGORY: Dict[str, Any] = {
    "id": "cat_2",
    "name": "Personal",
    "color": "#4CAF50",
    "createdAt": _TIMESTAMP,
}


def _task(**overrides: Any) -> Dict[str, Any]:
    task = {
        "id": "task_123",
        "title": "Complete project documentation",
        "description": "Write comprehensive documentation for the new feature",
        "priority": "high",
        "category": dict(WORK_CATEGORY),
        "dueDate": "2024-01-20T23:59:59Z",
        "completed": False,
        "createdAt": _TIMESTAMP,
        "updatedAt": _TIMESTAMP,
    }
    task.update(overrides)
    return task


# === Auth ===

def login(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {"message": "OTP sent successfully", "expiresIn": 300},
    }


def verify_otp(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "token": "mock_access_token_123",
            "refreshToken": "mock_refresh_token_123",
            "expiresIn": 3600,
            "user": {"id": "user_123", "phoneNumber": "+1234567890", "name": "John Doe"},
        },
    }


def logout(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "message": "Logged out successfully"}


# === Tasks ===

def task_list(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "tasks": [
                _task(),
                _task(
                    id="task_124",
                    title="Review code changes",
                    description="Review pull request for new feature",
                    priority="medium",
                    dueDate="2024-01-18T23:59:59Z",
                    completed=True,
                    updatedAt="2024-01-16T15:30:00Z",
                ),
            ],
            "pagination": {"page": 1, "limit": 20, "total": 2, "totalPages": 1},
        },
    }


def create_task(ctx: MockContext) -> Dict[str, Any]:
    body = ctx.json_body if isinstance(ctx.json_body, dict) else {}
    return {
        "success": True,
        "data": {
            "id": f"task_{uuid.uuid4().hex[:8]}",
            "title": body.get("title", "New Task"),
            "description": body.get("description", "Task description"),
            "priority": body.get("priority", "medium"),
            "category": None,
            "dueDate": body.get("dueDate"),
            "completed": False,
            "createdAt": _TIMESTAMP,
            "updatedAt": _TIMESTAMP,
        },
    }


def update_task(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": _task(
            id=ctx.resource_id("tasks") or "task_123",
            title="Updated Task Title",
            description="Updated task description",
            dueDate="2024-01-25T23:59:59Z",
            updatedAt="2024-01-15T11:45:00Z",
        ),
    }


def complete_task(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": _task(
            id=ctx.resource_id("tasks") or "task_123",
            completed=True,
            updatedAt="2024-01-15T11:45:00Z",
        ),
    }


def delete_task(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "message": "Task deleted successfully"}


def task_analytics(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "total": 25,
            "completed": 15,
            "pending": 10,
            "overdue": 3,
            "byPriority": {"high": 8, "medium": 12, "low": 5},
            "byCategory": [
                {"category": "Work", "count": 15},
                {"category": "Personal", "count": 10},
            ],
            "completionRate": 60.0,
        },
    }


def task_search(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "data": {"tasks": [_task()], "total": 1}}


def bulk_operation(ctx: MockContext) -> Dict[str, Any]:
    body = ctx.json_body if isinstance(ctx.json_body, dict) else {}
    task_ids = body.get("taskIds")
    count = len(task_ids) if isinstance(task_ids, list) else 3
    return {
        "success": True,
        "data": {"updatedCount": count, "message": f"Successfully completed {count} tasks"},
    }


# === Categories ===

def category_list(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "data": [dict(WORK_CATEGORY), dict(PERSONAL_CATEGORY)]}


def create_category(ctx: MockContext) -> Dict[str, Any]:
    body = ctx.json_body if isinstance(ctx.json_body, dict) else {}
    return {
        "success": True,
        "data": {
            "id": "cat_3",
            "name": body.get("name", "New Category"),
            "color": body.get("color", "#2196F3"),
            "createdAt": _TIMESTAMP,
        },
    }


def update_category(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "id": ctx.resource_id("categories") or "cat_1",
            "name": "Updated Work",
            "color": "#FF9800",
            "createdAt": _TIMESTAMP,
            "updatedAt": "2024-01-15T11:45:00Z",
        },
    }


def delete_category(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "message": "Category deleted successfully"}


# === Feedback ===

_FEEDBACK_GENERAL = {
    "id": "feedback_123",
    "rating": 5,
    "comment": "Great app! Very user-friendly interface.",
    "category": "general",
    "createdAt": _TIMESTAMP,
}


def submit_feedback(ctx: MockContext) -> Dict[str, Any]:
    return {"success": True, "data": dict(_FEEDBACK_GENERAL)}


def feedback_list(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": [
            dict(_FEEDBACK_GENERAL),
            {
                "id": "feedback_124",
                "rating": 4,
                "comment": "Good app, but could use more features.",
                "category": "feature_request",
                "createdAt": "2024-01-10T15:45:00Z",
            },
        ],
    }


def feedback_analytics(ctx: MockContext) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "totalFeedback": 150,
            "averageRating": 4.2,
            "ratingDistribution": {"5": 60, "4": 45, "3": 25, "2": 15, "1": 5},
            "categoryDistribution": {
                "general": 80,
                "feature_request": 40,
                "bug_report": 20,
                "improvement": 10,
            },
        },
    }


def not_found(path: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {"code": "NOT_FOUND", "message": f"Endpoint not found: {path}"},
    }
