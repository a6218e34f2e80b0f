"""
Integration test helper utilities.

Mock payload builders for the OpenAI endpoints and the threads workflow.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pytest_httpx

COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"
MODERATIONS_URL = "https://api.openai.com/v1/moderations"
IMAGES_URL = "https://api.openai.com/v1/images/generations"
THREADS_URL = "https://api.openai.com/v1/threads"

THREAD_ID = "thread_abc"
RUN_ID = "run_123"


def thread_url(*segments: str, thread_id: str = THREAD_ID) -> str:
    return "/".join([THREADS_URL, thread_id, *segments])


def run_url(*segments: str, thread_id: str = THREAD_ID, run_id: str = RUN_ID) -> str:
    return thread_url("runs", run_id, *segments, thread_id=thread_id)


def messages_list_url(thread_id: str = THREAD_ID, limit: int = 100) -> str:
    return f"{thread_url('messages', thread_id=thread_id)}?limit={limit}&order=asc"


def mock_openai_chat_response(content: str = "Hello from OpenAI!", model: str = "gpt-4o-mini") -> dict:
    """Create a mock OpenAI chat response."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1699012345,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def mock_tool_call(call_id: str, name: str, arguments: dict | None = None) -> dict:
    """Create a tool call entry as listed under required_action."""
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments or {})},
    }


def mock_run(
    status: str,
    tool_calls: list[dict] | None = None,
    last_error: dict | None = None,
    run_id: str = RUN_ID,
    thread_id: str = THREAD_ID,
) -> dict:
    """Create a mock run snapshot."""
    run: dict[str, Any] = {
        "id": run_id,
        "object": "thread.run",
        "thread_id": thread_id,
        "assistant_id": "asst_test",
        "status": status,
        "required_action": None,
        "last_error": last_error,
    }
    if tool_calls:
        run["required_action"] = {
            "type": "submit_tool_outputs",
            "submit_tool_outputs": {"tool_calls": tool_calls},
        }
    return run


def mock_thread_messages(*texts: str, thread_id: str = THREAD_ID) -> dict:
    """Create a mock message list response."""
    data = []
    for i, text in enumerate(texts):
        data.append({
            "id": f"msg_{i}",
            "object": "thread.message",
            "thread_id": thread_id,
            "role": "user" if i % 2 == 0 else "assistant",
            "content": [{"type": "text", "text": {"value": text, "annotations": []}}],
        })
    return {"object": "list", "data": data, "has_more": False}


def setup_thread_start(
    httpx_mock: pytest_httpx.HTTPXMock,
    message_count: int = 1,
    thread_id: str = THREAD_ID,
) -> None:
    """Mock thread creation, message appends and run creation."""
    httpx_mock.add_response(
        url=THREADS_URL,
        method="POST",
        json={"id": thread_id, "object": "thread"},
    )
    for i in range(message_count):
        httpx_mock.add_response(
            url=thread_url("messages", thread_id=thread_id),
            method="POST",
            json={"id": f"msg_in_{i}", "object": "thread.message"},
        )
    httpx_mock.add_response(
        url=thread_url("runs", thread_id=thread_id),
        method="POST",
        json=mock_run("queued", thread_id=thread_id),
    )


def setup_run_polls(httpx_mock: pytest_httpx.HTTPXMock, runs: list[dict]) -> None:
    """Mock one GET per run snapshot, served in order."""
    for run in runs:
        httpx_mock.add_response(
            url=run_url(thread_id=run["thread_id"], run_id=run["id"]),
            method="GET",
            json=run,
        )


def setup_tool_submission(httpx_mock: pytest_httpx.HTTPXMock, count: int = 1) -> None:
    for _ in range(count):
        httpx_mock.add_response(
            url=run_url("submit_tool_outputs"),
            method="POST",
            json=mock_run("queued"),
        )


def setup_fetch_messages(
    httpx_mock: pytest_httpx.HTTPXMock,
    *texts: str,
    thread_id: str = THREAD_ID,
) -> dict:
    body = mock_thread_messages(*texts, thread_id=thread_id)
    httpx_mock.add_response(
        url=messages_list_url(thread_id),
        method="GET",
        json=body,
    )
    return body


def request_json(request: Any) -> Any:
    """Decode the JSON body of a captured request."""
    return json.loads(request.content) if request.content else None
