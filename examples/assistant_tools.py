#!/usr/bin/env python3
"""
Assistant run with local tool handlers.

Starts a run on an existing assistant, answers its function calls with
local Python handlers and prints the resulting thread.

Usage:
    export OPENAI_API_KEY_ASSISTANTS="your-api-key"
    export ASSISTANT_ID="asst_..."
    python examples/assistant_tools.py
"""

import asyncio
import os
from typing import Any

from openai_service import (
    CancelToken,
    OpenAIService,
    PollTimeoutError,
    RunFailedError,
    ToolRegistry,
)
from openai_service.telemetry import LogLevel, ServiceLogger

registry = ToolRegistry()


@registry.tool(
    description="Get the current weather for a city",
    parameters={
        "type": "object",
        "properties": {
            "city": {"type": "string", "description": "City name, e.g. 'Paris'"},
            "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
        },
        "required": ["city"],
    },
)
def get_weather(args: dict[str, Any]) -> dict[str, Any]:
    # Stand-in for a real weather API
    temp = {"Paris": 21, "Oslo": -5}.get(args["city"], 15)
    if args.get("unit") == "fahrenheit":
        temp = temp * 9 / 5 + 32
    return {"city": args["city"], "temp": temp, "unit": args.get("unit", "celsius")}


@registry.tool(description="Convert an amount between currencies")
async def convert_currency(args: dict[str, Any]) -> str:
    await asyncio.sleep(0)
    return f"{args.get('amount', 0)} {args.get('from', 'EUR')} is about {args.get('amount', 0) * 1.1:.2f} USD"


def print_status(run) -> None:
    print(f"  run {run.id}: {run.status.value}")


async def main() -> None:
    ServiceLogger.configure(level=LogLevel.INFO, format="text")
    assistant_id = os.environ["ASSISTANT_ID"]

    # Give up locally after two minutes
    token = CancelToken(timeout=120)

    async with OpenAIService() as service:
        try:
            result = await service.assistant_run(
                assistant_id,
                [{"role": "user", "content": "What's the weather in Paris, in fahrenheit?"}],
                tool_handlers=registry,
                on_status=print_status,
                cancel_token=token,
            )
        except RunFailedError as e:
            print(f"Run failed: {e}")
            return
        except PollTimeoutError as e:
            print(f"Run still {e.last_status} after {e.attempts} polls")
            return

    print(f"\nThread {result.thread_id}:")
    for message in result.messages:
        for part in message.get("content", []):
            if part.get("type") == "text":
                print(f"[{message['role']}] {part['text']['value']}")


if __name__ == "__main__":
    asyncio.run(main())
