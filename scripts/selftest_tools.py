from __future__ import annotations
import asyncio
import json

from thinkgate.llm.factory import ProviderFactory
from thinkgate.server.dispatcher import Dispatcher
from thinkgate.tools.builtin import builtin_tools
from thinkgate.tools.builtin_tools.sequential_thinking import ThoughtLog
from thinkgate.tools.registry import ToolRegistry


class PrintNotifier:
    async def send_progress(self, token, progress, total, message):
        print(f"  progress[{token}] {progress:g}/{total:g} {message}")

    async def send_tools_changed(self):
        print("  tools changed")


async def main():
    # no keys: forwarding tools run in their degraded mode
    thoughts = ThoughtLog()
    registry = ToolRegistry(builtin_tools(ProviderFactory(env={}), thoughts))
    d = Dispatcher(registry, PrintNotifier(), debounce=0.05)

    print("LIST:", [t["name"] for t in d.on_list_tools()])

    # think echoes
    r = await d.on_call_tool("think", {"thought": "split the parser"}, progress_token="t1")
    print("THINK:", r.is_error, r.text.splitlines()[0])

    # architect needs a backend
    r = await d.on_call_tool("architect", {"prompt": "design a cache"})
    print("ARCHITECT:", r.is_error, r.content[0].text)

    # sequential thinking with a branch
    steps = [
        {"thought": "frame the problem", "thoughtNumber": 1, "totalThoughts": 2, "nextThoughtNeeded": True},
        {"thought": "try option A", "thoughtNumber": 2, "totalThoughts": 2, "nextThoughtNeeded": True,
         "branchFromThought": 1, "branchId": "a"},
        {"thought": "conclude", "thoughtNumber": 3, "totalThoughts": 2, "nextThoughtNeeded": False},
    ]
    for s in steps:
        r = await d.on_call_tool("sequential_thinking", s)
    print("SEQ:", json.loads(r.text))

    # unknown tool
    r = await d.on_call_tool("nope", {}, progress_token="t2")
    print("UNKNOWN:", r.is_error, r.text)

    # debounced tools-changed
    for _ in range(3):
        d.notify_tools_changed()
    await asyncio.sleep(0.1)
    await d.drain()

if __name__ == "__main__":
    asyncio.run(main())
