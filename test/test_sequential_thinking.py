from __future__ import annotations

import json
import threading

import pytest

from thinkgate.errors import ThoughtValidationError
from thinkgate.tools.builtin_tools.sequential_thinking import (
    SequentialThinkingTool,
    ThoughtLog,
    ThoughtRecord,
    render_thought,
)


def _args(n: int, total: int = 3, **extra):
    return {
        "thought": f"step {n}",
        "thoughtNumber": n,
        "totalThoughts": total,
        "nextThoughtNeeded": True,
        **extra,
    }


# ---------- validation ----------

@pytest.mark.parametrize(
    "args, field",
    [
        ({"thoughtNumber": 1, "totalThoughts": 1, "nextThoughtNeeded": True}, "thought"),
        ({"thought": "x", "totalThoughts": 1, "nextThoughtNeeded": True}, "thoughtNumber"),
        ({"thought": "x", "thoughtNumber": "1", "totalThoughts": 1, "nextThoughtNeeded": True}, "thoughtNumber"),
        ({"thought": "x", "thoughtNumber": 0, "totalThoughts": 1, "nextThoughtNeeded": True}, "thoughtNumber"),
        ({"thought": "x", "thoughtNumber": 1.5, "totalThoughts": 1, "nextThoughtNeeded": True}, "thoughtNumber"),
        ({"thought": "x", "thoughtNumber": True, "totalThoughts": 1, "nextThoughtNeeded": True}, "thoughtNumber"),
        ({"thought": "x", "thoughtNumber": 1, "nextThoughtNeeded": True}, "totalThoughts"),
        ({"thought": "x", "thoughtNumber": 1, "totalThoughts": 1}, "nextThoughtNeeded"),
        ({"thought": "x", "thoughtNumber": 1, "totalThoughts": 1, "nextThoughtNeeded": "yes"}, "nextThoughtNeeded"),
        ({**_args(1), "isRevision": "true"}, "isRevision"),
        ({**_args(1), "revisesThought": -2}, "revisesThought"),
        ({**_args(1), "branchId": 5}, "branchId"),
    ],
)
def test_from_obj_names_the_bad_field(args, field):
    with pytest.raises(ThoughtValidationError) as exc:
        ThoughtRecord.from_obj(args)
    assert exc.value.field == field
    assert field in str(exc.value)


def test_from_obj_accepts_integral_float_and_optionals():
    rec = ThoughtRecord.from_obj({**_args(2.0), "isRevision": True, "revisesThought": 1})
    assert rec.thought_number == 2
    assert rec.is_revision is True
    assert rec.revises_thought == 1
    assert rec.branch_id is None


def test_from_obj_rejects_non_mapping():
    with pytest.raises(ThoughtValidationError):
        ThoughtRecord.from_obj(["thought"])


# ---------- log ----------

def test_total_is_raised_to_thought_number():
    log = ThoughtLog()
    snap = None
    for n in (1, 2, 5):
        _, snap = log.record(ThoughtRecord.from_obj(_args(n, total=3)))
    assert snap["totalThoughts"] == 5
    assert snap["thoughtHistoryLength"] == 3
    assert log.history[-1].total_thoughts == 5


def test_branches_group_records_by_id():
    log = ThoughtLog()
    log.record(ThoughtRecord.from_obj(_args(1)))
    a, _ = log.record(ThoughtRecord.from_obj(_args(2, branchFromThought=1, branchId="b1")))
    b, snap = log.record(ThoughtRecord.from_obj(_args(3, branchFromThought=1, branchId="b1")))
    assert snap["branches"] == ["b1"]
    assert snap["thoughtHistoryLength"] == 3
    branch = log.branches["b1"]
    assert len(branch) == 2
    assert branch[0] is a and branch[1] is b
    assert log.history[1] is a


def test_branch_id_without_branch_point_is_not_a_branch():
    log = ThoughtLog()
    _, snap = log.record(ThoughtRecord.from_obj(_args(1, branchId="lonely")))
    assert snap["branches"] == []


def test_branches_listed_in_first_seen_order():
    log = ThoughtLog()
    for n, bid in enumerate(["zeta", "alpha", "zeta"], start=2):
        _, snap = log.record(ThoughtRecord.from_obj(_args(n, total=5, branchFromThought=1, branchId=bid)))
    assert snap["branches"] == ["zeta", "alpha"]


def test_concurrent_records_are_all_kept():
    log = ThoughtLog()

    def worker(offset):
        for i in range(50):
            log.record(ThoughtRecord.from_obj(_args(offset + i + 1, total=1)))

    threads = [threading.Thread(target=worker, args=(k * 50,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(log.history) == 200


def test_reset_clears_history_and_branches():
    log = ThoughtLog()
    log.record(ThoughtRecord.from_obj(_args(2, branchFromThought=1, branchId="b")))
    log.reset()
    assert log.history == [] and log.branches == {}


# ---------- rendering ----------

def test_render_modes():
    plain = render_thought(ThoughtRecord.from_obj(_args(1)))
    assert plain.splitlines()[0] == "Thought 1/3"
    assert plain.splitlines()[-1] == "step 1"

    rev = render_thought(ThoughtRecord.from_obj(_args(2, isRevision=True, revisesThought=1)))
    assert rev.startswith("Revision 2/3 (revising thought 1)")

    br = render_thought(ThoughtRecord.from_obj(_args(3, branchFromThought=1, branchId="b1")))
    assert br.startswith("Branch 3/3 (from thought 1, ID: b1)")


def test_revision_wins_over_branch_in_rendering():
    rec = ThoughtRecord.from_obj(_args(2, isRevision=True, revisesThought=1, branchFromThought=1, branchId="b"))
    assert render_thought(rec).startswith("Revision")


# ---------- tool ----------

@pytest.mark.asyncio
async def test_tool_returns_json_snapshot():
    tool = SequentialThinkingTool(ThoughtLog())
    result = await tool.execute({**_args(1), "nextThoughtNeeded": False})
    assert not result.is_error
    body = json.loads(result.text)
    assert body == {
        "thoughtNumber": 1,
        "totalThoughts": 3,
        "nextThoughtNeeded": False,
        "branches": [],
        "thoughtHistoryLength": 1,
    }


@pytest.mark.asyncio
async def test_tool_rejects_missing_thought_without_appending():
    log = ThoughtLog()
    tool = SequentialThinkingTool(log)
    result = await tool.execute({"thoughtNumber": 1, "totalThoughts": 1, "nextThoughtNeeded": True})
    assert result.is_error
    assert "thought" in result.text
    assert "Invalid thought data provided" in result.content[0].text
    assert log.history == []


@pytest.mark.asyncio
async def test_whitespace_thought_is_accepted():
    log = ThoughtLog()
    tool = SequentialThinkingTool(log)
    result = await tool.execute({"thought": "   ", "thoughtNumber": 1, "totalThoughts": 1, "nextThoughtNeeded": False})
    assert not result.is_error
    assert json.loads(result.text)["thoughtHistoryLength"] == 1
    assert log.history[0].thought == "   "


def test_empty_thought_is_rejected():
    with pytest.raises(ThoughtValidationError) as exc:
        ThoughtRecord.from_obj({"thought": "", "thoughtNumber": 1, "totalThoughts": 1, "nextThoughtNeeded": True})
    assert exc.value.field == "thought"
