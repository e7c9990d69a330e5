"""
Thread Unit Tests

Queue building, processing order, resumption, retry and formatting.
"""

import pytest

from nchain import (
    DEFAULT_SYSTEM_PROMPT,
    AdapterNotFoundError,
    ArtifactNotFoundError,
    EmptyResultError,
    Message,
    NoPriorStepError,
    Thread,
    v,
)


class TestThreadInit:
    def test_unknown_initial_adapter(self, adapter):
        with pytest.raises(AdapterNotFoundError):
            Thread("missing", {"fast": adapter})

    def test_defaults(self, thread, adapter):
        assert thread.adapter is adapter
        assert thread.adapter_name == "fast"
        assert thread.system_prompt == DEFAULT_SYSTEM_PROMPT
        assert thread.get_queue() == ()
        assert len(thread.history) == 0


class TestQueueBuilding:
    def test_items_are_pending_in_append_order(self, thread):
        thread.prompt("a").use("smart").hook("step", lambda t: None)
        queue = thread.get_queue()
        assert [item.type for item in queue] == ["prompt", "switch_adapter", "hook"]
        assert [item.label for item in queue] == ["Prompt", "Use smart", "step"]
        assert not any(item.executed for item in queue)

    def test_system_goes_first_and_evicts_previous(self, thread):
        thread.prompt("a").system("one").system(["two", "lines"])
        queue = thread.get_queue()
        assert [item.type for item in queue] == ["system", "prompt"]
        assert queue[0].content == "two\nlines"
        assert queue[0].label == "System Prompt"

    def test_prompt_builder_function(self, thread):
        thread.prompt(lambda p: p.prompt("hi").set_label("Greeting").save_as("greeting"))
        item = thread.get_queue()[0]
        assert item.label == "Greeting"
        assert item.content.key == "greeting"

    def test_queue_item_to_dict(self, thread):
        thread.prompt("hi")
        data = thread.get_queue()[0].to_dict()
        assert data["type"] == "prompt"
        assert data["content"]["message"] == {"role": "user", "content": "hi"}


class TestArtifacts:
    def test_insert_and_get(self, thread):
        assert thread.insert("k", "value") is thread
        assert thread.get_artifact("k") == "value"
        assert thread.get_artifact("missing") is None
        assert thread.get_artifact("missing", "fallback") == "fallback"

    def test_last_write_wins(self, thread):
        thread.insert("k", 1).insert("k", 2)
        assert thread.artifacts == {"k": 2}

    def test_insert_is_dispatched(self, adapter, debugger, records):
        t = Thread("fast", {"fast": adapter}, debugger=debugger)
        t.insert("k", "v")
        assert records[-1].name == "set_artifact"
        assert records[-1].payload == {"key": "k", "value": "v"}


class TestProcess:
    async def test_runs_prompts_in_order_with_history(self, thread, adapter):
        result = await thread.prompt("one").prompt("two").process()
        assert result == "second"
        assert len(adapter.calls) == 2
        second_messages, system_prompt = adapter.calls[1]
        assert second_messages == [
            Message("user", "one"),
            Message("assistant", "first"),
            Message("user", "two"),
        ]
        assert system_prompt == DEFAULT_SYSTEM_PROMPT
        assert all(item.executed for item in thread.get_queue())

    async def test_artifacts_flow_between_steps(self, thread, adapter):
        await (
            thread.insert("topic", "owls")
            .prompt(lambda p: p.prompt("Write about {{topic}}").save_as("draft"))
            .prompt("Improve {{draft}} keeping {{unknown}}")
            .process()
        )
        assert thread.get_artifact("draft") == "first"
        assert adapter.calls[0][0][-1].content == "Write about owls"
        assert adapter.last_user_message == "Improve first keeping {{unknown}}"

    async def test_idempotent_processing(self, thread, adapter):
        thread.prompt("one")
        first = await thread.process()
        second = await thread.process()
        assert first == second == "first"
        assert len(adapter.calls) == 1

    async def test_resumes_after_new_items(self, thread, adapter):
        await thread.prompt("one").process()
        result = await thread.prompt("two").process()
        assert result == "second"
        assert len(adapter.calls) == 2

    async def test_max_steps_counts_every_item(self, thread, adapter):
        thread.system("sys").prompt("one").prompt("two")
        assert await thread.process(max_steps=2) == "first"
        assert [item.executed for item in thread.get_queue()] == [True, True, False]
        assert await thread.process(max_steps=2) == "second"
        assert len(adapter.calls) == 2

    async def test_system_prompt_applies_when_reached(self, thread, adapter):
        await thread.system("Be terse").prompt("one").process()
        assert thread.system_prompt == "Be terse"
        assert adapter.calls[0][1] == "Be terse"

    async def test_use_is_deferred(self, adapter, make_adapter):
        smart = make_adapter("smart answer")
        t = Thread("fast", {"fast": adapter, "smart": smart})
        t.prompt("one").use("smart").prompt("two")
        assert t.adapter is adapter
        assert await t.process() == "smart answer"
        assert len(adapter.calls) == 1
        assert len(smart.calls) == 1
        # history carries across adapters
        assert [m.content for m in smart.calls[0][0]] == ["one", "first", "two"]
        assert t.adapter is smart

    async def test_unknown_adapter_switch(self, thread, adapter):
        thread.prompt("one").use("nonexistent").prompt("two")
        with pytest.raises(AdapterNotFoundError):
            await thread.process()
        assert thread.adapter is adapter
        queue = thread.get_queue()
        assert [item.executed for item in queue] == [True, False, False]
        assert len(adapter.calls) == 1

    async def test_return_key(self, thread):
        thread.prompt(lambda p: p.prompt("one").save_as("a")).prompt("two")
        assert await thread.process("a") == "first"

    async def test_empty_result(self, thread):
        thread.system("only a system prompt")
        with pytest.raises(EmptyResultError):
            await thread.process()

    async def test_incognito_prompt_skips_history_but_saves(self, thread, adapter):
        thread.prompt(lambda p: p.prompt("secret").incognito().save_as("s")).prompt("two")
        await thread.process()
        assert thread.get_artifact("s") == "first"
        assert adapter.calls[1][0] == [Message("user", "two")]
        assert [m.content for m in thread.history] == ["two", "second"]

    async def test_incognito_thread(self, thread):
        await thread.incognito().prompt("one").process()
        assert len(thread.history) == 0

    async def test_get_history_message(self, thread):
        await thread.prompt("one").prompt("two").process()
        assert thread.get().content == "second"
        assert thread.get(2).content == "first"
        assert thread.get(1, "user").content == "two"
        assert thread.get(3) is None

    async def test_adapter_failure_leaves_item_pending(self, make_adapter):
        class Failing(make_adapter):
            async def chat(self, messages, system_prompt):
                raise ConnectionError("offline")

        t = Thread("fast", {"fast": Failing()})
        t.prompt("one")
        with pytest.raises(ConnectionError):
            await t.process()
        assert t.get_queue()[0].executed is False
        assert len(t.history) == 0


class TestHooks:
    async def test_hook_result_becomes_last_result(self, thread):
        async def count_history(t):
            return len(t.history)

        result = await thread.prompt("one").hook("count", count_history).process()
        assert result == 2
        assert thread.get_queue()[1].result == 2

    async def test_sync_hook_and_artifact_writes(self, thread, adapter):
        thread.hook("seed", lambda t: t.insert("seed", "42") and None).prompt("Use {{seed}}")
        await thread.process()
        assert adapter.last_user_message == "Use 42"

    async def test_hook_enqueuing_steps(self, thread, adapter):
        def extend(t):
            t.prompt("added by hook")

        await thread.hook("extend", extend).process()
        assert adapter.last_user_message == "added by hook"

    async def test_none_result_keeps_previous(self, thread):
        result = await thread.prompt("one").hook("noop", lambda t: None).process()
        assert result == "first"


class TestRetry:
    async def test_retry_reexecutes_last_prompt(self, thread, adapter):
        await thread.prompt("one").process()
        assert thread.retry() is thread
        assert thread.get_queue()[0].executed is False

        assert await thread.process() == "second"
        assert len(adapter.calls) == 2
        assert [m.content for m in thread.history] == ["one", "first", "one", "second"]

    async def test_retry_resets_hook(self, thread):
        calls = []
        thread.hook("h", lambda t: calls.append(1) or len(calls))
        assert await thread.process() == 1
        thread.retry()
        assert thread.get_queue()[0].result is None
        assert await thread.process() == 2

    async def test_retry_skips_non_prompt_items(self, thread, adapter):
        await thread.prompt("one").use("smart").process()
        thread.retry()
        assert [item.executed for item in thread.get_queue()] == [False, True]

    def test_retry_without_executed_step(self, thread):
        thread.prompt("pending")
        with pytest.raises(NoPriorStepError):
            thread.retry()


class TestFormat:
    async def test_format_overrides_result(self, make_adapter):
        fast = make_adapter("raw text", '{"title": "T", "score": "0.5"}')
        t = Thread("fast", {"fast": fast})
        schema = v.object({"title": v.string(), "score": v.number()})
        result = await t.prompt("summarize").format(schema).process()
        assert result == {"title": "T", "score": 0.5}
        assert t.get_result() == result
        assert t.get_result(schema) == result

    async def test_formatter_uses_fast_adapter_on_fresh_thread(self, make_adapter):
        smart = make_adapter("raw text")
        fast = make_adapter("[1, 2]")
        t = Thread("smart", {"smart": smart, "fast": fast})
        assert await t.prompt("list").format(v.array(v.number())).process() == [1, 2]
        assert len(smart.calls) == 1
        assert len(fast.calls) == 1
        # formatter conversation does not leak into this thread
        assert len(t.history) == 2
        assert "raw text" in fast.last_user_message

    async def test_formatter_not_rerun_without_new_steps(self, make_adapter):
        fast = make_adapter("raw", "true")
        t = Thread("fast", {"fast": fast}).prompt("q").format(v.boolean())
        assert await t.process() is True
        assert await t.process() is True
        assert len(fast.calls) == 2

    async def test_get_result_checked_conversion(self, thread):
        await thread.prompt("one").process()
        assert thread.get_result() == "first"
        assert thread.get_result(v.string()) == "first"
        with pytest.raises(ValueError):
            thread.get_result(v.number())

    def test_get_result_before_processing(self, thread):
        assert thread.get_result() is None
        with pytest.raises(EmptyResultError):
            thread.get_result(v.string())

    async def test_get_formatted_artifact(self, make_adapter):
        fast = make_adapter('["a", "b"]')
        t = Thread("fast", {"fast": fast}).insert("raw", "a and b")
        assert await t.get_formatted_artifact("raw", v.array(v.string())) == ["a", "b"]
        assert t.get_queue() == ()
        assert "a and b" in fast.last_user_message

    async def test_get_formatted_artifact_missing(self, thread):
        with pytest.raises(ArtifactNotFoundError):
            await thread.get_formatted_artifact("missing", v.string())
