"""
Test Suite for SlideCraft Deck Synthesis

Uses pydantic-ai FunctionModel so no Gemini call is made.

Tests:
1. Prompt construction (truncation, image placeholders)
2. Fenced JSON reply parsed into a Presentation (bare numbers kept as text)
3. Malformed replies raise GenerationFormatError
4. Provider failures mapped to CredentialError / UpstreamError
5. Pipeline run: placeholders resolved, session READY
6. Pipeline run: failure keeps the previous deck; input errors keep state
7. Pipeline run: progress ticks stop when the run returns
8. Pipeline run: stale result after a reset is dropped
"""

import asyncio
import json
import sys
sys.path.insert(0, '.')

from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from slidecraft.agents.deck_synthesizer import DeckSynthesizer
from slidecraft.core.deck_parser import parse_presentation
from slidecraft.core.deck_pipeline import DeckPipeline
from slidecraft.core.errors import (
    CredentialError,
    GenerationFormatError,
    UpstreamError,
    ValidationError,
)
from slidecraft.models.content import SynthesisRequest
from slidecraft.models.session import DeckSession, SessionState
from slidecraft.models.slide import Presentation, Slide, SlideType


DECK_JSON = {
    "presentation": {
        "title": "Rust in Production",
        "slides": [
            {"type": "title", "title": "Rust in Production", "subtitle": "Lessons learned",
             "keywords": ["safe", "fast", "modern", "reliable", "fun"]},
            {"type": "big-number", "number": "70%", "label": "memory bugs", "detail": "eliminated"},
            {"type": "image", "image": "{{USER_IMAGE_1}}", "caption": "Our team"},
            {"type": "end", "title": "Thanks", "cta": "Try it"},
        ]
    }
}


def reply_with(text: str) -> FunctionModel:
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart(text)])
    return FunctionModel(respond)


def failing_with(error: Exception) -> FunctionModel:
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise error
    return FunctionModel(respond)


def fenced(data) -> str:
    return f"```json\n{json.dumps(data)}\n```"


def test_build_prompt():
    """Test 1: content truncated, image placeholders only when images exist."""
    print("\n[TEST 1] Prompt construction")
    print("-" * 50)

    synthesizer = DeckSynthesizer(model=reply_with("{}"))
    limit = synthesizer.settings.GENERATION_CONTENT_LIMIT

    request = SynthesisRequest(title="Doc", content="a" * (limit + 500), notes="for execs")
    prompt = synthesizer.build_prompt(request)
    assert "a" * limit in prompt
    assert "a" * (limit + 1) not in prompt
    assert "User Notes: for execs" in prompt
    assert "USER_IMAGE" not in prompt
    assert "'image'" not in prompt
    print(f"  ✓ Content truncated to {limit} chars, no image rules")

    prompt = synthesizer.build_prompt(SynthesisRequest(title="Doc", content="x", image_count=2))
    assert "{{USER_IMAGE_1}}, {{USER_IMAGE_2}}" in prompt
    assert "{{USER_IMAGE_3}}" not in prompt
    assert "type: 'image'" in prompt
    print("  ✓ Image slide type and placeholders announced")

    print("  ✓ TEST 1 PASSED!")


def test_parses_fenced_reply():
    """Test 2: a fenced JSON reply becomes a Presentation."""
    print("\n[TEST 2] Fenced reply")
    print("-" * 50)

    synthesizer = DeckSynthesizer(model=reply_with(fenced(DECK_JSON)))
    presentation = asyncio.run(synthesizer.synthesize(SynthesisRequest(content="Rust")))

    assert presentation.title == "Rust in Production"
    assert [s.type for s in presentation.slides] == [
        SlideType.TITLE, SlideType.BIG_NUMBER, SlideType.IMAGE, SlideType.END
    ]
    assert presentation.slides[2].image == "{{USER_IMAGE_1}}"
    print("  ✓ 4 slides parsed, placeholder left for the pipeline")

    bare = DeckSynthesizer(model=reply_with(json.dumps(DECK_JSON)))
    assert asyncio.run(bare.synthesize(SynthesisRequest(content="Rust"))).slide_count == 4
    print("  ✓ Unfenced reply also accepted")

    numeric = {"presentation": {"title": "By the numbers", "slides": [
        {"type": "big-number", "number": 42, "label": "teams", "detail": 2.5},
        {"type": "split", "title": "Before and after",
         "left": {"title": "Before", "value": 3, "label": "days"},
         "right": {"title": "After", "value": "1", "label": "day"}},
        {"type": "grid", "title": "Years", "items": [{"icon": "📅", "label": 2024}]},
    ]}}
    parsed = parse_presentation(fenced(numeric))
    assert parsed.slides[0].number == "42"
    assert parsed.slides[0].detail == "2.5"
    assert parsed.slides[1].left.value == "3"
    assert parsed.slides[2].items[0].label == "2024"
    print("  ✓ Bare numbers accepted as text")

    print("  ✓ TEST 2 PASSED!")


def test_malformed_replies():
    """Test 3: non-JSON, missing key and schema violations."""
    print("\n[TEST 3] Malformed replies")
    print("-" * 50)

    cases = {
        "prose": "Here is your deck!",
        "no presentation key": json.dumps({"slides": []}),
        "array": json.dumps([1, 2]),
        "unknown type": json.dumps({"presentation": {"title": "x", "slides": [{"type": "video"}]}}),
        "mixed columns": json.dumps({"presentation": {"title": "x", "slides": [
            {"type": "split", "left": ["a"], "right": {"title": "t", "value": "v", "label": "l"}}
        ]}}),
    }
    for name, reply in cases.items():
        synthesizer = DeckSynthesizer(model=reply_with(reply))
        try:
            asyncio.run(synthesizer.synthesize(SynthesisRequest(content="c")))
        except GenerationFormatError as e:
            assert e.status_code == 502
            print(f"  ✓ {name}: {e.message}")
        else:
            raise AssertionError(f"{name} should raise GenerationFormatError")

    print("  ✓ TEST 3 PASSED!")


def test_provider_errors():
    """Test 4: HTTP and unexpected failures mapped to the error taxonomy."""
    print("\n[TEST 4] Provider errors")
    print("-" * 50)

    cases = [
        (ModelHTTPError(status_code=401, model_name="gemini", body={"error": "denied"}), CredentialError),
        (ModelHTTPError(status_code=400, model_name="gemini", body="API key not valid"), CredentialError),
        (ModelHTTPError(status_code=503, model_name="gemini", body="overloaded"), UpstreamError),
        (RuntimeError("connection reset"), UpstreamError),
    ]
    for error, expected in cases:
        synthesizer = DeckSynthesizer(model=failing_with(error))
        try:
            asyncio.run(synthesizer.synthesize(SynthesisRequest(content="c")))
        except expected as e:
            print(f"  ✓ {type(error).__name__} -> {expected.__name__}: {e.message}")
        else:
            raise AssertionError(f"{error!r} should raise {expected.__name__}")

    try:
        asyncio.run(DeckSynthesizer(model=failing_with(ModelHTTPError(403, "gemini"))).synthesize(
            SynthesisRequest(content="c")
        ))
    except CredentialError as e:
        assert e.message == "Invalid API key. Please check your Gemini API key"
        assert e.status_code == 401
    print("  ✓ Credential message and status")

    print("  ✓ TEST 4 PASSED!")


def test_pipeline_run_success():
    """Test 5: pipeline installs a resolved deck on the session."""
    print("\n[TEST 5] Pipeline success")
    print("-" * 50)

    pipeline = DeckPipeline(synthesizer=DeckSynthesizer(model=reply_with(fenced(DECK_JSON))))
    session = DeckSession(id="pipeline")
    installed = asyncio.run(pipeline.run(
        session, text="Rust is a systems language", images=["blob:team"]
    ))
    assert installed
    assert session.state == SessionState.READY
    assert session.current_index == 0
    assert session.presentation.slides[2].image == "blob:team"
    assert session.images == ["blob:team"]
    print("  ✓ Deck installed with placeholder resolved")

    presentation = asyncio.run(pipeline.generate(SynthesisRequest(content="Rust")))
    assert presentation.slides[2].image == "{{USER_IMAGE_1}}"
    print("  ✓ Stateless generate without images keeps tokens")

    try:
        asyncio.run(pipeline.generate(SynthesisRequest()))
    except ValidationError as e:
        assert e.message == "Content is required to generate a presentation"
    else:
        raise AssertionError("empty request should raise ValidationError")
    print("  ✓ Empty request rejected")

    print("  ✓ TEST 5 PASSED!")


def test_pipeline_run_failure():
    """Test 6: a failed attempt never destroys the previous deck."""
    print("\n[TEST 6] Pipeline failure")
    print("-" * 50)

    session = DeckSession(id="failure")
    generation = session.begin_synthesis()
    previous = Presentation(title="Previous", slides=[Slide(type=SlideType.STATEMENT, text="keep me")])
    session.complete_synthesis(generation, previous)

    pipeline = DeckPipeline(synthesizer=DeckSynthesizer(model=reply_with("not json at all")))
    try:
        asyncio.run(pipeline.run(session, text="content"))
    except GenerationFormatError:
        pass
    else:
        raise AssertionError("invalid reply should raise GenerationFormatError")

    assert session.state == SessionState.FAILED
    assert session.last_error == "Failed to generate valid presentation data"
    assert session.presentation.title == "Previous"
    print("  ✓ FAILED with previous deck intact")

    session.acknowledge_failure()
    assert session.state == SessionState.READY
    print("  ✓ Acknowledged back to READY")

    for kwargs in ({}, {"text": "   "}, {"text": "x", "images": ["a"] * 6}):
        try:
            asyncio.run(pipeline.run(session, **kwargs))
        except ValidationError:
            pass
        else:
            raise AssertionError(f"{kwargs} should raise ValidationError")
        assert session.state == SessionState.READY
    print("  ✓ Input errors leave the session untouched")

    print("  ✓ TEST 6 PASSED!")


def slow_reply(text: str, delay: float) -> FunctionModel:
    async def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        await asyncio.sleep(delay)
        return ModelResponse(parts=[TextPart(text)])
    return FunctionModel(respond)


def test_pipeline_progress_ticks():
    """Test 7: progress climbs to the cap while the model runs, then stops."""
    print("\n[TEST 7] Progress ticks")
    print("-" * 50)

    pipeline = DeckPipeline(synthesizer=DeckSynthesizer(model=slow_reply(fenced(DECK_JSON), 0.3)))
    pipeline.settings = pipeline.settings.model_copy(
        update={"PROGRESS_TICK_SECONDS": 0.05, "PROGRESS_STEP": 40}
    )
    cap = pipeline.settings.PROGRESS_CAP
    session = DeckSession(id="progress")
    progress = []

    async def on_progress(value):
        progress.append(value)

    async def scenario():
        assert await pipeline.run(session, text="Rust is a systems language", on_progress=on_progress)
        delivered = len(progress)
        await asyncio.sleep(0.2)
        return delivered

    delivered = asyncio.run(scenario())

    assert delivered >= 1
    assert progress == sorted(progress)
    assert all(0 < value <= cap for value in progress)
    if delivered >= 3:
        assert max(progress) == cap
    print(f"  ✓ {delivered} ticks, non-decreasing, capped at {cap}")

    assert len(progress) == delivered
    print("  ✓ No ticks after run returns")

    print("  ✓ TEST 7 PASSED!")


def test_pipeline_stale_result():
    """Test 8: a reset during generation discards the late result."""
    print("\n[TEST 8] Stale result")
    print("-" * 50)

    pipeline = DeckPipeline(synthesizer=DeckSynthesizer(model=slow_reply(fenced(DECK_JSON), 0.3)))
    session = DeckSession(id="stale")

    async def scenario():
        task = asyncio.create_task(pipeline.run(session, text="Rust is a systems language"))
        await asyncio.sleep(0.05)
        assert session.state == SessionState.SYNTHESIZING
        session.reset()
        return await task

    assert asyncio.run(scenario()) is False
    assert session.presentation is None
    assert session.state == SessionState.EMPTY
    print("  ✓ run() returns False and no deck is installed")

    print("  ✓ TEST 8 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("SlideCraft Deck Synthesis Test Suite")
    print("=" * 60)

    tests = [
        test_build_prompt,
        test_parses_fenced_reply,
        test_malformed_replies,
        test_provider_errors,
        test_pipeline_run_success,
        test_pipeline_run_failure,
        test_pipeline_progress_ticks,
        test_pipeline_stale_result,
    ]

    results = []
    for test in tests:
        try:
            test()
            results.append(True)
        except Exception as e:
            print(f"  ✗ {test.__name__} FAILED: {e}")
            results.append(False)

    print("\n" + "=" * 60)
    print(f"RESULTS: {sum(results)}/{len(results)} tests passed")
    print("=" * 60)
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
