"""
Test Suite for SlideCraft Deck Editor and Session Lifecycle

Tests:
1. InsertSlide positions, clamping and current index
2. DeleteSlide clamping and the empty-deck state
3. EditField whole-field replacement and schema guards
4. SetFieldCustomization shallow merge
5. Navigation wrap-around, rename and theme selection
6. Session state machine and stale-result guard
"""

import sys
sys.path.insert(0, '.')

from slidecraft.core.deck_editor import DeckEditor
from slidecraft.models.session import DeckSession, SessionState
from slidecraft.models.slide import (
    DEFAULT_IMAGE_CAPTION,
    DEFAULT_SLIDE_TITLE,
    Presentation,
    Slide,
    SlideType,
)


def _ready_session(*titles) -> DeckSession:
    session = DeckSession(id="test-session")
    generation = session.begin_synthesis()
    deck = Presentation(
        title="Deck",
        slides=[Slide(type=SlideType.CONTENT, title=t, text=f"{t} body") for t in titles]
    )
    assert session.complete_synthesis(generation, deck)
    return session


def _titles(session: DeckSession):
    return [s.title for s in session.presentation.slides]


def test_insert_slide():
    """Test 1: insert after index, clamp out-of-range positions."""
    print("\n[TEST 1] InsertSlide")
    print("-" * 50)

    editor = DeckEditor()
    session = _ready_session("A", "B")

    x = Slide(type=SlideType.STATEMENT, title="X", text="x")
    assert editor.insert_slide(session, 0, x)
    assert _titles(session) == ["A", "X", "B"]
    assert session.current_index == 1
    print("  ✓ InsertSlide(0, X) on [A, B] -> [A, X, B], current=1")

    assert editor.insert_slide(session, -1, Slide(type=SlideType.END, title="Front"))
    assert _titles(session)[0] == "Front"
    assert session.current_index == 0
    print("  ✓ after_index=-1 inserts at the front")

    assert editor.insert_slide(session, 99, Slide(type=SlideType.END, title="Back"))
    assert _titles(session)[-1] == "Back"
    assert session.current_index == 4
    print("  ✓ Past-the-end index appends")

    assert editor.add_slide(session, 0)
    added = session.presentation.slides[1]
    assert added.type == SlideType.CONTENT and added.title == DEFAULT_SLIDE_TITLE
    print("  ✓ add_slide inserts the default content slide")

    assert editor.add_image_slide(session, 1, "blob:local/1")
    image = session.presentation.slides[2]
    assert image.type == SlideType.IMAGE
    assert image.image == "blob:local/1" and image.caption == DEFAULT_IMAGE_CAPTION
    assert not editor.add_image_slide(session, 1, "")
    print("  ✓ add_image_slide inserts an image slide")

    print("  ✓ TEST 1 PASSED!")


def test_delete_slide():
    """Test 2: delete clamps the current index; deleting everything is valid."""
    print("\n[TEST 2] DeleteSlide")
    print("-" * 50)

    editor = DeckEditor()
    session = _ready_session("A", "B", "C")
    session.current_index = 2

    assert editor.delete_slide(session, 2)
    assert _titles(session) == ["A", "B"]
    assert session.current_index == 1
    print("  ✓ Deleting the last slide clamps current index")

    assert not editor.delete_slide(session, 5)
    assert not editor.delete_slide(session, -1)
    assert _titles(session) == ["A", "B"]
    print("  ✓ Out-of-range delete ignored")

    session = _ready_session("Only")
    assert editor.delete_slide(session, 0)
    assert session.presentation.slides == []
    assert session.current_index == 0
    assert session.state == SessionState.READY
    print("  ✓ Deleting the only slide leaves an empty, ready deck")

    assert editor.add_slide(session, session.current_index)
    assert session.slide_count == 1
    assert session.current_index == 0
    print("  ✓ Later insert yields a one-slide deck with current index 0")

    print("  ✓ TEST 2 PASSED!")


def test_edit_field():
    """Test 3: whole-field edits, rejected when they would break the schema."""
    print("\n[TEST 3] EditField")
    print("-" * 50)

    editor = DeckEditor()
    session = _ready_session("A", "B")

    assert editor.edit_field(session, 1, "title", "Renamed")
    assert _titles(session) == ["A", "Renamed"]
    assert session.presentation.slides[1].text == "B body"
    print("  ✓ Title replaced, other fields untouched")

    assert editor.edit_field(session, 0, "left", ["one", "two"])
    assert editor.edit_field(session, 0, "right", ["three"])
    assert session.presentation.slides[0].right == ["three"]
    print("  ✓ Array fields replaced whole")

    assert not editor.edit_field(session, 0, "right", {"title": "t", "value": "v", "label": "l"})
    assert session.presentation.slides[0].right == ["three"]
    print("  ✓ Mixing list and record columns rejected")

    assert not editor.edit_field(session, 7, "title", "nope")
    assert not editor.edit_field(session, 0, "type", "quote")
    assert not editor.edit_field(session, 0, "fontSizes", {"title": 10})
    print("  ✓ Bad index and non-semantic fields ignored")

    assert editor.edit_field(session, 1, "text", None)
    assert session.presentation.slides[1].text is None
    print("  ✓ None removes an optional field")

    print("  ✓ TEST 3 PASSED!")


def test_set_field_customization():
    """Test 4: customizations merge one key at a time."""
    print("\n[TEST 4] SetFieldCustomization")
    print("-" * 50)

    editor = DeckEditor()
    session = _ready_session("A")

    assert editor.set_field_customization(session, 0, "fontSize", "title", 48)
    assert editor.set_field_customization(session, 0, "fontSize", "text", 20)
    assert session.presentation.slides[0].font_sizes == {"title": 48.0, "text": 20.0}
    print("  ✓ fontSize on title then text coexist")

    assert editor.set_field_customization(session, 0, "fontSize", "title", 52)
    assert session.presentation.slides[0].font_sizes == {"title": 52.0, "text": 20.0}
    print("  ✓ Same key overwritten, others preserved")

    assert editor.set_field_customization(session, 0, "position", "text", {"x": 10, "y": -5})
    offset = session.presentation.slides[0].positions["text"]
    assert (offset.x, offset.y) == (10.0, -5.0)
    assert editor.set_field_customization(session, 0, "rotation", "title", -3.5)
    assert session.presentation.slides[0].rotations == {"title": -3.5}
    print("  ✓ position and rotation maps independent")

    assert not editor.set_field_customization(session, 0, "colour", "title", 1)
    assert not editor.set_field_customization(session, 0, "fontSize", "title", "big")
    assert not editor.set_field_customization(session, 0, "fontSize", "title", True)
    assert not editor.set_field_customization(session, 3, "fontSize", "title", 12)
    assert session.presentation.slides[0].font_sizes["title"] == 52.0
    print("  ✓ Bad kind, value or index ignored")

    assert not editor.set_field_customization(session, 0, "fontSize", "no_such_field", 40)
    assert not editor.set_field_customization(session, 0, "fontSize", "subtitle", 40)
    assert not editor.set_field_customization(session, 0, "position", "left_0", {"x": 1, "y": 1})
    assert session.presentation.slides[0].font_sizes == {"title": 52.0, "text": 20.0}
    assert "left_0" not in session.presentation.slides[0].positions
    print("  ✓ Keys the slide does not have are ignored")

    columns = Slide(type=SlideType.TWO_COLUMN, title="Compare", left=["a", "b"], right=["c"])
    assert editor.insert_slide(session, 0, columns)
    assert editor.set_field_customization(session, 1, "position", "left_1", {"x": 4, "y": 2})
    assert not editor.set_field_customization(session, 1, "position", "right_1", {"x": 4, "y": 2})
    assert list(session.presentation.slides[1].positions) == ["left_1"]
    print("  ✓ List entries addressed by index")

    data = session.presentation.slides[0].to_dict()
    assert data["fontSizes"] == {"title": 52.0, "text": 20.0}
    print("  ✓ Wire format uses camelCase fontSizes")

    print("  ✓ TEST 4 PASSED!")


def test_navigation_rename_and_theme():
    """Test 5: navigation wraps around; rename and theme selection."""
    print("\n[TEST 5] Navigation & deck settings")
    print("-" * 50)

    editor = DeckEditor()
    session = _ready_session("A", "B", "C")

    assert editor.navigate(session, "previous")
    assert session.current_index == 2
    assert editor.navigate(session, "next")
    assert session.current_index == 0
    print("  ✓ next/previous wrap around")

    assert editor.navigate(session, index=10)
    assert session.current_index == 2
    assert not editor.navigate(session, "sideways")
    print("  ✓ Direct index clamped; unknown direction ignored")

    assert editor.rename_deck(session, "New title")
    assert session.presentation.title == "New title"

    assert editor.set_theme(session, "hybrid", "#E63946")
    assert (session.theme, session.accent_color) == ("hybrid", "#E63946")
    assert not editor.set_theme(session, "neon")
    assert session.theme == "hybrid"
    print("  ✓ Rename and theme selection")

    assert not editor.set_theme(session, accent_color="red; background:url(x)")
    assert not editor.set_theme(session, "hybrid", "#12345")
    assert session.accent_color == "#E63946"
    assert editor.set_theme(session, accent_color="#abc")
    assert session.accent_color == "#abc"
    print("  ✓ Accent colour must be #rgb or #rrggbb")

    snapshot = editor.snapshot(session)
    assert snapshot["state"] == "ready"
    assert snapshot["slide_count"] == 3
    assert snapshot["presentation"]["title"] == "New title"
    print("  ✓ Snapshot reflects the session")

    print("  ✓ TEST 5 PASSED!")


def test_session_state_machine():
    """Test 6: lifecycle transitions and the request-generation guard."""
    print("\n[TEST 6] Session lifecycle")
    print("-" * 50)

    editor = DeckEditor()
    session = DeckSession(id="lifecycle")
    assert session.state == SessionState.EMPTY
    assert not editor.add_slide(session, 0)
    print("  ✓ Editor ignored while EMPTY")

    first = session.begin_synthesis(["blob:1"])
    second = session.begin_synthesis(["blob:2"])
    assert session.state == SessionState.SYNTHESIZING
    assert not editor.add_slide(session, 0)

    stale = Presentation(title="stale", slides=[Slide(type=SlideType.END, title="old")])
    fresh = Presentation(title="fresh", slides=[Slide(type=SlideType.END, title="new")])
    assert not session.complete_synthesis(first, stale)
    assert session.complete_synthesis(second, fresh)
    assert session.presentation.title == "fresh"
    assert session.images == ["blob:2"]
    print("  ✓ Stale result discarded, latest installed")

    # Failure after an existing deck keeps the old deck
    third = session.begin_synthesis()
    assert session.presentation.title == "fresh"
    assert session.fail_synthesis(third, "boom")
    assert session.state == SessionState.FAILED
    assert session.last_error == "boom"
    session.acknowledge_failure()
    assert session.state == SessionState.READY
    assert session.presentation.title == "fresh"
    print("  ✓ FAILED -> READY keeps previous deck")

    session.reset()
    assert session.state == SessionState.EMPTY and session.presentation is None
    gen = session.begin_synthesis()
    session.fail_synthesis(gen, "again")
    session.acknowledge_failure()
    assert session.state == SessionState.EMPTY
    print("  ✓ FAILED -> EMPTY when there was no deck")

    gen = session.begin_synthesis()
    session.reset()
    assert not session.complete_synthesis(gen, fresh)
    assert session.presentation is None
    print("  ✓ Reset discards in-flight result")

    print("  ✓ TEST 6 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("SlideCraft Deck Editor Test Suite")
    print("=" * 60)

    tests = [
        test_insert_slide,
        test_delete_slide,
        test_edit_field,
        test_set_field_customization,
        test_navigation_rename_and_theme,
        test_session_state_machine,
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
