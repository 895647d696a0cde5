"""
Test Suite for the SlideCraft CLI command parser

Tests:
1. Generation commands
2. Editing and navigation commands (1-based slide numbers)
3. Unknown and malformed input
"""

import sys
sys.path.insert(0, '.')

from tools.slidecraft_cli import parse_command


def test_generation_commands():
    """Test 1: gen/text build generate messages."""
    print("\n[TEST 1] Generation commands")
    print("-" * 50)

    assert parse_command("gen https://example.com/post focus on costs") == {
        "type": "generate",
        "payload": {"url": "https://example.com/post", "notes": "focus on costs"}
    }
    assert parse_command('text "Solar panels are cheap"') == {
        "type": "generate", "payload": {"text": "Solar panels are cheap"}
    }
    print("  ✓ gen and text")

    print("  ✓ TEST 1 PASSED!")


def test_editing_commands():
    """Test 2: deck commands map to editor messages."""
    print("\n[TEST 2] Editing commands")
    print("-" * 50)

    assert parse_command("next")["payload"] == {"direction": "next"}
    assert parse_command("prev")["payload"] == {"direction": "previous"}
    assert parse_command("go 3")["payload"] == {"index": 2}
    print("  ✓ Navigation")

    assert parse_command("add", current_index=4)["payload"] == {"after_index": 4}
    assert parse_command("img blob:x", current_index=1)["payload"] == {"after_index": 1, "image": "blob:x"}
    assert parse_command("del", current_index=2)["payload"] == {"index": 2}
    assert parse_command("del 1")["payload"] == {"index": 0}
    print("  ✓ Add and delete")

    assert parse_command('edit 2 title "Big news"') == {
        "type": "edit_field",
        "payload": {"slide_index": 1, "field": "title", "value": "Big news"}
    }
    assert parse_command("size 1 title 48") == {
        "type": "set_customization",
        "payload": {"slide_index": 0, "kind": "fontSize", "field_key": "title", "value": 48.0}
    }
    print("  ✓ Edit and font size")

    assert parse_command("theme hybrid #E63946")["payload"] == {"template": "hybrid", "accent_color": "#E63946"}
    assert parse_command("rename Quarterly review")["payload"] == {"title": "Quarterly review"}
    assert parse_command("dismiss")["type"] == "dismiss_error"
    assert parse_command("reset")["type"] == "reset"
    print("  ✓ Theme, rename, dismiss, reset")

    print("  ✓ TEST 2 PASSED!")


def test_invalid_input():
    """Test 3: anything unparseable yields None."""
    print("\n[TEST 3] Invalid input")
    print("-" * 50)

    for line in ["", "   ", "fly away", "gen", "go two", "size 1 title big", 'text "unterminated']:
        assert parse_command(line) is None, line
    print("  ✓ Unknown or malformed commands ignored")

    print("  ✓ TEST 3 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("SlideCraft CLI Command Test Suite")
    print("=" * 60)

    tests = [
        test_generation_commands,
        test_editing_commands,
        test_invalid_input,
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
