import unittest

from scribe_llm.prompts import build_system_prompt, coerce_mode, parse_declared_mode, with_image_instructions
from scribe_llm.types import PromptContext, PromptMode

MARKERS = {
    PromptMode.QUICK: "## MODE: QUICK",
    PromptMode.PLANNING: "## MODE: PLANNING",
    PromptMode.CHATTY: "## MODE: CHATTY",
    PromptMode.BRAINSTORM: "## MODE: BRAINSTORM",
}
AUTO_MARKER = "## INTELLIGENT MODE SELECTION"


class BuildSystemPromptTests(unittest.TestCase):
    def test_each_mode_has_only_its_own_block(self) -> None:
        for mode, marker in MARKERS.items():
            with self.subTest(mode=mode):
                prompt = build_system_prompt(mode.value)
                self.assertIn(marker, prompt)
                self.assertNotIn(AUTO_MARKER, prompt)
                for other, other_marker in MARKERS.items():
                    if other is not mode:
                        self.assertNotIn(other_marker, prompt)

    def test_auto_and_unknown_modes_select_style_block(self) -> None:
        for mode in ("auto", "something-else", None, PromptMode.AUTO):
            with self.subTest(mode=mode):
                prompt = build_system_prompt(mode)
                self.assertIn(AUTO_MARKER, prompt)
                for marker in MARKERS.values():
                    self.assertNotIn(marker, prompt)

    def test_persona_defaults(self) -> None:
        prompt = build_system_prompt("quick")
        self.assertTrue(prompt.startswith('You are an AI writing assistant for a novel called "Untitled" by Unknown Author.'))
        self.assertIn("## CORE PHILOSOPHY", prompt)
        self.assertIn("Never write prose unless explicitly asked", prompt)

    def test_persona_uses_context(self) -> None:
        context = PromptContext(title="Ashes", author="R. Vale", project_type="screenplay")
        prompt = build_system_prompt("chatty", context)
        self.assertIn('a screenplay called "Ashes" by R. Vale', prompt)

    def test_deterministic(self) -> None:
        context = PromptContext(title="T", author="A")
        self.assertEqual(build_system_prompt("planning", context), build_system_prompt("planning", context))

    def test_coerce_mode_is_case_insensitive(self) -> None:
        self.assertIs(coerce_mode(" Brainstorm "), PromptMode.BRAINSTORM)
        self.assertIs(coerce_mode("nope"), PromptMode.AUTO)

    def test_image_instructions_appended(self) -> None:
        prompt = with_image_instructions(build_system_prompt("quick"))
        self.assertTrue(prompt.endswith("you have full vision capability for this message."))
        self.assertIn("## IMAGE ATTACHED", prompt)


class ParseDeclaredModeTests(unittest.TestCase):
    def test_strips_leading_tag(self) -> None:
        mode, text = parse_declared_mode("[MODE: Planning]  1. Understanding")
        self.assertIs(mode, PromptMode.PLANNING)
        self.assertEqual(text, "1. Understanding")

    def test_untagged_reply_is_untouched(self) -> None:
        self.assertEqual(parse_declared_mode("Sure, [MODE: quick]"), (None, "Sure, [MODE: quick]"))


if __name__ == "__main__":
    unittest.main()
