# tests/unit/test_prompts.py
from fakes import FOO_DIFF, change_set_from
from rv.models.config import Profile
from rv.models.review import ReviewContext
from rv.review.prompts import REVIEW_PROMPT, render_prompt, serialize_context


def _context(**kwargs) -> ReviewContext:
    return ReviewContext(change_set=change_set_from(FOO_DIFF), **kwargs)


def test_serialize_context_includes_diff():
    text = serialize_context(_context())

    assert "SOURCE: staged changes" in text
    assert '<diff path="foo.rs" kind="modified">' in text
    assert "-let x = 1;" in text
    assert "+let x = 2;" in text


def test_serialize_context_puts_changes_before_docs():
    text = serialize_context(_context(supplemental_docs={"context:README.md": "# Project"}))

    assert text.index("<diff") < text.index('<context label="context:README.md">')


def test_serialize_context_marks_omitted_files():
    text = serialize_context(_context(truncated=("foo.rs",)))

    assert '<omitted path="foo.rs" kind="modified" />' in text
    assert "+let x = 2;" not in text


def test_build_prompt_uses_default_template():
    prompt = render_prompt(Profile(name="p", model_id="m"), _context())

    assert prompt.startswith(REVIEW_PROMPT.split("{context}")[0].strip()[:40])
    assert "{context}" not in prompt
    assert "+let x = 2;" in prompt
    assert '"severity": "info|suggestion|warning|critical"' in prompt


def test_build_prompt_custom_template_and_suffix():
    profile = Profile(
        name="p",
        model_id="m",
        prompt_template="Review this:\n{context}\nThanks.",
        prompt_suffix="Focus on security.",
    )
    prompt = render_prompt(profile, _context())

    assert prompt.startswith("Review this:")
    assert prompt.index("Focus on security.") < prompt.index("<diff")
    assert prompt.endswith("Thanks.")


def test_build_prompt_template_without_placeholder_appends_context():
    profile = Profile(name="p", model_id="m", prompt_template="Just review.")
    prompt = render_prompt(profile, _context())

    assert prompt.startswith("Just review.")
    assert prompt.rstrip().endswith("</diff>")
