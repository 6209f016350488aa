from rv.models.config import Profile
from rv.models.diff import FileChange
from rv.models.review import ReviewContext


CONTEXT_PLACEHOLDER = "{context}"

REVIEW_PROMPT = """You are a senior software engineer and professional code reviewer.
Review the code change provided below and report concrete, actionable findings.

Rules:
- Prioritize correctness, security, maintainability (in that order).
- Only report issues present in the changed code. Never invent lines or diffs.
- Always include the exact file path and the line number in the NEW file.
- Style-only issues use severity "info".
- Respect comments in the source, especially tags like [review] or [rv].
- At most 10 findings. No filler text, no apologies.
- If there are no problems, return an empty findings array and say so in the summary.

Return ONLY valid JSON in this exact format:
{
  "findings": [
    {
      "path": "<file path as given in the diff>",
      "line": <line number in the NEW file>,
      "end_line": <last line of the range, or null>,
      "severity": "info|suggestion|warning|critical",
      "message": "<one or two sentences: the problem and the smallest fix>"
    }
  ],
  "summary": "<one sentence on overall quality>"
}

Input format:
- <diff path=.. kind=..>  : unified diff hunks of one changed file
- <binary path=.. />      : a binary file that changed; its content is not shown
- <omitted path=.. />     : a changed file left out to fit the context budget
- <context label=..>      : project context (README, guidelines, sources)

{context}"""


def _attr(value: str) -> str:
    return value.replace('"', "&quot;")


def serialize_file(change: FileChange, omitted: bool = False) -> str:
    attrs = f'path="{_attr(change.path)}" kind="{change.change_kind.value}"'
    if change.old_path:
        attrs += f' from="{_attr(change.old_path)}"'
    if change.is_binary:
        return f"<binary {attrs} />"
    if omitted:
        return f"<omitted {attrs} />"
    return f"<diff {attrs}>\n{change.render()}\n</diff>"


def serialize_source(label: str) -> str:
    return f"SOURCE: {label}"


def serialize_doc(label: str, text: str) -> str:
    return f'<context label="{_attr(label)}">\n{text.rstrip()}\n</context>'


def serialize_context(context: ReviewContext) -> str:
    """Render the review context; change content always precedes project context."""
    omitted = set(context.truncated)
    parts = []
    if context.change_set.source_label:
        parts.append(serialize_source(context.change_set.source_label))
    for change in context.change_set.files:
        parts.append(serialize_file(change, omitted=change.path in omitted))
    for label, text in context.supplemental_docs.items():
        parts.append(serialize_doc(label, text))
    return "\n".join(parts)


def render_prompt(profile: Profile, context: ReviewContext) -> str:
    """Build the complete prompt for code review."""
    template = profile.prompt_template or REVIEW_PROMPT
    if CONTEXT_PLACEHOLDER not in template:
        template = f"{template.rstrip()}\n\n{CONTEXT_PLACEHOLDER}"

    if profile.prompt_suffix.strip():
        head, tail = template.split(CONTEXT_PLACEHOLDER, 1)
        template = f"{head.rstrip()}\n\n{profile.prompt_suffix.strip()}\n\n{CONTEXT_PLACEHOLDER}{tail}"

    return template.replace(CONTEXT_PLACEHOLDER, serialize_context(context), 1)
