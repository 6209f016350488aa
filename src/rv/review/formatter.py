# src/rv/review/formatter.py
import json
import logging
import re

import click
from pydantic import ValidationError

from rv.errors import ResponseParseFailure
from rv.models.review import Finding, ReviewContext, ReviewPayload, ReviewResponse, Severity


logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.WARNING: "yellow",
    Severity.SUGGESTION: "cyan",
    Severity.INFO: "blue",
}


def _extract_json(text: str) -> str:
    text = THINK_RE.sub("", text).strip()
    # Extract JSON from response (may be wrapped in ```json or just ```)
    match = FENCE_RE.search(text)
    if match:
        return match.group(1)
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def _parse_payload(raw_text: str) -> ReviewPayload:
    try:
        return ReviewPayload(**json.loads(_extract_json(raw_text)))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ResponseParseFailure(f"model reply is not a valid review document: {e}") from e


def parse_response(raw_text: str, min_severity: Severity = Severity.INFO) -> ReviewResponse:
    """Parse the model reply; an unparseable reply degrades to unstructured text."""
    try:
        payload = _parse_payload(raw_text)
    except ResponseParseFailure as e:
        logger.warning(f"Falling back to unstructured output: {e}")
        return ReviewResponse(raw_text=raw_text, structured=False)

    findings = tuple(
        finding
        for finding in (item.to_finding() for item in payload.findings)
        if finding.severity.rank >= min_severity.rank
    )
    return ReviewResponse(raw_text=raw_text, findings=findings, summary=payload.summary.strip())


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def _pipe_record(finding: Finding) -> str:
    location = finding.location
    fields = [
        _escape(location.path) if location else "",
        location.line_spec if location else "",
        finding.severity.label,
        _escape(finding.message),
    ]
    return "\t".join(fields)


def render_pipe(response: ReviewResponse, context: ReviewContext) -> str:
    """Line-oriented output: `#` annotations, then path, line, severity, message per finding."""
    lines = [f"# truncated\t{_escape(item)}" for item in context.truncated]

    if not response.structured:
        lines.append("# unstructured")
        lines.append(response.raw_text.rstrip("\n"))
    else:
        lines.extend(_pipe_record(finding) for finding in response.findings)
        if response.summary:
            lines.append(f"# summary\t{_escape(response.summary)}")

    return "\n".join(lines) + "\n" if lines else ""


def render_interactive(response: ReviewResponse, context: ReviewContext, color: bool = False) -> str:
    """Human report: findings grouped by severity, most severe first."""

    def style(text: str, **kwargs) -> str:
        return click.style(text, **kwargs) if color else text

    title = f"rv review: {context.change_set.source_label or 'changes'}"
    lines = [style(title, bold=True), "=" * len(title)]

    if context.is_truncated:
        lines.append(style(
            f"[!] Partial review, left out to fit the context budget: {', '.join(context.truncated)}",
            fg="yellow",
        ))

    if not response.structured:
        lines.append(style("[!] Unstructured response, shown verbatim", fg="yellow"))
        lines.append("")
        lines.append(response.raw_text.rstrip())
        return "\n".join(lines) + "\n"

    if not response.findings:
        lines.append("")
        lines.append("No issues found.")

    for severity in sorted(Severity, key=lambda s: s.rank, reverse=True):
        group = [f for f in response.findings if f.severity is severity]
        if not group:
            continue
        lines.append("")
        lines.append(style(f"{severity.label.upper()} ({len(group)})", fg=SEVERITY_COLORS[severity], bold=True))
        for finding in group:
            where = str(finding.location) if finding.location else "(general)"
            lines.append(f"  {style(where, bold=True)}")
            for message_line in finding.message.splitlines() or [""]:
                lines.append(f"    {message_line}")

    if response.summary:
        lines.append("")
        lines.append(f"Summary: {response.summary}")

    return "\n".join(lines) + "\n"
