# src/rv/review/context.py
import logging
from pathlib import Path

from rv.models.config import RepoConfig, RvConfig
from rv.models.diff import ChangeKind, ChangeSet
from rv.models.review import ReviewContext
from .prompts import serialize_context, serialize_doc, serialize_file, serialize_source


logger = logging.getLogger(__name__)

README_FILE = "README.md"
RV_CONTEXT_FILE = ".rv_context"
RV_GUIDELINES_FILE = ".rv_guidelines"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def load_project_docs(
    root: Path,
    config: RvConfig,
    repo_config: RepoConfig | None = None,
    change_set: ChangeSet | None = None,
) -> dict[str, str]:
    """Collect guideline, context and (optionally) source files under the repository root."""
    repo_config = repo_config or RepoConfig()

    guidelines = list(config.guideline_files) + list(repo_config.guideline_files)
    if config.load_rv_guidelines:
        guidelines.insert(0, RV_GUIDELINES_FILE)

    contexts = list(config.context_files) + list(repo_config.context_files)
    if config.load_rv_context:
        contexts.insert(0, RV_CONTEXT_FILE)
    if config.load_readme:
        contexts.insert(0, README_FILE)

    docs: dict[str, str] = {}
    for kind, names in (("guideline", guidelines), ("context", contexts)):
        for name in names:
            label = f"{kind}:{name}"
            if label in docs:
                continue
            content = _read_text(root / name)
            if content is not None:
                docs[label] = content

    if config.report_sources and change_set is not None:
        for change in change_set.files:
            # Added files are already shown whole in their hunk
            if change.is_binary or change.change_kind in (ChangeKind.ADDED, ChangeKind.DELETED):
                continue
            content = _read_text(root / change.path)
            if content is not None:
                docs[f"source:{change.path}"] = content

    logger.debug(f"Loaded {len(docs)} supplemental document(s) from {root}")
    return docs


class ContextAssembler:
    """Merges a ChangeSet with supplemental documents under a character budget."""

    def __init__(self, max_chars: int = 120_000):
        self.max_chars = max_chars

    def assemble(self, change_set: ChangeSet, supplemental_docs: dict[str, str] | None = None) -> ReviewContext:
        files = list(change_set.files)
        docs = dict(supplemental_docs or {})
        truncated: list[str] = []
        omitted: set[str] = set()

        # Serialized length of every part; parts are joined by single newlines
        full = [len(serialize_file(change)) for change in files]
        short = [len(serialize_file(change, omitted=True)) for change in files]
        current = list(full)
        doc_sizes = {label: len(serialize_doc(label, text)) for label, text in docs.items()}
        header = [len(serialize_source(change_set.source_label))] if change_set.source_label else []

        total = sum(header) + sum(current) + sum(doc_sizes.values())
        count = len(header) + len(files) + len(docs)

        def size() -> int:
            return total + max(count - 1, 0)

        # Supplemental documents give way before any change content
        for label in sorted(docs, key=lambda name: len(docs[name]), reverse=True):
            if size() <= self.max_chars:
                break
            total -= doc_sizes.pop(label)
            count -= 1
            del docs[label]
            truncated.append(label)

        # Whole files lose their hunks, largest first, never part of a hunk
        for index in sorted((i for i, change in enumerate(files) if change.hunks), key=lambda i: full[i], reverse=True):
            if size() <= self.max_chars:
                break
            total -= current[index] - short[index]
            current[index] = short[index]
            omitted.add(files[index].path)
            truncated.append(files[index].path)

        while files and size() > self.max_chars:
            dropped = files.pop()
            total -= current.pop()
            count -= 1
            if dropped.path not in omitted:
                omitted.add(dropped.path)
                truncated.append(dropped.path)

        context = ReviewContext(
            change_set=change_set.model_copy(update={"files": tuple(files)}),
            supplemental_docs=docs,
            truncated=tuple(truncated),
        )
        logger.debug(f"Review context: {len(serialize_context(context))} of {self.max_chars} chars")
        if context.is_truncated:
            logger.warning(
                f"Review context exceeds {self.max_chars} chars, left out: {', '.join(context.truncated)}"
            )
        return context
