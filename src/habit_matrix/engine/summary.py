"""Week summary: collect the day sections of recently edited notes into one prompt."""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from habit_matrix.errors import DocumentNotFoundError
from habit_matrix.store.vault_store import TextStore

log = logging.getLogger(__name__)

DEFAULT_TEMPLATE = (
    "Summarise the following notes from the past week. "
    "Note what went well, what drained energy, and any important insights.\n{days}"
)

WINDOW = timedelta(days=7)
MAX_DOCUMENTS = 7


def section_pattern(header_text: str) -> "re.Pattern[str]":
    """Matches the body of every ``##`` heading that contains ``header_text``."""
    return re.compile(
        rf"^##[^\n]*?{re.escape(header_text)}[^\n]*\r?\n(.*?)(?=^##|\Z)",
        re.MULTILINE | re.DOTALL,
    )


def extract_sections(text: str, header_text: str) -> List[str]:
    return [m.group(1).strip() for m in section_pattern(header_text).finditer(text)]


def recent_documents(
    store: TextStore,
    now: datetime,
    exclude: Optional[Iterable[str]] = None,
) -> List[str]:
    """The newest documents edited within the last week, oldest first."""
    skip = set(exclude or ())
    cutoff = (now - WINDOW).timestamp()
    dated = []
    for handle in store.list_documents():
        if handle in skip:
            continue
        try:
            mtime = store.document_modified_time(handle)
        except DocumentNotFoundError:
            continue
        if mtime >= cutoff:
            dated.append((mtime, handle))
    dated.sort(key=lambda item: item[0], reverse=True)
    return [handle for _, handle in reversed(dated[:MAX_DOCUMENTS])]


def build_week_summary(
    store: TextStore,
    header_text: str,
    template: str = DEFAULT_TEMPLATE,
    now: Optional[datetime] = None,
    exclude: Optional[Iterable[str]] = None,
) -> str:
    days: List[str] = []
    for handle in recent_documents(store, now or datetime.now(), exclude):
        try:
            text = store.read_document(handle)
        except DocumentNotFoundError:
            continue
        days.extend(extract_sections(text, header_text))
    log.info("Week summary: %d sections", len(days))
    return template.replace("{days}", "\n".join(days))
