"""High-level Python API for converting many strings or tags at once."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .core import create_empty
from .processor import parse_into_record, render_from_record
from .utils import Config, filename_stem

logger = logging.getLogger(__name__)

ItemResultType = Dict[str, Any]

# ---------- Single items ----------
def parse_item(
    name: str,
    pattern: str,
    *,
    case: Optional[int] = None,
    weed: Optional[str] = None,
    base_tag: Optional[Mapping[str, str]] = None,
    strip_extension: bool = False
) -> ItemResultType:
    """Parse one name into a new tag (a copy of base_tag, or an empty tag)."""
    source = filename_stem(name) if strip_extension else name
    tag = create_empty()
    if base_tag:
        tag.update(base_tag)

    result = parse_into_record(source, pattern, tag, case=case, weed=weed)
    return {
        'name': name,
        'source': source,
        'passed': result.success,
        'changed': result.value if result.success else 0,
        'tag': tag if result.success else None,
        'error': result.error_message,
        'error_kind': result.error_kind,
        'warnings': result.warnings,
    }

def render_item(tag: Mapping[str, str], pattern: str, *, case: Optional[int] = None) -> ItemResultType:
    """Render one tag through a pattern."""
    result = render_from_record(pattern, tag, case=case)
    return {
        'tag': tag,
        'passed': result.success,
        'string': result.value,
        'error': result.error_message,
        'error_kind': result.error_kind,
        'warnings': result.warnings,
    }

# ---------- Dispatch ----------
def run_items(
    items: Iterable[Any],
    worker: Callable[[Any], ItemResultType],
    *,
    max_workers: Optional[int] = None,
    use_parallel: bool = True
) -> List[ItemResultType]:
    """
    Smart dispatcher that chooses between parallel and sequential processing.

    Results keep the order of the input items.
    """
    items_list = list(items)
    total = len(items_list)

    if total == 0:
        return []

    should_use_parallel = (
        use_parallel and
        total >= Config.MIN_ITEMS_FOR_PARALLEL and
        max_workers != 1
    )

    if should_use_parallel:
        workers = max_workers or Config.MAX_WORKERS
        logger.debug(f"Using parallel processing with {workers} workers for {total} items")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(worker, items_list))

    logger.debug(f"Using sequential processing for {total} items")
    return [worker(item) for item in items_list]

def summarize(results: List[ItemResultType]) -> Dict[str, Any]:
    successful = sum(1 for r in results if r['passed'])
    return {
        'processed': len(results),
        'successful': successful,
        'failed': len(results) - successful,
        'unchanged': sum(1 for r in results if r['passed'] and not r.get('changed', 1)),
        'results': results,
    }

# ---------- Batch API ----------
def process_batch(
    names: Iterable[str],
    pattern: str,
    *,
    case: Optional[int] = None,
    weed: Optional[str] = None,
    base_tag: Optional[Mapping[str, str]] = None,
    strip_extension: bool = False,
    max_workers: Optional[int] = None,
    use_parallel: bool = True
) -> Dict[str, Any]:
    """
    Parse many names (usually filenames) with the same pattern.

    A failing name never stops the batch; its result carries the error.

    Args:
        names: Strings to parse
        pattern: Placeholder pattern, e.g. '((TRACKNUM)) - ((TITLE))'
        case: Optional case conversion mode (0, 1 or 2)
        weed: Optional regular expression whose matches are blanked
        base_tag: Values every new tag starts from (e.g. a common ALBUM)
        strip_extension: If True, drop directory and extension from each name first
        max_workers: Number of parallel workers (None = auto)
        use_parallel: If False, disable parallel processing

    Returns:
        Dict with keys: processed, successful, failed, unchanged, results

    Examples:
        >>> summary = process_batch(
        ...     ['01 - Aces High.mp3', '02 - 2 Minutes to Midnight.mp3'],
        ...     '((TRACKNUM)) - ((TITLE))',
        ...     base_tag={'ARTIST': 'Iron Maiden'},
        ...     strip_extension=True
        ... )
        >>> summary['successful']
        2
    """
    def worker(name: str) -> ItemResultType:
        return parse_item(
            name,
            pattern,
            case=case,
            weed=weed,
            base_tag=base_tag,
            strip_extension=strip_extension
        )

    results = run_items(names, worker, max_workers=max_workers, use_parallel=use_parallel)
    return summarize(results)

def render_batch(
    tags: Iterable[Mapping[str, str]],
    pattern: str,
    *,
    case: Optional[int] = None,
    max_workers: Optional[int] = None,
    use_parallel: bool = True
) -> Dict[str, Any]:
    """
    Render many tags with the same pattern, e.g. to propose new filenames.

    Returns:
        Dict with keys: processed, successful, failed, unchanged, results
    """
    def worker(tag: Mapping[str, str]) -> ItemResultType:
        return render_item(tag, pattern, case=case)

    results = run_items(tags, worker, max_workers=max_workers, use_parallel=use_parallel)
    return summarize(results)
