"""
Product name classifier

Turns Vision label/object annotations into a short display name.
Generic words ("food", colours) are skipped in favour of something
specific; the result is title-cased and at most three words long.
"""

import re
from typing import Dict, Iterable, List, Union

from loguru import logger


GENERIC_LABELS = frozenset({
    'food', 'fruit', 'vegetable', 'produce', 'dish', 'ingredient', 'meat', 'seafood',
    'white', 'black', 'red', 'green', 'blue', 'yellow', 'orange', 'purple', 'brown', 'gray', 'grey',
})

MAX_NAME_TOKENS = 3

_TOKEN_SPLIT = re.compile(r'[\s_]+')


def _score(label: Dict) -> float:
    try:
        return float(label.get('score') or 0)
    except (TypeError, ValueError):
        return 0.0


def _object_name(obj: Union[Dict, str]) -> str:
    if isinstance(obj, dict):
        return str(obj.get('name') or '')
    return str(obj or '')


def title_case(text: str) -> str:
    """Lower-case, then capitalise the first letter of every word"""
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), (text or '').lower())


def classify_product_name(labels: Iterable[Dict], objects: Iterable[Union[Dict, str]]) -> str:
    """
    Pick a product name from label and object annotations.

    Preference order:
      1. Highest-scoring label not in GENERIC_LABELS
      2. First detected object name
      3. Highest-scoring label, generic or not
      4. ""

    Args:
        labels: [{'description': str, 'score': float}, ...]
        objects: [{'name': str, ...}, ...] or plain names

    Returns:
        Title-cased name of at most three words
    """
    ranked: List[Dict] = sorted(labels or [], key=_score, reverse=True)
    object_names = [_object_name(o) for o in (objects or [])]

    specific = ''
    for label in ranked:
        description = str(label.get('description') or '')
        if description and description.lower() not in GENERIC_LABELS:
            specific = description
            break

    if not specific:
        specific = (object_names[0] if object_names else '') or (
            str(ranked[0].get('description') or '') if ranked else ''
        )

    tokens = [t for t in _TOKEN_SPLIT.split(specific.strip()) if t]
    name = title_case(' '.join(tokens[:MAX_NAME_TOKENS]))
    logger.debug(f"[NAME] {len(ranked)} labels, {len(object_names)} objects → {name!r}")
    return name
