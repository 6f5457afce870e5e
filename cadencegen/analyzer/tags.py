"""Grouping tags derived from a file's directory."""

import re
from pathlib import PurePath
from typing import Optional, Union

WORD_SEPARATORS = re.compile(r'[_\-]+')


def derive_tag(relative_dir: Union[str, PurePath]) -> Optional[str]:
    """
    Convert a directory path (relative to the scan root) into a tag.

    'staking/delegator_info' -> 'StakingDelegatorInfo'. A root-level
    directory ('' or '.') has no tag.
    """
    segments = [s for s in PurePath(relative_dir).parts if s not in ('', '.')]

    converted = []
    for index, segment in enumerate(segments):
        words = [w for w in WORD_SEPARATORS.split(segment) if w]
        for position, word in enumerate(words):
            if index == 0 and position == 0:
                words[position] = word.lower()
            else:
                words[position] = word[:1].upper() + word[1:].lower()
        converted.append(''.join(words))

    tag = ''.join(converted)
    if not tag:
        return None
    return tag[0].upper() + tag[1:]
