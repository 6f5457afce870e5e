"""Separation of import header lines from a Cadence file body."""

from typing import List, Tuple, Union

from .models import Import


def split_imports(content: Union[str, bytes]) -> Tuple[List[Import], str]:
    """
    Split a Cadence file into its imports and the remaining body.

    Import lines are blanked in the body so parser line numbers still match
    the original file. Only 'import Name from Address' lines produce an
    Import; other import forms are dropped silently.

    Returns:
        (imports, body)
    """
    if isinstance(content, bytes):
        content = content.decode('utf-8')

    imports: List[Import] = []
    body: List[str] = []

    for line in content.split('\n'):
        trimmed = line.strip()
        if trimmed.startswith('import '):
            parts = trimmed.split()
            if len(parts) >= 4 and parts[2] == 'from':
                imports.append(Import(contract=parts[1], address=parts[3]))
            body.append('')
        else:
            body.append(line)

    return imports, '\n'.join(body)
