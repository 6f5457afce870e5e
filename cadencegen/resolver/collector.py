"""Discovery of contract-qualified struct references that are not yet known."""

from typing import Dict, Iterable, Optional, Set

from ..analyzer.models import AnalysisResult, Struct
from ..type_system import referenced_names, split_qualified_name


def collect_nested_types(
    scripts: Dict[str, AnalysisResult],
    structs: Dict[str, Struct],
) -> Dict[str, Set[str]]:
    """
    Build the work list of structs to resolve, grouped by contract.

    Scans every script return type and every struct field type (resolved
    structs included) for 'Contract.Struct' references. Names with more
    than one dot are skipped, as are names already in the catalog.

    Returns:
        Mapping of contract name to the set of struct names wanted from it
    """
    wanted: Dict[str, Set[str]] = {}

    def collect(type_strs: Iterable[Optional[str]]) -> None:
        for type_str in type_strs:
            if not type_str or '.' not in type_str:
                continue
            for name in referenced_names(type_str):
                parts = split_qualified_name(name)
                if len(parts) != 2 or name in structs:
                    continue
                contract, struct_name = parts
                wanted.setdefault(contract, set()).add(struct_name)

    collect(script.return_type for script in scripts.values())
    for struct in structs.values():
        collect(f.type_str for f in struct.fields)

    return wanted
