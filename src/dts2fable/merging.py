"""
Declaration merging.

TypeScript lets an interface or a namespace be declared several times, each
declaration contributing members. Both folds here are order preserving and
keyed by name; classes, enums and aliases are never merged.
"""

from typing import Dict, List

from dts2fable.models import FsInterface, FsType, is_module


def merge_types(types: List[FsType]) -> List[FsType]:
    """Fold interfaces sharing a name into the first one seen."""
    index: Dict[str, int] = {}
    out: List[FsType] = []
    for tp in types:
        if not isinstance(tp, FsInterface):
            out.append(tp)
            continue
        i = index.get(tp.name)
        if i is None:
            index[tp.name] = len(out)
            out.append(tp)
            continue
        first = out[i]
        out[i] = first.model_copy(
            update={
                "inherits": first.inherits + tp.inherits,
                "members": first.members + tp.members,
            }
        )
    return out


def merge_modules(types: List[FsType]) -> List[FsType]:
    """
    Fold modules sharing a name at the same depth. Each module's children are
    merged first, so nested namespaces are combined depth first, then the
    interfaces of the combined module are folded with `merge_types`.
    """
    index: Dict[str, int] = {}
    out: List[FsType] = []
    for tp in types:
        if not is_module(tp):
            out.append(tp)
            continue
        md = tp.model_copy(update={"types": merge_types(merge_modules(tp.types))})
        i = index.get(md.name)
        if i is None:
            index[md.name] = len(out)
            out.append(md)
            continue
        first = out[i]
        out[i] = first.model_copy(
            update={"types": merge_types(merge_modules(first.types + md.types))}
        )
    return out
