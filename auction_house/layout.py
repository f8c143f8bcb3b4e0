"""Storage layouts of compiled implementations.

Every implementation runs against the proxy's storage, so a new version may
only append variables to the layout of the one it replaces. Reordering or
retyping a variable compiles fine and silently misreads state after the
upgrade; :func:`check_append_only` is the guard the deploy tooling runs.
"""
from pathlib import Path
from typing import List, NamedTuple, Union

from vyper import compile_code


class StorageSlot(NamedTuple):
    name: str
    type: str
    slot: int
    n_slots: int


class IncompatibleLayout(ValueError):
    pass


def storage_layout(path: Union[str, Path]) -> List[StorageSlot]:
    source = Path(path).read_text()
    output = compile_code(source, output_formats=["layout"])
    storage = output["layout"]["storage_layout"]
    slots = [
        StorageSlot(name, entry["type"], entry["slot"], entry.get("n_slots", 1))
        for name, entry in storage.items()
    ]
    return sorted(slots, key=lambda s: s.slot)


def check_append_only(current_path: Union[str, Path], new_path: Union[str, Path]) -> None:
    current = storage_layout(current_path)
    new = storage_layout(new_path)
    for old_slot, new_slot in zip(current, new):
        if old_slot != new_slot:
            raise IncompatibleLayout(f"!layout: {old_slot} became {new_slot}")
    if len(new) < len(current):
        raise IncompatibleLayout(f"!layout: {len(current) - len(new)} variables dropped")
