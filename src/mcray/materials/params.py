"""Parameter checks and slot allocation shared by the material registries."""

from collections.abc import Sequence

import taichi as ti


def check_albedo(albedo: Sequence[float]) -> None:
    """Raise ValueError unless ``albedo`` is three components in [0, 1]."""
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}.")
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(
                f"Albedo {channel} = {value} is outside [0, 1]; "
                "a surface cannot reflect more light than it receives."
            )


def claim_slot(counter, capacity: int, kind: str) -> int:
    """Reserve the next index in a registry whose size lives in ``counter``.

    Args:
        counter: A scalar ``ti.field`` holding the number of used slots.
        capacity: Length of the registry's parameter fields.
        kind: Material name used in the error message.

    Raises:
        RuntimeError: If every slot is taken.
    """
    index = int(counter[None])
    if index >= capacity:
        raise RuntimeError(f"Maximum number of {kind} materials ({capacity}) exceeded")
    counter[None] = index + 1
    return index


def new_counter():
    return ti.field(dtype=ti.i32, shape=())
