"""Small in-memory sample tables."""

from __future__ import annotations

from typing import Sequence

from .registry import DatasetSpec, Sample, register_dataset

_CONSTANT_INPUT = (1.0, 0.0, 0.5)
_CONSTANT_EXPECTED = (1.0, 0.1, 0.4, 0.3, 0.5, 0.2, 0.7, 0.8)


@register_dataset("xor")
def make_xor(**_: object) -> DatasetSpec:
    """The exclusive-or truth table over ``{0, 1}``."""

    samples = [
        Sample.of([float(a), float(b)], [float(a ^ b)])
        for a in (0, 1)
        for b in (0, 1)
    ]
    return DatasetSpec(name="xor", samples=samples, d_in=2, d_out=1, provenance={"type": "xor"})


@register_dataset("constant")
def make_constant(
    inputs: Sequence[float] = _CONSTANT_INPUT,
    expected: Sequence[float] = _CONSTANT_EXPECTED,
    **_: object,
) -> DatasetSpec:
    """A single fixed input mapped to a fixed target vector."""

    sample = Sample.of(inputs, expected)
    provenance = {
        "type": "constant",
        "inputs": [float(v) for v in inputs],
        "expected": [float(v) for v in expected],
    }
    return DatasetSpec(
        name="constant",
        samples=[sample],
        d_in=int(sample.inputs.shape[0]),
        d_out=int(sample.expected.shape[0]),
        provenance=provenance,
    )


__all__ = ["make_constant", "make_xor"]
