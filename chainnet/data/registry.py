"""Sample-source registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Sequence

from ..core.types import Array, as_vector


@dataclass(frozen=True)
class Sample:
    """One input vector together with its expected output."""

    inputs: Array
    expected: Array

    @classmethod
    def of(cls, inputs: Sequence[float], expected: Sequence[float]) -> "Sample":
        return cls(inputs=as_vector(inputs), expected=as_vector(expected))


@dataclass(frozen=True)
class DatasetSpec:
    """A finite, re-iterable list of samples registered under ``name``.

    Attributes
    ----------
    d_in, d_out:
        Widths of every sample's inputs and expected outputs.
    provenance:
        Options the source was built with, recorded in run manifests.
    """

    name: str
    samples: Sequence[Sample]
    d_in: int
    d_out: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.samples)

    def __len__(self) -> int:
        return len(self.samples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a sample-source factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.samples:
        raise ValueError(f"Dataset {spec.name!r} has no samples")
    for idx, sample in enumerate(spec.samples):
        if sample.inputs.shape[0] != spec.d_in:
            raise ValueError(
                f"Sample {idx} of {spec.name!r} has {sample.inputs.shape[0]} inputs, expected {spec.d_in}"
            )
        if sample.expected.shape[0] != spec.d_out:
            raise ValueError(
                f"Sample {idx} of {spec.name!r} has {sample.expected.shape[0]} targets, expected {spec.d_out}"
            )


__all__ = [
    "DatasetSpec",
    "Sample",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
