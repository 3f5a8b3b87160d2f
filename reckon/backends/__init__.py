from typing import Dict, Optional, Type

from .base import Backend
from .bignumber import BigNumberBackend
from .complex_number import ComplexBackend
from .decimal_number import DecimalBackend
from .fraction import FractionBackend

BACKENDS: Dict[str, Type[Backend]] = {
    BigNumberBackend.name: BigNumberBackend,
    FractionBackend.name: FractionBackend,
    DecimalBackend.name: DecimalBackend,
    ComplexBackend.name: ComplexBackend,
}


def create_backend(name: str, precision: int = 20, decimal_places: int = 20,
                   seed: Optional[int] = None) -> Backend:
    """Instantiate the backend registered under `name`."""
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unknown backend {name!r}; expected one of {', '.join(BACKENDS)}")
    return cls(precision=precision, decimal_places=decimal_places, seed=seed)


__all__ = ['Backend', 'BACKENDS', 'create_backend']
