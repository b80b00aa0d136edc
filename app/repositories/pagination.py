# app/repositories/pagination.py
import math
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Pagina(Generic[T]):
    """Una página de resultados (páginas numeradas desde 1)."""
    items: List[T] = field(default_factory=list)
    total: int = 0
    per_page: int = 10
    current_page: int = 1

    @property
    def last_page(self) -> int:
        # Aun sin resultados hay una página (vacía)
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def desde(self) -> Optional[int]:
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def hasta(self) -> Optional[int]:
        if not self.items:
            return None
        return self.desde + len(self.items) - 1

    def meta(self) -> dict:
        return {
            "current_page": self.current_page,
            "last_page": self.last_page,
            "total": self.total,
            "per_page": self.per_page,
            "from_": self.desde,
            "to": self.hasta,
        }


def paginar(query, page: int, per_page: int) -> Pagina:
    """Aplica offset/limit a una query ya ordenada y cuenta el total."""
    page = max(1, page)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return Pagina(items=items, total=total, per_page=per_page, current_page=page)
