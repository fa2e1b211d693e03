"""Ordering and column selection shared by the collection routers."""

from typing import Dict, Iterable, List, Optional

from ims_backend.core.errors import UNDEFINED_COLUMN, api_error


def order_clauses(model, field: str, ascending: bool = True) -> list:
    column = model.__table__.columns.get(field)
    if column is None:
        raise api_error(UNDEFINED_COLUMN, f"Cannot order by unknown column '{field}'")
    clauses = [column.asc() if ascending else column.desc()]
    # id breaks ties so equal sort keys come back in a stable order
    if field != "id":
        clauses.append(model.id.asc() if ascending else model.id.desc())
    return clauses


def parse_columns(columns: Optional[str], allowed: Iterable[str]) -> Optional[List[str]]:
    """Parse a comma separated ``columns`` query value; None or '*' selects everything."""
    if columns is None:
        return None
    names = [c.strip() for c in columns.split(",") if c.strip()]
    if not names or names == ["*"]:
        return None
    allowed = set(allowed)
    unknown = [n for n in names if n not in allowed]
    if unknown:
        raise api_error(UNDEFINED_COLUMN, f"Unknown column(s): {', '.join(unknown)}")
    return names


def project(row: Dict, columns: Optional[List[str]]) -> Dict:
    if columns is None:
        return row
    return {name: row[name] for name in columns}
