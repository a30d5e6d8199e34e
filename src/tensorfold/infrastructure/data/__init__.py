from ._table import DataTable

__all__ = [DataTable.__name__]
