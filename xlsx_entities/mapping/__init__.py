from .binder import ColumnBinding, ColumnMapping, bind_columns
from .coercion import coerce_value

__all__ = ["ColumnBinding", "ColumnMapping", "bind_columns", "coerce_value"]
