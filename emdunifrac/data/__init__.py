from emdunifrac.data.tree_loader import load_tree
from emdunifrac.data.table_loader import load_table, read_biom_table, read_sample_table
from emdunifrac.data.matrix_writer import format_matrix, write_matrix

__all__ = [
    "format_matrix",
    "load_table",
    "load_tree",
    "read_biom_table",
    "read_sample_table",
    "write_matrix",
]
