from .tables import COLUMNS, PAGE_SIZE, Column, Page, format_cell, paginate, render_page

__all__ = [
    "COLUMNS",
    "PAGE_SIZE",
    "Column",
    "Page",
    "format_cell",
    "paginate",
    "render_page",
]
